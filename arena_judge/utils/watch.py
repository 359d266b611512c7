import logging
import os
import threading
from typing import Callable, List, Optional

from arena_judge.utils.node import Node

logger = logging.getLogger(__name__)


class Subscription:
    def __init__(self, unsubscribe: Callable[[], None]):
        self._unsubscribe = unsubscribe
        self.active = True

    def cancel(self) -> None:
        if self.active:
            self.active = False
            self._unsubscribe()


class Debouncer:
    """
    Coalesce bursts of calls into one delayed call.

    Every `trigger` cancels the pending timer and starts a new one, so the
    action runs once, `delay_ms` after the last trigger of a burst, with the
    arguments of that last trigger.
    """

    def __init__(
        self,
        action: Callable[..., None],
        delay_ms: int = 500,
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
    ):
        self.action = action
        self.delay_ms = delay_ms
        self._timer_factory = timer_factory
        self._timer: Optional[threading.Timer] = None
        self._generation = 0
        self._lock = threading.Lock()
        # actions never overlap, a slow run finishes before the next starts
        self._run_lock = threading.Lock()

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def trigger(self, *args) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            timer = self._timer_factory(
                self.delay_ms / 1000.0, self._fire, args=(self._generation, *args)
            )
            timer.daemon = True
            self._timer = timer
            timer.start()

    def _fire(self, generation: int, *args) -> None:
        with self._lock:
            # a timer that lost the race with a newer trigger does nothing
            if generation != self._generation:
                return
            self._timer = None
        with self._run_lock:
            with self._lock:
                # superseded while waiting for a running action
                if generation != self._generation:
                    return
            self.action(*args)

    def cancel(self) -> None:
        with self._lock:
            self._generation += 1
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None


class PageView:
    """
    The current tree of a page plus a change stream.

    `update` swaps in a new tree and notifies subscribers; nodes of the old
    tree are no longer reachable, which is what invalidates cached text.
    """

    def __init__(self, root: Node):
        self.root = root
        self._listeners: List[Callable[[Node], None]] = []

    def subscribe(self, listener: Callable[[Node], None]) -> Subscription:
        self._listeners.append(listener)
        return Subscription(lambda: self._listeners.remove(listener))

    def update(self, root: Node) -> None:
        self.root = root
        for listener in list(self._listeners):
            listener(root)

    def watch(
        self,
        on_change: Callable[[Node], None],
        delay_ms: int = 500,
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
    ) -> Subscription:
        # Debounced subscription; cancelling it also drops a pending re-scan
        debouncer = Debouncer(on_change, delay_ms, timer_factory)
        inner = self.subscribe(debouncer.trigger)

        def _unsubscribe():
            inner.cancel()
            debouncer.cancel()

        return Subscription(_unsubscribe)


def poll_file(
    path: str,
    view: PageView,
    load: Callable[[str], Node],
    stop: threading.Event,
    interval_s: float = 0.25,
) -> None:
    # Feed a saved page into the view whenever its mtime changes
    last_mtime = os.path.getmtime(path)
    while not stop.wait(interval_s):
        try:
            mtime = os.path.getmtime(path)
            if mtime == last_mtime:
                continue
            root = load(path)
        except FileNotFoundError:
            logger.debug("Page file %s disappeared, waiting", path)
            continue
        last_mtime = mtime
        view.update(root)
