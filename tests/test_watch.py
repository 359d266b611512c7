import os
import threading
import time

from arena_judge.utils.node import parse_html
from arena_judge.utils.watch import Debouncer, PageView, poll_file


class FakeTimer:
    """Stands in for threading.Timer; fires only when the test says so."""

    created = []

    def __init__(self, interval, function, args=()):
        self.interval = interval
        self.function = function
        self.args = args
        self.cancelled = False
        self.started = False
        self.daemon = False
        FakeTimer.created.append(self)

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if not self.cancelled:
            self.function(*self.args)


def _debouncer(calls, delay_ms=500):
    FakeTimer.created = []
    return Debouncer(lambda *a: calls.append(a), delay_ms, timer_factory=FakeTimer)


def test_burst_coalesces_into_one_call_with_last_arguments() -> None:
    calls = []
    d = _debouncer(calls)
    for i in range(5):
        d.trigger(i)

    assert len(FakeTimer.created) == 5
    assert [t.cancelled for t in FakeTimer.created] == [True, True, True, True, False]
    assert FakeTimer.created[-1].interval == 0.5
    assert d.pending

    for t in FakeTimer.created:
        t.fire()
    assert calls == [(4,)]
    assert not d.pending


def test_stale_timer_that_already_started_does_nothing() -> None:
    calls = []
    d = _debouncer(calls)
    d.trigger("old")
    stale = FakeTimer.created[0]
    d.trigger("new")
    # simulate the old timer thread winning the race against cancel()
    stale.function(*stale.args)
    assert calls == []
    FakeTimer.created[-1].fire()
    assert calls == [("new",)]


def test_cancel_drops_pending_call() -> None:
    calls = []
    d = _debouncer(calls)
    d.trigger(1)
    d.cancel()
    FakeTimer.created[0].function(*FakeTimer.created[0].args)
    assert calls == []
    assert not d.pending


def test_real_timer_fires_once_after_quiet_period() -> None:
    fired = threading.Event()
    calls = []

    def action(x):
        calls.append(x)
        fired.set()

    d = Debouncer(action, delay_ms=20)
    d.trigger(1)
    d.trigger(2)
    assert fired.wait(2.0)
    assert calls == [2]


def test_page_view_notifies_until_cancelled() -> None:
    view = PageView(parse_html("<div>v1</div>"))
    seen = []
    sub = view.subscribe(lambda root: seen.append(root.text))

    view.update(parse_html("<div>v2</div>"))
    sub.cancel()
    sub.cancel()
    view.update(parse_html("<div>v3</div>"))

    assert seen == ["v2"]
    assert view.root.text == "v3"


def test_page_view_watch_is_debounced() -> None:
    FakeTimer.created = []
    view = PageView(parse_html("<div>v1</div>"))
    seen = []
    sub = view.watch(lambda root: seen.append(root.text), delay_ms=500, timer_factory=FakeTimer)
    for v in ("v2", "v3", "v4"):
        view.update(parse_html(f"<div>{v}</div>"))

    for t in FakeTimer.created:
        t.fire()
    assert seen == ["v4"]

    # no new timer once the subscription is gone
    sub.cancel()
    view.update(parse_html("<div>v5</div>"))
    assert len(FakeTimer.created) == 3


def test_poll_file_feeds_changes(tmp_path) -> None:
    path = tmp_path / "page.html"
    path.write_text("<div>v1</div>", encoding="utf-8")

    view = PageView(parse_html(path.read_text(encoding="utf-8")))
    stop = threading.Event()
    seen = []

    def load(p):
        root = parse_html(open(p, encoding="utf-8").read())
        seen.append(root.text)
        stop.set()
        return root

    path.write_text("<div>v2</div>", encoding="utf-8")
    os.utime(path, (1, 1))
    thread = threading.Thread(target=poll_file, args=(str(path), view, load, stop, 0.01))
    # mtime is read at startup, so change it again once the poller is running
    thread.start()
    for _ in range(200):
        if stop.is_set():
            break
        os.utime(path, None)
        stop.wait(0.02)
    thread.join(2.0)

    assert seen and seen[-1] == "v2"
    assert view.root.text == "v2"


def test_slow_action_never_overlaps_the_next_one() -> None:
    lock = threading.Lock()
    running = []
    peak = []
    calls = []
    done = threading.Event()

    def slow_rescan(x):
        with lock:
            running.append(x)
            peak.append(len(running))
        time.sleep(0.3)
        with lock:
            running.remove(x)
            calls.append(x)
            if x == 2:
                done.set()

    d = Debouncer(slow_rescan, delay_ms=20)
    d.trigger(1)
    time.sleep(0.1)
    # first re-scan is still running
    d.trigger(2)
    assert done.wait(3.0)

    assert calls == [1, 2]
    assert max(peak) == 1


def test_poll_file_survives_file_vanishing_before_load(tmp_path) -> None:
    path = tmp_path / "page.html"
    path.write_text("<div>v1</div>", encoding="utf-8")

    view = PageView(parse_html("<div>v1</div>"))
    stop = threading.Event()
    attempts = []

    def load(p):
        attempts.append(p)
        if len(attempts) == 1:
            raise FileNotFoundError(p)
        stop.set()
        return parse_html("<div>v2</div>")

    thread = threading.Thread(target=poll_file, args=(str(path), view, load, stop, 0.01))
    thread.start()
    for _ in range(200):
        if stop.is_set():
            break
        os.utime(path, None)
        stop.wait(0.02)
    stop.set()
    thread.join(2.0)

    assert not thread.is_alive()
    assert len(attempts) >= 2
    assert view.root.text == "v2"
