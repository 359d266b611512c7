import logging
import sys
import threading

from arena_judge.evaluation.pipeline import PageExtractor
from arena_judge.utils.io import load_page, write_text
from arena_judge.utils.node import Node
from arena_judge.utils.watch import PageView, poll_file

logging.basicConfig(level=logging.INFO, format="[arena-judge] %(levelname)s %(name)s: %(message)s")


def main():
    #parse args
    if len(sys.argv) < 2:
        print("Usage: python -m arena_judge.experiments.watch_page <page.html> [out_dir]")
        sys.exit(2)

    page_path = sys.argv[1].strip()
    out_dir = sys.argv[2].strip() if len(sys.argv) > 2 else "outputs/watch"

    extractor = PageExtractor()
    view = PageView(load_page(page_path))
    runs = 0

    def rebuild(root: Node):
        nonlocal runs
        runs += 1
        judge_prompt = extractor.build_judge_prompt(root)
        if judge_prompt is None:
            print(f"[run {runs}] no complete turn yet")
            return
        out_path = write_text(out_dir, "latest_judge.txt", judge_prompt)
        print(f"[run {runs}] judge prompt updated ({len(judge_prompt)} chars) → {out_path}")

    # First pass right away, then once per quiet period after edits
    rebuild(view.root)
    subscription = view.watch(rebuild, delay_ms=extractor.config.debounce_ms)

    stop = threading.Event()
    print(f"Watching {page_path} (Ctrl+C to stop)")
    try:
        poll_file(page_path, view, load_page, stop)
    except KeyboardInterrupt:
        stop.set()
    finally:
        subscription.cancel()

    print(f"\nStopped after {runs} run(s).")


if __name__ == "__main__":
    main()
