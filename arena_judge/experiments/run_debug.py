import logging
import os
import sys
from pathlib import Path

from arena_judge.evaluation.diagnostics import report_to_json
from arena_judge.evaluation.pipeline import PageExtractor
from arena_judge.utils.clipboard import copy_to_clipboard
from arena_judge.utils.io import load_page, write_json

logging.basicConfig(level=logging.DEBUG, format="[arena-judge] %(levelname)s %(name)s: %(message)s")


def main():
    #parse args
    if len(sys.argv) < 2:
        print("Usage: python -m arena_judge.experiments.run_debug <page.html> [out_dir] [source url]")
        sys.exit(2)

    page_path = sys.argv[1].strip()
    out_dir = sys.argv[2].strip() if len(sys.argv) > 2 else "outputs/debug"
    url = sys.argv[3].strip() if len(sys.argv) > 3 else Path(page_path).resolve().as_uri()

    #load + report
    root = load_page(page_path)
    report = PageExtractor().build_debug_report(root, url=url)

    out_path = os.path.join(out_dir, f"{Path(page_path).stem}_debug.json")
    write_json(out_path, report)
    copy_to_clipboard(report_to_json(report))

    #print summary
    print("\n===== DEBUG REPORT =====")
    print("Summary:", report["summary"])
    print("Current eval:", report["currentEval"])
    print("\nTurns:")
    for t in report["turns"]:
        print(f"  chron={t['chronIndex']} dom={t['domIndex']} {t['type']:<10} {t['modelA']} vs {t['modelB']}")

    print(f"\nFull report saved to: {out_path}")


if __name__ == "__main__":
    main()
