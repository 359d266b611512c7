import logging
import sys
from pathlib import Path
from dotenv import load_dotenv

from arena_judge.evaluation.pipeline import PageExtractor
from arena_judge.models.llm_client import LLMConfig
from arena_judge.utils.clipboard import copy_to_clipboard
from arena_judge.utils.io import load_page, write_text

ROOT = Path(__file__).resolve().parents[2]
ENV_PATH = ROOT / ".env"
load_dotenv(ENV_PATH)

logging.basicConfig(level=logging.INFO, format="[arena-judge] %(levelname)s %(name)s: %(message)s")


def main():
    #parse args
    if len(sys.argv) < 2:
        print("Usage: python -m arena_judge.experiments.run_judge <page.html> [out_dir] [title yes/no]")
        sys.exit(2)

    page_path = sys.argv[1].strip()
    out_dir = sys.argv[2].strip() if len(sys.argv) > 2 else "outputs/judge"
    with_title = len(sys.argv) > 3 and sys.argv[3].strip().lower() == "yes"

    print(f"\nPage selected: {page_path}")
    print(f"Generate title: {'yes' if with_title else 'no'}")

    #load
    root = load_page(page_path)

    #extract
    extractor = PageExtractor()
    judge_prompt = extractor.build_judge_prompt(
        root,
        with_title=with_title,
        title_cfg=LLMConfig(model="gpt-4o-mini", max_completion_tokens=32),
    )

    if judge_prompt is None:
        print("No battle responses found. Make sure both models have responded.")
        sys.exit(1)

    #save
    out_path = write_text(out_dir, f"{Path(page_path).stem}_judge.txt", judge_prompt)

    #copy
    copied = copy_to_clipboard(judge_prompt)

    print("\n===== JUDGE PROMPT =====")
    print("Characters:", len(judge_prompt))
    print("Copied to clipboard:", copied)
    print("Saved to:", out_path)


if __name__ == "__main__":
    main()
