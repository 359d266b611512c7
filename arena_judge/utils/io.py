import os
import json
from typing import Dict, Any
from pathlib import Path

from arena_judge.utils.node import Node, parse_html


PAGE_SUFFIXES = (".html", ".htm")


# Loading a saved battle page
def load_page(path: str) -> Node:

    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Page file not found: {path}")

    if path.suffix.lower() not in PAGE_SUFFIXES:
        raise ValueError(f"Unsupported page format: {path.suffix}")

    with open(path, "r", encoding="utf-8") as f:
        return parse_html(f.read())


# Write a text output and return its path
def write_text(output_dir: str, name: str, text: str) -> Path:

    if text is None:
        text = ""

    os.makedirs(output_dir, exist_ok=True)
    out_path = Path(output_dir) / name

    with open(out_path, "w", encoding="utf-8") as f:
        f.write(text.strip() + "\n")

    return out_path


# Diagnostic report JSON
def write_json(path: str, data: Dict[str, Any]):

    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, default=str)
