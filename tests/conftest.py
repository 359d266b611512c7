from typing import List, Optional

import pytest

from arena_judge.utils.node import Node, parse_html


CONTAINER_CLASS = "flex -ml-4 gap-2"
BUBBLE_CLASS = "bg-surface-secondary max-w-prose rounded-xl"
SPINNER = "<div class='spinner'></div>"

LONG_A = "Gradient descent walks downhill on the loss surface. " * 12
LONG_B = "Backpropagation applies the chain rule layer by layer. " * 12


def column(name: Optional[str], body: str, extra: str = "") -> str:
    header = f"<div class='text-sm'>{name}</div>" if name else ""
    return f"<div class='col'>{header}{extra}<div class='prose'><p>{body}</p></div></div>"


def container(*columns: str) -> str:
    return f"<div class='{CONTAINER_CLASS}'>{''.join(columns)}</div>"


def bubble(text: str) -> str:
    return f"<div class='{BUBBLE_CLASS}'>{text}</div>"


def page(*blocks: str) -> Node:
    return parse_html(f"<html><body><main>{''.join(blocks)}</main></body></html>")


@pytest.fixture
def two_turn_page() -> Node:
    # Newest first, like the live page
    return page(
        bubble("Explain X more"),
        container(
            column("gpt-4o", "Second answer from the first model, with more depth."),
            column("claude-3-opus", "Second answer from the second model, also deeper."),
        ),
        bubble("Explain X"),
        container(
            column("gpt-4o", "First answer from the first model about X."),
            column("claude-3-opus", "First answer from the second model about X."),
        ),
    )


def texts(nodes: List[Node]) -> List[str]:
    return [n.text for n in nodes]
