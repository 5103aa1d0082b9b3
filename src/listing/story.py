from __future__ import annotations

from typing import NamedTuple

SEPARATOR = " | "
LINE_BUDGET = 47


class SplitCaptionLines(NamedTuple):
    first: str
    second: str = ""

    def render(self) -> str:
        return f"{self.first}\n{self.second}" if self.second else self.first


def strip_pipes(text: str) -> str:
    """Trim whitespace and any leading/trailing '|' until neither remains."""
    s = text.strip()
    while s.startswith("|") or s.endswith("|"):
        if s.startswith("|"):
            s = s[1:].strip()
        if s.endswith("|"):
            s = s[:-1].strip()
    return s


def split_caption_lines(caption: str, budget: int = LINE_BUDGET) -> SplitCaptionLines:
    """
    Greedy two-line packing of a " | "-delimited caption.

    A token joins the first line while len(first + token + " | ") <= budget;
    from the first token that does not fit onwards, everything goes to the
    second line, so reading line one then line two gives the original order.
    Tokens are never broken: an oversized leading token is placed whole on
    the first line.
    This deliberately departs from plain per-token filling, which would pull
    a later short token back onto line one and reorder the caption.
    """
    first = ""
    second = ""
    overflowed = False
    for token in caption.split(SEPARATOR):
        if not overflowed and (not first or len(first + token + SEPARATOR) <= budget):
            first += (SEPARATOR if first else "") + token
        else:
            overflowed = True
            second += (SEPARATOR if second else "") + token

    first = first.strip()
    second = second.strip()
    if first.endswith("|"):
        first = first[:-1].strip()
    return SplitCaptionLines(first, second)


def split_caption(caption: str, budget: int = LINE_BUDGET) -> str:
    """Clipboard text for two-line story UIs: first line, optionally "\\n" + second."""
    return split_caption_lines(caption, budget).render()
