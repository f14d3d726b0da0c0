"""Balanced-delimiter span extraction.

Responsibilities:
- Locate top-level balanced spans for arbitrary multi-character delimiter pairs.
- Rewrite located spans in one scan without re-searching the document.

Key types:
- `Span`: one balanced occurrence captured at extraction time.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Span:
    """A maximal balanced occurrence of a delimiter pair.

    Attributes:
        start: Inclusive offset of the opening delimiter.
        end: Exclusive offset just past the closing delimiter.
        text: Span content including both delimiters.
    """

    start: int
    end: int
    text: str

    def starts_line(self, document: str) -> bool:
        """Return whether the span begins at a line boundary of `document`."""

        return self.start == 0 or document[self.start - 1] == "\n"

    def ends_line(self, document: str) -> bool:
        """Return whether the span is followed by a newline or the document end."""

        return self.end == len(document) or document[self.end] == "\n"


def _balanced_end(opening: str, closing: str, text: str, start: int) -> int | None:
    """Return the offset past the delimiter closing the span opened at `start`."""

    depth = 0
    position = start
    length = len(text)
    while position < length:
        if text.startswith(opening, position):
            depth += 1
            position += len(opening)
        elif text.startswith(closing, position):
            depth -= 1
            position += len(closing)
            if depth == 0:
                return position
        else:
            position += 1
    return None


def extract_spans(opening: str, closing: str, text: str) -> list[Span]:
    """Return every top-level balanced span delimited by `opening`/`closing`.

    Scanning resumes right after the start of each candidate, so spans that share
    a delimiter character with their neighbour are still found. Candidates that
    end inside an already emitted span are nested and skipped. An opening
    delimiter that never balances yields nothing.
    """

    spans: list[Span] = []
    if not opening or not closing:
        return spans

    last_end = -1
    start = text.find(opening)
    while start != -1:
        end = _balanced_end(opening, closing, text, start)
        if end is not None and end > last_end:
            spans.append(Span(start=start, end=end, text=text[start:end]))
            last_end = end
        start = text.find(opening, start + 1)
    return spans


def outermost_spans(span_groups: Iterable[list[Span]]) -> list[Span]:
    """Merge span lists from several delimiter pairs, keeping only outermost spans."""

    merged = sorted(
        (span for group in span_groups for span in group),
        key=lambda span: (span.start, -span.end),
    )
    kept: list[Span] = []
    for span in merged:
        if kept and span.start < kept[-1].end:
            continue
        kept.append(span)
    return kept


def rewrite_spans(text: str, spans: list[Span], fixer: Callable[[str], str]) -> str:
    """Replace each located span with `fixer(span.text)` in a single pass.

    Spans must come from one extraction over `text` and must not overlap. Only the
    occurrence located by the scan is replaced, never identical text elsewhere.
    """

    if not spans:
        return text

    pieces: list[str] = []
    cursor = 0
    for span in spans:
        pieces.append(text[cursor : span.start])
        pieces.append(fixer(span.text))
        cursor = span.end
    pieces.append(text[cursor:])
    return "".join(pieces)
