"""Final whitespace normalization pass.

Responsibilities:
- Give block templates, tables, and standalone file links a blank line of room.
- Convert preformatted-block indentation to tabs and collapse excess spaces.
- Canonicalize `<br>` tags and trim blank lines.
"""

from __future__ import annotations

import re

from ..site.titles import FILE_NAMESPACE, NamespaceTitleResolver, TitleResolver
from .extract import Span, extract_spans

# One leading pre-block space followed by up to four two-space indentation steps.
_PRE_INDENT_RE = re.compile(r"^ ((?:  ){1,4})", re.MULTILINE)
_SPACE_RUN_TAB_RE = re.compile(r" {4}")
_SPACE_RUN_RE = re.compile(r"  +")
_LINE_BREAK_TAG_RE = re.compile(r" *<br *(?:/ *)?> *", re.IGNORECASE)
_EXCESS_BLANK_LINES_RE = re.compile(r"\n{3,}")


class SpacingNormalizer:
    """Apply document-wide whitespace rules after all structural passes."""

    def __init__(self, title_resolver: TitleResolver | None = None) -> None:
        """Initialize with a title resolver used to recognize file links."""

        self.title_resolver = title_resolver or NamespaceTitleResolver()

    def apply(self, text: str) -> str:
        """Normalize whitespace across `text`."""

        text = self._make_room(text)
        text = _PRE_INDENT_RE.sub(lambda match: " " + "\t" * (len(match.group(1)) // 2), text)
        text = _SPACE_RUN_TAB_RE.sub("\t", text)
        text = _SPACE_RUN_RE.sub(" ", text)
        # A lone space marks an empty line inside a preformatted block.
        text = "\n".join(line if line == " " else line.rstrip(" ") for line in text.split("\n"))
        text = _LINE_BREAK_TAG_RE.sub("<br>", text)
        text = _EXCESS_BLANK_LINES_RE.sub("\n\n", text)
        return text.strip("\n")

    def _make_room(self, text: str) -> str:
        """Insert a newline on both sides of every block-level construct."""

        templates = extract_spans("{{", "}}", text)
        tables = extract_spans("{|", "\n|}", text)
        blocks = [
            *(span for span in templates if self._is_standalone(span, text)),
            *(span for span in tables if self._is_standalone(span, text)),
            *(
                span
                for span in extract_spans("[[", "]]", text)
                if self._is_standalone(span, text) and self._is_file_link(span)
            ),
        ]
        if not blocks:
            return text

        insertions = sorted({span.start for span in blocks} | {span.end for span in blocks})
        pieces: list[str] = []
        cursor = 0
        for offset in insertions:
            pieces.append(text[cursor:offset])
            pieces.append("\n")
            cursor = offset
        pieces.append(text[cursor:])
        return "".join(pieces)

    @staticmethod
    def _is_standalone(span: Span, text: str) -> bool:
        return span.starts_line(text) and span.ends_line(text)

    def _is_file_link(self, span: Span) -> bool:
        """Return whether a link span targets the file namespace."""

        title = span.text[2:-2].split("|", 1)[0].strip()
        resolved = self.title_resolver.resolve(title)
        return resolved is not None and resolved.namespace == FILE_NAMESPACE
