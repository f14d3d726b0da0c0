"""Wikitable (`{|...|}`) normalization pass.

Responsibilities:
- Flatten inline `||`/`!!` cell syntax to one cell per line.
- Canonicalize marker spacing, captions, headers, and redundant row separators.

All rewrites are line-anchored and run in a fixed order: flattening, then
marker spacing, then caption/row cleanup, then bold stripping.
"""

from __future__ import annotations

import re

from .extract import extract_spans, outermost_spans, rewrite_spans
from .vault import PlaceholderVault

# Bold that wraps the whole remaining line content.
_WRAPPED_BOLD = r"'''((?:(?!''').)+)'''[ \t]*$"

_SPACING_RULES = (
    (re.compile(r"^!([^ \n])", re.MULTILINE), r"! \1"),
    (re.compile(r"^\|\+([^ \n])", re.MULTILINE), r"|+ \1"),
    (re.compile(r"^\|-([^ \n-])", re.MULTILINE), r"|- \1"),
    (re.compile(r"^\|([^ \n}+-])", re.MULTILINE), r"| \1"),
)
_EMPTY_CAPTION_RE = re.compile(r"^\|\+[ \t]*\n", re.MULTILINE)
_ROW_AFTER_CAPTION_RE = re.compile(r"^(\|\+[^\n]+)\n\|-[ \t]*(?=\n)", re.MULTILINE)
_CAPTION_BOLD_RE = re.compile(r"^\|\+[ \t]*" + _WRAPPED_BOLD, re.MULTILINE)
_HEADER_BOLD_RE = re.compile(r"^![ \t]*" + _WRAPPED_BOLD, re.MULTILINE)
_PSEUDO_HEADER_RE = re.compile(r"^\|[ \t]*" + _WRAPPED_BOLD, re.MULTILINE)
_LEADING_ROW_RE = re.compile(r"\A(\{\|[^\n]*\n)\|-[ \t]*\n")
_TRAILING_ROW_RE = re.compile(r"\n\|-[ \t]*\n\|\}\Z")


class TableNormalizer:
    """Rewrite every top-level wikitable into canonical line-per-cell form."""

    def apply(self, text: str) -> str:
        """Normalize all top-level tables in `text`."""

        return rewrite_spans(text, extract_spans("{|", "\n|}", text), self.fix_table)

    def fix_table(self, table: str) -> str:
        """Return the canonical form of one `{|...\\n|}` span."""

        vault = PlaceholderVault(table)
        inline_markup = outermost_spans(
            [extract_spans("{{", "}}", table), extract_spans("[[", "]]", table)]
        )
        table = vault.hide_spans(table, inline_markup)

        table = self._flatten(table)
        for pattern, replacement in _SPACING_RULES:
            table = pattern.sub(replacement, table)

        table = _EMPTY_CAPTION_RE.sub("", table)
        table = _ROW_AFTER_CAPTION_RE.sub(r"\1", table)
        table = _CAPTION_BOLD_RE.sub(r"|+ \1", table)
        table = _HEADER_BOLD_RE.sub(r"! \1", table)
        table = _PSEUDO_HEADER_RE.sub(r"! \1", table)
        table = _LEADING_ROW_RE.sub(r"\1", table)
        table = _TRAILING_ROW_RE.sub("\n|}", table)
        return vault.restore(table)

    @staticmethod
    def _flatten(table: str) -> str:
        """Split `||` and `!!` cell separators onto their own lines."""

        lines = table.split("\n")
        for index, line in enumerate(lines):
            if index == 0:
                continue
            if line.startswith("!"):
                lines[index] = line.replace("!!", "\n!").replace("||", "\n!")
            elif line.startswith("|") and not line.startswith(("|+", "|-", "|}")):
                lines[index] = line.replace("||", "\n|")
        return "\n".join(lines)
