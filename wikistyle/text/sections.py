"""Section heading normalization pass."""

from __future__ import annotations

import re

_HEADING_RE = re.compile(
    r"^(=+)[ \t]*([^\n]*?[^=\s][^\n]*?)[ \t]*(=+)[ \t]*$",
    re.MULTILINE,
)
_EXCESS_BLANK_LINES_RE = re.compile(r"\n{3,}")
_TRAILING_COLON_RE = re.compile(r"^(=+) ([^\n]+?): (=+)$", re.MULTILINE)
_BOLD_HEADING_RE = re.compile(r"^(=+) '''((?:(?!''')[^\n])+)''' (=+)$", re.MULTILINE)


class SectionNormalizer:
    """Give headings canonical inner spacing and one blank line around them."""

    def apply(self, text: str) -> str:
        """Normalize all heading lines in `text`."""

        text = _HEADING_RE.sub("\n\n\\1 \\2 \\3\n\n", text)
        text = _EXCESS_BLANK_LINES_RE.sub("\n\n", text)
        text = text.strip()

        # Colon, bold, colon: either wrapping order ends up fully stripped.
        text = _TRAILING_COLON_RE.sub(r"\1 \2 \3", text)
        text = _BOLD_HEADING_RE.sub(r"\1 \2 \3", text)
        text = _TRAILING_COLON_RE.sub(r"\1 \2 \3", text)
        return text
