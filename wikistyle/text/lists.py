"""List (`*`/`#`) normalization pass.

Responsibilities:
- Collapse spaced marker runs and enforce one space before item content.
- Keep lists contiguous and separated from surrounding prose by a blank line.
- Keep a leading redirect directive from being read as a numbered list.
"""

from __future__ import annotations

from enum import Enum
import re

from .vault import PlaceholderVault


class RedirectProtection(str, Enum):
    """Versions of the rule that shields a redirect line from list rewrites.

    `LEGACY` treats a first line starting with `#` and containing a wiki link as a
    redirect directive. `NONE` applies list rules to every line; callers using it
    are expected to skip redirect pages before normalizing.
    """

    LEGACY = "legacy"
    NONE = "none"


_REDIRECT_LINE_RE = re.compile(r"\A#[^\n]*\[\[[^\n]*\]\]")

_SPACED_MARKERS_RE = re.compile(r"^([*#]) ?([*#])? ?([*#])?", re.MULTILINE)
_EMPTY_ITEM_RE = re.compile(r"^[*#]+[ \t]*$", re.MULTILINE)
_ITEM_SPACE_RE = re.compile(r"^([*#][*#:;]*)[ \t]*(?=\S)", re.MULTILINE)
_GAP_BETWEEN_ITEMS_RE = re.compile(r"^([*#][^\n]*\n)(?:[ \t]*\n)+(?=[*#])", re.MULTILINE)
_PROSE_BEFORE_LIST_RE = re.compile(r"^([^*#:;\s][^\n]*)\n(?=[*#])", re.MULTILINE)
_LIST_BEFORE_PROSE_RE = re.compile(r"^([*#][^\n]*)\n(?=[^*#:;\s])", re.MULTILINE)


class ListNormalizer:
    """Canonicalize list markers and the blank lines around lists."""

    def __init__(
        self,
        redirect_protection: RedirectProtection | str = RedirectProtection.LEGACY,
    ) -> None:
        """Initialize with the redirect-protection rule version to apply."""

        self.redirect_protection = RedirectProtection(redirect_protection)

    def apply(self, text: str) -> str:
        """Normalize all list lines in `text`."""

        vault = PlaceholderVault(text)
        if self.redirect_protection is RedirectProtection.LEGACY:
            redirect = _REDIRECT_LINE_RE.match(text)
            if redirect is not None:
                text = vault.hide(text, [redirect.group(0)])

        text = _SPACED_MARKERS_RE.sub(r"\1\2\3", text)
        text = _EMPTY_ITEM_RE.sub("", text)
        text = _ITEM_SPACE_RE.sub(r"\1 ", text)
        text = _GAP_BETWEEN_ITEMS_RE.sub(r"\1", text)
        text = _PROSE_BEFORE_LIST_RE.sub("\\1\n\n", text)
        text = _LIST_BEFORE_PROSE_RE.sub("\\1\n\n", text)
        return vault.restore(text)
