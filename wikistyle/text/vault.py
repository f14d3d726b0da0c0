"""Placeholder vault for protecting markup from regex rewrites.

Responsibilities:
- Swap fragments for sentinel tokens that cannot occur in the protected text.
- Restore the original fragments verbatim after a rewrite.
"""

from __future__ import annotations

from collections.abc import Iterable

from .extract import Span, rewrite_spans

# Control characters that are neither whitespace nor line breaks for `str` methods.
_MARKER_CANDIDATES = tuple(chr(code) for code in (*range(0x01, 0x09), *range(0x0E, 0x1C)))


class PlaceholderCollisionError(ValueError):
    """Raised when no sentinel marker is free in the text being protected."""


class PlaceholderVault:
    """Short-lived mapping from sentinel tokens to hidden fragments."""

    def __init__(self, text: str) -> None:
        """Pick a sentinel marker character absent from `text`."""

        marker = next(
            (candidate for candidate in _MARKER_CANDIDATES if candidate not in text), None
        )
        if marker is None:
            raise PlaceholderCollisionError(
                "Text contains every placeholder marker character; cannot protect fragments."
            )
        self._marker = marker
        self._fragments: dict[int, str] = {}

    def __len__(self) -> int:
        return len(self._fragments)

    def token(self, key: int) -> str:
        """Return the sentinel token for a mapping key."""

        return f"{self._marker}{key}{self._marker}"

    def hide(self, text: str, fragments: Iterable[str]) -> str:
        """Replace every occurrence of each fragment with its own sentinel token.

        Identical fragments share one token, so all of their occurrences are hidden.
        """

        for fragment in fragments:
            if not fragment or fragment not in text:
                continue
            key = len(self._fragments)
            self._fragments[key] = fragment
            text = text.replace(fragment, self.token(key))
        return text

    def hide_spans(self, text: str, spans: Iterable[Span]) -> str:
        """Hide each located span behind a token of its own.

        Spans must be sorted, non-overlapping, and located in `text` itself. Only the
        located occurrence is hidden, so a span repeated inside a later span stays
        part of that span.
        """

        def _stash(fragment: str) -> str:
            key = len(self._fragments)
            self._fragments[key] = fragment
            return self.token(key)

        return rewrite_spans(text, list(spans), _stash)

    def restore(self, text: str) -> str:
        """Substitute every sentinel token back with its original fragment."""

        for key in sorted(self._fragments, reverse=True):
            text = text.replace(self.token(key), self._fragments[key])
        return text
