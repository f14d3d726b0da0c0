"""Wikitext normalization passes and their shared building blocks.

Every pass is a small class exposing `apply(text) -> str`. Passes never raise on
malformed markup; input they cannot parse is left unchanged.
"""

from typing import Protocol

from .categories import CategoryNormalizer
from .extract import Span, extract_spans, outermost_spans, rewrite_spans
from .links import LinkNormalizer, percent_decode
from .lists import ListNormalizer, RedirectProtection
from .references import ReferenceNormalizer
from .sections import SectionNormalizer
from .spacing import SpacingNormalizer
from .tables import TableNormalizer
from .templates import TemplateNormalizer
from .vault import PlaceholderCollisionError, PlaceholderVault


class WikitextRule(Protocol):
    """Protocol for wikitext normalization passes."""

    def apply(self, text: str) -> str:
        """Apply one normalization pass to a whole document."""


__all__ = [
    "WikitextRule",
    "Span",
    "extract_spans",
    "outermost_spans",
    "rewrite_spans",
    "PlaceholderVault",
    "PlaceholderCollisionError",
    "TemplateNormalizer",
    "TableNormalizer",
    "LinkNormalizer",
    "percent_decode",
    "ReferenceNormalizer",
    "ListNormalizer",
    "RedirectProtection",
    "SectionNormalizer",
    "CategoryNormalizer",
    "SpacingNormalizer",
]
