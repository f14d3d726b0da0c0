"""Top-level package for wikistyle.

This package normalizes wikitext markup into a canonical, idempotent form. The
main entry point is `WikitextNormalizer`; `NormalizationService` wraps it with
page-level eligibility and edit-loop policy.
"""

__version__ = "0.1.0"

from .pipeline import NormalizationReport, WikitextNormalizer, normalize_wikitext
from .service import NormalizationService, PageOutcome

__all__ = [
    "NormalizationReport",
    "NormalizationService",
    "PageOutcome",
    "WikitextNormalizer",
    "normalize_wikitext",
    "__version__",
]
