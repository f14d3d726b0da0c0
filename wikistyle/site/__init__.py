"""Collaborators around the normalization core: titles and page storage."""

from .mediawiki_client import MediaWikiApiError, MediaWikiClient
from .pages import EditFlags, PageRecord, PageStore
from .titles import NamespaceTitleResolver, ResolvedTitle, TitleResolver

__all__ = [
    "EditFlags",
    "MediaWikiApiError",
    "MediaWikiClient",
    "NamespaceTitleResolver",
    "PageRecord",
    "PageStore",
    "ResolvedTitle",
    "TitleResolver",
]
