"""Page-store records and protocol.

Key types:
- `PageRecord`: the current revision of a page plus the metadata eligibility needs.
- `EditFlags`: flags attached to normalization edits to keep them from re-triggering.
- `PageStore`: protocol for fetching and saving pages.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

WIKITEXT_CONTENT_MODEL = "wikitext"


def normalize_user_name(name: str) -> str:
    """Normalize a user name the way the wiki compares them.

    Bot-password login names (`Account@BotName`) compare as their account.
    """

    account = name.split("@", 1)[0]
    normalized = " ".join(account.replace("_", " ").split())
    return normalized[:1].upper() + normalized[1:]


@dataclass(frozen=True, slots=True)
class PageRecord:
    """Current state of one wiki page.

    Attributes:
        title: Page title as stored.
        text: Wikitext of the latest revision.
        namespace: Namespace number.
        content_model: Content model identifier (`wikitext`, `css`, `json`, ...).
        is_redirect: Whether the page is a redirect.
        revision_id: Latest revision id, when known.
        last_author: User name of the latest revision author, when known.
        is_revert: Whether the latest revision reverted earlier edits.
        is_exempt: Whether the page carries the opt-out property.
    """

    title: str
    text: str
    namespace: int
    content_model: str = WIKITEXT_CONTENT_MODEL
    is_redirect: bool = False
    revision_id: int | None = None
    last_author: str | None = None
    is_revert: bool = False
    is_exempt: bool = False


@dataclass(frozen=True, slots=True)
class EditFlags:
    """Flags for an edit made by the normalizer's service account."""

    suppress_recent_changes: bool = True
    bot: bool = True
    minor: bool = True
    internal: bool = True


class PageStore(Protocol):
    """Protocol for the page persistence collaborator."""

    def fetch_page(self, title: str) -> PageRecord | None:
        """Return the current page state, or `None` when the page does not exist."""

    def save_page(
        self,
        title: str,
        text: str,
        *,
        identity: str,
        summary: str,
        flags: EditFlags,
        base_revision_id: int | None = None,
    ) -> int | None:
        """Save a new revision and return its revision id when known."""
