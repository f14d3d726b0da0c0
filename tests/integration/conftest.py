"""Integration-test fakes for the page store and secure credential storage."""

from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from wikistyle.site import EditFlags, NamespaceTitleResolver, PageRecord, ResolvedTitle


class InMemoryCredentialStore:
    """Simple in-memory credential store used for CLI tests."""

    def __init__(self, initial_password: str | None = None) -> None:
        """Initialize the store with an optional pre-seeded bot password."""

        self._password = initial_password

    def is_available(self) -> bool:
        """Return availability flag expected by the CLI status command."""

        return True

    def get_password(self) -> str | None:
        """Return currently stored bot password."""

        return self._password

    def set_password(self, password: str) -> None:
        """Persist a normalized bot password."""

        self._password = password.strip()

    def clear_password(self) -> bool:
        """Clear the bot password and return whether one existed."""

        existed = self._password is not None
        self._password = None
        return existed


@dataclass
class FakeWikiClient:
    """Offline stand-in for `MediaWikiClient` used by `page` command tests."""

    api_url: str
    user_agent: str = ""
    opt_out_property: str = ""
    pages: dict[str, PageRecord] = field(default_factory=dict)
    logins: list[tuple[str, str]] = field(default_factory=list)
    saves: list[tuple[str, str, str]] = field(default_factory=list)

    def login(self, username: str, password: str) -> None:
        """Record the login."""

        self.logins.append((username, password))

    def fetch_page(self, title: str) -> PageRecord | None:
        """Return a seeded page."""

        return self.pages.get(title)

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
        """Record the save and return a deterministic revision id."""

        self.saves.append((title, text, identity))
        return 101

    def resolve(self, raw_title: str) -> ResolvedTitle | None:
        """Resolve titles offline."""

        return NamespaceTitleResolver().resolve(raw_title)


@pytest.fixture
def fake_wiki(monkeypatch: pytest.MonkeyPatch) -> dict[str, object]:
    """Patch the CLI to use fake wiki clients and an in-memory credential store.

    The returned mapping holds seeded `pages`, created `clients`, and the `store`.
    """

    state: dict[str, object] = {
        "pages": {},
        "clients": [],
        "store": InMemoryCredentialStore(initial_password="secret"),
    }

    def _client_factory(api_url: str, **kwargs: str) -> FakeWikiClient:
        """Build a fake client over the shared page table."""

        client = FakeWikiClient(api_url, pages=state["pages"], **kwargs)  # type: ignore[arg-type]
        state["clients"].append(client)  # type: ignore[union-attr]
        return client

    monkeypatch.setattr("wikistyle.cli.MediaWikiClient", _client_factory)
    monkeypatch.setattr(
        "wikistyle.cli.create_credential_store",
        lambda account_name: state["store"],
    )
    return state
