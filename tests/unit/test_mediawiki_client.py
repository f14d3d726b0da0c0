"""Unit tests for the MediaWiki Action API client."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest
import requests

from wikistyle.site import EditFlags, MediaWikiApiError, MediaWikiClient, PageRecord
from wikistyle.site.titles import ResolvedTitle

_API_URL = "https://wiki.example.org/w/api.php"


class FakeResponse:
    """Response stub with a JSON body and an HTTP status."""

    def __init__(self, payload: object, status_code: int = 200) -> None:
        """Initialize response payload and status."""

        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self) -> None:
        """Raise `HTTPError` for error statuses like `requests` does."""

        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)

    def json(self) -> object:
        """Return the payload, raising `ValueError` for non-JSON bodies."""

        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    """Session stub routing every request through a handler and recording calls."""

    def __init__(self, handler: Callable[[str, dict[str, str]], Any]) -> None:
        """Initialize request handler and call log."""

        self.headers: dict[str, str] = {}
        self.calls: list[tuple[str, dict[str, str]]] = []
        self._handler = handler

    def get(self, url: str, *, params: dict[str, str], timeout: float) -> FakeResponse:
        """Record and answer a GET request."""

        return self._dispatch("GET", url, params)

    def post(self, url: str, *, data: dict[str, str], timeout: float) -> FakeResponse:
        """Record and answer a POST request."""

        return self._dispatch("POST", url, data)

    def _dispatch(self, method: str, url: str, params: dict[str, str]) -> FakeResponse:
        assert url == _API_URL
        self.calls.append((method, params))
        result = self._handler(method, params)
        if isinstance(result, Exception):
            raise result
        if isinstance(result, FakeResponse):
            return result
        return FakeResponse(result)


def _wiki_handler(method: str, params: dict[str, str]) -> dict[str, Any]:
    """Answer token, login, and edit requests of a healthy wiki."""

    if params.get("meta") == "tokens":
        kind = params["type"]
        return {"query": {"tokens": {f"{kind}token": f"{kind}-token+\\"}}}
    if params["action"] == "login":
        return {"login": {"result": "Success", "lgusername": "Wikistyle bot"}}
    if params["action"] == "edit":
        return {"edit": {"result": "Success", "newrevid": 55}}
    raise AssertionError(f"Unexpected request: {method} {params}")


def _client(handler: Callable[[str, dict[str, str]], Any]) -> tuple[MediaWikiClient, FakeSession]:
    """Build a client over a fake session."""

    session = FakeSession(handler)
    client = MediaWikiClient(
        _API_URL,
        user_agent="wikistyle/test",
        session=session,  # type: ignore[arg-type]
    )
    return client, session


def test_login_and_save_send_flagged_edit_under_service_account() -> None:
    """Saves should carry bot, minor, watchlist, and base-revision parameters."""

    client, session = _client(_wiki_handler)

    client.login("Wikistyle bot@tidy", "secret")
    revision_id = client.save_page(
        "Foo",
        "* a",
        identity="Wikistyle bot",
        summary="Normalize wikitext",
        flags=EditFlags(),
        base_revision_id=7,
    )

    assert revision_id == 55
    assert client.username == "Wikistyle bot"
    assert session.headers["User-Agent"] == "wikistyle/test"

    login_call = session.calls[1]
    assert login_call[0] == "POST"
    assert login_call[1]["lgname"] == "Wikistyle bot@tidy"
    assert login_call[1]["lgtoken"] == "login-token+\\"

    method, edit_params = session.calls[-1]
    assert method == "POST"
    assert edit_params == {
        "action": "edit",
        "title": "Foo",
        "text": "* a",
        "summary": "Normalize wikitext",
        "nocreate": "1",
        "bot": "1",
        "minor": "1",
        "watchlist": "nochange",
        "baserevid": "7",
        "token": "csrf-token+\\",
        "format": "json",
        "formatversion": "2",
    }


def test_login_failure_raises_auth_error() -> None:
    """Rejected logins should surface the wiki's reason."""

    def handler(method: str, params: dict[str, str]) -> dict[str, Any]:
        if params.get("meta") == "tokens":
            return {"query": {"tokens": {"logintoken": "t"}}}
        return {"login": {"result": "Failed", "reason": {"text": "Incorrect password."}}}

    client, _ = _client(handler)

    with pytest.raises(MediaWikiApiError, match="Incorrect password") as exc_info:
        client.login("Wikistyle bot@tidy", "wrong")

    assert exc_info.value.failure_kind == "auth"
    assert client.username is None


def test_save_requires_login_and_matching_identity() -> None:
    """Saving should fail before login or when the identity differs from the login."""

    client, session = _client(_wiki_handler)

    with pytest.raises(MediaWikiApiError) as no_login:
        client.save_page("Foo", "x", identity="Wikistyle bot", summary="s", flags=EditFlags())
    assert no_login.value.failure_kind == "auth"

    client.login("Wikistyle bot@tidy", "secret")
    with pytest.raises(MediaWikiApiError) as mismatch:
        client.save_page("Foo", "x", identity="Someone else", summary="s", flags=EditFlags())
    assert mismatch.value.failure_kind == "identity_mismatch"
    assert all(params["action"] != "edit" for _, params in session.calls)


def test_fetch_page_maps_revision_metadata() -> None:
    """Fetched pages should carry namespace, author, revert, and opt-out metadata."""

    def handler(method: str, params: dict[str, str]) -> dict[str, Any]:
        assert params["prop"] == "revisions|info|pageprops"
        return {
            "query": {
                "pages": [
                    {
                        "title": "Foo",
                        "ns": 0,
                        "pageprops": {"nowikistyle": ""},
                        "revisions": [
                            {
                                "revid": 9,
                                "user": "Alice",
                                "tags": ["mw-undo"],
                                "slots": {
                                    "main": {"content": "*a", "contentmodel": "wikitext"}
                                },
                            }
                        ],
                    }
                ]
            }
        }

    client, _ = _client(handler)

    assert client.fetch_page("Foo") == PageRecord(
        title="Foo",
        text="*a",
        namespace=0,
        content_model="wikitext",
        is_redirect=False,
        revision_id=9,
        last_author="Alice",
        is_revert=True,
        is_exempt=True,
    )


def test_fetch_page_returns_none_for_missing_pages() -> None:
    """Missing pages should be reported as `None`."""

    missing = {"query": {"pages": [{"title": "X", "missing": True}]}}
    client, _ = _client(lambda method, params: missing)

    assert client.fetch_page("X") is None


def test_api_error_payload_raises_api_error() -> None:
    """API-level error objects should become `api_error` failures with the API code."""

    client, _ = _client(
        lambda method, params: {"error": {"code": "badtoken", "info": "Invalid CSRF token."}}
    )

    with pytest.raises(MediaWikiApiError) as exc_info:
        client.fetch_page("Foo")

    assert str(exc_info.value) == "MediaWiki API error `badtoken`: Invalid CSRF token."
    assert exc_info.value.failure_kind == "api_error"
    assert exc_info.value.api_code == "badtoken"


@pytest.mark.parametrize(
    ("result", "failure_kind", "status_code"),
    [
        (FakeResponse({}, status_code=503), "http_error", 503),
        (FakeResponse({}, status_code=504), "timeout", 504),
        (requests.Timeout("read timed out"), "timeout", None),
        (requests.ConnectionError("connection refused"), "transport", None),
        (FakeResponse(ValueError("not json")), "invalid_response", None),
        (FakeResponse(["not", "a", "mapping"]), "invalid_response", None),
    ],
)
def test_transport_failures_are_classified(
    result: object, failure_kind: str, status_code: int | None
) -> None:
    """HTTP, transport, and payload failures should map to stable failure kinds."""

    client, _ = _client(lambda method, params: result)

    with pytest.raises(MediaWikiApiError) as exc_info:
        client.fetch_page("Foo")

    assert exc_info.value.failure_kind == failure_kind
    assert exc_info.value.status_code == status_code


def test_resolve_uses_wiki_titles_and_caches_results() -> None:
    """Titles should be resolved once through the API and cached afterwards."""

    def handler(method: str, params: dict[str, str]) -> dict[str, Any]:
        if params["titles"] == "a|b":
            return {"query": {"pages": [{"title": "A|b", "invalid": True}]}}
        return {"query": {"pages": [{"ns": 14, "title": "Category:Foo", "missing": True}]}}

    client, session = _client(handler)

    assert client.resolve("category:foo#Top") == ResolvedTitle(14, "Foo", "Top")
    assert client.resolve("category:foo#Top") == ResolvedTitle(14, "Foo", "Top")
    assert client.resolve("a|b") is None
    assert client.resolve("#Section") == ResolvedTitle(0, "", "Section")
    assert len(session.calls) == 2


@pytest.mark.parametrize(
    "failure",
    [FakeResponse({}, status_code=503), requests.ConnectionError("connection refused")],
)
def test_resolve_failure_leaves_title_unresolved_and_uncached(failure: object) -> None:
    """A failed lookup should return `None` and be retried on the next call."""

    answers: list[object] = [
        failure,
        {"query": {"pages": [{"ns": 14, "title": "Category:Foo"}]}},
    ]
    client, session = _client(lambda method, params: answers.pop(0))

    assert client.resolve("category:foo") is None
    assert client.resolve("category:foo") == ResolvedTitle(14, "Foo", "")
    assert client.resolve("category:foo") == ResolvedTitle(14, "Foo", "")
    assert len(session.calls) == 2
