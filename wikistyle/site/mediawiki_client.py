"""MediaWiki Action API client acting as page store and title resolver.

Responsibilities:
- Log in with a bot password and keep the session cookies.
- Fetch the latest revision with the metadata eligibility checks need.
- Save normalization edits with bot/minor flags under the logged-in identity.
- Resolve raw titles to namespaces through the wiki's own title parser.
- Raise actionable `MediaWikiApiError` exceptions for every failure path.
"""

from __future__ import annotations

from typing import Any

import requests

from .pages import EditFlags, PageRecord, WIKITEXT_CONTENT_MODEL, normalize_user_name
from .titles import ResolvedTitle


class MediaWikiApiError(RuntimeError):
    """Raised when a MediaWiki API request fails or returns malformed output."""

    def __init__(
        self,
        message: str,
        *,
        failure_kind: str = "unknown",
        status_code: int | None = None,
        api_code: str | None = None,
    ) -> None:
        """Initialize API error metadata for stage-aware diagnostics."""

        super().__init__(message)
        self.failure_kind = failure_kind
        self.status_code = status_code
        self.api_code = api_code


class MediaWikiClient:
    """Minimal requests-based client for the MediaWiki Action API."""

    _REVERT_TAGS = frozenset({"mw-rollback", "mw-undo", "mw-manual-revert"})
    _MAX_MESSAGE_CHARS = 180

    def __init__(
        self,
        api_url: str,
        *,
        user_agent: str = "wikistyle",
        timeout_seconds: float = 30.0,
        opt_out_property: str = "nowikistyle",
        session: requests.Session | None = None,
    ) -> None:
        """Initialize API endpoint settings and the HTTP session."""

        self.api_url = api_url.strip()
        self.timeout_seconds = timeout_seconds
        self.opt_out_property = opt_out_property
        self.username: str | None = None
        self._session = session or requests.Session()
        self._session.headers["User-Agent"] = user_agent
        self._title_cache: dict[str, ResolvedTitle | None] = {}

    def login(self, username: str, password: str) -> None:
        """Log in with a bot password; later saves are attributed to this account."""

        token = self._token("login")
        payload = self._request(
            "POST",
            {"action": "login", "lgname": username, "lgpassword": password, "lgtoken": token},
        )
        login = payload.get("login")
        if not isinstance(login, dict) or login.get("result") != "Success":
            reason = login.get("reason", "unknown reason") if isinstance(login, dict) else ""
            if isinstance(reason, dict):
                reason = reason.get("text", "unknown reason")
            raise MediaWikiApiError(
                f"MediaWiki login failed for `{username}`: {self._short_message(str(reason))}",
                failure_kind="auth",
            )
        self.username = str(login.get("lgusername") or username.split("@", 1)[0])

    def fetch_page(self, title: str) -> PageRecord | None:
        """Return the latest revision of `title`, or `None` when the page is missing."""

        payload = self._request(
            "GET",
            {
                "action": "query",
                "prop": "revisions|info|pageprops",
                "titles": title,
                "rvprop": "ids|user|content|contentmodel|tags",
                "rvslots": "main",
            },
        )
        page = self._first_page(payload)
        if page is None or page.get("missing") or page.get("invalid"):
            return None

        revisions = page.get("revisions")
        if not isinstance(revisions, list) or not revisions:
            return None
        revision = revisions[0]
        main_slot = revision.get("slots", {}).get("main", {})
        tags = revision.get("tags") or []
        pageprops = page.get("pageprops") or {}

        return PageRecord(
            title=str(page.get("title", title)),
            text=str(main_slot.get("content", "")),
            namespace=int(page.get("ns", 0)),
            content_model=str(
                main_slot.get("contentmodel") or page.get("contentmodel") or WIKITEXT_CONTENT_MODEL
            ),
            is_redirect=bool(page.get("redirect", False)),
            revision_id=revision.get("revid"),
            last_author=revision.get("user"),
            is_revert=bool(self._REVERT_TAGS.intersection(tags)),
            is_exempt=self.opt_out_property in pageprops,
        )

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
        """Save `text` as a new revision of an existing page and return its id."""

        if self.username is None:
            raise MediaWikiApiError(
                "MediaWiki login is required before saving pages.",
                failure_kind="auth",
            )
        if normalize_user_name(identity) != normalize_user_name(self.username):
            raise MediaWikiApiError(
                f"Refusing to save as `{identity}` while logged in as `{self.username}`.",
                failure_kind="identity_mismatch",
            )

        params: dict[str, str] = {
            "action": "edit",
            "title": title,
            "text": text,
            "summary": summary,
            "nocreate": "1",
        }
        # The API has no separate recent-changes switch; bot edits are hidden there.
        if flags.bot or flags.suppress_recent_changes:
            params["bot"] = "1"
        if flags.minor:
            params["minor"] = "1"
        if flags.internal:
            params["watchlist"] = "nochange"
        if base_revision_id is not None:
            params["baserevid"] = str(base_revision_id)
        params["token"] = self._token("csrf")

        payload = self._request("POST", params)
        edit = payload.get("edit")
        if not isinstance(edit, dict) or edit.get("result") != "Success":
            raise MediaWikiApiError(
                f"MediaWiki rejected the edit to `{title}`.",
                failure_kind="edit_rejected",
            )
        new_revision_id = edit.get("newrevid")
        return int(new_revision_id) if new_revision_id is not None else None

    def resolve(self, raw_title: str) -> ResolvedTitle | None:
        """Resolve a raw title through the wiki's title parser, caching results."""

        if raw_title in self._title_cache:
            return self._title_cache[raw_title]

        resolved: ResolvedTitle | None = None
        name, _, fragment = raw_title.partition("#")
        if name.strip():
            try:
                payload = self._request("GET", {"action": "query", "titles": name})
            except MediaWikiApiError:
                # Unresolved links stay as written; the next call asks the wiki again.
                return None
            page = self._first_page(payload)
            if page is not None and not page.get("invalid"):
                namespace = int(page.get("ns", 0))
                full_title = str(page.get("title", name))
                text = full_title
                if namespace and ":" in full_title:
                    text = full_title.split(":", 1)[1]
                resolved = ResolvedTitle(namespace=namespace, text=text, fragment=fragment.strip())
        elif fragment.strip():
            resolved = ResolvedTitle(namespace=0, text="", fragment=fragment.strip())

        self._title_cache[raw_title] = resolved
        return resolved

    def _token(self, kind: str) -> str:
        """Fetch a fresh token of the given kind (`login`, `csrf`)."""

        payload = self._request("GET", {"action": "query", "meta": "tokens", "type": kind})
        tokens = payload.get("query", {}).get("tokens", {})
        token = tokens.get(f"{kind}token") if isinstance(tokens, dict) else None
        if not isinstance(token, str) or not token:
            raise MediaWikiApiError(
                f"MediaWiki response is missing a `{kind}` token.",
                failure_kind="invalid_response",
            )
        return token

    @staticmethod
    def _first_page(payload: dict[str, Any]) -> dict[str, Any] | None:
        """Return the first page object of a `formatversion=2` query response."""

        pages = payload.get("query", {}).get("pages")
        if not isinstance(pages, list) or not pages or not isinstance(pages[0], dict):
            return None
        return pages[0]

    def _request(self, method: str, params: dict[str, str]) -> dict[str, Any]:
        """Execute one API request and map transport, HTTP, and API failures."""

        payload = {**params, "format": "json", "formatversion": "2"}
        try:
            if method == "POST":
                response = self._session.post(
                    self.api_url, data=payload, timeout=self.timeout_seconds
                )
            else:
                response = self._session.get(
                    self.api_url, params=payload, timeout=self.timeout_seconds
                )
            response.raise_for_status()
        except requests.HTTPError as exc:
            status_code = exc.response.status_code if exc.response is not None else 0
            failure_kind = "timeout" if status_code in {408, 504} else "http_error"
            raise MediaWikiApiError(
                f"MediaWiki request failed (HTTP {status_code}).",
                failure_kind=failure_kind,
                status_code=status_code,
            ) from exc
        except requests.Timeout as exc:
            raise MediaWikiApiError(
                "MediaWiki request timed out.",
                failure_kind="timeout",
            ) from exc
        except requests.RequestException as exc:
            raise MediaWikiApiError(
                f"MediaWiki request transport error: {self._short_message(str(exc))}",
                failure_kind="transport",
            ) from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise MediaWikiApiError(
                "MediaWiki returned an invalid JSON payload.",
                failure_kind="invalid_response",
            ) from exc

        if not isinstance(body, dict):
            raise MediaWikiApiError(
                "MediaWiki returned a malformed payload.",
                failure_kind="invalid_response",
            )
        error = body.get("error")
        if isinstance(error, dict):
            code = str(error.get("code", "unknown"))
            info = self._short_message(str(error.get("info", "")))
            raise MediaWikiApiError(
                f"MediaWiki API error `{code}`: {info}",
                failure_kind="api_error",
                api_code=code,
            )
        return body

    @classmethod
    def _short_message(cls, text: str) -> str:
        """Normalize and cap user-facing API message length."""

        compact = " ".join(text.split())
        if len(compact) <= cls._MAX_MESSAGE_CHARS:
            return compact
        return f"{compact[: cls._MAX_MESSAGE_CHARS - 1]}..."
