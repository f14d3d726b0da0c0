"""Configuration model and loaders for wikistyle.

Responsibilities:
- Define normalization and service settings as a typed dataclass.
- Validate settings with actionable error messages.
- Provide loader entry points for file- and environment-based configuration.

Key types:
- `WikistyleConfig`: normalized settings for the normalizer and page service.
- `ConfigLoader`: static construction helpers for `WikistyleConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from . import __version__
from .parsing import normalize_optional_string, parse_csv_tokens, parse_namespace_ids
from .text.lists import RedirectProtection

NORMALIZATION_MODULES = (
    "templates",
    "tables",
    "links",
    "references",
    "lists",
    "sections",
    "categories",
    "spacing",
)
_DEFAULT_SERVICE_ACCOUNT = "Wikistyle bot"
_DEFAULT_EDIT_SUMMARY = "Normalize wikitext"
_DEFAULT_OPT_OUT_PROPERTY = "nowikistyle"
_DEFAULT_USER_AGENT = f"wikistyle/{__version__}"


@dataclass(slots=True)
class WikistyleConfig:
    """Settings for one normalizer or service instance.

    Attributes:
        enabled_modules: Normalization passes to run; order is fixed by the pipeline.
        eligible_namespaces: Namespace numbers the page service normalizes.
        service_account: Account that authors normalization edits.
        edit_summary: Summary attached to normalization edits.
        opt_out_property: Page property that exempts a page from normalization.
        protected_tags: Tags whose `<tag>...</tag>` islands are never rewritten.
        redirect_protection: Version of the list-pass redirect rule.
        api_url: MediaWiki Action API endpoint used by the page store.
        user_agent: HTTP user agent for API requests.
    """

    enabled_modules: tuple[str, ...] = NORMALIZATION_MODULES
    eligible_namespaces: frozenset[int] = frozenset({0})
    service_account: str = _DEFAULT_SERVICE_ACCOUNT
    edit_summary: str = _DEFAULT_EDIT_SUMMARY
    opt_out_property: str = _DEFAULT_OPT_OUT_PROPERTY
    protected_tags: tuple[str, ...] = ("html",)
    redirect_protection: str = RedirectProtection.LEGACY.value
    api_url: str | None = None
    user_agent: str = _DEFAULT_USER_AGENT

    def validate(self) -> None:
        """Validate settings before building a normalizer or service."""

        unknown = sorted(set(self.enabled_modules).difference(NORMALIZATION_MODULES))
        if unknown:
            supported = ", ".join(NORMALIZATION_MODULES)
            raise ValueError(
                f"Unsupported `enabled_modules` value(s): {', '.join(unknown)}; "
                f"supported: {supported}."
            )
        for namespace in self.eligible_namespaces:
            if isinstance(namespace, bool) or not isinstance(namespace, int) or namespace < 0:
                raise ValueError(
                    "`eligible_namespaces` must contain non-negative integer namespace ids."
                )
        self._require_non_empty(self.service_account, "service_account")
        self._require_non_empty(self.edit_summary, "edit_summary")
        self._require_non_empty(self.opt_out_property, "opt_out_property")
        self._require_non_empty(self.user_agent, "user_agent")
        for tag in self.protected_tags:
            if not isinstance(tag, str) or not tag.strip() or any(
                character in tag for character in "<>/ \t\n"
            ):
                raise ValueError(
                    "`protected_tags` must contain bare tag names such as `html`."
                )
        supported_rules = {rule.value for rule in RedirectProtection}
        if self.redirect_protection not in supported_rules:
            raise ValueError(
                f"Unsupported `redirect_protection` value `{self.redirect_protection}`; "
                f"supported: {', '.join(sorted(supported_rules))}."
            )
        if self.api_url is not None and not self.api_url.startswith(("http://", "https://")):
            raise ValueError("`api_url` must be an absolute http(s) URL.")

    @staticmethod
    def _require_non_empty(value: str, field_name: str) -> None:
        """Validate that string fields are not empty."""

        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"`{field_name}` must be a non-empty string.")


class ConfigLoader:
    """Factory methods for creating `WikistyleConfig` from external sources."""

    _SUPPORTED_YAML_KEYS = frozenset(
        {
            "enabled_modules",
            "eligible_namespaces",
            "service_account",
            "edit_summary",
            "opt_out_property",
            "protected_tags",
            "redirect_protection",
            "api_url",
            "user_agent",
        }
    )

    @staticmethod
    def from_yaml(path: Path) -> WikistyleConfig:
        """Create a validated config from a YAML file."""

        path_text = path.read_text(encoding="utf-8")
        payload = ConfigLoader._parse_yaml_payload(path_text, path)

        return ConfigLoader._build_config_from_mapping(payload, source_label=f"YAML `{path}`")

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> WikistyleConfig:
        """Create a validated config from `WIKISTYLE_*` environment variables."""

        env_map: Mapping[str, str] = os.environ if env is None else env

        modules = ConfigLoader._optional_env_string(env_map, "WIKISTYLE_MODULES")
        namespaces = ConfigLoader._optional_env_string(env_map, "WIKISTYLE_NAMESPACES")
        protected_tags = ConfigLoader._optional_env_string(env_map, "WIKISTYLE_PROTECTED_TAGS")

        config = WikistyleConfig(
            enabled_modules=(
                parse_csv_tokens(modules) if modules is not None else NORMALIZATION_MODULES
            ),
            eligible_namespaces=(
                parse_namespace_ids(namespaces, "WIKISTYLE_NAMESPACES")
                if namespaces is not None
                else frozenset({0})
            ),
            service_account=(
                ConfigLoader._optional_env_string(env_map, "WIKISTYLE_SERVICE_ACCOUNT")
                or _DEFAULT_SERVICE_ACCOUNT
            ),
            edit_summary=(
                ConfigLoader._optional_env_string(env_map, "WIKISTYLE_EDIT_SUMMARY")
                or _DEFAULT_EDIT_SUMMARY
            ),
            opt_out_property=(
                ConfigLoader._optional_env_string(env_map, "WIKISTYLE_OPT_OUT_PROPERTY")
                or _DEFAULT_OPT_OUT_PROPERTY
            ),
            protected_tags=(
                parse_csv_tokens(protected_tags) if protected_tags is not None else ("html",)
            ),
            redirect_protection=(
                ConfigLoader._optional_env_string(env_map, "WIKISTYLE_REDIRECT_PROTECTION")
                or RedirectProtection.LEGACY.value
            ),
            api_url=ConfigLoader._optional_env_string(env_map, "WIKISTYLE_API_URL"),
        )
        config.validate()
        return config

    @staticmethod
    def _parse_yaml_payload(raw_text: str, path: Path) -> Mapping[str, Any]:
        """Parse YAML text and enforce a mapping root payload."""

        try:
            payload = yaml.safe_load(raw_text)
        except yaml.YAMLError as exc:
            raise ValueError(f"YAML config `{path}` is not valid YAML: {exc}") from exc

        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")
        return payload

    @staticmethod
    def _build_config_from_mapping(
        payload: Mapping[str, Any], source_label: str
    ) -> WikistyleConfig:
        """Build a validated config from a normalized mapping payload."""

        ConfigLoader._validate_yaml_keys(payload, source_label)

        enabled_modules = (
            parse_csv_tokens(payload["enabled_modules"])
            if "enabled_modules" in payload
            else NORMALIZATION_MODULES
        )
        try:
            eligible_namespaces = (
                parse_namespace_ids(payload["eligible_namespaces"], "eligible_namespaces")
                if "eligible_namespaces" in payload
                else frozenset({0})
            )
        except ValueError as exc:
            raise ValueError(f"{source_label}: {exc}") from exc
        protected_tags = (
            parse_csv_tokens(payload["protected_tags"])
            if "protected_tags" in payload
            else ("html",)
        )

        config = WikistyleConfig(
            enabled_modules=enabled_modules,
            eligible_namespaces=eligible_namespaces,
            service_account=(
                ConfigLoader._optional_non_empty_string(payload, "service_account")
                or _DEFAULT_SERVICE_ACCOUNT
            ),
            edit_summary=(
                ConfigLoader._optional_non_empty_string(payload, "edit_summary")
                or _DEFAULT_EDIT_SUMMARY
            ),
            opt_out_property=(
                ConfigLoader._optional_non_empty_string(payload, "opt_out_property")
                or _DEFAULT_OPT_OUT_PROPERTY
            ),
            protected_tags=protected_tags,
            redirect_protection=(
                ConfigLoader._optional_non_empty_string(payload, "redirect_protection")
                or RedirectProtection.LEGACY.value
            ),
            api_url=ConfigLoader._optional_non_empty_string(payload, "api_url"),
            user_agent=(
                ConfigLoader._optional_non_empty_string(payload, "user_agent")
                or _DEFAULT_USER_AGENT
            ),
        )
        try:
            config.validate()
        except ValueError as exc:
            raise ValueError(f"{source_label}: {exc}") from exc
        return config

    @staticmethod
    def _validate_yaml_keys(payload: Mapping[str, Any], source_label: str) -> None:
        """Reject keys the config model does not define."""

        unknown = sorted(
            str(key) for key in set(payload).difference(ConfigLoader._SUPPORTED_YAML_KEYS)
        )
        if unknown:
            key_list = ", ".join(unknown)
            raise ValueError(f"{source_label} includes unsupported key(s): {key_list}.")

    @staticmethod
    def _optional_non_empty_string(payload: Mapping[str, Any], key: str) -> str | None:
        """Read an optional string field and normalize blank values to `None`."""

        if key not in payload:
            return None
        return normalize_optional_string(payload[key])

    @staticmethod
    def _optional_env_string(env: Mapping[str, str], key: str) -> str | None:
        """Read and normalize optional string environment variable values."""

        if key not in env:
            return None
        return normalize_optional_string(env.get(key))
