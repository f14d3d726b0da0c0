"""Template (`{{...}}`) normalization pass.

Responsibilities:
- Canonicalize parameter spacing for inline and block template styles.
- Keep nested templates, tables, and links untouched while splitting parameters.
"""

from __future__ import annotations

import re

from .extract import extract_spans, outermost_spans, rewrite_spans
from .vault import PlaceholderVault

_LIST_VALUE_RE = re.compile(r"^[*#]+\s|\n[*#]")


def _capitalize_first(value: str) -> str:
    """Uppercase only the first character of `value`."""

    return value[:1].upper() + value[1:]


def _starts_list(value: str) -> bool:
    """Return whether a parameter value holds list markup that must start a line."""

    return bool(_LIST_VALUE_RE.search(value)) and value[:1] in {"*", "#"}


class TemplateNormalizer:
    """Rebuild every top-level template in inline or block style."""

    def apply(self, text: str) -> str:
        """Normalize all top-level templates in `text`."""

        return rewrite_spans(text, extract_spans("{{", "}}", text), self.fix_template)

    def fix_template(self, template: str) -> str:
        """Return the canonical form of one `{{...}}` span."""

        body = template[2:-2]
        vault = PlaceholderVault(body)
        nested = outermost_spans(
            [
                extract_spans("{{", "}}", body),
                extract_spans("{|", "\n|}", body),
                extract_spans("[[", "]]", body),
            ]
        )
        body = vault.hide_spans(body, nested)

        params = [param.strip() for param in body.split("|")]
        title = params.pop(0)
        if "\n|" in body:
            rebuilt = self._block(title, params)
        else:
            rebuilt = self._inline(title, params)
        return "{{" + vault.restore(rebuilt) + "}}"

    def _inline(self, title: str, params: list[str]) -> str:
        """Serialize parameters as `{{title|key=value|value}}`."""

        rebuilt = title
        for param in params:
            key, value = self._split_param(param)
            if key is None:
                rebuilt += f"|{value}"
            elif value:
                rebuilt += f"|{key}={value}"
        return rebuilt

    def _block(self, title: str, params: list[str]) -> str:
        """Serialize parameters one per line as `| key = value`."""

        rebuilt = _capitalize_first(title)
        for param in params:
            key, value = self._split_param(param)
            if key is None:
                rebuilt += f"\n| {value}"
            elif value:
                rebuilt += f"\n| {key} = {value}"
        return rebuilt + "\n"

    @staticmethod
    def _split_param(param: str) -> tuple[str | None, str]:
        """Split a trimmed parameter into an optional key and its value."""

        if "=" in param:
            key, value = param.split("=", 1)
            key = key.strip()
            value = value.strip(" ")
        else:
            key = None
            value = param.strip(" ")
        if _starts_list(value):
            value = "\n" + value
        return key, value
