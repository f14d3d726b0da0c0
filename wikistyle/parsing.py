"""Shared parsing helpers for configuration value normalization."""

from __future__ import annotations

from collections.abc import Iterable


def normalize_optional_string(value: object) -> str | None:
    """Normalize an optional value to a stripped non-empty string.

    Args:
        value: Arbitrary input value.

    Returns:
        Stripped string value, or `None` when the value is empty after trimming.
    """

    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return text


def parse_csv_tokens(value: object) -> tuple[str, ...]:
    """Split a comma-separated string or an iterable of strings into trimmed tokens.

    Blank tokens are dropped and the first occurrence of each token wins.
    """

    if value is None:
        return ()
    if isinstance(value, str):
        raw_items: Iterable[object] = value.split(",")
    elif isinstance(value, Iterable):
        raw_items = value
    else:
        raw_items = (value,)

    tokens: list[str] = []
    for item in raw_items:
        token = normalize_optional_string(item)
        if token is not None and token not in tokens:
            tokens.append(token)
    return tuple(tokens)


def parse_namespace_ids(value: object, field_name: str) -> frozenset[int]:
    """Parse namespace numbers from a comma-separated string or an iterable.

    Raises:
        ValueError: If any token is not a non-negative integer.
    """

    namespaces: set[int] = set()
    for token in parse_csv_tokens(value if not isinstance(value, int) else str(value)):
        try:
            namespace = int(token)
        except ValueError as exc:
            raise ValueError(
                f"`{field_name}` must contain non-negative integer namespace ids; got `{token}`."
            ) from exc
        if namespace < 0:
            raise ValueError(
                f"`{field_name}` must contain non-negative integer namespace ids; got `{token}`."
            )
        namespaces.add(namespace)
    return frozenset(namespaces)
