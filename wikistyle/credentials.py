"""Secure credential storage for the service account's bot password.

Responsibilities:
- Persist the bot password in an OS-backed secure credential store.
- Provide deterministic read/write/delete operations for that password.
- Avoid logging or exposing secret values in diagnostics.

Key types:
- `CredentialStore`: interface for bot-password persistence.
- `KeyringCredentialStore`: keyring-backed secure credential storage.
"""

from __future__ import annotations

from dataclasses import dataclass

import keyring
from keyring.errors import KeyringError


_DEFAULT_SERVICE_NAME = "wikistyle"
_DEFAULT_ACCOUNT_NAME = "Wikistyle bot"


class CredentialStore:
    """Interface for secure bot-password operations."""

    def is_available(self) -> bool:
        """Return whether secure credential operations are available."""

        raise NotImplementedError

    def get_password(self) -> str | None:
        """Load the stored bot password from secure storage, when available."""

        raise NotImplementedError

    def set_password(self, password: str) -> None:
        """Persist a bot password in secure storage."""

        raise NotImplementedError

    def clear_password(self) -> bool:
        """Delete a stored bot password and return whether one existed."""

        raise NotImplementedError


@dataclass(slots=True)
class KeyringCredentialStore(CredentialStore):
    """Secure credential store backed by the `keyring` package.

    The account name is the service account the password belongs to.
    """

    service_name: str = _DEFAULT_SERVICE_NAME
    account_name: str = _DEFAULT_ACCOUNT_NAME

    def _load_keyring_module(self):
        """Return the `keyring` module used for storage operations."""

        return keyring

    def is_available(self) -> bool:
        """Return `True` when a usable keyring backend is configured."""

        keyring_module = self._load_keyring_module()
        try:
            backend = keyring_module.get_keyring()
        except KeyringError:
            return False
        return getattr(backend, "priority", 1) > 0

    def get_password(self) -> str | None:
        """Get the normalized bot password, returning `None` when missing."""

        if not self.is_available():
            return None
        value = self._load_keyring_module().get_password(self.service_name, self.account_name)
        if value is None:
            return None
        normalized = value.strip()
        if not normalized:
            return None
        return normalized

    def set_password(self, password: str) -> None:
        """Persist a normalized bot password or raise when storage is unavailable."""

        if not self.is_available():
            raise RuntimeError(
                "Secure credential storage is unavailable because no usable keyring "
                "backend is configured."
            )

        normalized = password.strip()
        if not normalized:
            raise ValueError("Bot password must be a non-empty string.")
        self._load_keyring_module().set_password(self.service_name, self.account_name, normalized)

    def clear_password(self) -> bool:
        """Remove the stored bot password and report if one was present."""

        if self.get_password() is None:
            return False

        self._load_keyring_module().delete_password(self.service_name, self.account_name)
        return True


def create_credential_store(account_name: str = _DEFAULT_ACCOUNT_NAME) -> CredentialStore:
    """Create the default secure credential store for a service account."""

    return KeyringCredentialStore(account_name=account_name)
