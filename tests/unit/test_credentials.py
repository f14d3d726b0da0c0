"""Unit tests for secure credential store helpers."""

from keyring.errors import KeyringError
import pytest

from wikistyle.credentials import KeyringCredentialStore, create_credential_store


class FakeBackend:
    """Keyring backend stub exposing only a priority."""

    def __init__(self, priority: float) -> None:
        """Initialize backend priority."""

        self.priority = priority


class FakeKeyringModule:
    """In-memory keyring stub for deterministic credential store tests."""

    def __init__(self, priority: float = 1) -> None:
        """Initialize fake storage dictionary and backend."""

        self._storage: dict[tuple[str, str], str] = {}
        self._backend = FakeBackend(priority)

    def get_keyring(self) -> FakeBackend:
        """Return the configured fake backend."""

        return self._backend

    def get_password(self, service_name: str, account_name: str) -> str | None:
        """Return previously stored password if present."""

        return self._storage.get((service_name, account_name))

    def set_password(self, service_name: str, account_name: str, value: str) -> None:
        """Store password value for the service/account key."""

        self._storage[(service_name, account_name)] = value

    def delete_password(self, service_name: str, account_name: str) -> None:
        """Delete password value for the service/account key."""

        self._storage.pop((service_name, account_name), None)


class BrokenKeyringModule(FakeKeyringModule):
    """Keyring stub whose backend lookup fails."""

    def get_keyring(self) -> FakeBackend:
        """Raise the keyring error raised by misconfigured environments."""

        raise KeyringError("no backend")


def test_keyring_store_roundtrip_set_get_clear(monkeypatch) -> None:  # type: ignore[no-untyped-def]
    """Keyring store should set/get/clear bot passwords via keyring backend."""

    fake_keyring = FakeKeyringModule()
    store = KeyringCredentialStore(account_name="Tidy bot")
    monkeypatch.setattr(store, "_load_keyring_module", lambda: fake_keyring)

    assert store.is_available() is True
    assert store.get_password() is None

    store.set_password("  hunter2  ")
    assert store.get_password() == "hunter2"
    assert fake_keyring._storage == {("wikistyle", "Tidy bot"): "hunter2"}

    assert store.clear_password() is True
    assert store.get_password() is None
    assert store.clear_password() is False


def test_keyring_store_rejects_blank_password(monkeypatch) -> None:  # type: ignore[no-untyped-def]
    """Blank passwords should not be written to secure storage."""

    store = KeyringCredentialStore()
    monkeypatch.setattr(store, "_load_keyring_module", lambda: FakeKeyringModule())

    with pytest.raises(ValueError, match="non-empty"):
        store.set_password("   ")


def test_keyring_store_handles_unusable_backends(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Keyring store should degrade safely when no usable backend is configured."""

    fail_store = KeyringCredentialStore()
    monkeypatch.setattr(fail_store, "_load_keyring_module", lambda: FakeKeyringModule(0))

    assert fail_store.is_available() is False
    assert fail_store.get_password() is None
    assert fail_store.clear_password() is False

    broken_store = KeyringCredentialStore()
    monkeypatch.setattr(broken_store, "_load_keyring_module", lambda: BrokenKeyringModule())

    assert broken_store.is_available() is False
    with pytest.raises(RuntimeError, match="unavailable"):
        broken_store.set_password("secret")


def test_create_credential_store_uses_service_account() -> None:
    """Factory should key the stored password by the service account name."""

    store = create_credential_store("Cleanup bot")

    assert isinstance(store, KeyringCredentialStore)
    assert store.service_name == "wikistyle"
    assert store.account_name == "Cleanup bot"
