"""Flat-file persistence for keys and tokens.

Every value lives in its own file inside the state directory, using the file
names earlier bunq tooling wrote to the working directory (``private``,
``public``, ``installation_token``, ``server_public_key``, ``session_token``).
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import logging
import os

from bunq_sdk.services.api.errors import BunqError
from bunq_sdk.services.crypto.pki import KeyPair, load_key_pair

__all__ = ["CredentialStore", "CredentialNotFoundError", "KeyLoadError", "STATE_FILES"]

_log = logging.getLogger(__name__)

PRIVATE_KEY = "private"
PUBLIC_KEY = "public"
INSTALLATION_TOKEN = "installation_token"
SERVER_PUBLIC_KEY = "server_public_key"
SESSION_TOKEN = "session_token"
API_KEY = "api_key"

STATE_FILES = (PRIVATE_KEY, PUBLIC_KEY, INSTALLATION_TOKEN, SERVER_PUBLIC_KEY, SESSION_TOKEN, API_KEY)
_SECRET_FILES = {PRIVATE_KEY, INSTALLATION_TOKEN, SESSION_TOKEN, API_KEY}


class CredentialNotFoundError(BunqError):
    """Raised when a required credential file is absent."""

    def __init__(self, name: str, path: Path) -> None:
        self.name = name
        self.path = path
        super().__init__(f"File doesn't exist at {path}")


class KeyLoadError(BunqError):
    """Raised when the stored private key cannot be decrypted or parsed."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot load private key at {path}: {reason}")


@dataclass(slots=True)
class CredentialStore:
    base_dir: Path

    def __post_init__(self) -> None:
        self.base_dir = Path(self.base_dir)

    def path(self, name: str) -> Path:
        if name not in STATE_FILES:
            raise ValueError(f"unknown credential file: {name}")
        return self.base_dir / name

    def exists(self, name: str) -> bool:
        return self.path(name).exists()

    def read(self, name: str) -> str | None:
        path = self.path(name)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def require(self, name: str) -> str:
        value = self.read(name)
        if not value:
            raise CredentialNotFoundError(name, self.path(name))
        return value

    def write(self, name: str, value: str) -> Path:
        path = self.path(name)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(value, encoding="utf-8")
        if name in _SECRET_FILES:
            try:
                os.chmod(path, 0o600)
            except PermissionError:
                # best effort on platforms that do not support chmod
                pass
        _log.debug("stored %s", path)
        return path

    def delete(self, name: str) -> None:
        self.path(name).unlink(missing_ok=True)

    # ---------- key pair -----------------------------------------------------
    def has_keys(self) -> bool:
        return self.exists(PRIVATE_KEY) and self.exists(PUBLIC_KEY)

    def load_keys(self, passphrase: bytes | None = None) -> KeyPair:
        if not self.has_keys():
            raise CredentialNotFoundError(PRIVATE_KEY, self.path(PRIVATE_KEY))
        try:
            return load_key_pair(self.require(PRIVATE_KEY), self.require(PUBLIC_KEY), passphrase)
        except (TypeError, ValueError) as exc:
            # TypeError: passphrase missing or unexpected; ValueError: wrong passphrase or bad PEM
            raise KeyLoadError(self.path(PRIVATE_KEY), str(exc)) from exc

    def save_keys(self, keys: KeyPair, passphrase: bytes | None = None) -> KeyPair:
        self.write(PRIVATE_KEY, keys.private_pem(passphrase))
        self.write(PUBLIC_KEY, keys.public_key_pem)
        return keys

    # ---------- installation & session --------------------------------------
    def has_installation(self) -> bool:
        return self.exists(INSTALLATION_TOKEN) and self.exists(SERVER_PUBLIC_KEY)

    def save_installation(self, token: str, server_public_key: str) -> None:
        self.write(INSTALLATION_TOKEN, token)
        self.write(SERVER_PUBLIC_KEY, server_public_key)

    def has_session(self) -> bool:
        return bool(self.read(SESSION_TOKEN))

    def save_session(self, token: str) -> None:
        self.write(SESSION_TOKEN, token)

    def clear_session(self) -> None:
        self.delete(SESSION_TOKEN)
