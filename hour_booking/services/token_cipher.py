"""Symmetric encryption for the on-disk credential cache."""

from __future__ import annotations

import base64
import hashlib
import json
from typing import Any

from cryptography.fernet import Fernet, InvalidToken


class CredentialCipher:
    """Encrypt JSON documents with a Fernet key derived from a secret."""

    def __init__(self, *, secret: str) -> None:
        if not secret:
            raise ValueError("Credential cache secret must be provided.")
        digest = hashlib.sha256(secret.encode("utf-8")).digest()
        self._fernet = Fernet(base64.urlsafe_b64encode(digest))

    def seal(self, document: dict[str, Any]) -> bytes:
        return self._fernet.encrypt(json.dumps(document).encode("utf-8"))

    def open(self, blob: bytes) -> dict[str, Any]:
        try:
            plaintext = self._fernet.decrypt(blob)
        except InvalidToken as exc:
            raise ValueError("Credential cache could not be decrypted.") from exc
        return json.loads(plaintext)


__all__ = ["CredentialCipher"]
