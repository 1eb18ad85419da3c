"""Optional encrypted file cache for the backend credential set."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import ValidationError

from hour_booking.models.session import CredentialSet
from hour_booking.services.token_cipher import CredentialCipher

logger = logging.getLogger(__name__)


class CredentialCache:
    """Persist the single credential set so a restart can refresh instead of re-prompting."""

    def __init__(self, path: Path, cipher: CredentialCipher) -> None:
        self._path = Path(path)
        self._cipher = cipher

    def load(self) -> CredentialSet | None:
        if not self._path.exists():
            return None
        try:
            document = self._cipher.open(self._path.read_bytes())
            return CredentialSet.model_validate(document)
        except (OSError, ValueError, ValidationError) as exc:
            logger.warning("Ignoring unreadable credential cache %s: %s", self._path, exc)
            return None

    def save(self, credentials: CredentialSet) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        blob = self._cipher.seal(credentials.model_dump(mode="json"))
        self._path.touch(mode=0o600, exist_ok=True)
        self._path.chmod(0o600)
        self._path.write_bytes(blob)
        logger.debug("Credential set cached at %s", self._path)

    def clear(self) -> None:
        """Forget the cached credential set; a missing file is fine."""
        self._path.unlink(missing_ok=True)
        logger.info("Cleared credential cache %s", self._path)


__all__ = ["CredentialCache"]
