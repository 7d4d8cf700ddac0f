"""File-backed credential cache keyed by account id."""

import json
import os
import tempfile
from datetime import datetime
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from carina.core.exceptions import CacheError
from carina.core.models import CacheEntry
from carina.utils.logging import get_logger

logger = get_logger(__name__)

_ENTRIES = TypeAdapter(dict[str, CacheEntry])


class CredentialCache:
    """JSON file of {account_id: CacheEntry}.

    One writer per process is assumed. Concurrent processes saving the same
    account race and the last writer wins.
    """

    def __init__(self, path: str | Path):
        """Initialize credential cache.

        Args:
            path: Cache file path; created on first save
        """
        self.path = Path(path).expanduser()
        logger.debug("credential_cache_initialized", path=str(self.path))

    def _load(self) -> dict[str, CacheEntry]:
        if not self.path.exists():
            return {}

        try:
            raw = self.path.read_bytes()
        except OSError as e:
            logger.error("credential_cache_read_failed", path=str(self.path), error=str(e))
            raise CacheError(f"Unable to read credential cache {self.path}: {e}") from e

        if not raw.strip():
            return {}

        try:
            return _ENTRIES.validate_json(raw)
        except ValidationError as e:
            logger.error("credential_cache_invalid", path=str(self.path), error=str(e))
            raise CacheError(f"Invalid credential cache {self.path}: {e}") from e

    def _store(self, entries: dict[str, CacheEntry]) -> None:
        data = {key: entry.model_dump(mode="json") for key, entry in entries.items()}

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".cache-", suffix=".tmp")
            try:
                with os.fdopen(fd, "w") as f:
                    json.dump(data, f, indent=2, sort_keys=True)
                os.chmod(tmp_path, 0o600)
                os.replace(tmp_path, self.path)
            except BaseException:
                Path(tmp_path).unlink(missing_ok=True)
                raise
        except OSError as e:
            logger.error("credential_cache_write_failed", path=str(self.path), error=str(e))
            raise CacheError(f"Unable to write credential cache {self.path}: {e}") from e

    def get(self, account_id: str) -> CacheEntry | None:
        """Get the cached entry for an account.

        Args:
            account_id: Account identifier

        Returns:
            CacheEntry if present, None otherwise

        Raises:
            CacheError: If the cache file cannot be read or parsed
        """
        return self._load().get(account_id)

    def save(self, entry: CacheEntry) -> None:
        """Save an entry, replacing any existing entry for the same account.

        Args:
            entry: Entry to save

        Raises:
            CacheError: If the cache file cannot be written
        """
        entries = self._load()
        entries[entry.account_id] = entry
        self._store(entries)
        logger.debug("credential_cache_saved", account_id=entry.account_id)

    def delete(self, account_id: str) -> None:
        """Remove an account's entry. Missing entries are ignored."""
        entries = self._load()
        if entries.pop(account_id, None) is not None:
            self._store(entries)
            logger.debug("credential_cache_entry_deleted", account_id=account_id)

    def last_update_check(self, account_id: str) -> datetime | None:
        entry = self.get(account_id)
        return entry.last_update_check if entry else None

    def record_update_check(self, account_id: str, when: datetime) -> None:
        """Record when a release check last ran for an account.

        Args:
            account_id: Account identifier
            when: Time of the check
        """
        entry = self.get(account_id) or CacheEntry(account_id=account_id)
        self.save(entry.model_copy(update={"last_update_check": when}))
