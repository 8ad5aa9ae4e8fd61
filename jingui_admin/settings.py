"""
Credential store — the endpoint + bearer token pair used for every request.

Persisted as a small JSON file (chmod 600) so the pair survives across
sessions. Absence of the file, or of either field, means "unconfigured".

Writing or clearing the pair notifies change listeners; the composition root
hooks ClientFactory.reset() in here so no request ever goes out with stale
credentials.

Usage:
    from jingui_admin.settings import CredentialPair, CredentialStore

    store = CredentialStore(path)
    store.write(CredentialPair("https://jingui.example.com", "tok"))
    pair = store.read()   # CredentialPair or None
    store.clear()
"""

from __future__ import annotations

import json
import logging
import stat
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CredentialPair:
    """Server endpoint plus bearer token. Compared by value."""

    endpoint: str
    token: str

    @property
    def configured(self) -> bool:
        return bool(self.endpoint) and bool(self.token)

    def __repr__(self) -> str:
        # never leak the token into logs or tracebacks
        return f"CredentialPair(endpoint={self.endpoint!r}, token='***')"


def normalize_endpoint(endpoint: str) -> str:
    """Strip whitespace and trailing slashes from an endpoint URL."""
    return endpoint.strip().rstrip("/")


class CredentialStore:
    """File-backed store for a single CredentialPair."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._listeners: list[Callable[[], None]] = []

    def read(self) -> CredentialPair | None:
        """Return the stored pair, or None when unconfigured or unreadable."""
        if not self.path.exists():
            return None
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable settings file %s: %s", self.path, e)
            return None
        if not isinstance(raw, dict):
            return None

        pair = CredentialPair(
            endpoint=str(raw.get("endpoint") or ""),
            token=str(raw.get("token") or ""),
        )
        return pair if pair.configured else None

    def write(self, pair: CredentialPair) -> CredentialPair:
        """Persist a pair, notifying listeners if it changed. Returns the normalized pair."""
        pair = CredentialPair(endpoint=normalize_endpoint(pair.endpoint), token=pair.token.strip())
        if not pair.configured:
            raise ValueError("Both endpoint and token are required")

        previous = self.read()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps({"endpoint": pair.endpoint, "token": pair.token}),
            encoding="utf-8",
        )
        self.path.chmod(stat.S_IRUSR | stat.S_IWUSR)  # 600
        logger.info("Saved credentials for %s", pair.endpoint)
        if previous != pair:
            self._notify()
        return pair

    def clear(self) -> None:
        """Forget the stored pair. Idempotent."""
        previous = self.read()
        self.path.unlink(missing_ok=True)
        if previous is not None:
            logger.info("Cleared stored credentials")
            self._notify()

    @property
    def configured(self) -> bool:
        return self.read() is not None

    def on_change(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register a callback fired when write/clear changes the pair. Returns an unsubscribe function."""
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        for callback in list(self._listeners):
            callback()
