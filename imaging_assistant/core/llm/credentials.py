"""
Credential Store

Holds the process-wide default Gemini API key. The store never validates
a key; a bad key is only discovered when the provider rejects a call.
"""
from dataclasses import dataclass
from typing import Optional

from imaging_assistant.utils import get_logger, mask_secret

logger = get_logger(__name__)


@dataclass(frozen=True)
class CredentialSnapshot:
    """Immutable view of the default credential at one point in time."""
    credential: Optional[str] = None
    version: int = 0


class CredentialStore:
    """
    Process-wide default credential.

    The current value lives in a frozen snapshot that `set_default`
    replaces with one reference assignment, so readers always see either
    the old or the new key, never a mix. Last write wins.
    """

    def __init__(self, initial: Optional[str] = None):
        self._snapshot = CredentialSnapshot(credential=initial or None)

    def current_credential(self) -> Optional[str]:
        return self._snapshot.credential

    @property
    def snapshot(self) -> CredentialSnapshot:
        return self._snapshot

    @property
    def is_configured(self) -> bool:
        return self._snapshot.credential is not None

    def set_default(self, credential: str) -> None:
        """Replace the default credential. Setting the same value again is a no-op."""
        current = self._snapshot
        if credential == current.credential:
            return
        self._snapshot = CredentialSnapshot(credential=credential, version=current.version + 1)
        logger.info(f"Default Gemini credential updated ({mask_secret(credential)})")
