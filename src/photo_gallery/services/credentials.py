"""Storage for the AI search credential."""

from dataclasses import dataclass

from photo_gallery.services.store import KeyValueStore


@dataclass
class CredentialService:
    """Keeps the search API key under its own storage key."""

    storage: KeyValueStore
    key: str

    def get(self) -> str | None:
        """Return the stored credential, if any."""
        value = self.storage.get(self.key)
        return value or None

    def save(self, value: str) -> bool:
        """Store a trimmed credential; a blank value clears it.

        Returns True when a credential was stored.
        """
        cleaned = value.strip()
        if not cleaned:
            self.clear()
            return False
        self.storage.set(self.key, cleaned)
        return True

    def clear(self) -> None:
        """Remove the stored credential."""
        self.storage.delete(self.key)
