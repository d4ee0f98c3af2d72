"""Health profile store."""

import logging
from dataclasses import dataclass, field
from typing import Protocol

from bytebuddy.domain.profiles import Profile

_logger = logging.getLogger(__name__)


class ProfileRepository(Protocol):
    """Persistence interface for per-account profiles."""

    def get_profile(self, account_id: str) -> Profile | None:
        """Return the stored profile, if any."""

    def save_profile(self, account_id: str, profile: Profile) -> None:
        """Replace the stored profile."""


@dataclass
class ProfileService:
    """Reads and replaces account profiles, caching them for the session."""

    repository: ProfileRepository
    _cache: dict[str, Profile | None] = field(default_factory=dict, init=False)

    def get(self, account_id: str) -> Profile | None:
        """Return the profile or None when absent or unreadable."""
        if account_id in self._cache:
            return self._cache[account_id]
        try:
            profile = self.repository.get_profile(account_id)
        except Exception:
            _logger.exception("Failed to load profile for account %s", account_id)
            return None
        self._cache[account_id] = profile
        return profile

    def save(self, account_id: str, profile: Profile) -> None:
        """Replace the profile; storage failures are logged only."""
        self._cache[account_id] = profile
        try:
            self.repository.save_profile(account_id, profile)
        except Exception:
            _logger.exception("Failed to save profile for account %s", account_id)
