"""Domain models for accounts and sessions."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Account:
    """Public fields of a registered account."""

    id: str
    username: str
    display_name: str


@dataclass(frozen=True)
class AccountRecord:
    """Stored account including its credential hash."""

    id: str
    username: str
    display_name: str
    password_hash: str

    def public(self) -> Account:
        """Return the account without its credential."""
        return Account(
            id=self.id, username=self.username, display_name=self.display_name
        )


@dataclass(frozen=True)
class SessionPointer:
    """Persisted reference to the signed-in account."""

    account: Account
    token: str
