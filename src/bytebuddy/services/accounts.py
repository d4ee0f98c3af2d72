"""Account registration, sign-in, and the active session."""

import hmac
import logging
import re
from dataclasses import dataclass, field
from typing import Protocol
from uuid import uuid4

import bcrypt

from bytebuddy.domain.accounts import Account, AccountRecord, SessionPointer
from bytebuddy.domain.errors import (
    AccountNotFoundError,
    DuplicateUsernameError,
    InvalidCredentialError,
    InvalidInputError,
)
from bytebuddy.services.tokens import SessionTokenSigner

MIN_SECRET_LENGTH = 6

_BCRYPT_HASH = re.compile(r"\$2[aby]\$\d{2}\$[./A-Za-z0-9]{53}")

_logger = logging.getLogger(__name__)


class AccountRepository(Protocol):
    """Persistence interface for the account collection and session pointer."""

    def list_accounts(self) -> list[AccountRecord]:
        """Return every stored account."""

    def save_accounts(self, accounts: list[AccountRecord]) -> None:
        """Replace the stored account collection."""

    def get_session(self) -> SessionPointer | None:
        """Return the persisted session pointer, if any."""

    def set_session(self, pointer: SessionPointer) -> None:
        """Persist the session pointer."""

    def clear_session(self) -> None:
        """Remove the persisted session pointer."""


@dataclass
class AccountService:
    """Manages user records and the signed-in session."""

    repository: AccountRepository
    signer: SessionTokenSigner
    _active: Account | None = field(default=None, init=False, repr=False)

    @property
    def active(self) -> Account | None:
        """Return the signed-in account, if any."""
        return self._active

    def register(self, name: str, username: str, secret: str) -> Account:
        """Create an account and sign it in."""
        if not username or not name.strip():
            raise InvalidInputError("Name and username are required.")
        if len(secret) < MIN_SECRET_LENGTH:
            raise InvalidInputError(
                f"Password must be at least {MIN_SECRET_LENGTH} characters long."
            )
        accounts = self.repository.list_accounts()
        if any(record.username == username for record in accounts):
            raise DuplicateUsernameError()

        record = AccountRecord(
            id=f"user-{uuid4().hex}",
            username=username,
            display_name=name.strip(),
            password_hash=_hash_secret(secret),
        )
        self.repository.save_accounts([*accounts, record])
        _logger.info("Registered account %s", record.id)
        return self._start_session(record.public())

    def authenticate(self, username: str, secret: str) -> Account:
        """Verify credentials and sign the account in."""
        accounts = self.repository.list_accounts()
        record = next((r for r in accounts if r.username == username), None)
        if record is None:
            raise AccountNotFoundError()
        if not _verify_secret(secret, record.password_hash):
            raise InvalidCredentialError()

        if not _is_bcrypt_hash(record.password_hash):
            upgraded = AccountRecord(
                id=record.id,
                username=record.username,
                display_name=record.display_name,
                password_hash=_hash_secret(secret),
            )
            self.repository.save_accounts(
                [upgraded if r.id == record.id else r for r in accounts]
            )
            _logger.info("Upgraded legacy credential for account %s", record.id)
        return self._start_session(record.public())

    def end_session(self) -> None:
        """Clear the active session."""
        if self._active is not None:
            _logger.info("Signed out account %s", self._active.id)
        self._active = None
        try:
            self.repository.clear_session()
        except Exception:
            _logger.exception("Failed to clear persisted session")

    def restore_session(self) -> Account | None:
        """Re-attach a persisted session when its token still validates."""
        pointer = self.repository.get_session()
        if pointer is None:
            return None
        account_id = self.signer.verify(pointer.token)
        record = None
        if account_id == pointer.account.id:
            record = next(
                (r for r in self.repository.list_accounts() if r.id == account_id),
                None,
            )
        if record is None:
            _logger.warning("Discarding invalid persisted session")
            self.repository.clear_session()
            return None
        self._active = record.public()
        _logger.info("Restored session for account %s", record.id)
        return self._active

    def _start_session(self, account: Account) -> Account:
        pointer = SessionPointer(account=account, token=self.signer.issue(account.id))
        self._active = account
        try:
            self.repository.set_session(pointer)
        except Exception:
            _logger.exception("Failed to persist session for account %s", account.id)
        _logger.info("Signed in account %s", account.id)
        return account


def _hash_secret(secret: str) -> str:
    # bcrypt only reads the first 72 bytes.
    return bcrypt.hashpw(secret.encode()[:72], bcrypt.gensalt()).decode()


def _is_bcrypt_hash(stored: str) -> bool:
    return _BCRYPT_HASH.fullmatch(stored) is not None


def _verify_secret(secret: str, stored: str) -> bool:
    if _is_bcrypt_hash(stored):
        try:
            return bcrypt.checkpw(secret.encode()[:72], stored.encode())
        except ValueError:
            return False
    return hmac.compare_digest(secret.encode(), stored.encode())
