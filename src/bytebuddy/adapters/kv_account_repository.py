"""Key-value repository for accounts and the session pointer."""

from dataclasses import dataclass

from bytebuddy.adapters.kv_documents import read_document, write_document
from bytebuddy.domain.accounts import Account, AccountRecord, SessionPointer
from bytebuddy.services.accounts import AccountRepository
from bytebuddy.services.storage import SESSION_KEY, USERS_KEY, KeyValueStore


@dataclass
class KeyValueAccountRepository(AccountRepository):
    """Stores the account collection and session pointer as JSON."""

    store: KeyValueStore

    def list_accounts(self) -> list[AccountRecord]:
        """Return every stored account."""
        rows = read_document(self.store, USERS_KEY, [])
        if not isinstance(rows, list):
            return []
        return [
            AccountRecord(
                id=str(row["id"]),
                username=str(row["username"]),
                display_name=_display_name(row),
                password_hash=str(row.get("password_hash", "")),
            )
            for row in rows
            if isinstance(row, dict) and "id" in row and "username" in row
        ]

    def save_accounts(self, accounts: list[AccountRecord]) -> None:
        """Replace the stored account collection."""
        write_document(
            self.store,
            USERS_KEY,
            [
                {**_public_row(record.public()), "password_hash": record.password_hash}
                for record in accounts
            ],
        )

    def get_session(self) -> SessionPointer | None:
        """Return the persisted session pointer, if readable."""
        row = read_document(self.store, SESSION_KEY, None)
        if not isinstance(row, dict) or "id" not in row or "username" not in row:
            return None
        account = Account(
            id=str(row["id"]),
            username=str(row["username"]),
            display_name=_display_name(row),
        )
        return SessionPointer(account=account, token=str(row.get("token", "")))

    def set_session(self, pointer: SessionPointer) -> None:
        """Persist the session pointer with its token."""
        write_document(
            self.store,
            SESSION_KEY,
            {**_public_row(pointer.account), "token": pointer.token},
        )

    def clear_session(self) -> None:
        """Remove the persisted session pointer."""
        self.store.delete(SESSION_KEY)


def _public_row(account: Account) -> dict[str, object]:
    return {
        "id": account.id,
        "username": account.username,
        "user_metadata": {"name": account.display_name},
    }


def _display_name(row: dict[str, object]) -> str:
    metadata = row.get("user_metadata")
    if isinstance(metadata, dict) and metadata.get("name"):
        return str(metadata["name"])
    return str(row.get("displayName") or row.get("username") or "")
