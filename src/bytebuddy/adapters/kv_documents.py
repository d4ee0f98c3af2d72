"""JSON document helpers for key-value backed repositories."""

import json
import logging

from bytebuddy.services.storage import KeyValueStore

_logger = logging.getLogger(__name__)


def read_document(store: KeyValueStore, key: str, default: object) -> object:
    """Return the decoded JSON value of a key, or the default."""
    raw = store.get(key)
    if raw is None:
        return default
    try:
        return json.loads(raw)
    except ValueError:
        _logger.warning("Ignoring unreadable stored value for %s", key)
        return default


def write_document(store: KeyValueStore, key: str, value: object) -> None:
    """Encode a value as JSON and store it under a key."""
    store.set(key, json.dumps(value, ensure_ascii=False))
