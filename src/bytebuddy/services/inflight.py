"""Keyed single-flight guard for user-triggered requests."""

from collections.abc import Hashable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

from bytebuddy.domain.errors import RequestInFlightError


@dataclass
class InFlightGuard:
    """Rejects a request while another with the same key is running."""

    _active: set[Hashable] = field(default_factory=set, init=False)

    def is_active(self, key: Hashable) -> bool:
        return key in self._active

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        """Mark a key as in flight for the duration of the block."""
        if key in self._active:
            raise RequestInFlightError()
        self._active.add(key)
        try:
            yield
        finally:
            self._active.discard(key)
