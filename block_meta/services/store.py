"""
Key-value store capability consumed by the block meta stage.

Production hosts inject their own store; ``InMemoryBucketStore`` is the
dict-backed implementation used for local replays and tests.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

import structlog

from block_meta.models.changes import BlockMetadata, MutationDelta, StoreOperation

logger = structlog.get_logger()


class BucketStore(ABC):
    """Write primitives plus a "diff since last call" accessor"""

    @abstractmethod
    def set_if_not_exists(self, ordinal: int, key: str, value: BlockMetadata) -> None:
        """Store ``value`` under ``key`` unless the key already holds a value."""

    @abstractmethod
    def set(self, ordinal: int, key: str, value: BlockMetadata) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    def deltas(self) -> List[MutationDelta]:
        """Return the changes recorded since the previous call, in write order."""


class InMemoryBucketStore(BucketStore):
    def __init__(self):
        self._values: Dict[str, BlockMetadata] = {}
        self._pending: List[MutationDelta] = []

    def set_if_not_exists(self, ordinal: int, key: str, value: BlockMetadata) -> None:
        if key in self._values:
            logger.debug("Bucket already populated", key=key, ordinal=ordinal)
            return
        self._values[key] = value
        self._pending.append(MutationDelta(key=key, ordinal=ordinal, operation=StoreOperation.CREATE, new_value=value))

    def set(self, ordinal: int, key: str, value: BlockMetadata) -> None:
        old_value = self._values.get(key)
        if old_value is None:
            self._values[key] = value
            self._pending.append(
                MutationDelta(key=key, ordinal=ordinal, operation=StoreOperation.CREATE, new_value=value)
            )
            return
        if old_value == value:
            return
        self._values[key] = value
        self._pending.append(
            MutationDelta(
                key=key,
                ordinal=ordinal,
                operation=StoreOperation.UPDATE,
                old_value=old_value,
                new_value=value,
            )
        )

    def deltas(self) -> List[MutationDelta]:
        pending, self._pending = self._pending, []
        return pending

    def get(self, key: str) -> Optional[BlockMetadata]:
        return self._values.get(key)

    def __contains__(self, key: str) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)
