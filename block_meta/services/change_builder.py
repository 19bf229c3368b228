"""
Store deltas to database changelog conversion.

Each delta on a bucket key becomes one ``ChangeRecord`` on the block meta
table, keyed by the bucket key and ordered by the store's ordinal.
"""

from typing import Any, Iterable, List, Optional, Tuple

import structlog

from block_meta.config import settings
from block_meta.models.block_meta_row import BlockMetaRow
from block_meta.models.changes import (
    BlockMetadata,
    ChangeRecord,
    DatabaseChanges,
    MutationDelta,
    StoreOperation,
    TableOperation,
)
from block_meta.utils.exceptions import MissingFieldError, SchemaError, UnsupportedOperationError
from block_meta.utils.timefmt import format_unix_rfc3339, to_hex

from .time_bucket import parse_key


def _timestamp_value(meta: BlockMetadata) -> str:
    if meta.timestamp is None:
        raise MissingFieldError("timestamp", context="block meta")
    return format_unix_rfc3339(meta.timestamp.seconds, meta.timestamp.nanos)


class ChangeRecordBuilder:
    """Turn bucket store deltas into block meta change records"""

    def __init__(self, table: Optional[str] = None):
        self.table = table or settings.TABLE_NAME
        self.columns = set(BlockMetaRow.column_names())
        self.logger = structlog.get_logger()

    def build(self, deltas: Iterable[MutationDelta]) -> DatabaseChanges:
        """
        Convert deltas into a changelog, preserving delivery order.

        Raises:
            UnsupportedOperationError: on a delete or unknown operation
            MissingFieldError: when a delta lacks the value its operation requires
            InvalidKeyError: when a created key cannot be parsed
        """
        changes = DatabaseChanges()
        for delta in deltas:
            self.push(changes, delta)
        return changes

    def push(self, changes: DatabaseChanges, delta: MutationDelta) -> ChangeRecord:
        operation, fields = self._fields_for(delta)
        for name, _ in fields:
            if name not in self.columns:
                raise SchemaError(self.table, name)

        record = changes.push_change(self.table, delta.key, delta.ordinal, operation)
        for name, values in fields:
            record.change(name, values)
        return record

    def _fields_for(self, delta: MutationDelta) -> Tuple[TableOperation, List[Tuple[str, Tuple[Any, Any]]]]:
        try:
            if isinstance(delta.operation, bool) or not isinstance(delta.operation, int):
                raise ValueError(delta.operation)
            operation = StoreOperation(delta.operation)
        except ValueError:
            self.logger.error("Unknown store operation", key=delta.key, operation=delta.operation)
            raise UnsupportedOperationError(delta.operation, delta.key)

        if operation == StoreOperation.CREATE:
            return TableOperation.CREATE, self._create_fields(delta)
        elif operation == StoreOperation.UPDATE:
            return TableOperation.UPDATE, self._update_fields(delta)
        elif operation == StoreOperation.DELETE:
            self.logger.error("Delete of a block meta bucket", key=delta.key, ordinal=delta.ordinal)
            raise UnsupportedOperationError(operation.name, delta.key)
        else:
            self.logger.error("Unset store operation", key=delta.key, ordinal=delta.ordinal)
            raise UnsupportedOperationError(operation.name, delta.key)

    def _create_fields(self, delta: MutationDelta):
        new = delta.new_value
        if new is None:
            raise MissingFieldError("new_value", context=f"create delta on {delta.key!r}")
        at = parse_key(delta.key)

        return [
            ("at", (None, str(at))),
            ("number", (None, new.number)),
            ("hash", (None, to_hex(new.hash))),
            ("parent_hash", (None, to_hex(new.parent_hash))),
            ("timestamp", (None, _timestamp_value(new))),
        ]

    def _update_fields(self, delta: MutationDelta):
        old, new = delta.old_value, delta.new_value
        if old is None:
            raise MissingFieldError("old_value", context=f"update delta on {delta.key!r}")
        if new is None:
            raise MissingFieldError("new_value", context=f"update delta on {delta.key!r}")

        return [
            ("number", (old.number, new.number)),
            ("hash", (to_hex(old.hash), to_hex(new.hash))),
            ("parent_hash", (to_hex(old.parent_hash), to_hex(new.parent_hash))),
            ("timestamp", (_timestamp_value(old), _timestamp_value(new))),
        ]
