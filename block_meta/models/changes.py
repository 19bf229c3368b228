from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, Optional, Tuple, Union

from .block import Timestamp


@dataclass(frozen=True)
class BlockMetadata:
    """Per-block record stored under each bucket key"""

    number: int
    hash: bytes
    parent_hash: bytes
    timestamp: Timestamp


class StoreOperation(IntEnum):
    """Delta operations emitted by the key-value store"""

    UNSET = 0
    CREATE = 1
    UPDATE = 2
    DELETE = 3


@dataclass(frozen=True)
class MutationDelta:
    key: str
    ordinal: int
    operation: Union[StoreOperation, int]
    old_value: Optional[BlockMetadata] = None
    new_value: Optional[BlockMetadata] = None


class TableOperation(IntEnum):
    """Row operations understood by the database sink"""

    UNSET = 0
    CREATE = 1
    UPDATE = 2
    DELETE = 3


@dataclass
class Field:
    name: str
    old_value: Any = None
    new_value: Any = None


@dataclass
class ChangeRecord:
    """Column-level description of one row mutation"""

    table: str
    pk: str
    ordinal: int
    operation: TableOperation
    fields: List[Field] = field(default_factory=list)

    def change(self, name: str, values: Tuple[Any, Any]) -> "ChangeRecord":
        old_value, new_value = values
        self.fields.append(Field(name=name, old_value=old_value, new_value=new_value))
        return self

    @property
    def columns(self) -> Dict[str, Tuple[Any, Any]]:
        return {f.name: (f.old_value, f.new_value) for f in self.fields}

    def get(self, name: str) -> Optional[Tuple[Any, Any]]:
        for f in self.fields:
            if f.name == name:
                return (f.old_value, f.new_value)
        return None


@dataclass
class DatabaseChanges:
    """Ordered changelog envelope for one block"""

    table_changes: List[ChangeRecord] = field(default_factory=list)

    def push_change(self, table: str, pk: str, ordinal: int, operation: TableOperation) -> ChangeRecord:
        record = ChangeRecord(table=table, pk=pk, ordinal=ordinal, operation=operation)
        self.table_changes.append(record)
        return record

    def __len__(self) -> int:
        return len(self.table_changes)

    def __iter__(self):
        return iter(self.table_changes)
