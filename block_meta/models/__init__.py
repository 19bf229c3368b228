from .base import Base
from .block import Block, BlockHeader, Timestamp
from .block_meta_row import BlockMetaRow
from .changes import (
    BlockMetadata,
    ChangeRecord,
    DatabaseChanges,
    Field,
    MutationDelta,
    StoreOperation,
    TableOperation,
)

__all__ = [
    "Base",
    "Block",
    "BlockHeader",
    "Timestamp",
    "BlockMetaRow",
    "BlockMetadata",
    "ChangeRecord",
    "DatabaseChanges",
    "Field",
    "MutationDelta",
    "StoreOperation",
    "TableOperation",
]
