"""Block metadata derivation and bucket writes."""

from typing import Tuple

from block_meta.models.block import Block
from block_meta.models.changes import BlockMetadata

from .store import BucketStore
from .time_bucket import BlockTimestamp


def derive(block: Block) -> Tuple[BlockTimestamp, BlockMetadata]:
    """
    Build the metadata record for a block.

    Raises:
        MissingFieldError: if the block has no header or the header has no timestamp
    """
    timestamp = BlockTimestamp.from_block(block)
    header = block.header

    return (
        timestamp,
        BlockMetadata(
            number=block.number,
            hash=block.hash,
            parent_hash=header.parent_hash,
            timestamp=header.timestamp,
        ),
    )


def write_block_meta(store: BucketStore, timestamp: BlockTimestamp, meta: BlockMetadata) -> None:
    """First block of each day and month wins."""
    store.set_if_not_exists(meta.number, timestamp.start_of_day_key(), meta)
    store.set_if_not_exists(meta.number, timestamp.start_of_month_key(), meta)


def write_block_meta_end(store: BucketStore, timestamp: BlockTimestamp, meta: BlockMetadata) -> None:
    """Latest block of each day and month wins."""
    store.set(meta.number, timestamp.end_of_day_key(), meta)
    store.set(meta.number, timestamp.end_of_month_key(), meta)
