"""Per-block orchestration for the block meta stage."""

from typing import Iterable, Iterator, Optional

import structlog

from block_meta.config import settings
from block_meta.models.block import Block
from block_meta.models.changes import DatabaseChanges
from block_meta.utils.exceptions import BlockMetaException

from .change_builder import ChangeRecordBuilder
from .metadata import derive, write_block_meta, write_block_meta_end
from .store import BucketStore


class BlockMetaPipeline:
    """Derive, store and convert one block at a time, in delivery order"""

    def __init__(
        self,
        store: BucketStore,
        builder: Optional[ChangeRecordBuilder] = None,
        track_end_buckets: Optional[bool] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            store: Bucket store the metadata is written to and deltas read from
            builder: Changelog builder, one bound to the configured table by default
            track_end_buckets: Also write day:last / month:last rows,
                defaults to settings.TRACK_END_BUCKETS
        """
        self.store = store
        self.builder = builder or ChangeRecordBuilder()
        self.track_end_buckets = settings.TRACK_END_BUCKETS if track_end_buckets is None else track_end_buckets
        self.logger = structlog.get_logger()

    def process_block(self, block: Block) -> DatabaseChanges:
        try:
            timestamp, meta = derive(block)
            write_block_meta(self.store, timestamp, meta)
            if self.track_end_buckets:
                write_block_meta_end(self.store, timestamp, meta)

            changes = self.builder.build(self.store.deltas())
        except BlockMetaException as e:
            self.logger.error(
                "Block meta processing failed",
                block_number=block.number,
                error_code=e.error_code,
                error=e.message,
            )
            raise

        self.logger.info(
            "Processed block meta",
            block_number=meta.number,
            bucket=timestamp.start_of_day_key(),
            changes=len(changes),
        )
        return changes

    def process_blocks(self, blocks: Iterable[Block]) -> Iterator[DatabaseChanges]:
        for block in blocks:
            yield self.process_block(block)
