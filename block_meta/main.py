"""
Main entry point for the block meta changelog stage.
"""

import structlog
from typing import Any, Iterable, List, Optional, Union

from pydantic import ValidationError

from .config import settings
from .models.block import Block
from .models.changes import DatabaseChanges
from .services.pipeline import BlockMetaPipeline
from .services.store import BucketStore, InMemoryBucketStore
from .utils.exceptions import BlockMetaErrorCodes, BlockMetaException
from .utils.logging import setup_logging


def main(
    blocks: Iterable[Union[Block, dict]],
    store: Optional[BucketStore] = None,
    debug: bool = False,
) -> List[DatabaseChanges]:
    """
    Replay blocks through the pipeline and return one changelog per block.

    With STOP_ON_ERROR disabled a failing block is logged and skipped. Bucket
    writes that block made before failing stay in the store, so redelivering
    it later emits no create for those keys.
    """
    setup_logging("DEBUG" if debug else settings.LOG_LEVEL)

    logger = structlog.get_logger()
    logger.info("Starting block meta stage", config=settings.dict())

    pipeline = BlockMetaPipeline(store if store is not None else InMemoryBucketStore())
    results: List[DatabaseChanges] = []

    for raw in blocks:
        try:
            block = _load(raw)
            results.append(pipeline.process_block(block))
        except (BlockMetaException, ValidationError) as e:
            if settings.STOP_ON_ERROR:
                raise
            logger.error(
                "Skipping block",
                block_number=raw.get("number") if isinstance(raw, dict) else raw.number,
                error_code=getattr(e, "error_code", BlockMetaErrorCodes.INVALID_BLOCK),
                error=str(e),
            )

    logger.info("Block meta stage finished", blocks=len(results))
    return results


def _load(raw: Any) -> Block:
    return raw if isinstance(raw, Block) else Block.model_validate(raw)
