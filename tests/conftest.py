import pytest

from block_meta.models.block import Block, BlockHeader, Timestamp
from block_meta.models.changes import BlockMetadata
from block_meta.services.store import InMemoryBucketStore


@pytest.fixture(autouse=True, scope="session")
def configure_logging():
    import logging
    import structlog

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=structlog.dev.ConsoleRenderer(),
    )

    root_logger = logging.getLogger()
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)


def make_block(number, seconds, nanos=0, block_hash=None, parent_hash=None):
    """Build a block whose hashes are derived from its number unless given"""
    return Block(
        number=number,
        hash=block_hash if block_hash is not None else number.to_bytes(4, "big"),
        header=BlockHeader(
            parent_hash=parent_hash if parent_hash is not None else max(number - 1, 0).to_bytes(4, "big"),
            timestamp=Timestamp(seconds=seconds, nanos=nanos),
        ),
    )


def make_meta(number, seconds=1625480514, nanos=354000000, block_hash=b"\xab\xcd", parent_hash=b"\x01\x02"):
    return BlockMetadata(
        number=number,
        hash=block_hash,
        parent_hash=parent_hash,
        timestamp=Timestamp(seconds=seconds, nanos=nanos),
    )


@pytest.fixture
def block_factory():
    return make_block


@pytest.fixture
def meta_factory():
    return make_meta


@pytest.fixture
def store():
    return InMemoryBucketStore()
