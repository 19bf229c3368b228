from sqlalchemy import Column, String, DateTime, Numeric
from .base import Base


class BlockMetaRow(Base):
    """
    Sink-side shape of the ``block_meta`` table that changelogs are replayed into.

    One row per bucket key:
    - id: the bucket key (``day:first:20210705``, ``month:last:202107``...)
    - at: the boundary instant the key denotes
    - number/hash/parent_hash/timestamp: metadata of the block stored under the key
    """

    __tablename__ = "block_meta"

    id = Column(String, primary_key=True)
    at = Column(DateTime, nullable=False, index=True)
    number = Column(Numeric(precision=20, scale=0), nullable=False, comment="Unsigned 64-bit block height")
    hash = Column(String, nullable=False, comment="Lowercase hex, no 0x prefix")
    parent_hash = Column(String, nullable=False, comment="Lowercase hex, no 0x prefix")
    timestamp = Column(DateTime, nullable=False)

    @classmethod
    def column_names(cls):
        return [c.name for c in cls.__table__.columns if not c.primary_key]
