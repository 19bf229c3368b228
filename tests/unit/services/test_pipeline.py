"""
Tests for BlockMetaPipeline.
"""

from unittest.mock import patch

import pytest

from block_meta.models.block import Block
from block_meta.models.changes import TableOperation
from block_meta.services.pipeline import BlockMetaPipeline
from block_meta.utils.exceptions import MissingFieldError

# 2021-07-05 10:21:54.354 UTC
JULY_5 = 1625480514
ONE_DAY = 86400


class TestBlockMetaPipeline:
    """Test per-block processing"""

    @pytest.fixture
    def pipeline(self, store):
        return BlockMetaPipeline(store, track_end_buckets=False)

    def test_first_block_creates_day_and_month_rows(self, pipeline, block_factory):
        changes = pipeline.process_block(block_factory(100, JULY_5, 354_000_000))

        assert [(r.pk, r.ordinal, r.operation) for r in changes] == [
            ("day:first:20210705", 100, TableOperation.CREATE),
            ("month:first:202107", 100, TableOperation.CREATE),
        ]
        assert changes.table_changes[0].get("at") == (None, "2021-07-05 00:00:00")
        assert changes.table_changes[1].get("at") == (None, "2021-07-01 00:00:00")

    def test_later_blocks_in_same_bucket_emit_nothing(self, pipeline, block_factory):
        pipeline.process_block(block_factory(100, JULY_5))

        assert len(pipeline.process_block(block_factory(101, JULY_5 + 12))) == 0
        assert len(pipeline.process_block(block_factory(102, JULY_5 + 24))) == 0

    def test_next_day_emits_only_day_row(self, pipeline, block_factory):
        pipeline.process_block(block_factory(100, JULY_5))
        changes = pipeline.process_block(block_factory(200, JULY_5 + ONE_DAY))

        assert [r.pk for r in changes] == ["day:first:20210706"]

    def test_next_month_emits_day_and_month_rows(self, pipeline, block_factory):
        pipeline.process_block(block_factory(100, JULY_5))
        # 2021-08-01 00:00:00
        changes = pipeline.process_block(block_factory(300, 1627776000))

        assert [r.pk for r in changes] == ["day:first:20210801", "month:first:202108"]

    def test_end_buckets_emit_updates(self, store, block_factory):
        pipeline = BlockMetaPipeline(store, track_end_buckets=True)

        first = pipeline.process_block(block_factory(100, JULY_5))
        assert [(r.pk, r.operation) for r in first] == [
            ("day:first:20210705", TableOperation.CREATE),
            ("month:first:202107", TableOperation.CREATE),
            ("day:last:20210705", TableOperation.CREATE),
            ("month:last:202107", TableOperation.CREATE),
        ]
        assert first.table_changes[2].get("at") == (None, "2021-07-05 23:59:59.999")
        assert first.table_changes[3].get("at") == (None, "2021-07-31 23:59:59.999")

        second = pipeline.process_block(block_factory(101, JULY_5 + 12))
        assert [(r.pk, r.operation) for r in second] == [
            ("day:last:20210705", TableOperation.UPDATE),
            ("month:last:202107", TableOperation.UPDATE),
        ]
        assert second.table_changes[0].get("number") == (100, 101)
        assert "at" not in second.table_changes[0].columns

    def test_track_end_buckets_defaults_to_settings(self, store):
        with patch("block_meta.services.pipeline.settings") as mock_settings:
            mock_settings.TRACK_END_BUCKETS = True
            assert BlockMetaPipeline(store).track_end_buckets is True

    def test_missing_header_is_logged_and_raised(self, pipeline, store):
        with patch.object(pipeline.logger, "error") as mock_log:
            with pytest.raises(MissingFieldError):
                pipeline.process_block(Block(number=7, hash=b"\x07"))
            mock_log.assert_called_once()
            assert mock_log.call_args.kwargs["block_number"] == 7
        assert len(store) == 0

    def test_process_block_logs_summary(self, pipeline, block_factory):
        with patch.object(pipeline.logger, "info") as mock_log:
            pipeline.process_block(block_factory(100, JULY_5))
            mock_log.assert_called_once_with(
                "Processed block meta",
                block_number=100,
                bucket="day:first:20210705",
                changes=2,
            )

    def test_process_blocks_keeps_order(self, pipeline, block_factory):
        blocks = [block_factory(n, JULY_5 + i * ONE_DAY) for i, n in enumerate((10, 20, 30))]
        results = list(pipeline.process_blocks(blocks))

        assert [r.table_changes[0].ordinal for r in results] == [10, 20, 30]
        assert [r.table_changes[0].pk for r in results] == [
            "day:first:20210705",
            "day:first:20210706",
            "day:first:20210707",
        ]
