"""
Tests for SyncResult composition.
"""

import dataclasses

import pytest

from asset_sync.sync import SyncResult


class TestSyncResult:
    """Tests for merging and relabeling results."""

    def test_empty(self):
        result = SyncResult()
        assert result.total_files == 0
        assert result.ok

    def test_counts(self):
        result = SyncResult(downloaded=["a"], already_present=["b", "c"], failed=["d"])
        assert result.total_files == 4
        assert result.success_count == 3
        assert not result.ok

    def test_merge_concatenates(self):
        left = SyncResult(downloaded=("a",), by_category={"male": ("a",)})
        right = SyncResult(failed=("b",), by_category={"male": ("c",), "both": ("d",)})
        merged = left.merge(right)
        assert merged.downloaded == ("a",)
        assert merged.failed == ("b",)
        assert dict(merged.by_category) == {"male": ("a", "c"), "both": ("d",)}

    def test_merge_leaves_operands_unchanged(self):
        left = SyncResult(downloaded=("a",))
        left.merge(SyncResult(downloaded=("b",)))
        assert left.downloaded == ("a",)

    def test_prefixed(self):
        result = SyncResult(downloaded=("a.deepar",), failed=("sub/",)).prefixed("effects")
        assert result.downloaded == ("effects/a.deepar",)
        assert result.failed == ("effects/sub/",)

    def test_in_category(self):
        result = SyncResult(
            downloaded=("a.deepar",),
            already_present=("b.deepar",),
            failed=("c.deepar",),
        ).in_category("male")
        assert result.downloaded == ("male/a.deepar",)
        assert result.already_present == ("male/b.deepar",)
        assert result.failed == ("male/c.deepar",)
        assert dict(result.by_category) == {"male": ("a.deepar", "b.deepar")}

    def test_combine(self):
        combined = SyncResult.combine([
            SyncResult(downloaded=("a",)),
            SyncResult(already_present=("b",)),
            SyncResult(failed=("c",)),
        ])
        assert (combined.downloaded, combined.already_present, combined.failed) == (("a",), ("b",), ("c",))

    def test_immutable(self):
        result = SyncResult(downloaded=("a",), by_category={"male": ("a",)})
        with pytest.raises(dataclasses.FrozenInstanceError):
            result.downloaded = ()
        with pytest.raises(TypeError):
            result.by_category["female"] = ()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
