"""
Tests for recursive folder sync.

Focus: files before subdirectories, one listing per directory, per-level
pruning, and nested failures recorded instead of aborting the walk.
"""

import pytest

from asset_sync.core.errors import ListingError
from asset_sync.core.progress import ProgressReporter
from asset_sync.remote.client import ContentsClient
from asset_sync.remote.pointer import PointerResolver
from asset_sync.sync import CacheReconciler, TreeWalker

from conftest import API_ROOT, MEDIA_ROOT, payload, run


def make_walker(transport, recorder=None):
    resolver = PointerResolver(transport, media_root=MEDIA_ROOT)
    reconciler = CacheReconciler(transport, resolver)
    client = ContentsClient(transport, api_root=API_ROOT)
    return TreeWalker(client, reconciler, ProgressReporter(recorder))


class TestTreeWalker:
    """Tests for TreeWalker.walk()."""

    def test_recursive_download(self, temp_dir, transport, repo):
        repo.put("effects/top.deepar", payload("top"))
        repo.put("effects/male/m1.deepar", payload("m1"))
        repo.put("effects/male/deep/m2.deepar", payload("m2"))

        result = run(make_walker(transport).walk(repo.coords, "effects", temp_dir))

        assert sorted(result.downloaded) == ["male/deep/m2.deepar", "male/m1.deepar", "top.deepar"]
        assert result.failed == ()
        assert (temp_dir / "male" / "deep" / "m2.deepar").read_bytes() == payload("m2")

    def test_one_listing_per_directory(self, temp_dir, transport, repo):
        repo.put("a/x.deepar", payload("x"))
        repo.put("a/b/y.deepar", payload("y"))
        repo.put("a/c/z.deepar", payload("z"))

        walker = make_walker(transport)
        run(walker.walk(repo.coords, "a", temp_dir))
        assert walker.client.api_calls == 3

    def test_files_before_directories(self, temp_dir, transport, repo, recorder):
        repo.put("sub/inner.deepar", payload("inner"))
        repo.put("zeta.deepar", payload("zeta"))

        run(make_walker(transport, recorder).walk(repo.coords, "", temp_dir))

        statuses = recorder.statuses
        assert statuses.index("Checking zeta.deepar...") < statuses.index("Syncing sub/...")
        assert transport.calls.index(repo.raw_url("zeta.deepar")) < transport.calls.index(repo.listing_url("sub"))

    def test_second_pass_fetches_nothing(self, temp_dir, transport, repo):
        repo.put("a.deepar", payload("a"))
        repo.put("sub/b.deepar", payload("b"))
        run(make_walker(transport).walk(repo.coords, "", temp_dir))
        transport.calls.clear()

        result = run(make_walker(transport).walk(repo.coords, "", temp_dir))

        assert result.downloaded == ()
        assert sorted(result.already_present) == ["a.deepar", "sub/b.deepar"]
        assert not [c for c in transport.calls if c.startswith("https://raw.")]

    def test_removed_remote_file_deleted_locally(self, temp_dir, transport, repo):
        for name in ("a", "b", "c"):
            repo.put(f"{name}.deepar", payload(name))
        run(make_walker(transport).walk(repo.coords, "", temp_dir))

        repo.remove("b.deepar")
        result = run(make_walker(transport).walk(repo.coords, "", temp_dir))

        assert sorted(p.name for p in temp_dir.iterdir()) == ["a.deepar", "c.deepar"]
        assert "b.deepar" not in result.downloaded + result.already_present + result.failed

    def test_obsolete_local_folder_deleted(self, temp_dir, transport, repo):
        repo.put("keep.deepar", payload("keep"))
        (temp_dir / "retired").mkdir()
        (temp_dir / "retired" / "old.deepar").write_bytes(payload("old"))
        (temp_dir / ".gitkeep").write_bytes(b"")

        run(make_walker(transport).walk(repo.coords, "", temp_dir))

        assert sorted(p.name for p in temp_dir.iterdir()) == [".gitkeep", "keep.deepar"]

    def test_nested_listing_failure_recorded(self, temp_dir, transport, repo):
        repo.put("good/g.deepar", payload("g"))
        repo.put("broken/b.deepar", payload("b"))
        repo.broken_dirs.add("broken")
        (temp_dir / "broken").mkdir()
        (temp_dir / "broken" / "cached.deepar").write_bytes(payload("cached"))

        result = run(make_walker(transport).walk(repo.coords, "", temp_dir))

        assert result.failed == ("broken/",)
        assert result.downloaded == ("good/g.deepar",)
        assert (temp_dir / "broken" / "cached.deepar").exists()

    def test_file_failure_does_not_stop_siblings(self, temp_dir, transport, repo):
        repo.put("a.deepar", payload("a"))
        repo.put("b.deepar", payload("b"))
        transport.add(repo.raw_url("a.deepar"), status=500)

        result = run(make_walker(transport).walk(repo.coords, "", temp_dir))

        assert result.failed == ("a.deepar",)
        assert result.downloaded == ("b.deepar",)

    def test_pointer_files_resolved(self, temp_dir, transport, repo):
        data = payload("big", 5000)
        repo.put_pointer("fx/big.deepar", data)

        result = run(make_walker(transport).walk(repo.coords, "fx", temp_dir))

        assert result.downloaded == ("big.deepar",)
        assert (temp_dir / "big.deepar").read_bytes() == data
        assert repo.media_url("fx/big.deepar") in transport.calls

    def test_path_naming_a_file(self, temp_dir, transport, repo):
        repo.put("fx/one.deepar", payload("one"))
        (temp_dir / "unrelated.deepar").write_bytes(payload("unrelated"))

        result = run(make_walker(transport).walk(repo.coords, "fx/one.deepar", temp_dir))

        assert result.downloaded == ("one.deepar",)
        assert (temp_dir / "unrelated.deepar").exists()

    def test_root_listing_failure_raises(self, temp_dir, transport, repo):
        with pytest.raises(ListingError):
            run(make_walker(transport).walk(repo.coords, "does/not/exist", temp_dir))

    def test_progress_never_decreases(self, temp_dir, transport, repo, recorder):
        repo.put("a.deepar", payload("a"))
        repo.put("x/b.deepar", payload("b"))
        repo.put("x/y/c.deepar", payload("c"))
        repo.put("z/d.deepar", payload("d"))

        run(make_walker(transport, recorder).walk(repo.coords, "", temp_dir, (0.1, 1.0)))

        fractions = recorder.fractions
        assert fractions == sorted(fractions)
        assert fractions[-1] == pytest.approx(1.0)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
