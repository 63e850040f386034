#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
End-to-end tests for building the virtual tree through the worker pool.
"""

import os
from unittest.mock import patch

import pytest

from jpgfs.errors import BuildStateError
from jpgfs.models.mount_config import MountConfig
from jpgfs.scanning.dispatcher import BuildState, TreeBuilder, build_tree
from jpgfs.transcode.cache import TranscodeCache
from jpgfs.tree.node import PassthroughNode, TranscodedNode
from conftest import image_size, write_file, write_jpeg


def make_builder(cache_dir, **kwargs):
    return TreeBuilder(TranscodeCache(cache_dir), **kwargs)


class TestScenarios:

    def test_picture_and_notes(self, source_dir, cache_dir):
        pic = write_jpeg(source_dir / "pic.jpg", size=(4000, 3000))
        write_file(source_dir / "notes.txt", b"hello")
        original_size = pic.stat().st_size

        tree = make_builder(cache_dir, workers=2).build(source_dir)

        assert tree.listdir("/") == ["notes.txt", "pic.jpg"]
        assert tree.lookup("notes.txt").read_all() == b"hello"

        node = tree.lookup("pic.jpg")
        data = node.read_all()
        assert image_size(data) == ("JPEG", (2000, 1500))
        assert node.attributes().size == len(data)
        assert node.attributes().size != original_size

        st = os.stat(pic)
        attrs = node.attributes()
        assert attrs.mode == st.st_mode
        assert attrs.mtime == pytest.approx(st.st_mtime_ns / 1e9)
        assert attrs.crtime == attrs.ctime

    def test_corrupt_jpeg_is_omitted(self, source_dir, cache_dir, corrupt_jpeg_bytes):
        write_file(source_dir / "bad.jpg", corrupt_jpeg_bytes)
        write_jpeg(source_dir / "good.jpg")
        write_file(source_dir / "sub" / "readme.md", b"# hi")

        builder = make_builder(cache_dir, workers=3)
        tree = builder.build(source_dir)

        assert tree.listdir("") == ["good.jpg", "sub"]
        assert "bad.jpg" not in tree
        assert list(tree) == ["good.jpg", "sub/readme.md"]
        assert builder.stats.failed == 1

    def test_corrupt_jpeg_served_original_with_fallback(self, source_dir, cache_dir, corrupt_jpeg_bytes):
        write_file(source_dir / "bad.jpg", corrupt_jpeg_bytes)

        builder = make_builder(cache_dir, fallback_to_original=True)
        tree = builder.build(source_dir)

        node = tree.lookup("bad.jpg")
        assert isinstance(node, PassthroughNode)
        assert node.read_all() == corrupt_jpeg_bytes
        assert node.attributes().size == len(corrupt_jpeg_bytes)
        assert builder.stats.fallback == 1
        assert builder.stats.failed == 0


class TestProperties:

    def test_non_jpeg_files_pass_through(self, source_dir, cache_dir):
        files = {
            "a.txt": b"alpha",
            "b/c.bin": bytes(range(256)) * 10,
            "b/d/e.png": b"\x89PNG fake",
            "empty": b"",
        }
        for rel, data in files.items():
            write_file(source_dir / rel, data)

        tree = make_builder(cache_dir).build(source_dir)

        for rel, data in files.items():
            node = tree.lookup(rel)
            assert isinstance(node, PassthroughNode)
            assert node.attributes().size == os.stat(source_dir / rel).st_size
            assert node.read_all() == data
        assert not cache_dir.exists()

    def test_jpeg_reads_are_idempotent(self, source_dir, cache_dir):
        write_jpeg(source_dir / "pic.jpg", size=(2500, 2500))
        node = make_builder(cache_dir).build(source_dir).lookup("pic.jpg")
        assert node.read_all() == node.read_all()

    def test_duplicate_content_shares_artifact(self, source_dir, cache_dir):
        data = write_jpeg(source_dir / "one.jpg", size=(2400, 1600)).read_bytes()
        write_file(source_dir / "elsewhere" / "two.jpeg", data)

        builder = make_builder(cache_dir, workers=4)
        tree = builder.build(source_dir)

        one, two = tree.lookup("one.jpg"), tree.lookup("elsewhere/two.jpeg")
        assert isinstance(one, TranscodedNode) and isinstance(two, TranscodedNode)
        assert one.content_path == two.content_path
        assert builder.cache.transcoded == 1
        assert builder.cache.cache_hits == 1

    def test_restart_reuses_cache(self, source_dir, cache_dir):
        for i in range(3):
            write_jpeg(source_dir / f"p{i}.jpg", size=(2100, 700), color=(i * 90, 10, 10))

        first = make_builder(cache_dir)
        first.build(source_dir)
        assert first.cache.transcoded == 3

        second = make_builder(cache_dir)
        with patch("jpgfs.transcode.cache.Image.open") as image_open:
            tree = second.build(source_dir)
            image_open.assert_not_called()

        assert len(tree) == 3
        assert second.cache.transcoded == 0
        assert second.cache.cache_hits == 3

    def test_stat_failure_isolated(self, source_dir, cache_dir):
        for i in range(5):
            write_file(source_dir / f"f{i}.txt", b"x" * i)
        bad = str(source_dir / "f2.txt")
        real_stat = os.stat

        def flaky_stat(path, *args, **kwargs):
            if os.fspath(path) == bad:
                raise OSError(5, "Input/output error", bad)
            return real_stat(path, *args, **kwargs)

        builder = make_builder(cache_dir)
        with patch("jpgfs.scanning.discovery.os.stat", side_effect=flaky_stat):
            tree = builder.build(source_dir)

        assert list(tree) == ["f0.txt", "f1.txt", "f3.txt", "f4.txt"]
        assert builder.stats.skipped == 1

    @pytest.mark.parametrize("workers", [1, 2, 3, 8])
    def test_every_file_inserted_exactly_once(self, source_dir, cache_dir, workers):
        expected = set()
        for i in range(60):
            rel = f"dir{i % 4}/sub{i % 5}/file{i}.dat"
            write_file(source_dir / rel, str(i).encode())
            expected.add(rel)
        for i in range(4):
            rel = f"img/photo{i}.jpg"
            write_jpeg(source_dir / rel, size=(64, 64), color=(i * 60, 0, 0))
            expected.add(rel)

        builder = make_builder(cache_dir, workers=workers)
        tree = builder.build(source_dir)

        assert len(tree) == len(expected)
        assert set(tree) == expected
        for rel in expected:
            assert tree.lookup(rel).relative_path == rel
        assert builder.stats.inserted == len(expected)


class TestBuilder:

    def test_listing_survives_undecodable_name(self, source_dir, cache_dir):
        write_file(source_dir / "ok.txt", b"ok")
        write_jpeg(source_dir / "pic.jpg")
        with open(os.path.join(os.fsencode(source_dir), b"caf\xe9.txt"), "wb") as f:
            f.write(b"x")

        builder = make_builder(cache_dir)
        tree = builder.build(source_dir)

        names = tree.listdir("")
        assert names == ["ok.txt", "pic.jpg"]
        assert [name.encode("utf-8") for name in names] == [b"ok.txt", b"pic.jpg"]
        assert builder.stats.skipped == 1
        assert builder.stats.to_dict()["inserted"] == 2

    def test_state_machine(self, source_dir, cache_dir):
        write_file(source_dir / "a.txt", b"a")
        builder = make_builder(cache_dir)
        assert builder.state is BuildState.UNBUILT

        tree = builder.build(source_dir)

        assert builder.state is BuildState.BUILT
        assert tree.frozen
        with pytest.raises(BuildStateError):
            builder.build(source_dir)

    def test_tiny_queue_applies_backpressure_without_deadlock(self, source_dir, cache_dir):
        for i in range(40):
            write_file(source_dir / f"{i:02d}.txt", b"x")
        tree = make_builder(cache_dir, workers=2, queue_size=1).build(source_dir)
        assert len(tree) == 40

    def test_unexpected_worker_error_drops_file_only(self, source_dir, cache_dir):
        write_jpeg(source_dir / "boom.jpg")
        write_jpeg(source_dir / "fine.jpg", color=(0, 0, 255))
        builder = make_builder(cache_dir, workers=2)
        real_resolve = builder.cache.resolve

        def exploding_resolve(path):
            if str(path).endswith("boom.jpg"):
                raise RuntimeError("unexpected")
            return real_resolve(path)

        with patch.object(builder.cache, "resolve", side_effect=exploding_resolve):
            tree = builder.build(source_dir)

        assert list(tree) == ["fine.jpg"]
        assert builder.stats.failed == 1

    def test_invalid_worker_count(self, cache_dir):
        with pytest.raises(ValueError):
            make_builder(cache_dir, workers=0)

    def test_from_config(self, tmp_path):
        config = MountConfig(source=tmp_path, mountpoint=tmp_path / "mnt",
                             cache_dir=tmp_path / "c", workers=3, max_dimension=500,
                             quality=60, fallback_to_original=True)
        builder = TreeBuilder.from_config(config)
        assert builder.workers == 3
        assert builder.fallback_to_original
        assert builder.cache.cache_dir == tmp_path / "c"
        assert builder.cache.max_dimension == 500
        assert builder.cache.quality == 60

    def test_build_tree_helper(self, source_dir, cache_dir):
        write_jpeg(source_dir / "pic.jpg", size=(400, 200))
        tree = build_tree(source_dir, cache_dir, max_dimension=100, workers=1)
        assert image_size(tree.lookup("pic.jpg").read_all()) == ("JPEG", (100, 50))
