# SPDX-License-Identifier: MIT
"""Tests for the durable index snapshot."""

import io
import json
import tempfile

import pytest
from hypothesis import given, settings, strategies as st

from tf_registry import (
    ModuleIdentity,
    ModuleIndex,
    ModuleStorage,
    SnapshotCorruptError,
    SnapshotIOError,
    SnapshotStore,
)

valid_segment = st.from_regex(r"[a-z][a-z0-9\-]{0,12}", fullmatch=True)
valid_version = st.from_regex(r"(0|[1-9][0-9]{0,2})\.(0|[1-9][0-9]{0,2})\.(0|[1-9][0-9]{0,2})", fullmatch=True)
valid_identity = st.builds(
    ModuleIdentity, namespace=valid_segment, name=valid_segment, system=valid_segment, version=valid_version
)


def _module(version: str, name: str = "vpc") -> ModuleIdentity:
    return ModuleIdentity(namespace="acme", name=name, system="aws", version=version)


class TestLoad:
    def test_missing_file_leaves_index_empty(self, snapshot, index):
        assert snapshot.load() == 0
        assert len(index) == 0

    def test_loads_in_document_order(self, snapshot, index, data_dir):
        data_dir.mkdir()
        document = {
            "modules": [
                {"namespace": "acme", "name": "vpc", "system": "aws", "version": "2.0.0"},
                {"namespace": "acme", "name": "vpc", "system": "aws", "version": "1.0.0"},
            ]
        }
        (data_dir / "data.json").write_text(json.dumps(document))

        assert snapshot.load() == 2
        assert index.versions("acme", "vpc", "aws") == ["2.0.0", "1.0.0"]

    def test_duplicates_collapse(self, snapshot, index, data_dir):
        data_dir.mkdir()
        record = {"namespace": "acme", "name": "vpc", "system": "aws", "version": "1.0.0"}
        (data_dir / "data.json").write_text(json.dumps({"modules": [record, record]}))

        snapshot.load()
        assert len(index) == 1

    def test_empty_document(self, snapshot, index, data_dir):
        data_dir.mkdir()
        (data_dir / "data.json").write_text("{}")
        assert snapshot.load() == 0

    @pytest.mark.parametrize(
        "content",
        [
            "not json",
            "[]",
            '{"modules": "nope"}',
            '{"modules": [{"namespace": "acme", "name": "vpc", "system": "aws"}]}',
        ],
    )
    def test_unparseable_document(self, snapshot, index, data_dir, content):
        data_dir.mkdir()
        (data_dir / "data.json").write_text(content)

        with pytest.raises(SnapshotCorruptError):
            snapshot.load()
        assert len(index) == 0

    def test_invalid_identity_is_corrupt(self, snapshot, index, data_dir):
        data_dir.mkdir()
        document = {
            "modules": [
                {"namespace": "acme", "name": "vpc", "system": "aws", "version": "1.0.0"},
                {"namespace": "acme", "name": "vpc", "system": "aws", "version": "latest"},
            ]
        }
        (data_dir / "data.json").write_text(json.dumps(document))

        with pytest.raises(SnapshotCorruptError) as exc_info:
            snapshot.load()
        assert "modules[1]" in str(exc_info.value)
        # nothing is loaded from a corrupt snapshot
        assert len(index) == 0


class TestSave:
    def test_writes_document_in_index_order(self, snapshot, index, data_dir):
        index.add(_module("2.0.0"))
        index.add(_module("1.0.0", name="dns"))
        snapshot.save()

        document = json.loads((data_dir / "data.json").read_text())
        assert document == {
            "modules": [
                {"namespace": "acme", "name": "vpc", "system": "aws", "version": "2.0.0"},
                {"namespace": "acme", "name": "dns", "system": "aws", "version": "1.0.0"},
            ]
        }

    def test_no_temp_files_left(self, snapshot, index, data_dir):
        index.add(_module("1.0.0"))
        snapshot.save()
        snapshot.save()
        assert sorted(p.name for p in data_dir.iterdir()) == ["data.json"]

    def test_load_then_save_is_fixed_point(self, snapshot, index, data_dir):
        index.add(_module("1.0.0"))
        index.add(_module("1.1.0-rc.1"))
        snapshot.save()
        first = json.loads((data_dir / "data.json").read_text())

        reloaded = SnapshotStore(data_dir, ModuleIndex())
        reloaded.load()
        reloaded.save()
        assert json.loads((data_dir / "data.json").read_text()) == first

    def test_write_failure(self, snapshot, index, data_dir):
        # A directory in place of the snapshot makes the final rename fail
        (data_dir / "data.json").mkdir(parents=True)
        index.add(_module("1.0.0"))

        with pytest.raises(SnapshotIOError):
            snapshot.save()
        assert index.identities() == [_module("1.0.0")]
        assert sorted(p.name for p in data_dir.iterdir()) == ["data.json"]

    @given(identities=st.lists(valid_identity, max_size=20, unique=True))
    @settings(max_examples=50, deadline=None)
    def test_round_trip(self, identities):
        with tempfile.TemporaryDirectory() as root:
            original = ModuleIndex(identities)
            SnapshotStore(root, original).save()

            restored = ModuleIndex()
            SnapshotStore(root, restored).load()

            assert restored.identities() == identities


class TestRebuild:
    def test_rebuild_from_storage(self, snapshot, index, data_dir):
        storage = ModuleStorage(data_dir)
        storage.write_archive(_module("1.0.0"), io.BytesIO(b"a"))
        storage.write_archive(_module("0.9.0", name="dns"), io.BytesIO(b"b"))
        index.add(_module("9.9.9"))

        assert snapshot.rebuild(storage) == 2
        assert index.identities() == [_module("0.9.0", name="dns"), _module("1.0.0")]

        restored = ModuleIndex()
        SnapshotStore(data_dir, restored).load()
        assert restored.identities() == index.identities()
