"""Tests for the carton lock file module."""

import json
import os
import stat

import pytest

from carton_cli.deps.lockfile import (
    LockedModule,
    LockFile,
    LockFileError,
    LockNotFoundError,
    LockParseError,
    get_lockfile_path,
)


class TestLockedModule:
    """Tests for LockedModule dataclass."""

    def test_display_name_prefers_dist(self):
        module = LockedModule(name="Plack", dist="MIYAGAWA/Plack-1.0030.tar.gz")
        assert module.display_name == "MIYAGAWA/Plack-1.0030.tar.gz"

    def test_display_name_falls_back_to_name(self):
        assert LockedModule(name="Plack").display_name == "Plack"

    def test_to_dict_minimal(self):
        result = LockedModule(name="Plack").to_dict()
        assert result == {"requires": {}}

    def test_to_dict_full(self):
        module = LockedModule(
            name="Plack", version="1.0030", dist="MIYAGAWA/Plack-1.0030.tar.gz",
            requires={"HTTP::Message": "5.814", "Try::Tiny": ""},
        )
        assert module.to_dict() == {
            "version": "1.0030",
            "dist": "MIYAGAWA/Plack-1.0030.tar.gz",
            "requires": {"HTTP::Message": "5.814", "Try::Tiny": ""},
        }

    def test_from_dict(self):
        data = {"version": "2.0", "dist": "X/Bar-2.0.tar.gz", "requires": {"Baz": None}}
        module = LockedModule.from_dict("Bar", data)
        assert module.name == "Bar"
        assert module.version == "2.0"
        assert module.requires == {"Baz": ""}

    def test_from_dict_numeric_version(self):
        module = LockedModule.from_dict("Bar", {"version": 2})
        assert module.version == "2"

    def test_from_dict_rejects_non_object(self):
        with pytest.raises(LockParseError):
            LockedModule.from_dict("Bar", ["not", "an", "object"])

    def test_from_dict_rejects_bad_requires(self):
        with pytest.raises(LockParseError):
            LockedModule.from_dict("Bar", {"requires": ["Baz"]})


class TestLockFile:
    def _sample_lock(self):
        lock = LockFile()
        lock.add_module(LockedModule(
            name="Foo", version="1.2", dist="A/Foo-1.2.tar.gz",
            requires={"Bar": "", "Baz": "0.5"},
        ))
        lock.add_module(LockedModule(name="Bar", version="2.0", dist="B/Bar-2.0.tar.gz"))
        lock.add_module(LockedModule(name="Baz"))
        return lock

    def test_add_and_get_module(self):
        lock = LockFile()
        lock.add_module(LockedModule(name="Foo", version="1.0"))
        assert lock.has_module("Foo")
        assert not lock.has_module("foo")
        assert lock.get_module("Foo").version == "1.0"
        assert lock.get_module("Missing") is None

    def test_get_all_modules_in_graph_order(self):
        lock = self._sample_lock()
        assert [m.name for m in lock.get_all_modules()] == ["Foo", "Bar", "Baz"]

    def test_merge_replaces_same_name(self):
        lock = self._sample_lock()
        lock.merge([LockedModule(name="Bar", version="3.0"), LockedModule(name="Qux")])
        assert lock.get_module("Bar").version == "3.0"
        assert lock.has_module("Qux")

    def test_to_json_uses_sorted_keys(self):
        data = json.loads(self._sample_lock().to_json())
        assert data["lockfile_version"] == "1"
        assert list(data["modules"]) == ["Bar", "Baz", "Foo"]

    def test_to_json_ends_with_newline(self):
        assert self._sample_lock().to_json().endswith("}\n")

    def test_round_trip_preserves_graph(self):
        lock = self._sample_lock()
        loaded = LockFile.from_json(lock.to_json())
        assert loaded.modules == lock.modules

    def test_load_then_save_is_byte_identical(self):
        raw = self._sample_lock().to_json()
        assert LockFile.from_json(raw).to_json() == raw

    def test_from_json_normalizes_unsorted_input(self):
        raw = '{"modules": {"Z": {"requires": {"B": "", "A": "1"}}, "A": {}}}'
        first = LockFile.from_json(raw).to_json()
        assert LockFile.from_json(first).to_json() == first

    def test_from_json_keeps_requires_order(self):
        raw = '{"modules": {"Z": {"requires": {"B": "", "A": "1"}}}}'
        lock = LockFile.from_json(raw)
        assert list(lock.get_module("Z").requires) == ["B", "A"]

    def test_from_json_empty_modules(self):
        lock = LockFile.from_json('{"modules": {}}')
        assert lock.modules == {}

    def test_from_json_invalid_json(self):
        with pytest.raises(LockParseError) as exc_info:
            LockFile.from_json("{not json")
        assert "Expecting property name" in str(exc_info.value)

    def test_from_json_rejects_non_object(self):
        with pytest.raises(LockParseError):
            LockFile.from_json("[1, 2, 3]")

    def test_from_json_rejects_bad_modules(self):
        with pytest.raises(LockParseError):
            LockFile.from_json('{"modules": ["Foo"]}')

    def test_write_and_read(self, tmp_path):
        lock = self._sample_lock()
        lock_path = tmp_path / "carton.lock"
        lock.write(lock_path)
        assert lock_path.exists()
        loaded = LockFile.read(lock_path)
        assert loaded.modules == lock.modules

    def test_write_replaces_existing_file(self, tmp_path):
        lock_path = tmp_path / "carton.lock"
        lock_path.write_text("old contents", encoding="utf-8")
        self._sample_lock().write(lock_path)
        assert LockFile.read(lock_path).has_module("Foo")

    def test_write_leaves_no_temp_files(self, tmp_path):
        self._sample_lock().write(tmp_path / "carton.lock")
        assert [p.name for p in tmp_path.iterdir()] == ["carton.lock"]

    def test_write_creates_parent_directory(self, tmp_path):
        lock_path = tmp_path / "nested" / "carton.lock"
        LockFile().write(lock_path)
        assert lock_path.exists()

    def test_requires_order_survives_write_and_read(self, tmp_path):
        lock = LockFile()
        lock.add_module(LockedModule(
            name="Plack",
            requires={"Try::Tiny": "", "HTTP::Message": "5.814", "Apache::LogFormat::Compiler": ""},
        ))
        lock_path = tmp_path / "carton.lock"
        lock.write(lock_path)
        loaded = LockFile.read(lock_path)
        assert list(loaded.get_module("Plack").requires) == [
            "Try::Tiny", "HTTP::Message", "Apache::LogFormat::Compiler",
        ]

    def test_unknown_module_keys_survive_write_and_read(self, tmp_path):
        lock_path = tmp_path / "carton.lock"
        lock_path.write_text(json.dumps({
            "modules": {
                "Plack": {
                    "dist": "MIYAGAWA/Plack-1.0030.tar.gz",
                    "pathname": "M/MI/MIYAGAWA/Plack-1.0030.tar.gz",
                    "provides": {"Plack": "1.0030", "Plack::Request": "1.0030"},
                    "requires": {"Try::Tiny": ""},
                    "target": "Plack",
                    "version": "1.0030",
                },
            },
        }), encoding="utf-8")

        LockFile.read(lock_path).write(lock_path)

        module = json.loads(lock_path.read_text(encoding="utf-8"))["modules"]["Plack"]
        assert module["pathname"] == "M/MI/MIYAGAWA/Plack-1.0030.tar.gz"
        assert module["provides"] == {"Plack": "1.0030", "Plack::Request": "1.0030"}
        assert module["target"] == "Plack"
        assert LockFile.read(lock_path).get_module("Plack").extra["target"] == "Plack"

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits")
    def test_write_keeps_existing_permissions(self, tmp_path):
        lock_path = tmp_path / "carton.lock"
        lock_path.write_text("{}", encoding="utf-8")
        os.chmod(lock_path, 0o664)
        self._sample_lock().write(lock_path)
        assert stat.S_IMODE(lock_path.stat().st_mode) == 0o664

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits")
    def test_write_new_file_is_world_readable(self, tmp_path):
        lock_path = tmp_path / "carton.lock"
        self._sample_lock().write(lock_path)
        assert stat.S_IMODE(lock_path.stat().st_mode) == 0o644

    def test_read_nonexistent(self, tmp_path):
        with pytest.raises(LockNotFoundError) as exc_info:
            LockFile.read(tmp_path / "carton.lock")
        assert isinstance(exc_info.value, FileNotFoundError)
        assert isinstance(exc_info.value, LockFileError)

    def test_read_corrupt(self, tmp_path):
        lock_path = tmp_path / "carton.lock"
        lock_path.write_text('{"modules": ', encoding="utf-8")
        with pytest.raises(LockParseError) as exc_info:
            LockFile.read(lock_path)
        assert "Can't parse carton.lock" in str(exc_info.value)
        assert isinstance(exc_info.value, ValueError)

    def test_load_or_create_missing(self, tmp_path):
        lock = LockFile.load_or_create(tmp_path / "carton.lock")
        assert lock.modules == {}

    def test_load_or_create_corrupt_still_raises(self, tmp_path):
        lock_path = tmp_path / "carton.lock"
        lock_path.write_text("garbage", encoding="utf-8")
        with pytest.raises(LockParseError):
            LockFile.load_or_create(lock_path)


class TestGetLockfilePath:
    def test_get_lockfile_path(self, tmp_path):
        assert get_lockfile_path(tmp_path) == tmp_path / "carton.lock"
