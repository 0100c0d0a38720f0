"""
Unit Tests for session storage backends
"""
import os
import stat

import pytest

from civicportal.exceptions import SessionStorageError
from civicportal.session import SessionTokens, admin_namespace, citizen_namespace
from civicportal.storage import FileStorage, MemoryStorage


class TestMemoryStorage:
    """Test the in-process backend"""

    def test_set_get_remove(self):
        """Test basic operations"""
        storage = MemoryStorage({"a": "1"})
        storage.set_item("b", "2")
        storage.remove_item("a")
        storage.remove_item("missing")

        assert storage.get_item("a") is None
        assert storage.keys() == ["b"]


class TestFileStorage:
    """Test the JSON file backend"""

    def test_persists_across_instances(self, tmp_path):
        """Test a second instance sees the first one's writes"""
        path = tmp_path / "storage.json"
        FileStorage(str(path)).set_item("authTokens", "{}")
        assert FileStorage(str(path)).get_item("authTokens") == "{}"

    @pytest.mark.skipif(os.name != "posix", reason="POSIX permissions")
    def test_file_is_private(self, tmp_path):
        """Test the token file is owner-only"""
        path = tmp_path / "storage.json"
        FileStorage(str(path)).set_item("k", "v")
        assert stat.S_IMODE(path.stat().st_mode) == 0o600

    def test_corrupt_file_reads_empty(self, tmp_path):
        """Test a corrupt file behaves as empty and is replaced on write"""
        path = tmp_path / "storage.json"
        path.write_text("{not json")
        storage = FileStorage(str(path))

        assert storage.get_item("authTokens") is None
        storage.set_item("authTokens", "x")
        assert storage.get_item("authTokens") == "x"

    def test_non_string_values_ignored(self, tmp_path):
        """Test only string values are returned"""
        path = tmp_path / "storage.json"
        path.write_text('{"a": 1, "b": "two"}')
        assert FileStorage(str(path)).keys() == ["b"]

    def test_write_failure_raises(self, tmp_path):
        """Test unwritable storage raises SessionStorageError"""
        target = tmp_path / "dir_in_the_way"
        storage = FileStorage(str(target))
        target.mkdir()
        with pytest.raises(SessionStorageError):
            storage.set_item("k", "v")

    def test_namespaces_share_file(self, tmp_path):
        """Test both namespaces live in one file without clashing"""
        storage = FileStorage(str(tmp_path / "storage.json"))
        citizen = citizen_namespace(storage)
        admin = admin_namespace(storage)
        citizen.save(SessionTokens("c"), {"id": "1"})
        admin.save(SessionTokens("a"), {"id": "2"})

        admin.force_logout()

        assert citizen.get_token() == "c"
        assert sorted(storage.keys()) == ["authTokens", "currentUser"]
