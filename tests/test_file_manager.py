"""
Tests for the uploads file manager.
"""

import io
import os

import pytest
from werkzeug.datastructures import FileStorage

from app.file_manager.models import FileEntry, UploadOutcome
from app.file_manager.services import FileManagerService
from portfolio_store.errors import Conflict, InvalidInput, NotFound


def upload_file(name, data=b"data"):
    return FileStorage(stream=io.BytesIO(data), filename=name)


@pytest.fixture
def root(tmp_path):
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def manager(root):
    return FileManagerService(root, base_url="https://cdn.example.com/uploads/", max_file_mb=1)


class TestFileManagerModels:
    """Test entry ordering and outcome serialization."""

    def test_directories_sort_first(self):
        entries = [
            FileEntry("b.jpg", "file", 1, 0, "b.jpg"),
            FileEntry("Zebra", "dir", 0, 0, "Zebra"),
            FileEntry("A.jpg", "file", 1, 0, "A.jpg"),
            FileEntry("alpen", "dir", 0, 0, "alpen"),
        ]
        assert [e.name for e in sorted(entries, key=FileEntry.sort_key)] == ["alpen", "Zebra", "A.jpg", "b.jpg"]

    def test_outcome_drops_unset_fields(self):
        assert UploadOutcome(name="x.exe", ok=False, message="Type not allowed").to_dict() == {
            "name": "x.exe", "ok": False, "message": "Type not allowed"
        }


class TestFileManagerService:
    """Test the file manager against a temporary uploads root."""

    def test_list_root(self, manager, root):
        (root / "2024").mkdir()
        (root / "Cover Photo.jpg").write_bytes(b"12345")

        listing = manager.list_dir("")

        assert listing["path"] == ""
        assert [item["name"] for item in listing["items"]] == ["2024", "Cover Photo.jpg"]
        folder, image = listing["items"]
        assert folder["type"] == "dir"
        assert folder["url"] is None
        assert image["size"] == 5
        assert image["url"] == "https://cdn.example.com/uploads/Cover%20Photo.jpg"

    def test_list_nested_path(self, manager, root):
        (root / "2024" / "Alpen").mkdir(parents=True)
        (root / "2024" / "Alpen" / "a.jpg").write_bytes(b"x")

        listing = manager.list_dir("/2024//Alpen/")

        assert listing["path"] == "2024/Alpen"
        assert listing["items"][0]["path"] == "2024/Alpen/a.jpg"

    def test_parent_segments_cannot_escape(self, manager, root, tmp_path):
        (tmp_path / "secret").mkdir()

        listing = manager.list_dir("../..")
        assert listing["path"] == ""

        with pytest.raises(InvalidInput):
            manager.list_dir("../secret")

    def test_symlink_outside_root_is_rejected(self, manager, root, tmp_path):
        outside = tmp_path / "outside"
        outside.mkdir()
        os.symlink(outside, root / "link")

        with pytest.raises(InvalidInput) as exc_info:
            manager.list_dir("link")
        assert exc_info.value.message == "Invalid path"

    def test_list_file_is_not_a_directory(self, manager, root):
        (root / "a.jpg").write_bytes(b"x")
        with pytest.raises(InvalidInput):
            manager.list_dir("a.jpg")

    def test_make_dir(self, manager, root):
        (root / "2024").mkdir()

        assert manager.make_dir("2024", "Neu") == {"created": "2024/Neu"}
        assert (root / "2024" / "Neu").is_dir()

        with pytest.raises(Conflict):
            manager.make_dir("2024", "Neu")

    @pytest.mark.parametrize("name", ["", "..", "a/b", "bad:name"])
    def test_make_dir_rejects_bad_names(self, manager, name):
        with pytest.raises(InvalidInput):
            manager.make_dir("", name)

    def test_rename(self, manager, root):
        (root / "2024").mkdir()
        (root / "2024" / "old.jpg").write_bytes(b"x")

        result = manager.rename("2024/old.jpg", "new.jpg")

        assert result == {"renamed": {"from": "2024/old.jpg", "to": "2024/new.jpg"}}
        assert (root / "2024" / "new.jpg").is_file()

    def test_rename_errors(self, manager, root):
        (root / "a.jpg").write_bytes(b"x")
        (root / "b.jpg").write_bytes(b"x")

        with pytest.raises(Conflict):
            manager.rename("a.jpg", "b.jpg")
        with pytest.raises(NotFound):
            manager.rename("missing.jpg", "c.jpg")
        with pytest.raises(NotFound):
            manager.rename("", "c.jpg")
        with pytest.raises(InvalidInput):
            manager.rename("a.jpg", "../c.jpg")

    def test_delete_file_and_folder(self, manager, root):
        (root / "2024" / "Alpen").mkdir(parents=True)
        (root / "2024" / "Alpen" / "a.jpg").write_bytes(b"x")
        (root / "b.jpg").write_bytes(b"x")

        assert manager.delete("b.jpg") == {"deleted": "b.jpg"}
        assert manager.delete("2024") == {"deleted": "2024"}
        assert list(root.iterdir()) == []

    def test_delete_root_is_refused(self, manager, root):
        with pytest.raises(InvalidInput):
            manager.delete("")
        with pytest.raises(InvalidInput):
            manager.delete("../")
        assert root.is_dir()

    def test_delete_missing(self, manager):
        with pytest.raises(NotFound):
            manager.delete("nope.jpg")

    def test_upload_never_overwrites(self, manager, root):
        (root / "photo.jpg").write_bytes(b"original")

        result = manager.upload("", [upload_file("photo.jpg"), upload_file("photo.jpg")])

        assert [o["name"] for o in result["uploaded"]] == ["photo (1).jpg", "photo (2).jpg"]
        assert (root / "photo.jpg").read_bytes() == b"original"

    def test_upload_reports_each_file(self, manager, root):
        result = manager.upload("", [
            upload_file("doc.pdf"),
            upload_file("tool.exe"),
            upload_file("big.zip", b"x" * (1024 * 1024 + 1)),
            upload_file("README"),
        ])

        assert result["uploaded"] == [
            {"name": "doc.pdf", "ok": True, "path": "doc.pdf"},
            {"name": "tool.exe", "ok": False, "message": "Type not allowed"},
            {"name": "big.zip", "ok": False, "message": "Too large"},
            {"name": "README", "ok": True, "path": "README"},
        ]
        assert not (root / "tool.exe").exists()

    def test_upload_strips_client_directories(self, manager, root):
        result = manager.upload("", [upload_file("C:\\Users\\me\\scan.pdf")])
        assert result["uploaded"][0]["name"] == "scan.pdf"
        assert (root / "scan.pdf").is_file()

    def test_upload_requires_files_and_directory(self, manager):
        with pytest.raises(InvalidInput):
            manager.upload("", [])
        with pytest.raises(InvalidInput):
            manager.upload("missing", [upload_file("a.pdf")])


class TestFileManagerRoutes:
    """Test the /files endpoints through the app."""

    @pytest.fixture
    def root(self, services):
        return services["file_manager"].root_dir

    def test_every_route_requires_token(self, client):
        assert client.get("/files/list").status_code == 401
        for path in ("/files/mkdir", "/files/rename", "/files/delete", "/files/upload"):
            assert client.post(path, json={}).status_code == 401, path

    def test_list(self, client, admin_headers, root):
        (root / "a.jpg").write_bytes(b"x")

        response = client.get("/files/list?path=", headers=admin_headers)

        assert response.status_code == 200
        items = response.get_json()["data"]["items"]
        assert items[0]["url"] == "https://cdn.example.com/uploads/a.jpg"

    def test_mkdir_rename_delete(self, client, admin_headers, root):
        response = client.post("/files/mkdir", json={"path": "", "name": "Neu"}, headers=admin_headers)
        assert response.get_json() == {"success": True, "data": {"created": "Neu"}}

        response = client.post("/files/rename", json={"path": "Neu", "newName": "Alt"}, headers=admin_headers)
        assert response.get_json()["data"]["renamed"] == {"from": "Neu", "to": "Alt"}

        response = client.post("/files/delete", json={"path": "Alt"}, headers=admin_headers)
        assert response.get_json()["data"] == {"deleted": "Alt"}
        assert not (root / "Alt").exists()

    def test_mkdir_conflict(self, client, admin_headers, root):
        (root / "Neu").mkdir()
        response = client.post("/files/mkdir", json={"path": "", "name": "Neu"}, headers=admin_headers)

        assert response.status_code == 409
        assert response.get_json() == {"success": False, "message": "Exists"}

    def test_upload(self, client, admin_headers, root):
        response = client.post("/files/upload", data={
            "path": "",
            "files": [(io.BytesIO(b"a"), "one.pdf"), (io.BytesIO(b"b"), "two.exe")],
        }, headers=admin_headers, content_type="multipart/form-data")

        assert response.status_code == 200
        uploaded = response.get_json()["data"]["uploaded"]
        assert [o["ok"] for o in uploaded] == [True, False]
        assert (root / "one.pdf").is_file()
