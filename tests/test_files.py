import pytest

from sharebox.core.config import Settings
from sharebox.core.errors import Forbidden, InvalidOperation, NotFound, StorageError
from sharebox.core.storage import LocalStorage
from sharebox.models import FileMeta, Visibility
from sharebox.services import files as file_service


class BrokenDeleteStorage(LocalStorage):
    def delete(self, key):
        raise OSError("disk on fire")


class BrokenPutStorage(LocalStorage):
    def put(self, key, data, content_type=None):
        raise OSError("read-only file system")


def test_upload_stores_bytes_and_metadata(db, storage, alice):
    meta = file_service.upload(db, storage, alice, "report.pdf", b"%PDF-1.4", Visibility.public)

    assert meta.owner_id == alice.id
    assert meta.original_name == "report.pdf"
    assert meta.size == 8
    assert meta.visibility == Visibility.public
    assert meta.uploaded_at is not None
    assert meta.stored_name.startswith(f"{alice.id}/")
    assert storage.get(meta.stored_name) == b"%PDF-1.4"


def test_upload_defaults_to_private(db, storage, alice):
    meta = file_service.upload(db, storage, alice, "a.txt", b"a")
    assert meta.visibility == Visibility.private


def test_storage_keys_are_unique_for_same_name(db, storage, alice):
    first = file_service.upload(db, storage, alice, "same.txt", b"1")
    second = file_service.upload(db, storage, alice, "same.txt", b"2")

    assert first.stored_name != second.stored_name
    assert storage.get(first.stored_name) == b"1"


def test_storage_key_is_sanitized():
    key = file_service.make_storage_key(7, "../../etc/passwd")
    assert key.startswith("7/")
    assert ".." not in key


def test_failed_metadata_insert_removes_bytes(db, storage, alice, monkeypatch):
    taken = FileMeta(owner_id=alice.id, original_name="x.txt", stored_name="1/taken_x.txt", size=1)
    db.add(taken)
    db.commit()
    monkeypatch.setattr(file_service, "make_storage_key", lambda owner_id, name: "1/taken_x.txt")

    with pytest.raises(StorageError):
        file_service.upload(db, storage, alice, "x.txt", b"payload")

    assert not storage.exists("1/taken_x.txt")
    assert db.query(FileMeta).count() == 1


def test_failed_storage_write_is_storage_error(db, tmp_path, alice):
    storage = BrokenPutStorage(tmp_path / "broken")

    with pytest.raises(StorageError):
        file_service.upload(db, storage, alice, "x.txt", b"payload")

    assert db.query(FileMeta).count() == 0


def test_download_missing_file(db, storage, alice):
    with pytest.raises(NotFound):
        file_service.download(db, storage, alice, 42)


def test_download_private_file_forbidden(db, storage, alice, bob):
    meta = file_service.upload(db, storage, alice, "a.txt", b"a")

    with pytest.raises(Forbidden):
        file_service.download(db, storage, bob, meta.id)


def test_download_missing_bytes_is_storage_error(db, storage, alice):
    meta = file_service.upload(db, storage, alice, "a.txt", b"a")
    storage.delete(meta.stored_name)

    with pytest.raises(StorageError) as exc:
        file_service.download(db, storage, alice, meta.id)
    assert exc.value.status_code == 500


def test_delete_file(db, storage, alice):
    meta = file_service.upload(db, storage, alice, "a.txt", b"a")
    key, file_id = meta.stored_name, meta.id

    result = file_service.delete_file(db, storage, alice, file_id)

    assert result.warning is None
    assert result.message == "File deleted successfully."
    assert db.get(FileMeta, file_id) is None
    assert not storage.exists(key)


def test_delete_with_missing_bytes_warns(db, storage, alice):
    meta = file_service.upload(db, storage, alice, "a.txt", b"a")
    storage.delete(meta.stored_name)
    file_id = meta.id

    result = file_service.delete_file(db, storage, alice, file_id)

    assert result.warning == "physical file was already missing."
    assert db.get(FileMeta, file_id) is None


def test_delete_with_failing_storage_still_succeeds(db, tmp_path, alice):
    storage = BrokenDeleteStorage(tmp_path / "broken")
    meta = file_service.upload(db, storage, alice, "a.txt", b"a")
    file_id = meta.id

    result = file_service.delete_file(db, storage, alice, file_id)

    assert result.warning == "physical file deletion failed."
    assert "physical file deletion failed" in result.message
    assert db.get(FileMeta, file_id) is None


def test_only_owner_or_admin_deletes(db, storage, alice, bob, admin):
    meta = file_service.upload(db, storage, alice, "a.txt", b"a", Visibility.public)

    with pytest.raises(Forbidden):
        file_service.delete_file(db, storage, bob, meta.id)

    file_service.delete_file(db, storage, admin, meta.id)


@pytest.mark.parametrize(
    "name,size",
    [
        ("", 1),
        ("virus.exe", 1),
        ("noextension", 1),
        ("big.zip", 11),
    ],
)
def test_check_upload_allowed_rejects(name, size):
    settings = Settings(max_upload_bytes=10)
    with pytest.raises(InvalidOperation):
        file_service.check_upload_allowed(name, size, settings)


def test_check_upload_allowed_accepts_known_types():
    settings = Settings(max_upload_bytes=10)
    file_service.check_upload_allowed("Photo.JPG", 10, settings)
