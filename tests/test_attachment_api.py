import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from taskboard.attachment.attachment_router import content_disposition
from taskboard.database import get_db
from taskboard.models.attachment import Attachment
from taskboard.models.task import Task
from taskboard.storage.file_storage import FileStorage, StorageError, get_storage


class SpyStorage(FileStorage):
    """Real disk storage that records calls and can be told to fail removals."""

    def __init__(self, root):
        super().__init__(root=root, bucket="task-attachments")
        self.calls = []
        self.fail_remove = False

    def upload(self, path, data):
        self.calls.append(("upload", path))
        return super().upload(path, data)

    def remove(self, paths):
        paths = list(paths)
        self.calls.append(("remove", paths))
        if self.fail_remove:
            raise StorageError("storage unavailable")
        return super().remove(paths)


@pytest.fixture()
def spy(app, tmp_path):
    storage = SpyStorage(str(tmp_path / "spy"))
    app.dependency_overrides[get_storage] = lambda: storage
    return storage


@pytest.fixture()
def task(client, auth_headers):
    return client.post("/api/tasks", json={"title": "with files"}, headers=auth_headers).json()


def _upload(client, headers, task_id, name="notes.txt", data=b"hello", mime="text/plain"):
    return client.post(
        f"/api/tasks/{task_id}/attachments",
        files={"file": (name, data, mime)},
        headers=headers,
    )


def test_upload_list_download_delete(client, auth_headers, task, spy):
    resp = _upload(client, auth_headers, task["id"])
    assert resp.status_code == 201, resp.text
    att = resp.json()
    assert att["original_filename"] == "notes.txt"
    assert att["file_size"] == 5
    assert att["mime_type"] == "text/plain"
    assert att["filename"].endswith(".txt") and att["filename"] != "notes.txt"
    assert att["file_path"].endswith(f"/{task['id']}/{att['filename']}")
    assert spy.exists(att["file_path"])

    listed = client.get(f"/api/tasks/{task['id']}/attachments", headers=auth_headers).json()
    assert [a["id"] for a in listed] == [att["id"]]

    resp = client.get(f"/api/files/{att['filename']}", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.content == b"hello"
    assert resp.headers["content-type"].startswith("text/plain")
    assert resp.headers["content-disposition"] == 'attachment; filename="notes.txt"'

    resp = client.delete(f"/api/tasks/{task['id']}/attachments/{att['id']}", headers=auth_headers)
    assert resp.status_code == 200
    assert not spy.exists(att["file_path"])
    assert client.get(f"/api/tasks/{task['id']}/attachments", headers=auth_headers).json() == []


def test_missing_file_is_a_400(client, auth_headers, task):
    resp = client.post(f"/api/tasks/{task['id']}/attachments", data={"other": "x"}, headers=auth_headers)
    assert resp.status_code == 400
    assert resp.json() == {"error": "No file uploaded"}


def test_oversized_upload_is_rejected_before_any_io(client, auth_headers, task, spy, monkeypatch):
    monkeypatch.setattr("taskboard.attachment.attachment_router.MAX_UPLOAD_BYTES", 8)
    resp = _upload(client, auth_headers, task["id"], data=b"123456789")
    assert resp.status_code == 400
    assert "exceeds" in resp.json()["error"]
    assert spy.calls == []
    assert client.get(f"/api/tasks/{task['id']}/attachments", headers=auth_headers).json() == []


def test_upload_to_unknown_task_is_404(client, auth_headers, spy):
    resp = _upload(client, auth_headers, 999)
    assert resp.status_code == 404
    assert spy.calls == []


def failing_commits(app, engine, should_fail):
    """Route requests through sessions whose commit raises while should_fail(session) holds."""

    class FailingCommit(Session):
        def commit(self):
            if should_fail(self):
                raise OperationalError("COMMIT", {}, Exception("disk I/O error"))
            super().commit()

    factory = sessionmaker(bind=engine, class_=FailingCommit, autoflush=False)

    def _get_db():
        session = factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db


def test_failed_insert_removes_uploaded_bytes(app, client, auth_headers, task, spy, engine):
    failing_commits(app, engine, lambda s: any(isinstance(obj, Attachment) for obj in s.new))

    resp = _upload(client, auth_headers, task["id"])
    assert resp.status_code == 500
    assert resp.json() == {"error": "disk I/O error"}

    (kind, path), (kind2, removed) = spy.calls
    assert (kind, kind2) == ("upload", "remove")
    assert removed == [path]
    assert not spy.exists(path)


def test_record_is_kept_when_bytes_cannot_be_removed(client, auth_headers, task, spy):
    att = _upload(client, auth_headers, task["id"]).json()
    spy.fail_remove = True

    resp = client.delete(f"/api/tasks/{task['id']}/attachments/{att['id']}", headers=auth_headers)
    assert resp.status_code == 500
    assert resp.json() == {"error": "storage unavailable"}

    listed = client.get(f"/api/tasks/{task['id']}/attachments", headers=auth_headers).json()
    assert [a["id"] for a in listed] == [att["id"]]


def test_files_are_private(client, auth_headers, other_headers, task, spy):
    att = _upload(client, auth_headers, task["id"]).json()
    assert client.get(f"/api/files/{att['filename']}", headers=other_headers).status_code == 404
    resp = client.delete(f"/api/tasks/{task['id']}/attachments/{att['id']}", headers=other_headers)
    assert resp.status_code == 404


def test_failed_task_delete_keeps_attachment_bytes(app, client, auth_headers, task, spy, engine):
    att = _upload(client, auth_headers, task["id"]).json()
    failing_commits(app, engine, lambda s: any(isinstance(obj, Task) for obj in s.deleted))

    resp = client.delete(f"/api/tasks/{task['id']}", headers=auth_headers)
    assert resp.status_code == 500
    assert resp.json() == {"error": "disk I/O error"}

    assert spy.exists(att["file_path"])
    assert all(kind != "remove" for kind, _ in spy.calls)
    listed = client.get(f"/api/tasks/{task['id']}/attachments", headers=auth_headers).json()
    assert [a["id"] for a in listed] == [att["id"]]
    resp = client.get(f"/api/files/{att['filename']}", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.content == b"hello"


def test_task_delete_survives_storage_failure(client, auth_headers, task, spy):
    att = _upload(client, auth_headers, task["id"]).json()
    spy.fail_remove = True

    resp = client.delete(f"/api/tasks/{task['id']}", headers=auth_headers)
    assert resp.status_code == 200
    assert client.get(f"/api/tasks/{task['id']}", headers=auth_headers).status_code == 404
    assert client.get(f"/api/files/{att['filename']}", headers=auth_headers).status_code == 404


def test_deleting_task_removes_attachment_bytes(client, auth_headers, task, spy):
    att = _upload(client, auth_headers, task["id"]).json()
    assert client.delete(f"/api/tasks/{task['id']}", headers=auth_headers).status_code == 200
    assert not spy.exists(att["file_path"])
    assert client.get(f"/api/files/{att['filename']}", headers=auth_headers).status_code == 404


def test_content_disposition():
    assert content_disposition("notes.txt") == 'attachment; filename="notes.txt"'
    header = content_disposition("отчёт.pdf")
    assert header.startswith('attachment; filename="')
    assert "filename*=UTF-8''%D0%BE%D1%82%D1%87%D1%91%D1%82.pdf" in header


def test_content_disposition_never_breaks_the_quoted_string():
    header = content_disposition('my "final" re\\port.txt')
    assert header == (
        'attachment; filename="my _final_ re_port.txt"; '
        "filename*=UTF-8''my%20%22final%22%20re%5Cport.txt"
    )
