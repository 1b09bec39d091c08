import pytest

from suite_api.main import app
from suite_api.routers.files import decode_file_content
from suite_api.store import InMemoryStore, StoreError, get_store

UPLOAD = "/api/files/upload"


class BrokenStorage(InMemoryStore):
    def upload(self, bucket, path, content, content_type):
        raise StoreError("Bucket not found", 404)


class TestDecodeFileContent:
    def test_plain_and_data_url(self):
        assert decode_file_content("aGVsbG8=") == b"hello"
        assert decode_file_content("data:text/plain;base64,aGVs\nbG8=") == b"hello"

    def test_rejects_non_base64(self):
        with pytest.raises(ValueError):
            decode_file_content("not base64!!")


class TestUploadEndpoint:
    @pytest.mark.parametrize("method", ["GET", "PUT", "PATCH", "DELETE"])
    def test_non_post_is_405(self, client, method):
        res = client.request(method, UPLOAD)
        assert res.status_code == 405
        assert res.headers["Allow"] == "POST"
        assert res.json()["success"] is False
        assert res.json()["error"] == "Method not allowed"

    def test_options_is_ok(self, client):
        res = client.options(UPLOAD)
        assert res.status_code == 200
        assert res.text == "ok"

    def test_missing_fields(self, client):
        res = client.post(UPLOAD, json={"bucket": "docs"})
        assert res.status_code == 400
        assert res.json()["error"] == "Missing required fields: filePath, fileContent"

    def test_invalid_base64(self, client, store):
        res = client.post(UPLOAD, json={"bucket": "docs", "filePath": "a.txt", "fileContent": "not base64!!"})
        assert res.status_code == 400
        assert res.json() == {"success": False, "error": "Invalid base64 file content", "data": None}
        assert store.get_object("docs", "a.txt") is None

    def test_upload_stores_object(self, client, store):
        res = client.post(
            UPLOAD,
            json={"bucket": "docs", "filePath": "notes/a.txt", "fileContent": "aGVsbG8=", "mimeType": "text/plain"},
        )
        assert res.status_code == 200
        body = res.json()
        assert body["success"] is True
        assert body["data"] == "http://localhost:54321/storage/v1/object/public/docs/notes/a.txt"
        assert store.get_object("docs", "notes/a.txt") == (b"hello", "text/plain")

    def test_mime_type_defaults_to_octet_stream(self, client, store):
        client.post(UPLOAD, json={"bucket": "docs", "filePath": "b.bin", "fileContent": "AAE="})
        assert store.get_object("docs", "b.bin") == (b"\x00\x01", "application/octet-stream")

    def test_storage_failure_is_500(self, client):
        app.dependency_overrides[get_store] = lambda: BrokenStorage()
        res = client.post(UPLOAD, json={"bucket": "nope", "filePath": "a.txt", "fileContent": "aGVsbG8="})
        assert res.status_code == 500
        assert res.json()["error"] == "Bucket not found"
        assert res.json()["success"] is False
