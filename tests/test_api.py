"""
Integration tests for the docstore HTTP endpoints.
"""
import base64

from docstore.filestore import FileItem
from docstore.models import DocumentModel
from docstore.repositories import UploadItem, utcnow

PDF_BYTES = b"%PDF-1.4 api payload"


def _post(client, **doc):
    return client.post("/api/v1/documents", json=doc)


def _b64(value: str) -> str:
    return base64.b64encode(value.encode()).decode()


class TestSaveDocument:
    def test_create_returns_201(self, client):
        resp = _post(client, title="Jan invoice", amount=12.5, tags=["work"], senders=["ACME"])
        assert resp.status_code == 201
        body = resp.json()
        assert body["result"] == "Created"
        assert "Jan invoice" in body["message"]

    def test_create_with_staged_upload(self, client, stores, upload_dir, filestore):
        stores.uploads.write(
            UploadItem(id="T1", file_name="invoice.pdf", mime_type="application/pdf", created=utcnow())
        )
        (upload_dir / "T1.pdf").write_bytes(PDF_BYTES)

        resp = _post(client, title="Jan invoice", fileName="invoice.pdf", uploadFileToken="T1")

        assert resp.status_code == 201
        assert len(filestore.objects) == 1
        assert not (upload_dir / "T1.pdf").exists()

    def test_update_returns_200(self, client, session_factory):
        _post(client, title="old")
        with session_factory() as s:
            doc = s.query(DocumentModel).one()
            doc_id, alt_id = doc.id, doc.alt_id

        resp = _post(client, id=doc_id, title="new", amount=3.0, fileName="x.pdf", tags=["a"], senders=["s"])

        assert resp.status_code == 200
        assert resp.json()["result"] == "Updated"
        fetched = client.get(f"/api/v1/documents/{doc_id}").json()
        assert fetched["title"] == "new"
        assert fetched["alternativeId"] == alt_id
        assert fetched["modified"]

    def test_stale_id_creates_new(self, client, session_factory):
        resp = _post(client, id="nonexistent", title="t")
        assert resp.status_code == 201
        with session_factory() as s:
            doc = s.query(DocumentModel).one()
        assert doc.id != "nonexistent"
        assert doc.id in resp.json()["message"]

    def test_missing_title_is_bad_request(self, client):
        resp = _post(client, amount=1.0)
        assert resp.status_code == 400
        assert resp.headers["content-type"].startswith("application/problem+json")
        assert resp.json()["status"] == 400

    def test_invalid_json_is_bad_request(self, client):
        resp = client.post(
            "/api/v1/documents", content=b"{not json", headers={"Content-Type": "application/json"}
        )
        assert resp.status_code == 400

    def test_unknown_upload_token_is_server_error(self, client):
        resp = _post(client, title="t", fileName="a.pdf", uploadFileToken="missing")
        assert resp.status_code == 500
        body = resp.json()
        assert body["instance"] == "/api/v1/documents"
        assert body["type"] == "about:blank"


class TestGetDocument:
    def test_round_trip(self, client, session_factory):
        _post(client, title="Jan invoice", amount=12.5, fileName="/2024_01_01/a.pdf", tags=["work", "2024"], senders=["ACME"])
        with session_factory() as s:
            doc_id = s.query(DocumentModel).one().id

        resp = client.get(f"/api/v1/documents/{doc_id}")

        assert resp.status_code == 200
        body = resp.json()
        assert body["id"] == doc_id
        assert len(body["alternativeId"]) == 8
        assert body["amount"] == 12.5
        assert body["tags"] == ["work", "2024"]
        assert body["senders"] == ["ACME"]
        assert body["fileName"] == "/2024_01_01/a.pdf"
        assert body["previewLink"] == _b64("/2024_01_01/a.pdf")
        assert body["created"].endswith("+00:00")
        assert "modified" not in body
        assert "uploadFileToken" not in body

    def test_not_found(self, client):
        resp = client.get("/api/v1/documents/missing")
        assert resp.status_code == 404
        assert resp.json()["instance"] == "/api/v1/documents/missing"


class TestSearchDocuments:
    def test_search_paged(self, client):
        for title in ("Invoice A", "Invoice B", "Letter"):
            _post(client, title=title, tags=["work"])

        resp = client.get("/api/v1/documents/search", params={"title": "invoice", "limit": 1})

        assert resp.status_code == 200
        body = resp.json()
        assert body["totalEntries"] == 2
        assert len(body["documents"]) == 1

    def test_search_defaults(self, client):
        for i in range(25):
            _post(client, title=f"doc {i}")
        body = client.get("/api/v1/documents/search").json()
        assert body["totalEntries"] == 25
        assert len(body["documents"]) == 20

    def test_date_range_with_offset(self, client):
        _post(client, title="t")
        resp = client.get(
            "/api/v1/documents/search",
            params={"from": "2000-01-01T00:00:00+01:00", "to": "2000-12-31T00:00:00+01:00"},
        )
        assert resp.json()["totalEntries"] == 0

    def test_empty_tags_come_back_as_empty_list(self, client):
        _post(client, title="plain")
        doc = client.get("/api/v1/documents/search").json()["documents"][0]
        assert doc["tags"] == []
        assert doc["senders"] == []


class TestDeleteDocument:
    def _create(self, client, filestore, session_factory):
        filestore.save(FileItem("a.pdf", "2024_01_01", "application/pdf", PDF_BYTES))
        _post(client, title="t", fileName="/2024_01_01/a.pdf")
        with session_factory() as s:
            return s.query(DocumentModel).one().id

    def test_delete_existing(self, client, filestore, session_factory):
        doc_id = self._create(client, filestore, session_factory)
        resp = client.delete(f"/api/v1/documents/{doc_id}")
        assert resp.status_code == 200
        assert resp.json()["result"] == "Deleted"
        assert filestore.objects == {}
        assert client.get(f"/api/v1/documents/{doc_id}").status_code == 404

    def test_delete_missing(self, client):
        assert client.delete("/api/v1/documents/missing").status_code == 404

    def test_store_failure_keeps_row(self, client, filestore, session_factory):
        doc_id = self._create(client, filestore, session_factory)
        filestore.fail_on.add("delete")
        resp = client.delete(f"/api/v1/documents/{doc_id}")
        assert resp.status_code == 500
        assert client.get(f"/api/v1/documents/{doc_id}").status_code == 200


class TestFiles:
    def test_get_file(self, client, filestore):
        filestore.save(FileItem("a.pdf", "2024_01_01", "application/pdf", PDF_BYTES))
        resp = client.get("/api/v1/file", params={"path": _b64("/2024_01_01/a.pdf")})
        assert resp.status_code == 200
        assert resp.content == PDF_BYTES
        assert resp.headers["content-type"] == "application/pdf"

    def test_undecodable_path(self, client):
        assert client.get("/api/v1/file", params={"path": "!!not-base64!!"}).status_code == 400

    def test_missing_file(self, client):
        resp = client.get("/api/v1/file", params={"path": _b64("/2024_01_01/missing.pdf")})
        assert resp.status_code == 404


class TestCatalog:
    def test_tags_and_senders(self, client):
        _post(client, title="t", tags=["work", "Alpha"], senders=["ACME"])

        tags = client.get("/api/v1/tags").json()
        assert [t["name"] for t in tags] == ["Alpha", "work"]
        assert client.get("/api/v1/tags/search", params={"name": "WO"}).json()[0]["name"] == "work"
        assert [s["name"] for s in client.get("/api/v1/senders").json()] == ["ACME"]
        assert client.get("/api/v1/senders/search", params={"name": "zzz"}).json() == []


class TestAppInfo:
    def test_app_info(self, client):
        body = client.get("/api/v1/appinfo").json()
        assert body["userInfo"]["userName"] == "tester"
        assert body["userInfo"]["displayName"] == "Test User"
        assert body["versionInfo"]["version"] == "2.0.0"
        assert body["versionInfo"]["buildNumber"] == "1-local"
