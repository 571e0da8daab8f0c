"""
Integration tests for the HTTP surface using FastAPI's TestClient.
"""
import httpx
import pytest
from fastapi.testclient import TestClient

from conftest import gemini_body
from main import create_app
from rag_services.state import APOLOGY_TEXT, CONNECTION_ERROR_TEXT, load_confirmation

SAMPLE_TEXT = "Hello world. This is a test document."


@pytest.fixture
def api(make_llm, test_settings):
    def _api(outcomes):
        llm = make_llm(outcomes)
        app = create_app(test_settings, llm=llm)
        return TestClient(app)

    return _api


def upload(client, name="test.txt", data=SAMPLE_TEXT.encode(), content_type="text/plain"):
    return client.post("/documents/upload", files={"file": (name, data, content_type)})


@pytest.mark.integration
class TestDocumentsRouter:
    def test_health(self, api):
        with api([gemini_body("x")]) as client:
            assert client.get("/health").json() == {"status": "ok"}

    def test_status_before_upload(self, api):
        with api([gemini_body("x")]) as client:
            body = client.get("/documents/status").json()

        assert body["status"] == "no_document"
        assert body["has_document"] is False
        assert body["chunks_count"] == 0

    def test_upload_text_file(self, api):
        with api([gemini_body("x")]) as client:
            response = upload(client)
            status = client.get("/documents/status").json()

        assert response.status_code == 200
        body = response.json()
        assert body["filename"] == "test.txt"
        assert body["chunks_count"] == 1
        assert body["is_update"] is False
        assert body["file_size"] == len(SAMPLE_TEXT)
        assert body["message"] == load_confirmation("test.txt")
        assert status["status"] == "document_ready"
        assert status["filename"] == "test.txt"

    def test_second_upload_reports_update(self, api):
        with api([gemini_body("x")]) as client:
            upload(client)
            body = upload(client, name="other.txt", data=b"abc").json()

        assert body["is_update"] is True
        assert body["previous_chunks"] == 1

    def test_unsupported_upload(self, api):
        with api([gemini_body("x")]) as client:
            response = upload(client, name="image.png", data=b"\x89PNG", content_type="image/png")
            status = client.get("/documents/status").json()

        assert response.status_code == 415
        assert status["has_document"] is False
        assert status["last_error"] == "Only PDF or TXT files are supported."

    def test_upload_accepted_by_mime_type(self, api):
        with api([gemini_body("x")]) as client:
            response = upload(client, name="README", data=b"plain", content_type="text/plain")
            status = client.get("/documents/status").json()

        assert response.status_code == 200
        assert response.json()["filename"] == "README"
        assert status["status"] == "document_ready"
        assert status["last_error"] is None

    def test_oversized_upload(self, api):
        with api([gemini_body("x")]) as client:
            response = upload(client, name="big.txt", data=b"a" * (1024 * 1024 + 1))
            status = client.get("/documents/status").json()

        assert response.status_code == 400
        assert status["has_document"] is False
        assert status["last_error"] == "Failed to read file. File size limit exceeded."

    def test_unreadable_upload(self, api):
        with api([gemini_body("x")]) as client:
            response = upload(client, name="bad.txt", data=b"\xff\xfe\xfa")

        assert response.status_code == 400


@pytest.mark.integration
class TestChatRouter:
    def test_full_exchange(self, api):
        with api([gemini_body("It is a test document.")]) as client:
            upload(client)
            response = client.post("/chat", json={"message": "What is this?"})
            history = client.get("/chat/history").json()["messages"]

        assert response.status_code == 200
        assert response.json() == {"answer": "It is a test document.", "last_error": None}
        assert [(m["role"], m["text"]) for m in history] == [
            ("model", load_confirmation("test.txt")),
            ("user", "What is this?"),
            ("model", "It is a test document."),
        ]

    def test_chat_without_document(self, api):
        with api([gemini_body("x")]) as client:
            response = client.post("/chat", json={"message": "What is this?"})

        assert response.status_code == 400

    def test_blank_message(self, api):
        with api([gemini_body("x")]) as client:
            upload(client)
            response = client.post("/chat", json={"message": "   "})
            history = client.get("/chat/history").json()["messages"]

        assert response.status_code == 400
        assert len(history) == 1

    def test_connection_failure_returns_apology(self, api):
        with api([httpx.ConnectError]) as client:
            upload(client)
            response = client.post("/chat", json={"message": "What is this?"})
            status = client.get("/documents/status").json()

        assert response.status_code == 200
        assert response.json() == {"answer": APOLOGY_TEXT, "last_error": CONNECTION_ERROR_TEXT}
        assert status["last_error"] == CONNECTION_ERROR_TEXT
        assert status["pending_request"] is False
