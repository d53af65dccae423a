"""Tests for PDF text extraction and the upload endpoint"""

import pytest
from fastapi.testclient import TestClient

from contract_lens.api.app import create_app
from contract_lens.exceptions import InvalidDocument
from contract_lens.services.pdf_extractor import extract_document


class TestExtractDocument:

    def test_pages_numbered_from_one(self, make_pdf):
        data = make_pdf(["Payment shall be net 30", "Termination on 30 days notice"])

        document = extract_document(data)

        assert [p.page for p in document.pages] == [1, 2]
        assert "Payment shall be net 30" in document.pages[0].text
        assert "Termination" in document.pages[1].text
        assert document.full_text == document.pages[0].text + "\n\n" + document.pages[1].text
        assert document.total_pages == 2
        assert document.pages_processed == 2

    def test_page_cap(self, make_pdf):
        data = make_pdf([f"Page body {i}" for i in range(1, 6)])

        document = extract_document(data, max_pages=3)

        assert document.total_pages == 5
        assert document.pages_processed == 3
        assert [p.page for p in document.pages] == [1, 2, 3]

    def test_garbage_bytes_rejected(self):
        with pytest.raises(InvalidDocument):
            extract_document(b"this is not a pdf", filename="notes.txt")

    def test_empty_bytes_rejected(self):
        with pytest.raises(InvalidDocument):
            extract_document(b"")


class TestExtractEndpoint:

    @pytest.fixture
    def client(self, settings, make_provider):
        return TestClient(create_app(settings=settings, provider=make_provider()))

    def test_upload(self, client, make_pdf):
        files = {"file": ("contract.pdf", make_pdf(["Liability is unlimited"]), "application/pdf")}

        response = client.post("/api/extract", files=files)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["pages"][0]["page"] == 1
        assert "Liability is unlimited" in data["full_text"]

    def test_non_pdf_rejected(self, client):
        files = {"file": ("notes.txt", b"hello", "text/plain")}

        response = client.post("/api/extract", files=files)

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_document"

    def test_oversized_rejected(self, client, make_pdf, monkeypatch):
        monkeypatch.setenv("MAX_PDF_MB", "0")
        files = {"file": ("contract.pdf", make_pdf(["x"]), "application/pdf")}

        response = client.post("/api/extract", files=files)

        assert response.status_code == 400
        assert "File size" in response.json()["message"]

    def test_missing_file(self, client):
        response = client.post("/api/extract")

        assert response.status_code == 400
        assert response.json()["error"] == "missing_input"
