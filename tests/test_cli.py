"""Tests for the command line interface"""

import json

import pytest
from typer.testing import CliRunner

from contract_lens.cli.main import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def quiet_logs(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "ERROR")


def test_extract_json(tmp_path, make_pdf):
    pdf = tmp_path / "contract.pdf"
    pdf.write_bytes(make_pdf(["Payment shall be net 30", "Governing law is Texas"]))

    result = runner.invoke(app, ["extract", str(pdf), "--json"])

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["total_pages"] == 2
    assert data["pages"][1]["page"] == 2


def test_extract_table(tmp_path, make_pdf):
    pdf = tmp_path / "contract.pdf"
    pdf.write_bytes(make_pdf(["Payment shall be net 30"]))

    result = runner.invoke(app, ["extract", str(pdf)])

    assert result.exit_code == 0
    assert "contract.pdf" in result.stdout


def test_extract_invalid_pdf(tmp_path):
    bad = tmp_path / "bad.pdf"
    bad.write_bytes(b"not a pdf at all")

    result = runner.invoke(app, ["extract", str(bad), "--json"])

    assert result.exit_code == 1
    assert json.loads(result.stdout)["error"] == "invalid_document"
