from io import BytesIO
from unittest.mock import AsyncMock, patch

import pandas as pd
from fastapi.testclient import TestClient

from aria_audit.dom import Document
from aria_audit.errors import PageFetchError
from aria_audit.main import app

client = TestClient(app)

NESTED = '<html><body><a href="#"><button>Go</button></a></body></html>'


def test_root():
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["rules"] == ["nested-interactive", "prohibited-naming", "icon-name"]


def test_audit_html():
    response = client.post("/audit", json={"html": NESTED})
    assert response.status_code == 200
    data = response.json()
    assert len(data["findings"]) == 1
    finding = data["findings"][0]
    assert finding["rule_id"] == "nested-interactive"
    assert finding["tags"] == ["button", "a"]
    assert "subjects" not in finding
    assert data["counts"]["nested-interactive"] == {"Fail": 1}
    assert data["execution_trace"]


def test_audit_rule_subset_and_errors():
    response = client.post("/audit", json={"html": NESTED, "rules": ["icon-name"]})
    assert response.json()["findings"] == []

    assert client.post("/audit", json={"html": NESTED, "rules": ["bogus"]}).status_code == 400
    assert client.post("/audit", json={}).status_code == 400


def test_audit_url_uses_fetcher():
    with patch("aria_audit.main.fetch_html", return_value=NESTED) as fetch:
        response = client.post("/audit", json={"url": "https://example.com"})
    assert response.status_code == 200
    assert fetch.call_args.args[0] == "https://example.com"
    assert len(response.json()["findings"]) == 1


def test_audit_url_fetch_failure():
    with patch("aria_audit.main.fetch_html", side_effect=PageFetchError("boom")):
        response = client.post("/audit", json={"url": "https://example.com"})
    assert response.status_code == 502
    assert response.json()["detail"] == "boom"


def test_live_audit_uses_snapshot():
    snapshot = AsyncMock(return_value=Document(NESTED))
    with patch("aria_audit.main.snapshot_page", snapshot):
        response = client.post("/audit", json={"url": "https://example.com", "live": True})
    assert response.status_code == 200
    snapshot.assert_awaited_once_with(url="https://example.com", html=None)


def test_html_report():
    response = client.post("/audit/report", json={"html": NESTED})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "Invalid Nested Interactive Controls" in response.text
    assert "Found 1 issues" in response.text


def _excel(urls):
    buffer = BytesIO()
    pd.DataFrame({"URL": urls}).to_excel(buffer, index=False)
    buffer.seek(0)
    return buffer


def test_batch_process():
    pages = {
        "https://a.example": NESTED,
        "https://b.example": "<html><body><i class=\"fa-x\"></i></body></html>",
    }

    def fake_fetch(url, timeout):
        if url not in pages:
            raise PageFetchError(f"Could not fetch {url}")
        return pages[url]

    upload = _excel(["https://a.example", "https://b.example", "https://down.example", None])
    with patch("aria_audit.main.fetch_html", side_effect=fake_fetch):
        response = client.post(
            "/batch/process",
            files={"file": ("urls.xlsx", upload, "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet")},
        )

    assert response.status_code == 200
    sheets = pd.read_excel(BytesIO(response.content), sheet_name=None)
    pages_sheet = sheets["Pages"]
    assert list(pages_sheet["Status"]) == ["OK", "OK", "FETCH_ERROR", "SKIPPED_EMPTY"]
    assert list(pages_sheet["Failures_nested-interactive"]) == [1, 0, 0, 0]
    assert list(pages_sheet["Failures_icon-name"]) == [0, 1, 0, 0]

    findings_sheet = sheets["Findings"]
    assert list(findings_sheet["URL"]) == ["https://a.example", "https://b.example"]
    assert list(findings_sheet["Rule"]) == ["nested-interactive", "icon-name"]


def test_batch_requires_url_column():
    buffer = BytesIO()
    pd.DataFrame({"Link": ["https://a.example"]}).to_excel(buffer, index=False)
    buffer.seek(0)
    response = client.post("/batch/process", files={"file": ("links.xlsx", buffer)})
    assert response.status_code == 400
