import json

import pytest
from fastapi.testclient import TestClient

import server

from conftest import JD_TEXT, RESUME_TEXT


@pytest.fixture
def client(pipeline):
    server.app.dependency_overrides[server.get_pipeline] = lambda: pipeline
    yield TestClient(server.app)
    server.app.dependency_overrides.clear()


def upload(text, name):
    return (name, text.encode(), "application/pdf")


def parse_sse(body):
    events = []
    for block in body.strip().split("\n\n"):
        lines = dict(line.split(": ", 1) for line in block.splitlines())
        events.append((lines["event"], json.loads(lines["data"])))
    return events


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_analyze_streams_progress_then_complete(client):
    response = client.post(
        "/analyze",
        files={"resume": upload(RESUME_TEXT, "resume.pdf"), "jd_pdf": upload(JD_TEXT, "jd.pdf")},
        data={"target_ats": "workday", "region": "uk"},
    )
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")

    events = parse_sse(response.text)
    kinds = [kind for kind, _ in events]
    assert kinds[0] == "progress"
    assert kinds[-1] == "complete"
    assert kinds.count("complete") == 1

    _, first = events[0]
    assert first == {
        "kind": "progress",
        "stage": "parsing",
        "stage_id": "parse_resume",
        "percent": 0,
        "message": "Parsing resume...",
    }
    _, final = events[-1]
    assert final["percent"] == 100
    assert final["results"]["ats_scores"]["target_system"]["system"] == "workday"


def test_analyze_sync_returns_results(client):
    response = client.post(
        "/analyze/sync",
        files={"resume": upload(RESUME_TEXT, "resume.pdf"), "jd_pdf": upload(JD_TEXT, "jd.pdf")},
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["success"] is True
    assert payload["percent"] == 100
    assert payload["results"]["parsed_jd"]["title"] == "Senior Backend Engineer"
    assert payload["results"]["errors"] == []


def test_analyze_with_url(client, fake_scraper):
    response = client.post(
        "/analyze/sync",
        files={"resume": upload(RESUME_TEXT, "resume.pdf")},
        data={"jd_url": "https://boards.greenhouse.io/globex/jobs/1"},
    )
    assert response.status_code == 200
    assert fake_scraper.urls == ["https://boards.greenhouse.io/globex/jobs/1"]


def test_missing_resume_is_rejected(client):
    response = client.post("/analyze", files={"jd_pdf": upload(JD_TEXT, "jd.pdf")})
    assert response.status_code == 400
    assert response.json()["detail"] == "Resume PDF is required"


def test_missing_jd_is_rejected(client):
    response = client.post("/analyze/sync", files={"resume": upload(RESUME_TEXT, "resume.pdf")})
    assert response.status_code == 400
    assert response.json()["detail"] == "Job description URL or PDF is required"


def test_non_http_url_is_rejected(client):
    response = client.post(
        "/analyze",
        files={"resume": upload(RESUME_TEXT, "resume.pdf")},
        data={"jd_url": "ftp://example.com/job"},
    )
    assert response.status_code == 400


def test_invalid_option_is_rejected(client):
    response = client.post(
        "/analyze/sync",
        files={"resume": upload(RESUME_TEXT, "resume.pdf"), "jd_pdf": upload(JD_TEXT, "jd.pdf")},
        data={"region": "mars"},
    )
    assert response.status_code == 422


def test_pipeline_error_is_streamed_not_raised(client, fake_llm):
    fake_llm.responses["Resume to Job Matching"] = RuntimeError("boom")
    response = client.post(
        "/analyze",
        files={"resume": upload(RESUME_TEXT, "resume.pdf"), "jd_pdf": upload(JD_TEXT, "jd.pdf")},
    )
    kind, final = parse_sse(response.text)[-1]
    assert kind == "error"
    assert final["error"] is True
    assert final["stage_id"] == "match_resume_jd"
