"""Tests for the job control API."""

import pytest
from fastapi.testclient import TestClient

from backend.app.api.deps import get_runner
from backend.app.main import app
from golf_scraper.job_runner import JobRunner

from fakes import ScriptedFetcher, make_job, make_pages


@pytest.fixture
def runner(controller):
    return JobRunner(controller, {'fake': make_job(ScriptedFetcher(make_pages(2)))})


@pytest.fixture
def client(runner):
    app.dependency_overrides[get_runner] = lambda: runner
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestJobsApi:

    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_list_jobs(self, client):
        response = client.get("/api/jobs")
        assert response.status_code == 200
        assert response.json() == [{"job_id": "fake", "title": "Fake stores", "status": "idle"}]

    def test_status(self, client):
        assert client.get("/api/jobs/fake/status").json() == {"job_id": "fake", "status": "idle"}
        assert client.get("/api/jobs/nope/status").status_code == 404

    def test_stream_runs_job_to_completion(self, client, controller):
        response = client.get("/api/jobs/fake/stream")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert "event: log" in response.text
        assert response.text.rstrip().split("\n\n")[-1].startswith("event: end")
        assert len(controller.sink.load_all('fake')) == 6

    def test_stream_conflict_when_running(self, client, controller):
        controller.status.begin('fake')
        response = client.get("/api/jobs/fake/stream")
        assert response.status_code == 409
        assert "already running" in response.json()["detail"]

    def test_stream_unknown_job(self, client):
        assert client.get("/api/jobs/nope/stream").status_code == 404

    def test_stop_endpoints(self, client, controller):
        response = client.post("/api/jobs/fake/stop")
        assert response.status_code == 200
        assert response.json()["message"] == "job is not running"

        controller.status.begin('fake')
        response = client.post("/api/jobs/fake", json={"action": "stop"})
        assert response.status_code == 200
        assert response.json()["status"] == "stopped"

    def test_invalid_action(self, client):
        response = client.post("/api/jobs/fake", json={"action": "start"})
        assert response.status_code == 400

    def test_clear_progress(self, client, controller):
        controller.checkpoints.write('fake', {'currentPage': 5})

        controller.status.begin('fake')
        assert client.delete("/api/jobs/fake/progress").status_code == 409
        assert controller.checkpoints.exists('fake')

        controller.status.reset('fake')
        assert client.delete("/api/jobs/fake/progress").status_code == 200
        assert not controller.checkpoints.exists('fake')
