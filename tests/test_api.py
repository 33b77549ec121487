"""
API endpoint tests for the gateway.

Tests cover:
- POST /pixie - script execution and error mapping
- GET /healthz - liveness check
- GET /openapi.json and GET / - API documentation

The query service is replaced through FastAPI dependency overrides so
no Pixie cluster is needed.
"""

import pytest
from fastapi.testclient import TestClient

from pixie_gateway import main
from pixie_gateway.main import app, get_query_service

from conftest import FakeTable


@pytest.fixture
def client(query_service):
    """TestClient with the query service wired to the fake client."""
    app.dependency_overrides[get_query_service] = lambda: query_service
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def scripts_dir(tmp_path):
    """Point the gateway's scripts directory at a temp dir with one script."""
    directory = tmp_path / "scripts"
    directory.mkdir()
    (directory / "conn_status.pxl").write_text("px.display(df)", encoding="utf-8")

    original = main.config.get("scripts_dir")
    main.config.set("scripts_dir", str(directory))
    yield directory
    main.config.set("scripts_dir", original)


class TestRunScript:
    def test_success(self, client):
        response = client.post("/pixie", json={"script": "px.display(df)"})

        assert response.status_code == 200
        body = response.json()
        assert body["columns"] == ["upid", "req_path"]
        assert body["rows"] == [["12345", "/api/users"], ["67890", "/login"]]
        assert body["stats"]["records_processed"] == 2
        assert body["stats"]["tables"] == 1

    def test_empty_columns_with_rows(self, client, fake_client):
        fake_client.tables = [FakeTable(metadata=object(), rows=[["a", "b"]])]

        response = client.post("/pixie", json={"script": "px.display(df)"})

        assert response.status_code == 200
        assert response.json()["columns"] == []
        assert response.json()["rows"] == [["a", "b"]]

    def test_empty_script(self, client, fake_client):
        response = client.post("/pixie", json={"script": ""})

        assert response.status_code == 400
        assert response.headers["content-type"].startswith("text/plain")
        assert "script must not be empty" in response.text
        assert fake_client.sessions_opened == []

    def test_missing_body(self, client, fake_client):
        response = client.post("/pixie")

        assert response.status_code == 400
        assert fake_client.sessions_opened == []

    def test_invalid_json(self, client):
        response = client.post(
            "/pixie", content="{script:", headers={"content-type": "application/json"}
        )
        assert response.status_code == 400

    def test_no_script_source(self, client):
        response = client.post("/pixie", json={})

        assert response.status_code == 400
        assert "one of script or script_file is required" in response.text

    def test_unauthenticated(self, client, fake_client):
        fake_client.session_error = RuntimeError("rpc error: unauthenticated")

        response = client.post("/pixie", json={"script": "px.display(df)"})

        assert response.status_code == 401
        assert response.text == "Authentication failed: Invalid API key or cluster ID"

    def test_cluster_not_found(self, client, fake_client):
        fake_client.session_error = RuntimeError("cluster does not exist")

        response = client.post("/pixie", json={"script": "px.display(df)"})

        assert response.status_code == 404
        assert response.text == "Cluster not found: cluster-1234"

    def test_session_timeout_returns_no_rows(self, client, query_service, fake_client):
        query_service.session_timeout = 0.05
        fake_client.session_delay = 1

        response = client.post("/pixie", json={"script": "px.display(df)"})

        assert response.status_code == 504
        assert response.text == "Timeout connecting to cluster"
        assert "rows" not in response.text

    def test_execution_auth_failure(self, client, fake_client):
        fake_client.stream_error = RuntimeError("unauthenticated")

        response = client.post("/pixie", json={"script": "px.display(df)"})

        assert response.status_code == 401

    def test_execution_failure(self, client, fake_client):
        fake_client.stream_error = RuntimeError("vizier went away")

        response = client.post("/pixie", json={"script": "px.display(df)"})

        assert response.status_code == 500
        assert response.text == "vizier went away"

    def test_config_error(self, client, config_file):
        config_file.write_text("{}", encoding="utf-8")

        response = client.post("/pixie", json={"script": "px.display(df)"})

        assert response.status_code == 500
        assert response.text == "Failed to load configuration"


class TestScriptFile:
    def test_named_script(self, client, fake_client, scripts_dir):
        response = client.post("/pixie", json={"script_file": "conn_status.pxl"})

        assert response.status_code == 200
        assert fake_client.scripts == ["px.display(df)"]

    def test_suffix_is_optional(self, client, fake_client, scripts_dir):
        response = client.post("/pixie", json={"script_file": "conn_status"})

        assert response.status_code == 200

    def test_missing_script_file(self, client, fake_client, scripts_dir):
        response = client.post("/pixie", json={"script_file": "nope.pxl"})

        assert response.status_code == 400
        assert response.text == "Script file not found: nope.pxl"
        assert fake_client.sessions_opened == []

    def test_path_traversal_rejected(self, client, scripts_dir):
        response = client.post("/pixie", json={"script_file": "../config.json"})
        assert response.status_code == 400

    def test_script_and_file_are_exclusive(self, client, scripts_dir):
        response = client.post(
            "/pixie", json={"script": "px.display(df)", "script_file": "conn_status.pxl"}
        )
        assert response.status_code == 400


class TestServiceEndpoints:
    def test_healthz(self):
        response = TestClient(app).get("/healthz")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_openapi_document(self):
        response = TestClient(app).get("/openapi.json")

        assert response.status_code == 200
        assert "/pixie" in response.json()["paths"]

    def test_swagger_ui_at_root(self):
        response = TestClient(app).get("/")

        assert response.status_code == 200
        assert "swagger" in response.text.lower()

    def test_uninitialized_service(self):
        app.dependency_overrides.clear()
        original = main.query_service
        main.query_service = None
        try:
            response = TestClient(app).post("/pixie", json={"script": "px.display(df)"})
        finally:
            main.query_service = original
        assert response.status_code == 503
        assert response.headers["content-type"].startswith("text/plain")
        assert response.text == "Service not initialized"

    def test_unknown_route_is_plain_text(self):
        response = TestClient(app).get("/nope")

        assert response.status_code == 404
        assert response.headers["content-type"].startswith("text/plain")

    def test_wrong_method_is_plain_text(self):
        response = TestClient(app).get("/pixie")

        assert response.status_code == 405
        assert response.headers["content-type"].startswith("text/plain")
        assert "POST" in response.headers["allow"]
