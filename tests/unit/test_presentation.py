"""Tests for the REST API and MCP tool handlers."""
from __future__ import annotations

import json
from collections.abc import Iterator
from typing import Any

import pytest
from fastapi.testclient import TestClient

from ifc_flow.domain.models.model import Model
from ifc_flow.infrastructure.di.container import container
from ifc_flow.presentation.api.app import create_app
from ifc_flow.presentation.tools import workflow_tools


@pytest.fixture
def loaded(sample_model: Model) -> Iterator[Model]:
    """Shared registry holding the sample model."""
    container.reset()
    container.registry.register(sample_model)
    yield sample_model
    container.reset()


@pytest.fixture
def client(loaded: Model) -> Iterator[TestClient]:
    with TestClient(create_app()) as test_client:
        yield test_client


def graph() -> dict[str, Any]:
    return {
        "nodes": [
            {"id": "src", "type": "ifcNode", "data": {"properties": {}}},
            {"id": "qty", "type": "quantityNode", "data": {"properties": {"quantityType": "count", "groupBy": "material"}}},
        ],
        "edges": [{"source": "src", "target": "qty", "sourceHandle": None, "targetHandle": None}],
    }


class TestRestApi:
    """Tests for the FastAPI routes."""

    def test_health(self, client: TestClient) -> None:
        """Test the health check."""
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_run_workflow(self, client: TestClient) -> None:
        """Test running a canvas workflow over REST."""
        response = client.post("/api/v1/workflows/run", json=graph())
        assert response.status_code == 200
        data = response.json()
        assert data["order"] == ["src", "qty"]
        assert data["results"]["qty"]["values"] == {"Concrete": 2, "Steel": 1}
        assert data["failures"] == []

    def test_run_rejects_cycle(self, client: TestClient) -> None:
        """Test cyclic workflows get 422."""
        cyclic = {
            "nodes": [{"id": "a", "kind": "filter"}, {"id": "b", "kind": "filter"}],
            "edges": [{"source": "a", "target": "b"}, {"source": "b", "target": "a"}],
        }
        response = client.post("/api/v1/workflows/run", json=cyclic)
        assert response.status_code == 422
        assert response.json()["issues"][0]["code"] == "cycle"

    def test_validate(self, client: TestClient) -> None:
        """Test workflow validation returns the order."""
        response = client.post("/api/v1/workflows/validate", json=graph())
        assert response.json() == {"valid": True, "order": ["src", "qty"]}

    def test_node_kinds(self, client: TestClient) -> None:
        """Test listing node kinds."""
        kinds = {entry["kind"] for entry in client.get("/api/v1/node-kinds").json()}
        assert {"source", "filter", "export", "watch"} <= kinds

    def test_models(self, client: TestClient) -> None:
        """Test listing loaded models."""
        data = client.get("/api/v1/models").json()
        assert data["total"] == 1
        assert data["latest"] == "sample"

    def test_remove_model(self, client: TestClient) -> None:
        """Test removing a model, then a missing one."""
        assert client.delete("/api/v1/models/sample").status_code == 200
        assert client.delete("/api/v1/models/sample").status_code == 404

    def test_import_rejects_non_ifc(self, client: TestClient) -> None:
        """Test non-IFC uploads get 400."""
        response = client.post(
            "/api/v1/models/import",
            files={"file": ("notes.txt", b"hello", "text/plain")},
        )
        assert response.status_code == 400


class TestMcpTools:
    """Tests for the MCP tool handlers."""

    async def test_run_workflow(self, loaded: Model) -> None:
        """Test the run tool compacts element results."""
        content = await workflow_tools._run_workflow({"graph": graph()})
        data = json.loads(content[0].text)
        assert data["status"] == "success"
        assert data["results"]["src"]["element_ids"] == [e.id for e in loaded.elements]
        assert "elements" not in data["results"]["src"]

    async def test_run_invalid_workflow(self, loaded: Model) -> None:
        """Test the run tool reports validation issues."""
        content = await workflow_tools._run_workflow({"graph": {"nodes": [{"id": "x", "kind": "teleport"}]}})
        data = json.loads(content[0].text)
        assert data["status"] == "invalid"
        assert data["issues"][0]["code"] == "unknown_kind"

    async def test_load_missing_file(self, loaded: Model) -> None:
        """Test loading a missing file."""
        content = await workflow_tools._load_model({"file_path": "/does/not/exist.ifc"})
        assert content[0].text.startswith("File not found")

    def test_list_models(self, loaded: Model) -> None:
        """Test the list tool."""
        data = json.loads(workflow_tools._list_models()[0].text)
        assert data["models"][0]["id"] == "sample"
