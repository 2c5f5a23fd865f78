"""Test fixtures and utilities."""

from pathlib import Path

import pytest

from anythingllm_bridge.anythingllm_client import AnythingLLMClient

BASE_URL = "http://anythingllm.test:3001"
API_KEY = "test-api-key-12345"

ENV_VARS = (
    "ANYTHINGLLM_BASE_URL",
    "ANYTHINGLLM_API_KEY",
    "ANYTHINGLLM_TIMEOUT",
    "ANYTHINGLLM_WORKSPACE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's own AnythingLLM settings out of the tests."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def client() -> AnythingLLMClient:
    """Client pointed at the mocked test server."""
    return AnythingLLMClient(BASE_URL, API_KEY)


@pytest.fixture
def sample_workspace_documents() -> list[dict]:
    """Documents embedded in a workspace detail response."""
    return [
        {
            "id": 1,
            "docId": "a1b2c3d4-0000-4000-8000-000000000001",
            "filename": "handbook.pdf-a1b2c3d4.json",
            "docpath": "custom-documents/handbook.pdf-a1b2c3d4.json",
            "workspaceId": 7,
        },
        {
            "id": 2,
            "docId": "a1b2c3d4-0000-4000-8000-000000000002",
            "filename": "faq.txt-9f8e7d6c.json",
            "docpath": "custom-documents/faq.txt-9f8e7d6c.json",
            "workspaceId": 7,
        },
    ]


@pytest.fixture
def sample_workspace(sample_workspace_documents) -> dict:
    """Workspace detail payload with the workspace as a single object."""
    return {
        "workspace": {
            "id": 7,
            "name": "Support",
            "slug": "support",
            "chatMode": "chat",
            "documents": sample_workspace_documents,
        }
    }


@pytest.fixture
def sample_upload_response() -> dict:
    """Successful document upload response with two created records."""
    return {
        "success": True,
        "error": None,
        "documents": [
            {
                "id": "d1",
                "title": "notes.txt",
                "location": "custom-documents/notes.txt-1111.json",
                "wordCount": 120,
            },
            {
                "id": "d2",
                "title": "notes-part2.txt",
                "location": "custom-documents/notes-part2.txt-2222.json",
                "wordCount": 80,
            },
        ],
    }


@pytest.fixture
def config_file(tmp_path) -> Path:
    """Config file for the test server with a default workspace."""
    path = tmp_path / "config.yaml"
    path.write_text(
        f"""
anythingllm:
  base_url: "{BASE_URL}"
  api_key: "{API_KEY}"
default_workspace: "support"
""",
        encoding="utf-8",
    )
    return path
