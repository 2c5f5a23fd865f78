"""
AnythingLLM API client implementation.
"""

import json
import logging
import time
from pathlib import Path
from typing import Any, BinaryIO, Generator, Optional, Union

import requests

from ..schemas.ingest import IngestResult
from ..schemas.workspace import find_document_path, workspace_documents

logger = logging.getLogger(__name__)


class AnythingLLMError(Exception):
    """Base exception for AnythingLLM client errors."""

    pass


class AnythingLLMAPIError(AnythingLLMError):
    """API returned a non-success status."""

    def __init__(self, status_code: int, response_body: str):
        self.status_code = status_code
        self.response_body = response_body
        super().__init__(f"AnythingLLM API error: {status_code} - {response_body}")


class AnythingLLMConnectionError(AnythingLLMError):
    """Failed to connect to AnythingLLM."""

    pass


class UnsupportedOperationError(AnythingLLMError):
    """Operation has no endpoint in the AnythingLLM API."""

    pass


class AgentValidationError(AnythingLLMError, ValueError):
    """Agent request is missing required fields."""

    pass


class AnythingLLMClient:
    """
    Client for the AnythingLLM developer API (``/api/v1``).

    Features:
    - Workspace CRUD and settings
    - Chat (complete JSON or raw byte stream)
    - Document upload, raw-text and webpage ingestion, attached to a workspace
    - Admin users, API keys and system preferences
    - Agents, expressed as workspace settings and chat calls

    No retries, pagination or rate limiting: every call is one request (or a
    short fixed sequence) whose JSON payload is returned as-is.
    """

    API_PREFIX = "/api/v1"
    DEFAULT_CHAT_MODE = "chat"
    EMBEDDED_DOC_SOURCE = "mcp-embedded"
    AGENT_MESSAGE = "Agents are configured per-workspace in AnythingLLM"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: Optional[float] = None,
    ):
        """
        Initialize AnythingLLM client.

        Args:
            base_url: AnythingLLM instance URL (e.g., "http://localhost:3001")
            api_key: Developer API key, sent as a bearer token
            timeout: Request timeout in seconds (None waits indefinitely)
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

        self.session = requests.Session()
        self.session.headers.update(self.headers)

    def _send(
        self,
        method: str,
        endpoint: str,
        params: Optional[dict] = None,
        json_data: Any = None,
        files: Optional[dict] = None,
        headers: Optional[dict] = None,
        stream: bool = False,
    ) -> requests.Response:
        """Make an API request and raise on non-success status."""
        url = f"{self.base_url}{endpoint}"

        logger.debug(f"API Request: {method} {url}")
        if json_data is not None:
            logger.debug(f"Request body: {json.dumps(json_data, default=str)}")

        try:
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json_data,
                files=files,
                headers=headers,
                timeout=self.timeout,
                stream=stream,
            )
        except requests.exceptions.ConnectionError as e:
            raise AnythingLLMConnectionError(
                f"Failed to connect to AnythingLLM at {self.base_url}: {e}"
            ) from e
        except requests.exceptions.Timeout as e:
            raise AnythingLLMConnectionError(f"Request to AnythingLLM timed out: {e}") from e
        except requests.exceptions.RequestException as e:
            raise AnythingLLMError(f"Request failed: {e}") from e

        logger.debug(f"Response status: {response.status_code}")

        if not response.ok:
            error_body = response.text
            response.close()
            logger.warning(f"API Error {response.status_code} for {method} {endpoint}")
            raise AnythingLLMAPIError(response.status_code, error_body)

        return response

    def request(
        self,
        endpoint: str,
        method: str = "GET",
        json_data: Any = None,
        headers: Optional[dict] = None,
        params: Optional[dict] = None,
    ) -> Any:
        """
        Call a JSON endpoint and return the decoded body.

        Args:
            endpoint: Path below the base URL (e.g., "/api/v1/workspaces")
            method: HTTP method
            json_data: Request body, serialized as JSON
            headers: Header overrides merged over the default set
            params: Query string parameters

        Returns:
            Parsed JSON response
        """
        response = self._send(
            method, endpoint, params=params, json_data=json_data, headers=headers
        )
        try:
            return response.json()
        except ValueError as e:
            raise AnythingLLMError(f"Invalid JSON response from {endpoint}: {e}") from e

    def _api(self, path: str) -> str:
        return f"{self.API_PREFIX}{path}"

    def test_connection(self) -> bool:
        """Check that the server is reachable and the API key is accepted."""
        try:
            self.request(self._api("/auth"))
            return True
        except AnythingLLMError:
            return False

    # === Workspaces ===

    def list_workspaces(self) -> dict:
        return self.request(self._api("/workspaces"))

    def get_workspace(self, slug: str) -> dict:
        return self.request(self._api(f"/workspace/{slug}"))

    def create_workspace(self, name: str) -> dict:
        return self.request(
            self._api("/workspace/new"), method="POST", json_data={"name": name}
        )

    def update_workspace(self, slug: str, updates: dict) -> dict:
        return self.request(
            self._api(f"/workspace/{slug}/update"), method="POST", json_data=updates
        )

    def delete_workspace(self, slug: str) -> dict:
        """
        Delete a workspace.

        The server answers with plain text ``OK`` instead of JSON.

        Returns:
            ``{"success": bool, "message": <response text>}``
        """
        response = self._send("DELETE", self._api(f"/workspace/{slug}"))
        text = response.text
        return {"success": text == "OK", "message": text}

    def get_workspace_settings(self, slug: str) -> dict:
        return self.request(self._api(f"/workspace/{slug}"))

    def update_workspace_settings(self, slug: str, settings: dict) -> dict:
        return self.request(
            self._api(f"/workspace/{slug}/update"), method="POST", json_data=settings
        )

    # === Chat ===

    def chat_with_workspace(
        self, slug: str, message: str, mode: str = DEFAULT_CHAT_MODE
    ) -> dict:
        return self.request(
            self._api(f"/workspace/{slug}/chat"),
            method="POST",
            json_data={"message": message, "mode": mode},
        )

    def stream_chat_with_workspace(
        self, slug: str, message: str, mode: str = DEFAULT_CHAT_MODE
    ) -> Generator[bytes, None, None]:
        """
        Chat with a workspace and return the raw response stream.

        Chunks are yielded as they arrive, without line framing. Calling
        ``close()`` on the returned generator releases the connection; a
        connection dropped mid-stream raises AnythingLLMConnectionError.

        Returns:
            Generator over raw body bytes
        """
        response = self._send(
            "POST",
            self._api(f"/workspace/{slug}/stream-chat"),
            json_data={"message": message, "mode": mode},
            stream=True,
        )
        return self._iter_stream(response)

    def _iter_stream(self, response: requests.Response) -> Generator[bytes, None, None]:
        try:
            yield from response.iter_content(chunk_size=None)
        except requests.exceptions.RequestException as e:
            raise AnythingLLMConnectionError(f"Stream from AnythingLLM interrupted: {e}") from e
        finally:
            response.close()

    def get_workspace_chat_history(self, slug: str, limit: int = 100) -> dict:
        return self.request(
            self._api(f"/workspace/{slug}/chats"), params={"limit": limit}
        )

    def clear_workspace_chat_history(self, slug: str) -> dict:
        """Not available in the AnythingLLM API; always raises."""
        raise UnsupportedOperationError(
            "AnythingLLM API v1 does not support clearing chat history. "
            f"Workaround: Delete and recreate the workspace '{slug}'."
        )

    # === Documents ===

    def _attach_ingested(self, slug: str, payload: dict) -> IngestResult:
        """Attach freshly created documents to a workspace when there are any."""
        result = IngestResult.from_api_response(payload)
        if result.should_attach:
            self.add_documents_to_workspace(slug, result.locations)
        else:
            logger.info(f"Not attaching to workspace '{slug}': {result.outcome.value}")
        return result

    def upload_document(
        self,
        slug: str,
        file: Union[bytes, BinaryIO],
        filename: str = "document",
    ) -> dict:
        """
        Upload a file and add it to a workspace.

        AnythingLLM requires two steps: upload to the system document store,
        then attach the returned locations via update-embeddings.

        Args:
            slug: Target workspace slug
            file: File contents or a binary file object
            filename: Name reported in the multipart form

        Returns:
            Upload response payload
        """
        # requests drops headers set to None, letting it write the multipart boundary
        response = self._send(
            "POST",
            self._api("/document/upload"),
            files={"file": (filename, file)},
            headers={"Content-Type": None},
        )
        try:
            upload_result = response.json()
        except ValueError as e:
            raise AnythingLLMError(f"Invalid JSON response from document upload: {e}") from e

        self._attach_ingested(slug, upload_result)
        return upload_result

    def upload_file(self, slug: str, path: Path) -> dict:
        """Upload a local file and add it to a workspace."""
        path = Path(path)
        with open(path, "rb") as f:
            return self.upload_document(slug, f, filename=path.name)

    def list_documents(self, slug: Optional[str] = None) -> dict:
        """
        List documents.

        With a workspace slug, returns the documents embedded in that
        workspace (there is no dedicated endpoint). Without one, lists all
        system documents.
        """
        if slug:
            workspace = self.get_workspace(slug)
            return {"documents": workspace_documents(workspace)}
        return self.request(self._api("/documents"))

    def delete_document(self, slug: str, document_name: str) -> dict:
        """
        Remove a document from a workspace.

        Args:
            slug: Workspace slug
            document_name: Document id, filename, docpath or docpath fragment
        """
        workspace = self.get_workspace(slug)
        doc_path = find_document_path(workspace_documents(workspace), document_name)
        logger.debug(f"Resolved '{document_name}' to '{doc_path}'")
        return self.request(
            self._api(f"/workspace/{slug}/update-embeddings"),
            method="POST",
            json_data={"deletes": [doc_path]},
        )

    def add_documents_to_workspace(self, slug: str, document_paths: list[str]) -> dict:
        """Attach documents to a workspace by their storage locations."""
        logger.debug(f"Attaching {len(document_paths)} document(s) to '{slug}'")
        return self.request(
            self._api(f"/workspace/{slug}/update-embeddings"),
            method="POST",
            json_data={"adds": document_paths},
        )

    def embed_text_in_workspace(self, slug: str, texts: Union[str, list[str]]) -> dict:
        """
        Embed raw text items in a workspace.

        Each item becomes its own document, created and attached before the
        next item is sent. An error on one item aborts the rest.

        Returns:
            ``{"success": True, "documents": [create responses in input order]}``
        """
        items = texts if isinstance(texts, list) else [texts]
        results = []

        for i, text in enumerate(items):
            title = f"embedded-text-{int(time.time() * 1000)}-{i}"
            doc_response = self.request(
                self._api("/document/raw-text"),
                method="POST",
                json_data={
                    "textContent": text,
                    "metadata": {
                        "title": title,
                        "docSource": self.EMBEDDED_DOC_SOURCE,
                    },
                },
            )
            results.append(doc_response)
            self._attach_ingested(slug, doc_response)

        return {"success": True, "documents": results}

    def embed_webpage(self, slug: str, url: str) -> dict:
        """Scrape a webpage into a document and add it to a workspace."""
        link_response = self.request(
            self._api("/document/upload-link"), method="POST", json_data={"link": url}
        )
        self._attach_ingested(slug, link_response)
        return link_response

    def process_document(self, slug: str, document_url: str) -> dict:
        return self.embed_webpage(slug, document_url)

    def get_document_vectors(self, slug: str, document_id: str) -> dict:
        """
        Approximate a document's vectors with a broad workspace vector search.

        The API does not expose per-document vectors, so ``document_id`` is
        not sent.
        """
        return self.request(
            self._api(f"/workspace/{slug}/vector-search"),
            method="POST",
            json_data={"query": "", "topK": 100},
        )

    def search_workspace(self, slug: str, query: str, limit: int = 10) -> dict:
        return self.request(
            self._api(f"/workspace/{slug}/vector-search"),
            method="POST",
            json_data={"query": query, "topK": limit},
        )

    # === Admin ===

    def get_system_settings(self) -> dict:
        return self.request(self._api("/admin/system-preferences"))

    def update_system_settings(self, settings: dict) -> dict:
        return self.request(
            self._api("/admin/system-preferences"), method="POST", json_data=settings
        )

    def list_users(self) -> dict:
        return self.request(self._api("/admin/users"))

    def create_user(self, user_data: dict) -> dict:
        return self.request(self._api("/admin/users/new"), method="POST", json_data=user_data)

    def update_user(self, user_id: Union[int, str], updates: dict) -> dict:
        return self.request(
            self._api(f"/admin/users/{user_id}"), method="POST", json_data=updates
        )

    def delete_user(self, user_id: Union[int, str]) -> dict:
        return self.request(self._api(f"/admin/users/{user_id}"), method="DELETE")

    def list_api_keys(self) -> dict:
        return self.request(self._api("/admin/api-keys"))

    def create_api_key(self) -> dict:
        return self.request(self._api("/admin/generate-api-key"), method="POST")

    def delete_api_key(self, key_id: Union[int, str]) -> dict:
        return self.request(self._api(f"/admin/delete-api-key/{key_id}"), method="DELETE")

    def list_llm_providers(self) -> dict:
        """Current LLM provider configuration, read from system preferences."""
        return self.request(self._api("/admin/system-preferences"))

    def update_llm_provider(self, provider: str, config: dict) -> dict:
        return self.request(
            self._api("/admin/system-preferences"),
            method="POST",
            json_data={"LLMProvider": provider, **config},
        )

    def get_vector_database_info(self) -> dict:
        return self.request(self._api("/admin/system-preferences"))

    def update_vector_database(self, config: dict) -> dict:
        payload = {}
        if config.get("provider") is not None:
            payload["VectorDB"] = config["provider"]
        payload.update(config)
        return self.request(
            self._api("/admin/system-preferences"), method="POST", json_data=payload
        )

    # === System ===

    def get_system_info(self) -> dict:
        return self.request(self._api("/system/env-dump"))

    def get_system_stats(self) -> dict:
        return self.request(self._api("/system/system-vectors"))

    # === Agents ===
    # Agents live on workspaces: the agent id is the workspace slug.

    def list_agents(self) -> dict:
        workspaces = self.list_workspaces()
        return {"message": self.AGENT_MESSAGE, "workspaces": workspaces}

    def create_agent(self, agent_data: dict) -> dict:
        """
        Enable an agent on a workspace.

        Args:
            agent_data: Must contain ``workspaceSlug``; ``provider`` and
                ``model`` select the agent LLM. All keys are forwarded.
        """
        slug = agent_data.get("workspaceSlug")
        if not slug:
            raise AgentValidationError("workspaceSlug is required to create an agent")

        payload = {"agentProvider": agent_data.get("provider") or "none"}
        # Unset keys stay out of the body so the server keeps its current value
        if agent_data.get("model") is not None:
            payload["agentModel"] = agent_data["model"]
        payload.update(agent_data)

        return self.request(
            self._api(f"/workspace/{slug}/update"), method="POST", json_data=payload
        )

    def update_agent(self, agent_id: str, updates: dict) -> dict:
        return self.request(
            self._api(f"/workspace/{agent_id}/update"), method="POST", json_data=updates
        )

    def delete_agent(self, agent_id: str) -> dict:
        """Disable the agent on a workspace."""
        return self.request(
            self._api(f"/workspace/{agent_id}/update"),
            method="POST",
            json_data={"agentProvider": "none"},
        )

    def invoke_agent(self, agent_id: str, agent_input: str) -> dict:
        return self.request(
            self._api(f"/workspace/{agent_id}/chat"),
            method="POST",
            json_data={"message": agent_input, "mode": "chat", "attachments": []},
        )
