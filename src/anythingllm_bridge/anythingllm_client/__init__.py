"""
AnythingLLM API Client.

Provides:
- Workspace CRUD, settings and chat (JSON or raw stream)
- Document upload / raw text / webpage ingestion attached to a workspace
- Admin users, API keys and system preferences
- Agents expressed as workspace settings

Authenticates with a developer API key sent as a bearer token.
"""

from .client import (
    AgentValidationError,
    AnythingLLMAPIError,
    AnythingLLMClient,
    AnythingLLMConnectionError,
    AnythingLLMError,
    UnsupportedOperationError,
)

__all__ = [
    "AgentValidationError",
    "AnythingLLMAPIError",
    "AnythingLLMClient",
    "AnythingLLMConnectionError",
    "AnythingLLMError",
    "UnsupportedOperationError",
]
