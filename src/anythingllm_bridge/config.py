"""
Configuration management.

All configuration keys for the bridge are defined here; no other module
should invent config keys. Values come from a YAML file, overridden by
environment variables.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

CHAT_MODES = ("chat", "query")


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""

    pass


@dataclass
class AnythingLLMConfig:
    """AnythingLLM server connection.

    - base_url: Server root, without the /api/v1 prefix
    - api_key: Developer API key (Settings → Developer API)
    - timeout_seconds: None leaves requests without a timeout
    """

    base_url: str = "http://localhost:3001"
    api_key: str = ""
    timeout_seconds: float | None = None
    default_mode: str = "chat"


@dataclass
class Config:
    """Application configuration."""

    anythingllm: AnythingLLMConfig = field(default_factory=AnythingLLMConfig)
    # Workspace used by CLI commands when no slug is given
    default_workspace: str | None = None

    def validate(self) -> list[str]:
        """Validate configuration completeness and consistency.

        Returns:
            List of validation errors (empty if valid)
        """
        errors: list[str] = []

        if not self.anythingllm.base_url:
            errors.append("anythingllm.base_url is required")
        if not self.anythingllm.api_key:
            errors.append("anythingllm.api_key is required")
        if self.anythingllm.default_mode not in CHAT_MODES:
            errors.append(
                f"anythingllm.default_mode must be one of {', '.join(CHAT_MODES)}"
            )
        timeout = self.anythingllm.timeout_seconds
        if timeout is not None and timeout <= 0:
            errors.append("anythingllm.timeout_seconds must be positive")

        return errors


def load_config(config_path: Path) -> Config:
    """
    Load configuration from YAML file.

    Environment variables can override config values:
    - ANYTHINGLLM_BASE_URL
    - ANYTHINGLLM_API_KEY
    - ANYTHINGLLM_TIMEOUT (request timeout in seconds)
    - ANYTHINGLLM_WORKSPACE (default workspace slug)
    """
    if config_path.exists():
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
    else:
        data = {}

    server_data = data.get("anythingllm", {}) or {}

    timeout = os.environ.get("ANYTHINGLLM_TIMEOUT", server_data.get("timeout_seconds"))
    if timeout in ("", None):
        timeout = None
    else:
        timeout = float(timeout)

    anythingllm = AnythingLLMConfig(
        base_url=os.environ.get(
            "ANYTHINGLLM_BASE_URL", server_data.get("base_url", "http://localhost:3001")
        ),
        api_key=os.environ.get("ANYTHINGLLM_API_KEY", server_data.get("api_key", "")),
        timeout_seconds=timeout,
        default_mode=server_data.get("default_mode", "chat"),
    )

    return Config(
        anythingllm=anythingllm,
        default_workspace=os.environ.get(
            "ANYTHINGLLM_WORKSPACE", data.get("default_workspace")
        ),
    )


def create_default_config(config_path: Path) -> None:
    """Create a default configuration file."""
    default_config = """# AnythingLLM Bridge Configuration
#
# Environment variables override these values:
#   ANYTHINGLLM_BASE_URL, ANYTHINGLLM_API_KEY,
#   ANYTHINGLLM_TIMEOUT, ANYTHINGLLM_WORKSPACE

anythingllm:
  base_url: "http://localhost:3001"   # Server root, without /api/v1
  api_key: "YOUR_ANYTHINGLLM_API_KEY"
  timeout_seconds: null               # null = wait indefinitely
  default_mode: "chat"                # chat or query

# Workspace used when a command is run without a slug
default_workspace: null
"""

    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w") as f:
        f.write(default_config)
