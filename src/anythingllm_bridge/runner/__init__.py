"""
CLI runner module.

Provides commands:
- init: Write a default config file
- status: Connection check and vector stats
- workspaces / create-workspace / delete-workspace: Workspace management
- documents / upload / embed-text / embed-url / delete-document: Documents
- search: Vector search
- chat: Chat with a workspace (optionally streamed)
"""

from .main import create_cli, main

__all__ = [
    "create_cli",
    "main",
]
