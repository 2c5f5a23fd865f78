"""
CLI main entry point.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

import yaml

from ..anythingllm_client import AnythingLLMClient, AnythingLLMError
from ..config import Config, ConfigValidationError, create_default_config, load_config

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def create_cli() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="anythingllm-bridge",
        description="Manage AnythingLLM workspaces, documents and chats",
    )

    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=Path("config.yaml"),
        help="Path to config file (default: config.yaml)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    subparsers.add_parser("init", help="Write a default config file")
    subparsers.add_parser("status", help="Check the connection and show vector stats")
    subparsers.add_parser("workspaces", help="List workspaces")

    create_parser = subparsers.add_parser("create-workspace", help="Create a workspace")
    create_parser.add_argument("name", type=str, help="Workspace name")

    delete_parser = subparsers.add_parser("delete-workspace", help="Delete a workspace")
    delete_parser.add_argument("slug", type=str, help="Workspace slug")

    docs_parser = subparsers.add_parser(
        "documents", help="List documents (of a workspace, or all system documents)"
    )
    docs_parser.add_argument("slug", type=str, nargs="?", help="Workspace slug")
    docs_parser.add_argument(
        "--all",
        action="store_true",
        help="List all system documents, ignoring default_workspace",
    )

    upload_parser = subparsers.add_parser("upload", help="Upload a file into a workspace")
    upload_parser.add_argument("path", type=Path, help="File to upload")
    upload_parser.add_argument("--workspace", "-w", type=str, help="Workspace slug")

    text_parser = subparsers.add_parser("embed-text", help="Embed raw text into a workspace")
    text_parser.add_argument("texts", type=str, nargs="+", help="Text items to embed")
    text_parser.add_argument("--workspace", "-w", type=str, help="Workspace slug")

    url_parser = subparsers.add_parser("embed-url", help="Embed a webpage into a workspace")
    url_parser.add_argument("url", type=str, help="Page URL")
    url_parser.add_argument("--workspace", "-w", type=str, help="Workspace slug")

    remove_parser = subparsers.add_parser(
        "delete-document", help="Remove a document from a workspace"
    )
    remove_parser.add_argument("name", type=str, help="Document id, filename or path")
    remove_parser.add_argument("--workspace", "-w", type=str, help="Workspace slug")

    search_parser = subparsers.add_parser("search", help="Vector search within a workspace")
    search_parser.add_argument("query", type=str, help="Search query")
    search_parser.add_argument("--workspace", "-w", type=str, help="Workspace slug")
    search_parser.add_argument(
        "--limit",
        type=int,
        default=10,
        help="Maximum results (default: 10)",
    )

    chat_parser = subparsers.add_parser("chat", help="Send a chat message to a workspace")
    chat_parser.add_argument("message", type=str, help="Message text")
    chat_parser.add_argument("--workspace", "-w", type=str, help="Workspace slug")
    chat_parser.add_argument(
        "--mode",
        type=str,
        choices=["chat", "query"],
        help="Chat mode (default: from config)",
    )
    chat_parser.add_argument(
        "--stream",
        action="store_true",
        help="Print the raw response stream as it arrives",
    )

    return parser


def build_client(config: Config) -> AnythingLLMClient:
    """Create a client from validated configuration."""
    errors = config.validate()
    if errors:
        raise ConfigValidationError("; ".join(errors))

    return AnythingLLMClient(
        base_url=config.anythingllm.base_url,
        api_key=config.anythingllm.api_key,
        timeout=config.anythingllm.timeout_seconds,
    )


def _resolve_workspace(config: Config, slug: str | None) -> str:
    workspace = slug or config.default_workspace
    if not workspace:
        raise ConfigValidationError("No workspace given and no default_workspace configured")
    return workspace


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def cmd_init(config_path: Path) -> int:
    """Write a default config file."""
    if config_path.exists():
        print(f"❌ Config already exists: {config_path}")
        return 1

    create_default_config(config_path)
    print(f"✓ Wrote default config to {config_path}")
    return 0


def cmd_status(client: AnythingLLMClient) -> int:
    """Check connection and show vector stats."""
    print(f"🔍 Checking AnythingLLM at {client.base_url}...")

    if not client.test_connection():
        print("❌ Failed to connect to AnythingLLM (check base_url and api_key)")
        return 1

    print("✓ Connected")
    _print_json(client.get_system_stats())
    return 0


def cmd_workspaces(client: AnythingLLMClient) -> int:
    """List workspaces."""
    data = client.list_workspaces()
    workspaces = data.get("workspaces", [])

    for ws in workspaces:
        print(f"  📁 [{ws.get('slug')}] {ws.get('name')}")

    print(f"\n✓ Found {len(workspaces)} workspace(s)")
    return 0


def cmd_create_workspace(client: AnythingLLMClient, name: str) -> int:
    """Create a workspace."""
    data = client.create_workspace(name)
    ws = data.get("workspace") or {}
    print(f"✓ Created workspace '{ws.get('name', name)}' (slug: {ws.get('slug')})")
    return 0


def cmd_delete_workspace(client: AnythingLLMClient, slug: str) -> int:
    """Delete a workspace."""
    result = client.delete_workspace(slug)
    if not result["success"]:
        print(f"❌ Server did not confirm deletion: {result['message']}")
        return 1

    print(f"✓ Deleted workspace '{slug}'")
    return 0


def cmd_documents(client: AnythingLLMClient, slug: str | None) -> int:
    """List documents of a workspace, or all system documents."""
    data = client.list_documents(slug)
    if slug:
        docs = data.get("documents", [])
        for doc in docs:
            print(f"  📄 [{doc.get('docId')}] {doc.get('filename')} → {doc.get('docpath')}")
        print(f"\n✓ {len(docs)} document(s) in '{slug}'")
    else:
        _print_json(data)
    return 0


def cmd_upload(client: AnythingLLMClient, slug: str, path: Path) -> int:
    """Upload a file and attach it to a workspace."""
    if not path.is_file():
        print(f"❌ Not a file: {path}")
        return 1

    print(f"📤 Uploading {path.name} to '{slug}'...")
    result = client.upload_file(slug, path)
    if not result.get("success"):
        print(f"❌ Upload failed: {result.get('error')}")
        return 1

    for doc in result.get("documents") or []:
        print(f"  📄 {doc.get('title')} → {doc.get('location')}")
    print("✓ Uploaded")
    return 0


def cmd_embed_text(client: AnythingLLMClient, slug: str, texts: list[str]) -> int:
    """Embed raw text items into a workspace."""
    result = client.embed_text_in_workspace(slug, texts)

    failed = 0
    for i, doc_response in enumerate(result["documents"]):
        if doc_response.get("success"):
            print(f"  ✓ [{i}] embedded")
        else:
            failed += 1
            print(f"  ❌ [{i}] {doc_response.get('error')}")

    print(f"\n✓ Embedded: {len(texts) - failed}, Failed: {failed}")
    return 1 if failed else 0


def cmd_embed_url(client: AnythingLLMClient, slug: str, url: str) -> int:
    """Embed a webpage into a workspace."""
    print(f"🌐 Fetching {url}...")
    result = client.embed_webpage(slug, url)
    if not result.get("success"):
        print(f"❌ Failed: {result.get('error')}")
        return 1

    print(f"✓ Embedded {len(result.get('documents') or [])} document(s) into '{slug}'")
    return 0


def cmd_delete_document(client: AnythingLLMClient, slug: str, name: str) -> int:
    """Remove a document from a workspace."""
    client.delete_document(slug, name)
    print(f"✓ Removed '{name}' from '{slug}'")
    return 0


def cmd_search(client: AnythingLLMClient, slug: str, query: str, limit: int) -> int:
    """Vector search within a workspace."""
    data = client.search_workspace(slug, query, limit)
    results = data.get("results", [])

    for hit in results:
        meta = hit.get("metadata") or {}
        score = hit.get("score")
        score_str = f"{score:.2f}" if isinstance(score, (int, float)) else "?"
        print(f"  [{score_str}] {meta.get('title', '')}: {(hit.get('text') or '')[:100]}")

    print(f"\n✓ {len(results)} result(s)")
    return 0


def cmd_chat(
    client: AnythingLLMClient, slug: str, message: str, mode: str, stream: bool
) -> int:
    """Send a chat message to a workspace."""
    if stream:
        for chunk in client.stream_chat_with_workspace(slug, message, mode):
            sys.stdout.write(chunk.decode("utf-8", errors="replace"))
            sys.stdout.flush()
        print()
        return 0

    data = client.chat_with_workspace(slug, message, mode)
    if data.get("error"):
        print(f"❌ {data['error']}")
        return 1

    print(data.get("textResponse", ""))
    for source in data.get("sources") or []:
        print(f"  📎 {source.get('title')}")
    return 0


def main(args: list[str] | None = None) -> int:
    """Main entry point."""
    parser = create_cli()
    parsed = parser.parse_args(args)

    setup_logging(parsed.verbose)

    if not parsed.command:
        parser.print_help()
        return 1

    if parsed.command == "init":
        return cmd_init(parsed.config)

    # Load config
    try:
        config = load_config(parsed.config)
        client = build_client(config)
    except (ConfigValidationError, ValueError, OSError, yaml.YAMLError) as e:
        print(f"❌ Failed to load config: {e}")
        return 1

    # Route to command
    try:
        if parsed.command == "status":
            return cmd_status(client)
        elif parsed.command == "workspaces":
            return cmd_workspaces(client)
        elif parsed.command == "create-workspace":
            return cmd_create_workspace(client, parsed.name)
        elif parsed.command == "delete-workspace":
            return cmd_delete_workspace(client, parsed.slug)
        elif parsed.command == "documents":
            slug = None if parsed.all else (parsed.slug or config.default_workspace)
            return cmd_documents(client, slug)
        elif parsed.command == "upload":
            return cmd_upload(client, _resolve_workspace(config, parsed.workspace), parsed.path)
        elif parsed.command == "embed-text":
            return cmd_embed_text(
                client, _resolve_workspace(config, parsed.workspace), parsed.texts
            )
        elif parsed.command == "embed-url":
            return cmd_embed_url(client, _resolve_workspace(config, parsed.workspace), parsed.url)
        elif parsed.command == "delete-document":
            return cmd_delete_document(
                client, _resolve_workspace(config, parsed.workspace), parsed.name
            )
        elif parsed.command == "search":
            return cmd_search(
                client, _resolve_workspace(config, parsed.workspace), parsed.query, parsed.limit
            )
        elif parsed.command == "chat":
            return cmd_chat(
                client,
                _resolve_workspace(config, parsed.workspace),
                parsed.message,
                parsed.mode or config.anythingllm.default_mode,
                parsed.stream,
            )
        else:
            parser.print_help()
            return 1
    except ConfigValidationError as e:
        print(f"❌ {e}")
        return 1
    except AnythingLLMError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"❌ Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
