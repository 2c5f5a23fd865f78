"""
Helpers for workspace detail payloads.

``GET /api/v1/workspace/{slug}`` answers ``{"workspace": ...}`` where the
value is a single object on some server versions and a one-element list on
others. Embedded documents carry ``docId``, ``filename`` and ``docpath``.
"""

from typing import Callable, Optional


def workspace_data(payload: dict) -> Optional[dict]:
    """Return the workspace object, unwrapping a list response."""
    ws = payload.get("workspace")
    if isinstance(ws, list):
        return ws[0] if ws else None
    return ws


def workspace_documents(payload: dict) -> list[dict]:
    """Return the documents embedded in a workspace detail payload."""
    ws = workspace_data(payload)
    if not ws:
        return []
    return ws.get("documents") or []


def find_document_path(documents: list[dict], name: str) -> str:
    """
    Resolve a document reference to its ``docpath``.

    The reference may be a document id, a filename, a full docpath or a
    fragment of a docpath. The first record satisfying any of these checks
    wins; a later record's exact id does not beat an earlier partial match.

    Args:
        documents: Embedded document records of a workspace
        name: Caller-supplied reference

    Returns:
        The matched record's docpath, or ``name`` unchanged when nothing matches
    """
    checks: list[Callable[[dict], bool]] = [
        lambda d: d.get("docId") == name,
        lambda d: d.get("filename") == name,
        lambda d: d.get("docpath") == name,
        lambda d: name in (d.get("docpath") or ""),
    ]
    for doc in documents:
        if any(check(doc) for check in checks):
            return doc.get("docpath") or name
    return name
