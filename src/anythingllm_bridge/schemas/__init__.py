"""
Payload shapes exchanged with AnythingLLM.

All records are the server's own JSON; these helpers only classify and
navigate them.
"""

from .ingest import IngestOutcome, IngestResult
from .workspace import find_document_path, workspace_data, workspace_documents

__all__ = [
    "IngestOutcome",
    "IngestResult",
    "find_document_path",
    "workspace_data",
    "workspace_documents",
]
