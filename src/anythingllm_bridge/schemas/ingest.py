"""
Ingestion results for the create-then-attach workflows.

Uploading a file, submitting raw text and submitting a link all create
documents on the server first. Only then can the documents be attached to a
workspace via their storage ``location``. The first step's payload is
classified here so callers can tell whether the attach step applies.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class IngestOutcome(str, Enum):
    """
    Outcome of a document creation request.

    DOCUMENTS_CREATED: Server reported success and returned document records
    NO_DOCUMENTS: Server reported success but returned no records
    FAILED: Server reported ``success: false`` (or omitted it)
    """

    DOCUMENTS_CREATED = "documents_created"
    NO_DOCUMENTS = "no_documents"
    FAILED = "failed"


@dataclass
class IngestResult:
    """Classified response of an upload, raw-text or upload-link call."""

    outcome: IngestOutcome
    documents: list[dict] = field(default_factory=list)
    payload: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api_response(cls, data: dict) -> "IngestResult":
        """Classify a document creation response."""
        documents = data.get("documents") or []
        if not isinstance(documents, list):
            documents = []

        if not data.get("success"):
            outcome = IngestOutcome.FAILED
        elif not documents:
            outcome = IngestOutcome.NO_DOCUMENTS
        else:
            outcome = IngestOutcome.DOCUMENTS_CREATED

        return cls(outcome=outcome, documents=documents, payload=data)

    @property
    def should_attach(self) -> bool:
        return self.outcome == IngestOutcome.DOCUMENTS_CREATED

    @property
    def locations(self) -> list[str]:
        """Storage locations of the created documents, in server order."""
        return [doc.get("location") for doc in self.documents]
