"""
JSON report of the `check` command.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .template import DocumentNode, iter_nodes, parse, render


class CheckReport(BaseModel):
    """Result of parsing a document and re-parsing its reconstruction."""
    model_config = ConfigDict(populate_by_name=True)

    path: str
    ok: bool
    children: int = 0                    # direct children of the document node
    nodes: int = 0                       # all nodes below the document node
    documents_match: bool = Field(default=False, alias="documentsMatch")
    error: Optional[str] = None


def documents_match(document: DocumentNode) -> bool:
    """Checks that the reconstructed text parses back to an equal tree."""
    return parse(render(document)) == document


def build_check_report(path: str, document: DocumentNode) -> CheckReport:
    return CheckReport(
        path=path,
        ok=True,
        children=len(document.children),
        nodes=sum(1 for _ in iter_nodes(document)) - 1,
        documents_match=documents_match(document),
    )


def failed_check_report(path: str, error: Exception) -> CheckReport:
    return CheckReport(path=path, ok=False, error=str(error))


__all__ = ["CheckReport", "build_check_report", "failed_check_report", "documents_match"]
