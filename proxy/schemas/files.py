"""Pydantic schemas for folder listing and item resolution."""

from typing import Any, Dict, List

from pydantic import BaseModel


class ListFilesResponse(BaseModel):
    """Children of a folder, all pages concatenated in page order."""
    files: List[Dict[str, Any]]


class ResolvedFile(BaseModel):
    """Transient download location of a single file."""
    id: str
    downloadUrl: str


class ResolveFileResponse(BaseModel):
    """Response model for item resolution."""
    file: ResolvedFile
