"""Pydantic schemas for upload session negotiation."""

from typing import Optional

from pydantic import BaseModel


class CreateUploadSessionRequest(BaseModel):
    """Request model for upload session creation.

    Both fields are optional here so that missing values are reported with the
    proxy's own 400 message instead of a validation error.
    """
    itemId: Optional[str] = None
    fileName: Optional[str] = None


class CreateUploadSessionResponse(BaseModel):
    """Response model for upload session creation."""
    uploadUrl: str
