"""Wire messages exchanged with the object-store gateway."""

from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Error body returned by the gateway on any non-2xx status."""
    detail: str
    code: str


class BucketInfoResponse(BaseModel):
    """Response model for bucket lookup."""
    volume: str
    bucket: str
    replication: Optional[int] = None


class OpenKeyRequest(BaseModel):
    """Request model for opening a key for writing."""
    buffer_size: int = Field(ge=0)
    replication: int = Field(default=0, ge=0)
    block_size: int = Field(default=0, ge=0)
    overwrite: bool = False


class OpenKeyResponse(BaseModel):
    """Response model for an opened key."""
    session_id: str
    key: str


class WriteResponse(BaseModel):
    """Response model for a single write call."""
    bytes_written: int = Field(ge=0)


class CommitResponse(BaseModel):
    """Response model for committing a key."""
    key: str
    size: int = Field(ge=0)
