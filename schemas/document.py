from typing import Optional

from pydantic import BaseModel


class UploadResponse(BaseModel):
    message: str
    chunks_count: int
    is_update: bool = False
    previous_chunks: Optional[int] = None
    filename: str
    file_size: int  # bytes


class StatusResponse(BaseModel):
    status: str
    has_document: bool
    chunks_count: int
    filename: Optional[str] = None
    pending_request: bool = False
    last_error: Optional[str] = None
