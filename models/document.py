"""
The active document and its segments
"""
from typing import Tuple

from pydantic import BaseModel


class Document(BaseModel):
    """A loaded document, chunked once and never modified afterwards."""

    name: str
    raw_text: str
    segments: Tuple[str, ...] = ()

    model_config = {"frozen": True}

    @property
    def chunks_count(self) -> int:
        return len(self.segments)
