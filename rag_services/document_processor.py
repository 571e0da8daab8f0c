"""
Document text extraction and chunking
"""
import io
import logging
from pathlib import PurePath
from typing import Iterable, List, Optional, Tuple

from pypdf import PdfReader

from core.exceptions import ReadFailure, UnsupportedFormat

logger = logging.getLogger(__name__)

UNSUPPORTED_FORMAT_TEXT = "Only PDF or TXT files are supported."
READ_FAILURE_TEXT = "Failed to read file."

_MIME_TYPES = {
    "text/plain": ".txt",
    "application/pdf": ".pdf",
}


class DocumentProcessor:
    """Turns uploaded bytes into text and text into fixed-size chunks."""

    def __init__(
        self,
        allowed_extensions: Iterable[str] = (".txt", ".pdf"),
        max_file_size_mb: Optional[int] = None,
    ):
        self.allowed_extensions = tuple(ext.lower() for ext in allowed_extensions)
        self.max_file_size_mb = max_file_size_mb

    def resolve_extension(self, filename: str, content_type: Optional[str] = None) -> str:
        """Return the accepted extension for a file, or raise UnsupportedFormat."""
        suffix = PurePath(filename or "").suffix.lower()
        if suffix in self.allowed_extensions:
            return suffix
        mime = (content_type or "").split(";")[0].strip().lower()
        from_mime = _MIME_TYPES.get(mime)
        if from_mime and from_mime in self.allowed_extensions:
            return from_mime
        raise UnsupportedFormat(UNSUPPORTED_FORMAT_TEXT)

    def read_upload(
        self, filename: str, data: bytes, content_type: Optional[str] = None
    ) -> Tuple[str, str]:
        """Validate and decode an upload. Returns (text, name)."""
        if not filename:
            raise ReadFailure(READ_FAILURE_TEXT)
        extension = self.resolve_extension(filename, content_type)

        self.check_size(len(data))

        text = self.extract_text(data, extension)
        logger.info("Read %s (%d bytes, %d characters)", filename, len(data), len(text))
        return text, PurePath(filename).name

    def check_size(self, size: int) -> None:
        if self.max_file_size_mb is not None and size > self.max_file_size_mb * 1024 * 1024:
            raise ReadFailure(f"{READ_FAILURE_TEXT} File size limit exceeded.")

    def extract_text(self, data: bytes, extension: str) -> str:
        if extension == ".pdf":
            return self._extract_pdf_text(data)
        return self._decode_text(data)

    @staticmethod
    def _decode_text(data: bytes) -> str:
        try:
            return data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ReadFailure(READ_FAILURE_TEXT) from e

    @staticmethod
    def _extract_pdf_text(pdf_bytes: bytes) -> str:
        """Extract text from PDF bytes, falling back to raw decoding."""
        try:
            reader = PdfReader(io.BytesIO(pdf_bytes))
            text_pages = []
            for page in reader.pages:
                extracted = page.extract_text()
                if extracted:
                    text_pages.append(extracted)
            text = "\n".join(text_pages)
        except Exception as e:
            logger.warning("pypdf could not parse upload, decoding raw bytes: %s", e)
            text = ""

        if text.strip():
            return text
        return pdf_bytes.decode("utf-8", errors="replace")

    @staticmethod
    def create_chunks(text: str, chunk_size: int) -> List[str]:
        """Slice text into consecutive pieces of at most chunk_size characters.

        Splits on character count only, so words and sentences may be cut.
        """
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if not text:
            return []
        return [text[start:start + chunk_size] for start in range(0, len(text), chunk_size)]
