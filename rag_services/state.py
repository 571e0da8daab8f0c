"""
Conversation state for the single active document.

One ConversationSession owns the document, the chat history and the
in-flight flag. Routers hold a handle to it and only ever go through the
transition methods below, so the history stays in submission order and at
most one model call is pending for the current document.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from core.config import settings
from core.exceptions import InvocationError, QueryRejected, ReadFailure, UnsupportedFormat
from models.chat import Message
from models.document import Document
from rag_services.document_processor import DocumentProcessor
from rag_services.llm import LLMService, build_prompt
from rag_services.retrieval import ContextSelector, FirstChunkSelector

logger = logging.getLogger(__name__)

PLACEHOLDER_ANSWER = "Error: Failed to get a response from the AI model."
APOLOGY_TEXT = "Sorry, I encountered a connection error while trying to generate a response."
CONNECTION_ERROR_TEXT = "Could not connect to the AI service. Please check your network."

STATUS_NO_DOCUMENT = "no_document"
STATUS_DOCUMENT_READY = "document_ready"
STATUS_AWAITING_RESPONSE = "awaiting_response"


def load_confirmation(name: str) -> str:
    return f'Document "{name}" loaded successfully. You can now ask questions based on its content.'


@dataclass
class ConversationState:
    active_document: Optional[Document] = None
    history: List[Message] = field(default_factory=list)
    pending_request: bool = False
    last_error: Optional[str] = None
    # Bumped on every load so late answers for an older document can be dropped
    generation: int = 0


class ConversationSession:
    def __init__(
        self,
        llm: LLMService,
        selector: Optional[ContextSelector] = None,
        processor: Optional[DocumentProcessor] = None,
        chunk_size: Optional[int] = None,
    ):
        self.llm = llm
        self.selector = selector or FirstChunkSelector()
        self.processor = processor or DocumentProcessor(
            settings.ALLOWED_EXTENSIONS, settings.MAX_FILE_SIZE_MB
        )
        self.chunk_size = chunk_size or settings.CHUNK_SIZE
        self._state = ConversationState()

    # Read side

    @property
    def active_document(self) -> Optional[Document]:
        return self._state.active_document

    @property
    def history(self) -> tuple:
        return tuple(self._state.history)

    @property
    def pending_request(self) -> bool:
        return self._state.pending_request

    @property
    def last_error(self) -> Optional[str]:
        return self._state.last_error

    @property
    def generation(self) -> int:
        return self._state.generation

    @property
    def status(self) -> str:
        if self._state.active_document is None:
            return STATUS_NO_DOCUMENT
        if self._state.pending_request:
            return STATUS_AWAITING_RESPONSE
        return STATUS_DOCUMENT_READY

    def snapshot(self) -> dict:
        doc = self._state.active_document
        return {
            "status": self.status,
            "has_document": doc is not None,
            "filename": doc.name if doc else None,
            "chunks_count": doc.chunks_count if doc else 0,
            "pending_request": self._state.pending_request,
            "last_error": self._state.last_error,
        }

    # Transitions

    def load_document(self, text: str, name: str) -> Document:
        """Make text the active document and restart the conversation.

        Raises UnsupportedFormat before touching any state when name does
        not carry an accepted extension.
        """
        self.processor.resolve_extension(name)
        return self._replace_document(text, name)

    def _replace_document(self, text: str, name: str) -> Document:
        segments = self.processor.create_chunks(text, self.chunk_size)
        document = Document(name=name, raw_text=text, segments=tuple(segments))

        if self._state.pending_request:
            logger.info("Loading %s while a request is pending; its answer will be discarded", name)

        self._state = ConversationState(
            active_document=document,
            history=[Message(role="model", text=load_confirmation(name))],
            pending_request=False,
            last_error=None,
            generation=self._state.generation + 1,
        )
        logger.info("Loaded %s: %d characters in %d chunks", name, len(text), len(segments))
        return document

    def check_upload_size(self, filename: str, size: int) -> None:
        """Reject an upload by its declared size before its bytes are read."""
        try:
            self.processor.check_size(size)
        except ReadFailure as e:
            logger.warning("Rejected upload %r: %s", filename, e)
            self._state.last_error = str(e)
            raise

    def load_file(self, filename: str, data: bytes, content_type: Optional[str] = None) -> Document:
        """Read an upload and load it, recording read errors as last_error."""
        try:
            text, name = self.processor.read_upload(filename, data, content_type)
        except (UnsupportedFormat, ReadFailure) as e:
            logger.warning("Rejected upload %r: %s", filename, e)
            self._state.last_error = str(e)
            raise
        # read_upload already accepted the file by extension or MIME type
        return self._replace_document(text, name)

    def _check_query(self, question: str) -> None:
        if not question:
            raise QueryRejected(QueryRejected.EMPTY, "Question must not be empty")
        if self._state.active_document is None:
            raise QueryRejected(QueryRejected.NO_DOCUMENT, "Load a document before asking questions")
        if self._state.pending_request:
            raise QueryRejected(QueryRejected.PENDING, "A previous question is still being answered")

    async def submit_query(self, question: str) -> Optional[Message]:
        """Ask a question about the active document.

        Returns the model message appended to the history, or None when the
        document was replaced while the answer was in flight.
        """
        question = (question or "").strip()
        self._check_query(question)

        state = self._state
        state.history.append(Message(role="user", text=question))
        state.pending_request = True
        state.last_error = None
        generation = state.generation

        context = self.selector.select_context(state.active_document.segments, question)
        request = build_prompt(context, question)

        error_text = None
        try:
            response = await self.llm.invoke(request)
            answer = response.answer_text or PLACEHOLDER_ANSWER
            if response.is_empty:
                logger.warning("Model returned no answer text, using placeholder")
        except InvocationError as e:
            logger.error("Chat API error: %s", e)
            answer = APOLOGY_TEXT
            error_text = CONNECTION_ERROR_TEXT
        except BaseException:
            if self._state.generation == generation:
                self._state.pending_request = False
            raise

        if self._state.generation != generation:
            logger.info("Discarding answer for a document that is no longer loaded")
            return None

        reply = Message(role="model", text=answer)
        self._state.history.append(reply)
        self._state.pending_request = False
        if error_text:
            self._state.last_error = error_text
        return reply
