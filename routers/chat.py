from fastapi import APIRouter, Depends, HTTPException, status

from core.exceptions import QueryRejected
from dependencies.session import get_session
from rag_services.state import ConversationSession
from schemas.chat import ChatRequest, ChatResponse, HistoryResponse, MessageResponse

router = APIRouter()

_REJECTION_STATUS = {
    QueryRejected.EMPTY: status.HTTP_400_BAD_REQUEST,
    QueryRejected.NO_DOCUMENT: status.HTTP_400_BAD_REQUEST,
    QueryRejected.PENDING: status.HTTP_409_CONFLICT,
}


@router.post("/chat", response_model=ChatResponse)
async def ask_question(
    payload: ChatRequest,
    session: ConversationSession = Depends(get_session),
):
    """
    Ask a question about the active document.

    Request body:
    ```json
    {
        "message": "What is this document about?"
    }
    ```

    Response:
    ```json
    {
        "answer": "The document is a test document.",
        "last_error": null
    }
    ```

    Connection failures still return 200 with an apology answer and
    `last_error` set; only rejected questions produce 4xx responses.
    """
    try:
        reply = await session.submit_query(payload.message)
    except QueryRejected as e:
        raise HTTPException(status_code=_REJECTION_STATUS[e.reason], detail=str(e))

    if reply is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="The document changed before the answer arrived",
        )

    return ChatResponse(answer=reply.text, last_error=session.last_error)


@router.get("/chat/history", response_model=HistoryResponse)
async def chat_history(session: ConversationSession = Depends(get_session)):
    """Full conversation for the active document, oldest first."""
    return HistoryResponse(
        messages=[MessageResponse.model_validate(msg) for msg in session.history]
    )
