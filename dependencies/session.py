from fastapi import HTTPException, Request, status

from rag_services.state import ConversationSession


def get_session(request: Request) -> ConversationSession:
    session = getattr(request.app.state, "session", None)
    if session is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Session not ready")
    return session
