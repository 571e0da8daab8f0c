from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from core.exceptions import ReadFailure, UnsupportedFormat
from dependencies.session import get_session
from rag_services.state import ConversationSession
from schemas.document import StatusResponse, UploadResponse

router = APIRouter()


@router.post("/upload", response_model=UploadResponse)
async def upload_document(
    file: UploadFile = File(...),
    session: ConversationSession = Depends(get_session),
):
    """
    Load a .txt or .pdf file as the active document.

    Replaces any previously loaded document and restarts the conversation
    with a single confirmation message.
    """
    if file.size is not None:
        try:
            session.check_upload_size(file.filename or "", file.size)
        except ReadFailure as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    try:
        data = await file.read()
    except OSError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Failed to read file.")

    previous = session.active_document
    try:
        document = session.load_file(file.filename or "", data, file.content_type)
    except UnsupportedFormat as e:
        raise HTTPException(status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, detail=str(e))
    except ReadFailure as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return UploadResponse(
        message=session.history[0].text,
        chunks_count=document.chunks_count,
        is_update=previous is not None,
        previous_chunks=previous.chunks_count if previous else None,
        filename=document.name,
        file_size=len(data),
    )


@router.get("/status", response_model=StatusResponse)
async def document_status(session: ConversationSession = Depends(get_session)):
    return StatusResponse(**session.snapshot())
