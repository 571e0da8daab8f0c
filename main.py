from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.config import Settings, settings as default_settings
from core.logging_config import configure_logging
from rag_services.document_processor import DocumentProcessor
from rag_services.llm import LLMService
from rag_services.state import ConversationSession


def create_app(settings: Optional[Settings] = None, llm: Optional[LLMService] = None) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL)

    application = FastAPI(
        title=settings.app_name,
        description="Ask questions about a single loaded document",
        version="1.0.0",
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    llm_service = llm or LLMService(settings)
    application.state.llm = llm_service
    application.state.session = ConversationSession(
        llm_service,
        processor=DocumentProcessor(settings.ALLOWED_EXTENSIONS, settings.MAX_FILE_SIZE_MB),
        chunk_size=settings.CHUNK_SIZE,
    )

    @application.on_event("shutdown")
    async def shutdown_event():
        await application.state.llm.close()

    from routers.chat import router as chat_router
    from routers.documents import router as documents_router

    application.include_router(documents_router, prefix="/documents", tags=["documents"])
    application.include_router(chat_router, tags=["chat"])

    @application.get("/health", tags=["health"])
    async def health():
        return {"status": "ok"}

    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="127.0.0.1", port=8000, reload=True)
