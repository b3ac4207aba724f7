from ..infrastructure.app_factory import create_application
from ..infrastructure.config.settings import get_settings
from ..interfaces.api import router as api_router

settings = get_settings()

app = create_application(
    router=api_router,
    settings=settings,
    summary="Retrieval-augmented chat over your own documents",
    description="""
    # RAG Chat API

    Upload or paste texts and ask questions about them:

    * **Documents**: Texts are split into chunks and embedded on ingestion
    * **Retrieval**: Questions are matched against your chunks by vector similarity
    * **Chat**: Answers are generated from the retrieved chunks and cite them as [1], [2], ...
    * **Profile**: Bring your own provider key and system prompt

    Every request must carry the caller's id in the `X-Owner-Id` header.
    """,
)
