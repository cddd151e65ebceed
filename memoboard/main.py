import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from memoboard.shared.config import settings
from memoboard.shared.db import Base, engine
from memoboard.shared.http import ok

# import models so they register with Base.metadata
from memoboard.memos import models as memos_models  # noqa: F401

# Routers Import
from memoboard.memos.api import router as memos_router
from memoboard.summary.api import router as summary_router

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

TAGS_METADATA = [
    {"name": "Memos", "description": "Create, list, edit and delete memos"},
    {"name": "Summary", "description": "One-sentence memo summaries, computed once and stored"},
    {"name": "Health", "description": "Service health"},
]

app = FastAPI(
    title="Memoboard",
    version="0.1.0",
    description="Short text memos with cached one-sentence summaries.",
    openapi_tags=TAGS_METADATA,
)

# ---- DEV-ONLY error handler (helps you see real errors in Swagger) ----
if settings.ENV == "dev":
    @app.exception_handler(Exception)
    async def _dev_ex_handler(request: Request, exc: Exception):
        logger.exception("unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"detail": str(exc)})

# ----------------------------------------------------------------------


@app.on_event("startup")
def _init_db():
    Base.metadata.create_all(bind=engine)

@app.get("/healthz", tags=["Health"])
def healthz():
    return ok()

# Routers
app.include_router(memos_router)
app.include_router(summary_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("memoboard.main:app", host="127.0.0.1", port=8000, reload=settings.ENV == "dev")
