import logging

from fastapi import FastAPI, Request, Depends
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api.v1.endpoints import ai, docs, gitlab
from .config import CORS_ORIGINS, LOG_LEVEL
from .relay import RelayError
from .storage import DocsStorage, UnsafePathError, get_storage
from .utils.util import debug_details, error_response

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Docs Editor API")

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(docs.router)
app.include_router(gitlab.router)
app.include_router(ai.router)


# == error envelope == #
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return error_response(400, "Invalid request body", debug_details(exc))


@app.exception_handler(UnsafePathError)
async def unsafe_path_handler(request: Request, exc: UnsafePathError):
    logger.warning("Rejected path on %s: %s", request.url.path, exc)
    return error_response(400, "Invalid path")


@app.exception_handler(RelayError)
async def relay_error_handler(request: Request, exc: RelayError):
    return error_response(exc.status_code, exc.error, exc.details)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(500, "Internal server error", debug_details(exc))


@app.get("/health")
def health(storage: DocsStorage = Depends(get_storage)):
    return {"status": "ok", "docsRoot": str(storage.root)}
