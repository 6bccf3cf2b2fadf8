from typing import Any, AsyncGenerator, Dict, Optional

import httpx
from fastapi.responses import JSONResponse

from ..config import AI_BACKEND_URL, DEBUG, GITLAB_API_URL, HTTP_TIMEOUT
# == utils == #

# GitLab REST API
async def get_gitlab_client() -> AsyncGenerator[httpx.AsyncClient, None]:
    async with httpx.AsyncClient(base_url=GITLAB_API_URL, timeout=HTTP_TIMEOUT) as client:
        yield client

# AI backend
async def get_ai_client() -> AsyncGenerator[httpx.AsyncClient, None]:
    headers = {"Content-Type": "application/json"}
    async with httpx.AsyncClient(base_url=AI_BACKEND_URL, headers=headers, timeout=HTTP_TIMEOUT) as client:
        yield client

# error envelope: {"success": false, "error": ..., "details"?: ...}
def error_response(status_code: int, error: str, details: Any = None) -> JSONResponse:
    body: Dict[str, Any] = {"success": False, "error": error}
    if details is not None:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=body)

# underlying message only in development mode
def debug_details(exc: BaseException) -> Optional[str]:
    return str(exc) if DEBUG else None
