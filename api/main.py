"""FastAPI-приложение с операциями архива и объединения клиентов."""

import logging

from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse

from services.activity_service import get_recent_activity
from services.clients.errors import (
    ClientError,
    ClientNotFoundError,
    InvalidArgumentError,
    InvalidStateError,
    MergeFailedError,
)

from .clients import router as clients_router
from .schemas import ActivityRead

logger = logging.getLogger(__name__)

# Порядок важен: ClientBusyError наследует InvalidStateError
_ERROR_STATUS = (
    (InvalidArgumentError, 400),
    (ClientNotFoundError, 404),
    (InvalidStateError, 409),
    (MergeFailedError, 500),
)

app = FastAPI(title="Quote Pipeline API")
app.include_router(clients_router)


@app.exception_handler(ClientError)
def handle_client_error(request: Request, exc: ClientError) -> JSONResponse:
    status_code = next(
        (code for cls, code in _ERROR_STATUS if isinstance(exc, cls)), 400
    )
    if status_code >= 500:
        logger.error("❌ %s %s: %s", request.method, request.url.path, exc)
    else:
        logger.warning("⚠️ %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "error": type(exc).__name__, **exc.context()},
    )


@app.get("/activity", response_model=list[ActivityRead])
def read_activity(client_id: int | None = None, limit: int = Query(20, ge=1, le=200)):
    return get_recent_activity(client_id=client_id, limit=limit)


@app.get("/ping")
def ping():
    return {"message": "pong"}
