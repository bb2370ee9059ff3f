# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/clinical_access_core

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from clinical_access.services.exceptions import (
    AuthorizationDenied,
    AuthorizationError,
    InvalidRequest,
    ResourceNotFound,
)
from clinical_access.utils.logger import logger

ERROR_STATUS = {
    AuthorizationDenied: status.HTTP_403_FORBIDDEN,
    InvalidRequest: status.HTTP_400_BAD_REQUEST,
    ResourceNotFound: status.HTTP_404_NOT_FOUND,
}


def error_status(exc: AuthorizationError) -> int:
    """HTTP status of the closest registered class in the exception's hierarchy."""
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS:
            return ERROR_STATUS[cls]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    logger.info("Starting clinical-access-core...")
    yield
    logger.info("Shutting down clinical-access-core...")


app = FastAPI(
    title="Clinical Access Core",
    description="Authorization core for clinical records",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(AuthorizationError)
async def authorization_error_handler(request: Request, exc: AuthorizationError) -> JSONResponse:
    status_code = error_status(exc)
    logger.error(f"{exc.error_code} on {request.url.path}: {exc.description}")
    return JSONResponse(
        status_code=status_code,
        content={"errorCode": exc.error_code, "description": exc.description},
    )


@app.get("/")
def health() -> dict[str, str]:
    return {"status": "ok"}
