import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import Response

from lumber_sales.config import settings
from lumber_sales.dependencies import get_client_ip

logger = logging.getLogger(__name__)


def install_cors(app: FastAPI) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=['*'],
        allow_headers=['*'],
    )


def install_request_logging(app: FastAPI) -> None:
    @app.middleware('http')
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            '%s %s -> %s in %.1fms (%s)',
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            get_client_ip(request),
        )
        return response
