from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger

from ..exceptions import MetadataError, NotOnGce, PathNotFound, TransportFailure


async def _handle_exception(
    request: Request, exc: Exception, code: int = 500, prefix: str = ""
) -> JSONResponse:
    args = getattr(exc, "args")
    a = args[0] if args else str(exc)
    p = f"{prefix}: " if prefix else ""
    return JSONResponse(status_code=code, content={"detail": f"{p}{a}"})


async def handle_PathNotFound(request: Request, exc: PathNotFound) -> JSONResponse:
    logger.debug(f"Metadata path not found: {exc.path}")
    return await _handle_exception(request, exc, code=404)


async def handle_NotOnGce(request: Request, exc: NotOnGce) -> JSONResponse:
    logger.debug("Metadata requested while not running on GCE")
    return await _handle_exception(request, exc, code=503)


async def handle_TransportFailure(
    request: Request, exc: TransportFailure
) -> JSONResponse:
    logger.error(f"Metadata server request failed: {exc}")
    return await _handle_exception(
        request, exc, code=502, prefix="Metadata server error"
    )


async def handle_MetadataError(request: Request, exc: MetadataError) -> JSONResponse:
    logger.error(f"Metadata client error: {exc}")
    return await _handle_exception(request, exc, code=500)


def install_handlers(app: FastAPI) -> None:
    """Installs exception handlers for metadata client errors on the FastAPI app."""
    handlers = {
        PathNotFound: handle_PathNotFound,
        NotOnGce: handle_NotOnGce,
        TransportFailure: handle_TransportFailure,
        MetadataError: handle_MetadataError,
    }
    for exc, handler in handlers.items():
        app.add_exception_handler(exc, handler)  # type: ignore
