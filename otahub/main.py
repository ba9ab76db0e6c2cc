import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from otahub.api.routes import firmware_router, ota_router
from otahub.config import get_settings

settings = get_settings()

logging.basicConfig(level=settings.log_level)

app = FastAPI(title=settings.app_name)


@app.middleware("http")
async def enforce_https(request: Request, call_next):
    if not settings.allow_insecure_http:
        proto = request.headers.get("x-forwarded-proto") or request.url.scheme
        if proto != "https":
            return JSONResponse(status_code=400, content={"detail": "HTTPS required"})
    return await call_next(request)


@app.exception_handler(RequestValidationError)
async def request_validation_error(request: Request, exc: RequestValidationError):
    # Malformed bodies and parameters are validation failures, same as domain ones.
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


app.include_router(firmware_router)
app.include_router(ota_router)

if settings.serve_blobs:
    blob_root = Path(settings.blob_storage_path)
    blob_root.mkdir(parents=True, exist_ok=True)
    app.mount("/blobs", StaticFiles(directory=blob_root), name="blobs")


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}
