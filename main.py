import os
import re
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, File, Form, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

# Local imports
import config
from analysis import generate_slide_document
from errors import PresentationServiceError, TemplateTooLargeError, ValidationError
from models import AnalyzeRequest
from ppt_generator import render_presentation
from theme_extractor import load_template_theme

# Logging configuration
import logging
logging.basicConfig(level=config.LOG_LEVEL)
logging.getLogger("urllib3").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"AI Presentation Generator Backend running on port {config.PORT}")
    logger.info(f"Frontend: http://localhost:{config.PORT}")
    logger.info(f"API Health: http://localhost:{config.PORT}/api/health")
    yield


# --- FastAPI App ---
app = FastAPI(
    title="AI Presentation Generator",
    description="Turns text into a slide outline with an LLM provider and renders it as a .pptx file.",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Error handlers ---
@app.exception_handler(PresentationServiceError)
async def service_error_handler(request: Request, exc: PresentationServiceError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request body", "details": str(exc.errors())},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return JSONResponse(status_code=404, content={"error": "Endpoint not found"})
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content={"error": "Internal server error", "details": str(exc)})


# --- Helpers ---
def attachment_filename(title: str) -> str:
    return f"{re.sub(r'[^a-zA-Z0-9]', '_', title)}.pptx"


async def read_template(template: Optional[UploadFile]) -> Optional[bytes]:
    """Returns the uploaded template's bytes, rejecting anything that is not a .pptx."""
    if template is None or not template.filename:
        return None

    content_type = (template.content_type or "").split(";")[0].strip().lower()
    if content_type != config.PPTX_MIME_TYPE:
        raise ValidationError("Only PPTX files are allowed")

    data = await template.read(config.MAX_TEMPLATE_BYTES + 1)
    if len(data) > config.MAX_TEMPLATE_BYTES:
        raise TemplateTooLargeError(f"Template exceeds the {config.MAX_TEMPLATE_BYTES // (1024 * 1024)} MB limit")
    return data


# --- Endpoints ---
@app.post("/api/analyze", summary="Outline text as slides")
async def analyze_endpoint(payload: AnalyzeRequest):
    """Returns the validated slide outline the provider produced for `text`."""
    document = await run_in_threadpool(
        generate_slide_document, payload.text, payload.guidance, payload.provider, payload.apiKey
    )
    return {"success": True, "slides": document.model_dump(exclude_none=True)}


@app.post("/api/generate-pptx", summary="Generate a .pptx file from text")
async def generate_pptx_endpoint(
    text: Optional[str] = Form(None),
    guidance: Optional[str] = Form(None),
    provider: Optional[str] = Form(None),
    apiKey: Optional[str] = Form(None),
    template: Optional[UploadFile] = File(None),
):
    """Outlines `text` and renders it, styled after `template` when one is uploaded."""
    # The upload is checked before anything is sent to the provider
    template_bytes = await read_template(template)

    document = await run_in_threadpool(generate_slide_document, text, guidance, provider, apiKey)

    theme = await run_in_threadpool(load_template_theme, template_bytes)
    logger.info(f"Extracted template theme: {'Success' if theme else 'None'}")
    pptx_bytes = await run_in_threadpool(render_presentation, document, theme)

    filename = attachment_filename(document.presentationTitle)
    return Response(
        content=pptx_bytes,
        media_type=config.PPTX_MIME_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@app.get("/api/health")
async def health():
    timestamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return {"status": "healthy", "timestamp": timestamp}


# --- Static frontend ---
class FrontendFiles(StaticFiles):
    """Static files that answer only reads; any other method is an unknown endpoint."""

    async def get_response(self, path: str, scope):
        if scope["method"] not in ("GET", "HEAD"):
            raise StarletteHTTPException(status_code=404)
        return await super().get_response(path, scope)


def mount_frontend(application: FastAPI, directory: str):
    application.mount("/", FrontendFiles(directory=directory, html=True), name="frontend")


# Static frontend, if one is deployed next to the service
if os.path.isdir(config.STATIC_DIR):
    mount_frontend(app, config.STATIC_DIR)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=config.PORT)
