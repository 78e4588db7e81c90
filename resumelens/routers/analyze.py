import json
import logging

from fastapi import APIRouter, Depends, Request, Response
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from resumelens.auth import require_session
from resumelens.config import get_settings
from resumelens.exceptions import InvalidRequestError
from resumelens.models.analysis import AnalysisResult, Capabilities, TextAnalysisRequest
from resumelens.models.auth import UserSession
from resumelens.services import documents
from resumelens.services import gemini as gemini_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["analyze"])

CORS_HEADERS = {
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, Accept",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Max-Age": "86400",
}


def _form_text(value) -> str | None:
    return value if isinstance(value, str) and value else None


async def _analyze_text(request: Request) -> AnalysisResult:
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise InvalidRequestError("Invalid JSON body", details=str(e)) from e
    try:
        req = TextAnalysisRequest.model_validate(body)
    except ValidationError as e:
        raise InvalidRequestError("Prompt is required", details=str(e)) from e
    if not req.prompt.strip():
        raise InvalidRequestError("Prompt is required")
    return await run_in_threadpool(gemini_service.analyze_text, req.prompt, req.timestamp)


async def _analyze_upload(request: Request) -> AnalysisResult:
    form = await request.form()
    try:
        upload = form.get("file")
        if not isinstance(upload, UploadFile):
            raise InvalidRequestError("No file provided")
        if upload.size is not None:
            documents.check_size(upload.size)
        data = await upload.read()
        return await run_in_threadpool(
            gemini_service.analyze_file,
            data,
            upload.filename or "upload",
            upload.content_type,
            _form_text(form.get("prompt")),
            _form_text(form.get("instruction")),
        )
    finally:
        await form.close()


@router.post("/analyze", response_model_exclude_none=True)
async def analyze(request: Request, user: UserSession | None = Depends(require_session)) -> AnalysisResult:
    """Analyze a JSON text prompt or a multipart file upload with Gemini."""
    if user is not None:
        logger.info("Analysis requested by %s", user.email)
    content_type = request.headers.get("content-type", "")
    if "multipart/form-data" in content_type:
        return await _analyze_upload(request)
    return await _analyze_text(request)


@router.get("/analyze")
def capabilities() -> Capabilities:
    """Describe the model, accepted file types and how to call the endpoint."""
    summary = gemini_service.capabilities_summary()
    base_url = f"http://localhost:{get_settings().port}/api/analyze"
    return Capabilities(
        message="Gemini AI Analysis API",
        status="active",
        model=summary["model"],
        supported_file_types=summary["supported_file_types"],
        max_file_size=summary["max_file_size"],
        endpoints={
            "textAnalysis": 'POST /api/analyze with JSON body {prompt: "your text"}',
            "fileAnalysis": "POST /api/analyze with multipart/form-data (file and optional prompt)",
        },
        example_usage={
            "curlText": (
                f"curl -X POST {base_url} -H \"Content-Type: application/json\" "
                "-d '{\"prompt\":\"Hello Gemini\"}'"
            ),
            "curlFile": f'curl -X POST {base_url} -F "file=@document.pdf" -F "prompt=Analyze this"',
        },
    )


@router.options("/analyze")
def preflight() -> Response:
    return Response(status_code=200, headers=CORS_HEADERS)
