import mimetypes
from pathlib import Path

from fastmcp import FastMCP

from resumelens.exceptions import (
    AuthenticationError,
    IntegrationError,
    InvalidRequestError,
    PayloadTooLargeError,
    RateLimitError,
    ResumeLensError,
    UnsupportedFileError,
)
from resumelens.services import documents
from resumelens.services import gemini as gemini_service

for _ext, _mime in documents.SUPPORTED_EXTENSIONS.items():
    mimetypes.add_type(_mime, _ext)

mcp = FastMCP("ResumeLens")


def _handle_mcp_error(e: Exception) -> dict:
    """Convert exceptions to agent-friendly error dicts."""
    if isinstance(e, AuthenticationError):
        return {"error": "auth_error", "message": str(e), "action": "Ask the user to set GOOGLE_API_KEY in .env"}
    if isinstance(e, RateLimitError):
        return {"error": "rate_limit", "message": str(e), "action": "Wait until the quota resets and retry"}
    if isinstance(e, PayloadTooLargeError):
        return {"error": "file_too_large", "message": str(e)}
    if isinstance(e, (InvalidRequestError, UnsupportedFileError)):
        return {"error": "invalid_request", "message": str(e)}
    if isinstance(e, IntegrationError):
        return {"error": "integration_error", "message": str(e)}
    return {"error": "unknown_error", "message": str(e)}


@mcp.tool
def analyze_text(prompt: str) -> dict:
    """Analyze free-form text (e.g. a pasted resume) with Gemini.
    Returns the model's markdown response and request metadata."""
    if not prompt.strip():
        return _handle_mcp_error(InvalidRequestError("Prompt is required"))
    try:
        return gemini_service.analyze_text(prompt).model_dump(by_alias=True, exclude_none=True)
    except ResumeLensError as e:
        return _handle_mcp_error(e)


@mcp.tool
def analyze_file(path: str, prompt: str = "", instruction: str = "") -> dict:
    """Analyze a local document (PDF, image, TXT, Markdown, CSV, JSON, DOC, DOCX) with Gemini.
    The file type is inferred from its extension. Files over 10MB are rejected."""
    file_path = Path(path).expanduser()
    if not file_path.is_file():
        return _handle_mcp_error(InvalidRequestError(f"No file found at {path}"))
    mime_type = mimetypes.guess_type(file_path.name)[0]
    try:
        documents.check_size(file_path.stat().st_size)
        result = gemini_service.analyze_file(
            file_path.read_bytes(), file_path.name, mime_type, prompt or None, instruction or None
        )
        return result.model_dump(by_alias=True, exclude_none=True)
    except ResumeLensError as e:
        return _handle_mcp_error(e)


@mcp.tool
def analyzer_capabilities() -> dict:
    """List the Gemini model in use, the supported file types and the maximum upload size."""
    return gemini_service.capabilities_summary()
