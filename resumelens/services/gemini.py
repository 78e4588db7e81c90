"""Gemini analysis service: sends prompts and uploaded documents to Gemini."""

import logging
import traceback
from datetime import datetime, timezone
from typing import NoReturn

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from resumelens.config import get_settings
from resumelens.exceptions import (
    AuthenticationError,
    IntegrationError,
    RateLimitError,
    UnsupportedFileError,
)
from resumelens.models.analysis import AnalysisMetadata, AnalysisResult
from resumelens.services import documents

logger = logging.getLogger(__name__)

TEXT_GENERATION = {"temperature": 0.7, "top_p": 0.8, "top_k": 40, "max_output_tokens": 2048}
FILE_GENERATION = {**TEXT_GENERATION, "max_output_tokens": 4096}

API_KEY_MESSAGE = (
    "Gemini API key is invalid or missing. "
    "Please check your GOOGLE_API_KEY in .env file."
)
QUOTA_MESSAGE = (
    "API quota exceeded. "
    "Please check your Google Cloud billing or wait until quota resets."
)
FILE_FORMAT_MESSAGE = (
    "File format may not be supported by Gemini. "
    "Try converting to a different format."
)


def _get_client() -> genai.Client:
    api_key = get_settings().google_api_key
    if not api_key:
        raise AuthenticationError(API_KEY_MESSAGE, details="GOOGLE_API_KEY is not set")
    return genai.Client(api_key=api_key)


def _model_name() -> str:
    return get_settings().model_name


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _preview(text: str, limit: int = 100) -> str:
    return text[:limit] + "..."


def _handle_api_error(e: Exception, action: str, file_upload: bool = False) -> NoReturn:
    """Translate a provider failure into one of our typed errors.

    SDK status codes are checked first; message matching covers errors that
    arrive without one.
    """
    message = str(e)
    logger.error("%s error: %s", action, message)

    if isinstance(e, genai_errors.APIError):
        if e.code == 429 or e.status == "RESOURCE_EXHAUSTED":
            raise RateLimitError(QUOTA_MESSAGE, details=message) from e
        if e.code in (401, 403) or e.status in ("UNAUTHENTICATED", "PERMISSION_DENIED"):
            raise AuthenticationError(API_KEY_MESSAGE, details=message) from e

    if "API key" in message or "API_KEY_INVALID" in message:
        raise AuthenticationError(API_KEY_MESSAGE, details=message) from e
    if "quota" in message or "QUOTA" in message:
        raise RateLimitError(QUOTA_MESSAGE, details=message) from e
    lowered = message.lower()
    if file_upload and "invalid" in lowered and "file" in lowered:
        raise UnsupportedFileError(FILE_FORMAT_MESSAGE, details=message) from e

    stack = "".join(traceback.format_exception(e))
    raise IntegrationError(f"{action} failed: {message}", details=stack) from e


def _generate(contents, generation: dict, action: str, file_upload: bool = False) -> str:
    client = _get_client()
    try:
        response = client.models.generate_content(
            model=_model_name(),
            contents=contents,
            config=types.GenerateContentConfig(**generation),
        )
        text = response.text
    except Exception as e:
        _handle_api_error(e, action, file_upload)
    if not text:
        raise IntegrationError(f"{action} failed: model returned an empty response")
    return text


def analyze_text(prompt: str, timestamp: str | None = None) -> AnalysisResult:
    """Send a free-form prompt to Gemini and return its text."""
    model = _model_name()
    logger.info(
        "Text request received: prompt=%r length=%d timestamp=%s model=%s",
        _preview(prompt), len(prompt), timestamp, model,
    )

    text = _generate(prompt, TEXT_GENERATION, "Text analysis")

    logger.info(
        "Text analysis complete: prompt_length=%d response_length=%d model=%s",
        len(prompt), len(text), model,
    )
    return AnalysisResult(
        success=True,
        response=text,
        metadata=AnalysisMetadata(
            model=model,
            prompt_length=len(prompt),
            response_length=len(text),
            request_timestamp=timestamp,
            timestamp=_now_iso(),
        ),
    )


def analyze_file(
    data: bytes,
    file_name: str,
    mime_type: str | None,
    prompt: str | None = None,
    instruction: str | None = None,
) -> AnalysisResult:
    """Validate an uploaded document and analyze it with Gemini.

    Images and PDFs are sent inline as a multimodal request; text-like files
    are decoded and embedded in the prompt.
    """
    mime_type = documents.normalize_mime_type(mime_type)
    size = len(data)
    label = documents.validate_upload(mime_type, size)
    prompt = prompt or documents.DEFAULT_FILE_PROMPT
    instruction = instruction or documents.DEFAULT_INSTRUCTION
    model = _model_name()

    logger.info(
        "File upload received: name=%s size=%d type=%s prompt=%r model=%s",
        file_name, size, mime_type, _preview(prompt), model,
    )

    if documents.is_inline_type(mime_type):
        logger.debug("Sending %s inline as binary data", label)
        contents = [
            documents.build_inline_prompt(instruction, file_name, label, size, prompt),
            types.Part.from_bytes(data=data, mime_type=mime_type),
        ]
    else:
        logger.debug("Embedding %s content as text", label)
        extracted = documents.extract_text(data, mime_type, label, file_name)
        contents = documents.build_text_prompt(instruction, file_name, label, size, prompt, extracted)

    analysis = _generate(contents, FILE_GENERATION, "File analysis", file_upload=True)

    logger.info(
        "File analysis complete: name=%s type=%s analysis_length=%d model=%s",
        file_name, label, len(analysis), model,
    )
    return AnalysisResult(
        success=True,
        response=analysis,
        metadata=AnalysisMetadata(
            model=model,
            file_name=file_name,
            file_type=label,
            file_size=size,
            analysis_length=len(analysis),
            timestamp=_now_iso(),
        ),
    )


def capabilities_summary() -> dict:
    return {
        "model": _model_name(),
        "supported_file_types": list(documents.SUPPORTED_TYPES.values()),
        "max_file_size": documents.max_file_size_label(),
    }
