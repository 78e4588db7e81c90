"""Upload validation, text extraction and prompt composition for file analysis."""

import io
import logging

from docx import Document

from resumelens.exceptions import InvalidRequestError, PayloadTooLargeError

logger = logging.getLogger(__name__)

DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

SUPPORTED_TYPES = {
    "application/pdf": "PDF",
    "text/plain": "TXT",
    "text/markdown": "Markdown",
    "application/msword": "DOC",
    DOCX_MIME: "DOCX",
    "text/csv": "CSV",
    "image/jpeg": "JPEG",
    "image/png": "PNG",
    "image/webp": "WebP",
    "application/json": "JSON",
}

# File extensions for callers that only have a path.
SUPPORTED_EXTENSIONS = {
    ".pdf": "application/pdf",
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".markdown": "text/markdown",
    ".doc": "application/msword",
    ".docx": DOCX_MIME,
    ".csv": "text/csv",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
    ".json": "application/json",
}

MAX_FILE_SIZE = 10 * 1024 * 1024
MAX_TEXT_CHARS = 15000

DEFAULT_FILE_PROMPT = "Please analyze this file content and provide key insights"
DEFAULT_INSTRUCTION = "Extract key information, summarize content, and provide analysis"


def max_file_size_label() -> str:
    return f"{MAX_FILE_SIZE // 1024 // 1024}MB"


def normalize_mime_type(mime_type: str | None) -> str:
    """Strip parameters such as '; charset=utf-8' and lowercase."""
    if not mime_type:
        return ""
    return mime_type.split(";", 1)[0].strip().lower()


def check_size(size: int) -> None:
    if size > MAX_FILE_SIZE:
        raise PayloadTooLargeError(f"File too large. Maximum size is {max_file_size_label()}")


def validate_upload(mime_type: str, size: int) -> str:
    """Check size and type of an upload, returning its display label."""
    check_size(size)
    label = SUPPORTED_TYPES.get(mime_type)
    if label is None:
        raise InvalidRequestError(
            f"Unsupported file type: {mime_type or 'unknown'}. "
            f"Supported types: {', '.join(SUPPORTED_TYPES.values())}"
        )
    return label


def is_inline_type(mime_type: str) -> bool:
    """Images and PDFs go to the model as inline binary data, not text."""
    return mime_type.startswith("image/") or mime_type == "application/pdf"


def _binary_placeholder(label: str, file_name: str) -> str:
    return f"[Binary {label} file. File name: {file_name}]"


def _extract_docx_text(data: bytes) -> str:
    doc = Document(io.BytesIO(data))
    return "\n".join(p.text for p in doc.paragraphs)


def extract_text(data: bytes, mime_type: str, label: str, file_name: str) -> str:
    """Decode a text-like upload, truncated to MAX_TEXT_CHARS characters.

    DOCX bodies are read with python-docx. Anything that cannot be decoded
    becomes a placeholder naming the file so the model still gets context.
    """
    if mime_type == DOCX_MIME:
        try:
            text = _extract_docx_text(data)
        except Exception as e:
            logger.warning("Could not read DOCX %s: %s", file_name, e)
            return _binary_placeholder(label, file_name)
    else:
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError:
            return _binary_placeholder(label, file_name)
    return text[:MAX_TEXT_CHARS]


def build_file_header(instruction: str, file_name: str, label: str, size: int, prompt: str) -> str:
    return (
        f"{instruction}\n\n"
        f"File: {file_name}\n"
        f"Type: {label}\n"
        f"Size: {size / 1024:.1f} KB\n\n"
        f"Prompt: {prompt}"
    )


def build_inline_prompt(instruction: str, file_name: str, label: str, size: int, prompt: str) -> str:
    header = build_file_header(instruction, file_name, label, size, prompt)
    return f"{header}\n\nPlease analyze this document:"


def build_text_prompt(
    instruction: str, file_name: str, label: str, size: int, prompt: str, content: str
) -> str:
    header = build_file_header(instruction, file_name, label, size, prompt)
    return f"{header}\n\nFile Content:\n{content}"
