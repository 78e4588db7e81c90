from pydantic import BaseModel

from resumelens.models.common import CamelModel


class TextAnalysisRequest(BaseModel):
    prompt: str = ""
    timestamp: str | None = None


class AnalysisMetadata(CamelModel):
    model: str
    timestamp: str
    # text submissions
    prompt_length: int | None = None
    response_length: int | None = None
    request_timestamp: str | None = None
    # file submissions
    file_name: str | None = None
    file_type: str | None = None
    file_size: int | None = None
    analysis_length: int | None = None


class AnalysisResult(CamelModel):
    success: bool
    response: str | None = None
    error: str | None = None
    details: str | None = None
    metadata: AnalysisMetadata | None = None


class Capabilities(CamelModel):
    message: str
    status: str
    model: str
    supported_file_types: list[str]
    max_file_size: str
    endpoints: dict[str, str]
    example_usage: dict[str, str]
