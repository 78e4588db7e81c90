from pathlib import Path

import pytest

from resumelens.exceptions import AuthenticationError, IntegrationError, PayloadTooLargeError, RateLimitError
from resumelens.models.analysis import AnalysisMetadata, AnalysisResult
from resumelens.services import documents
from conftest import PDF_BYTES

SAMPLE_RESULT = AnalysisResult(
    success=True,
    response="Solid experience section.",
    metadata=AnalysisMetadata(model="gemini-2.5-flash", timestamp="2025-01-01T00:00:00.000Z", file_type="PDF"),
)


@pytest.fixture(autouse=True)
def mock_svc(mocker):
    return mocker.patch("resumelens.mcp_server.gemini_service")


class TestAnalyzeText:
    def test_returns_dict(self, mock_svc):
        mock_svc.analyze_text.return_value = SAMPLE_RESULT
        from resumelens.mcp_server import analyze_text
        result = analyze_text.fn(prompt="Review my resume")
        assert result["success"] is True
        assert result["response"] == "Solid experience section."
        assert result["metadata"]["fileType"] == "PDF"
        mock_svc.analyze_text.assert_called_once_with("Review my resume")

    def test_blank_prompt(self, mock_svc):
        from resumelens.mcp_server import analyze_text
        result = analyze_text.fn(prompt="  ")
        assert result["error"] == "invalid_request"
        mock_svc.analyze_text.assert_not_called()

    def test_error_returns_dict_not_raises(self, mock_svc):
        mock_svc.analyze_text.side_effect = RateLimitError("API quota exceeded")
        from resumelens.mcp_server import analyze_text
        result = analyze_text.fn(prompt="hi")
        assert result["error"] == "rate_limit"
        assert "quota" in result["message"]

    def test_auth_error(self, mock_svc):
        mock_svc.analyze_text.side_effect = AuthenticationError("key missing")
        from resumelens.mcp_server import analyze_text
        assert analyze_text.fn(prompt="hi")["error"] == "auth_error"


class TestAnalyzeFile:
    def test_reads_file_and_guesses_type(self, mock_svc, tmp_path):
        path = tmp_path / "cv.pdf"
        path.write_bytes(PDF_BYTES)
        mock_svc.analyze_file.return_value = SAMPLE_RESULT
        from resumelens.mcp_server import analyze_file
        result = analyze_file.fn(path=str(path), prompt="Rate it")
        assert result["success"] is True
        mock_svc.analyze_file.assert_called_once_with(PDF_BYTES, "cv.pdf", "application/pdf", "Rate it", None)

    def test_missing_path(self, mock_svc, tmp_path):
        from resumelens.mcp_server import analyze_file
        result = analyze_file.fn(path=str(tmp_path / "nope.pdf"))
        assert result["error"] == "invalid_request"
        mock_svc.analyze_file.assert_not_called()

    def test_too_large(self, mock_svc, tmp_path):
        path = tmp_path / "cv.pdf"
        path.write_bytes(PDF_BYTES)
        mock_svc.analyze_file.side_effect = PayloadTooLargeError("File too large. Maximum size is 10MB")
        from resumelens.mcp_server import analyze_file
        assert analyze_file.fn(path=str(path))["error"] == "file_too_large"

    def test_provider_failure(self, mock_svc, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("hello")
        mock_svc.analyze_file.side_effect = IntegrationError("File analysis failed: boom")
        from resumelens.mcp_server import analyze_file
        assert analyze_file.fn(path=str(path))["error"] == "integration_error"


class TestCapabilities:
    def test_forwards_summary(self, mock_svc):
        mock_svc.capabilities_summary.return_value = {"model": "gemini-2.5-flash"}
        from resumelens.mcp_server import analyzer_capabilities
        assert analyzer_capabilities.fn() == {"model": "gemini-2.5-flash"}


class TestFileTypes:
    @pytest.mark.parametrize(
        "name, mime",
        [
            ("notes.md", "text/markdown"),
            ("cv.docx", "application/vnd.openxmlformats-officedocument.wordprocessingml.document"),
            ("photo.webp", "image/webp"),
        ],
    )
    def test_extension_mapping(self, mock_svc, tmp_path, name, mime):
        path = tmp_path / name
        path.write_bytes(b"content")
        mock_svc.analyze_file.return_value = SAMPLE_RESULT
        from resumelens.mcp_server import analyze_file
        analyze_file.fn(path=str(path))
        assert mock_svc.analyze_file.call_args.args[2] == mime


class TestSizeGuard:
    def test_oversized_file_not_read(self, mock_svc, tmp_path, mocker):
        path = tmp_path / "big.pdf"
        with open(path, "wb") as f:
            f.truncate(documents.MAX_FILE_SIZE + 1)
        read_bytes = mocker.spy(Path, "read_bytes")
        from resumelens.mcp_server import analyze_file
        result = analyze_file.fn(path=str(path))
        assert result["error"] == "file_too_large"
        assert read_bytes.call_count == 0
        mock_svc.analyze_file.assert_not_called()
