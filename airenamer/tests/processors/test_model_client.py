"""Unit tests for the chat model client."""

import io
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from rich.console import Console
from tenacity import wait_none

from airenamer.errors import ModelInvocationError
from airenamer.processors.model_client import ModelClient, encode_image, response_text


@pytest.fixture
def output():
    return Console(file=io.StringIO(), force_terminal=False)


def make_client(llm, output, max_attempts=3):
    return ModelClient(llm=llm, max_attempts=max_attempts, retry_wait=wait_none(), output=output)


class TestResponseText:
    """Tests for response_text."""

    def test_string_content(self):
        assert response_text(MagicMock(content="budget-review")) == "budget-review"

    def test_content_blocks(self):
        response = MagicMock(
            content=[
                {"type": "text", "text": "budget"},
                {"type": "reasoning", "text": "ignored"},
                "-review",
            ]
        )

        assert response_text(response) == "budget-review"

    def test_none_content(self):
        assert response_text(MagicMock(content=None)) == ""


def test_encode_image(tmp_path: Path):
    image = tmp_path / "frame-001.png"
    image.write_bytes(b"\x89PNG")

    assert encode_image(image) == "data:image/png;base64,iVBORw=="


class TestModelClient:
    """Tests for ModelClient.generate."""

    def test_text_prompt(self, output):
        llm = MagicMock()
        llm.invoke.return_value = MagicMock(content="Q3 Budget Review")
        client = make_client(llm, output)

        reply = client.generate("Generate filename:\nContent:\nbudget", description="report.txt")

        assert reply == "Q3 Budget Review"
        messages = llm.invoke.call_args[0][0]
        assert len(messages) == 1
        assert messages[0].content == "Generate filename:\nContent:\nbudget"
        assert client.usage.llm_calls == 1
        assert client.usage.input_tokens > 0

    def test_images_attached_as_data_urls(self, tmp_path: Path, output):
        """Test that images become image_url blocks after the text block."""
        frame = tmp_path / "frame-001.jpg"
        frame.write_bytes(b"jpeg-bytes")
        llm = MagicMock()
        llm.invoke.return_value = MagicMock(content="Beach Sunset")
        client = make_client(llm, output)

        client.generate("Generate filename:", images=[frame])

        content = llm.invoke.call_args[0][0][0].content
        assert content[0] == {"type": "text", "text": "Generate filename:"}
        assert content[1]["type"] == "image_url"
        assert content[1]["image_url"]["url"].startswith("data:image/jpeg;base64,")

    def test_retries_then_succeeds(self, output):
        llm = MagicMock()
        llm.invoke.side_effect = [RuntimeError("rate limited"), MagicMock(content="Roadmap")]
        client = make_client(llm, output)

        assert client.generate("prompt", description="roadmap.md") == "Roadmap"
        assert llm.invoke.call_count == 2
        assert "Retrying" in output.file.getvalue()
        assert "roadmap.md" in output.file.getvalue()

    def test_raises_after_all_attempts(self, output):
        """Test that persistent failures surface as ModelInvocationError."""
        llm = MagicMock()
        llm.invoke.side_effect = RuntimeError("service unavailable")
        client = make_client(llm, output, max_attempts=2)

        with pytest.raises(ModelInvocationError, match="service unavailable"):
            client.generate("prompt")

        assert llm.invoke.call_count == 2
        assert client.usage.llm_calls == 0
