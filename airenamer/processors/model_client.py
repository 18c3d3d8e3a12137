"""Chat model invocation for filename generation."""

import base64
import mimetypes
import time
from pathlib import Path

from langchain.chat_models.base import BaseChatModel
from langchain.messages import HumanMessage
from rich.console import Console
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from airenamer.errors import ModelInvocationError
from airenamer.tokens import TokenUsage, estimate_tokens


console = Console()

# Maximum attempts for rate-limited or failing requests
MAX_RETRY_ATTEMPTS = 3

DEFAULT_RETRY_WAIT = wait_exponential(multiplier=2, min=2, max=30)


def encode_image(path: Path) -> str:
    """Return the image at `path` as a base64 data URL."""
    mime_type = mimetypes.guess_type(path.name)[0] or "image/jpeg"
    data = base64.b64encode(path.read_bytes()).decode("ascii")
    return f"data:{mime_type};base64,{data}"


def response_text(response) -> str:
    """Flatten a chat model response into plain text."""
    content = getattr(response, "content", response)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type", "text") == "text":
                parts.append(str(block.get("text", "")))
        return "".join(parts)
    return "" if content is None else str(content)


class ModelClient:
    """Sends naming prompts, with optional images, to a LangChain chat model."""

    def __init__(
        self,
        llm: BaseChatModel,
        usage: TokenUsage | None = None,
        max_attempts: int = MAX_RETRY_ATTEMPTS,
        retry_wait: wait_base = DEFAULT_RETRY_WAIT,
        output: Console | None = None,
    ) -> None:
        self.llm = llm
        self.usage = usage if usage is not None else TokenUsage()
        self.max_attempts = max_attempts
        self.retry_wait = retry_wait
        self.console = output or console

    def _build_message(self, prompt: str, images: list[Path]) -> HumanMessage:
        if not images:
            return HumanMessage(content=prompt)

        content: list[str | dict] = [{"type": "text", "text": prompt}]
        for image in images:
            content.append({"type": "image_url", "image_url": {"url": encode_image(image)}})
        return HumanMessage(content=content)

    def generate(self, prompt: str, images: list[Path] | None = None, description: str = "") -> str:
        """Ask the model for a filename.

        Args:
            prompt: The assembled naming prompt.
            images: Image files (or extracted video frames) to attach.
            description: Label used in retry messages and usage records.

        Returns:
            The raw reply text.

        Raises:
            ModelInvocationError: If every attempt failed.
        """
        images = images or []
        messages = [self._build_message(prompt, images)]

        def _log_retry(retry_state) -> None:
            """Log retry attempt information."""
            wait_time = getattr(retry_state.next_action, "sleep", 0) if retry_state.next_action else 0
            self.console.print(
                f"  [yellow]Model error for {description or 'request'}. Retrying in {wait_time:.1f}s "
                f"(attempt {retry_state.attempt_number}/{self.max_attempts})...[/yellow]"
            )

        @retry(
            retry=retry_if_exception_type(Exception),
            stop=stop_after_attempt(self.max_attempts),
            wait=self.retry_wait,
            before_sleep=_log_retry,
            reraise=True,
        )
        def _invoke():
            return self.llm.invoke(messages)

        start_time = time.time()
        try:
            response = _invoke()
        except Exception as e:
            raise ModelInvocationError(f"Model call failed after {self.max_attempts} attempt(s): {e}") from e

        reply = response_text(response)
        self.usage.add_call(
            input_tokens=estimate_tokens(prompt),
            output_tokens=estimate_tokens(reply),
            description=f"{description} ({time.time() - start_time:.1f}s)" if description else "",
        )
        return reply
