"""Token counting and estimation utilities."""

import threading
from dataclasses import dataclass, field


# Rough estimate for token counting. Prompts mix prose with metadata and
# punctuation, so 3 chars per token is used rather than the usual 4.
CHARS_PER_TOKEN = 3


@dataclass
class TokenUsage:
    """Tracks token usage across LLM calls. Safe to share between worker threads."""

    input_tokens: int = 0
    output_tokens: int = 0
    llm_calls: int = 0
    _call_details: list[dict] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def add_call(self, input_tokens: int, output_tokens: int, description: str = "") -> None:
        """Record a single LLM call's token usage."""
        with self._lock:
            self.input_tokens += input_tokens
            self.output_tokens += output_tokens
            self.llm_calls += 1
            self._call_details.append(
                {
                    "call_number": self.llm_calls,
                    "input_tokens": input_tokens,
                    "output_tokens": output_tokens,
                    "description": description,
                }
            )

    @property
    def total_tokens(self) -> int:
        """Total tokens used across all calls."""
        return self.input_tokens + self.output_tokens

    def summary(self, detailed: bool = False) -> str:
        """Return a human-readable summary of token usage.

        With `detailed`, one line per call follows the totals.
        """
        lines = [
            "Token Usage Summary:",
            f"  LLM calls: {self.llm_calls}",
            f"  Input tokens: {self.input_tokens:,} (estimated)",
            f"  Output tokens: {self.output_tokens:,} (estimated)",
            f"  Total tokens: {self.total_tokens:,}",
        ]
        if detailed:
            with self._lock:
                details = list(self._call_details)
            for call in details:
                label = f" {call['description']}" if call["description"] else ""
                lines.append(
                    f"    #{call['call_number']}{label}: {call['input_tokens']:,} in / {call['output_tokens']:,} out"
                )
        return "\n".join(lines)


def estimate_tokens(text: str) -> int:
    """Estimate the number of tokens in a text string.

    This is a rough estimate based on character count.
    For more accurate counts, use a tokenizer specific to the model.
    """
    return len(text) // CHARS_PER_TOKEN
