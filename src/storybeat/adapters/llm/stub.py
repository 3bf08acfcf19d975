"""Stub LLM provider for testing."""

import re

from storybeat.adapters.llm.base import LLMMessage, LLMProvider, LLMResponse
from storybeat.logging import get_logger

logger = get_logger(__name__)

# Sentence skeletons the stub fills with the requested topic
SCRIPT_SENTENCES = [
    "Nobody expected {topic} to matter this much.",
    "It started quietly, with a detail most people overlooked.",
    "Then the questions began to pile up.",
    "Who was really behind {topic}, and why did it happen when it did?",
    "The records tell part of the story.",
    "The people who were there tell the rest.",
    "Each account adds a piece that the others leave out.",
    "By the end, the picture is clearer than anyone wanted it to be.",
    "And {topic} still has one more surprise left.",
    "Stay with us, because the ending changes everything.",
]


class StubLLMProvider(LLMProvider):
    """Stub provider that returns a deterministic narration script.

    Args:
        fail_with: If set, every completion raises RuntimeError with this message
    """

    def __init__(self, fail_with: str | None = None) -> None:
        self.fail_with = fail_with

    @property
    def name(self) -> str:
        return "stub"

    async def complete(
        self,
        messages: list[LLMMessage],
        temperature: float = 0.7,  # noqa: ARG002
        max_tokens: int = 4096,  # noqa: ARG002
    ) -> LLMResponse:
        """Return a mock script mentioning the topic found in the prompt."""
        logger.info("stub_llm_complete", message_count=len(messages))

        if self.fail_with:
            raise RuntimeError(self.fail_with)

        user_message = ""
        for msg in reversed(messages):
            if msg.role == "user":
                user_message = msg.content
                break

        match = re.search(r"^Topic:\s*(.+)$", user_message, flags=re.MULTILINE)
        topic = match.group(1).strip() if match else "this story"
        content = " ".join(s.format(topic=topic) for s in SCRIPT_SENTENCES)

        return LLMResponse(
            content=content,
            model="stub-model",
            usage={
                "prompt_tokens": len(user_message.split()),
                "completion_tokens": len(content.split()),
                "total_tokens": len(user_message.split()) + len(content.split()),
            },
            finish_reason="stop",
        )

    async def health_check(self) -> bool:
        """Stub provider is always healthy."""
        return True
