from typing import List

from career_data_api.core.agents.llm_client import LLMClient, Message
from career_data_api.schemas import GenerationResult, TokenUsage


class FakeLLMClient(LLMClient):
    """Records every call and answers with canned text."""

    provider = "fake"

    def __init__(self, content: str = "Generated document", error: Exception | None = None) -> None:
        super().__init__(model="fake-model", max_tokens=1024)
        self.content = content
        self.error = error
        self.calls: List[dict] = []

    def _call_api(self, system_prompt: str, messages: List[Message]) -> GenerationResult:
        self.calls.append({"system_prompt": system_prompt, "messages": messages})
        if self.error is not None:
            raise self.error
        return GenerationResult(
            content=self.content,
            usage=TokenUsage(input_tokens=120, output_tokens=40),
        )
