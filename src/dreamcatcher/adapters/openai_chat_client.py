"""OpenAI-compatible chat completion client."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from dreamcatcher.services.completions import CompletionClient


@dataclass
class OpenAIChatClient(CompletionClient):
    """Completion client backed by the Chat Completions API."""

    client: AsyncOpenAI
    model: str = "gpt-3.5-turbo"
    temperature: float = 0.7

    @classmethod
    def create(  # noqa: PLR0913
        cls,
        api_key: str,
        base_url: str,
        model: str,
        temperature: float,
        timeout: float = 60.0,
    ) -> "OpenAIChatClient":
        """Create a chat client for an OpenAI-compatible endpoint."""
        return cls(
            client=AsyncOpenAI(
                api_key=api_key, base_url=base_url, timeout=timeout, max_retries=0
            ),
            model=model,
            temperature=temperature,
        )

    async def complete(self, system_prompt: str, user_message: str) -> str:
        """Send a system + user exchange and return the first choice's text."""
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_message},
            ],
            temperature=self.temperature,
        )
        if not response.choices:
            return ""
        content = response.choices[0].message.content
        return (content or "").strip()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()
