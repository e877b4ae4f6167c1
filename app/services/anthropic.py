"""Anthropic Claude SDK wrapper service.

Provides a singleton AsyncAnthropic client used as a plain text completion
service by the tutor.
"""

from anthropic import AsyncAnthropic

from app.config import settings


# Singleton client instance
_client: AsyncAnthropic | None = None


def get_client() -> AsyncAnthropic:
    """
    Get or create the singleton AsyncAnthropic client.

    Returns:
        The shared AsyncAnthropic client instance.
    """
    global _client
    if _client is None:
        _client = AsyncAnthropic(api_key=settings.anthropic_api_key)
    return _client


async def generate_text(
    messages: list[dict],
    system_prompt: str | None = None,
    model: str | None = None,
    max_tokens: int = 2048,
    temperature: float = 0.7,
) -> str:
    """
    Generate a complete text response from Claude.

    Args:
        messages: List of message dicts with 'role' and 'content' keys.
        system_prompt: Optional system prompt for context.
        model: Claude model to use; defaults to the configured tutor model.
        max_tokens: Maximum tokens in the response.
        temperature: Sampling temperature.

    Returns:
        The concatenated text blocks of the response.
    """
    client = get_client()
    response = await client.messages.create(
        model=model or settings.claude_model,
        max_tokens=max_tokens,
        temperature=temperature,
        system=system_prompt or "",
        messages=messages,
    )
    return "".join(block.text for block in response.content if block.type == "text")


async def close_client() -> None:
    """
    Close the singleton client and release resources.

    Should be called during application shutdown for graceful cleanup.
    """
    global _client
    if _client is not None:
        await _client.close()
        _client = None
