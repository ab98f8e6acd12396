from __future__ import annotations

import logging

from groq import Groq

from .config import DEFAULT_RESEARCH_CONFIG, ResearchConfig
from .errors import GenerationError

logger = logging.getLogger(__name__)


def generate_text(
    prompt: str,
    *,
    max_tokens: int,
    config: ResearchConfig = DEFAULT_RESEARCH_CONFIG,
) -> str:
    """
    Send a single user message to Groq and return the trimmed reply text.

    Timeouts and retries are left to the Groq client defaults.
    """
    try:
        client = Groq(api_key=config.api_key or None)
        response = client.chat.completions.create(
            model=config.model,
            messages=[{"role": "user", "content": prompt}],
            max_tokens=max_tokens,
        )
    except Exception as exc:
        logger.error("Groq API call failed: %s", exc)
        raise GenerationError(str(exc)) from exc

    if not response.choices:
        raise GenerationError("Groq returned no choices")
    content = (response.choices[0].message.content or "").strip()
    logger.debug("Groq response: %s", content[:2000])
    return content
