"""Conversation insights - analyst summary of a finished conversation."""

import json
import re
from typing import List, Sequence, Tuple

from .completion import CompletionService
from .prompt_builder import format_transcript


ANALYST_SYSTEM_PROMPT = (
    "You are an AI conversation analyst. Generate key insights from the conversation "
    "transcript provided. Identify main themes, key points of agreement/disagreement, "
    "and any interesting patterns. Format your response as an array of concise insights, "
    "each 1-2 sentences."
)

MAX_INSIGHTS = 5
INSIGHTS_TEMPERATURE = 0.7
INSIGHTS_MAX_TOKENS = 400

_NUMBERED_LINE = re.compile(r'^\s*\d+\s*[.)]\s*(.+)$')
_BULLET_PREFIX = re.compile(r'^\s*[-*•]+\s*')


def _clean(text: str) -> str:
    return text.strip().strip('"').strip()


def parse_insights(text: str, limit: int = MAX_INSIGHTS) -> List[str]:
    """
    Extract insights from free-form model output.

    A JSON array of strings is taken as-is. Otherwise numbered lines ("1.",
    "2)") win, and failing those every non-empty line counts with bullet
    markers stripped.

    Args:
        text: Raw completion text
        limit: Maximum number of insights

    Returns:
        At most ``limit`` insights
    """
    stripped = (text or "").strip()
    if not stripped:
        return []

    if stripped.startswith("["):
        try:
            items = json.loads(stripped)
        except json.JSONDecodeError:
            items = None
        if isinstance(items, list) and all(isinstance(item, str) for item in items):
            return [_clean(item) for item in items if _clean(item)][:limit]

    lines = [line for line in stripped.splitlines() if line.strip()]

    numbered = []
    for line in lines:
        match = _NUMBERED_LINE.match(line)
        if match:
            numbered.append(_clean(match.group(1)))
    if numbered:
        return [item for item in numbered if item][:limit]

    bulleted = [_clean(_BULLET_PREFIX.sub("", line)) for line in lines]
    return [item for item in bulleted if item][:limit]


def build_insights_prompt(topic: str, transcript: Sequence[Tuple[str, str]]) -> str:
    return (
        f"Topic: {topic}\n\n"
        f"Conversation:\n{format_transcript(transcript)}\n\n"
        f"Generate {MAX_INSIGHTS} key insights from this conversation."
    )


async def generate_insights(
    completion_service: CompletionService,
    topic: str,
    transcript: Sequence[Tuple[str, str]],
    model: str
) -> Tuple[List[str], str]:
    """
    Ask the analyst model for key insights.

    Returns:
        (insights, model that answered)

    Raises:
        CompletionError: The completion failed after the model fallback
    """
    result = await completion_service.complete_with_fallback(
        system_prompt=ANALYST_SYSTEM_PROMPT,
        user_prompt=build_insights_prompt(topic, transcript),
        model=model,
        temperature=INSIGHTS_TEMPERATURE,
        max_tokens=INSIGHTS_MAX_TOKENS
    )
    return parse_insights(result.text), result.model
