"""Prompt construction for agent turns.

Everything here is pure: the same persona, topic and transcript always give
the same instruction text.
"""

from typing import List, Sequence, Tuple

from ..db.database_models.personality import AgentPersonalityDO


RESPONSE_STYLE_DIRECTIVES = {
    "brief": "Keep your reply short and to the point, favouring one sharp idea over several loose ones.",
    "detailed": "Give a thorough reply that explains your reasoning and supports it with specifics.",
    "poetic": "Use vivid imagery, metaphor and rhythm so your reply reads like lyrical prose.",
    "technical": "Use precise technical language and ground your reply in mechanisms and evidence.",
    "questioning": "Frame your reply around probing questions that push the discussion deeper.",
    "balanced": "Weigh several angles fairly and reach a measured position.",
}

DEFAULT_RESPONSE_STYLE = "balanced"

CLOSING_INSTRUCTION = (
    "Respond in 2-4 sentences in your distinctive voice. "
    "Do not address the other agents by name; share your own perspective."
)


def response_style_directive(style: str) -> str:
    """Map a response style to its instruction sentence; unknown styles read as balanced."""
    key = (style or DEFAULT_RESPONSE_STYLE).strip().lower()
    return RESPONSE_STYLE_DIRECTIVES.get(key, RESPONSE_STYLE_DIRECTIVES[DEFAULT_RESPONSE_STYLE])


def _join(items: Sequence[str]) -> str:
    return ", ".join(item.strip() for item in items if item and item.strip())


def format_transcript(prior_turns: Sequence[Tuple[str, str]]) -> str:
    """Render prior turns as one "<agentName>: <content>" line each."""
    return "\n".join(f"{agent_name}: {content}" for agent_name, content in prior_turns)


def build_prompt(
    persona: AgentPersonalityDO,
    topic: str,
    prior_turns: Sequence[Tuple[str, str]]
) -> str:
    """
    Assemble the instruction text for one agent turn.

    Args:
        persona: Agent personality taking the turn
        topic: Conversation topic
        prior_turns: Chronological (agent_name, content) pairs

    Returns:
        Instruction text to send as the user prompt
    """
    sections: List[str] = []

    identity = f"You are {persona.name}"
    if persona.description:
        identity += f", {persona.description.strip().rstrip('.')}"
    sections.append(identity + ".")

    traits = _join(persona.personality_traits)
    if traits:
        sections.append(f"Your defining personality traits: {traits}.")

    if persona.archetype:
        sections.append(f"Your archetype is {persona.archetype}; let it shape how you engage.")

    if persona.perspective:
        sections.append(f"Your worldview: {persona.perspective}")

    domains = _join(persona.knowledge_domains)
    specialties = _join(persona.specialties)
    if domains or specialties:
        expertise = []
        if domains:
            expertise.append(f"You are knowledgeable in {domains}.")
        if specialties:
            expertise.append(f"Your specialties are {specialties}.")
        sections.append(" ".join(expertise) + " Draw on this expertise where it is relevant.")

    quirks = _join(persona.quirks)
    if persona.speech_pattern or quirks:
        speech = []
        if persona.speech_pattern:
            speech.append(f"Your speech pattern: {persona.speech_pattern}.")
        if quirks:
            speech.append(f"Your quirks: {quirks}.")
        sections.append(" ".join(speech))

    if persona.voice_type or persona.temperament:
        voice = []
        if persona.voice_type:
            voice.append(f"Your voice is {persona.voice_type}.")
        if persona.temperament:
            voice.append(f"Your temperament is {persona.temperament}.")
        sections.append(" ".join(voice))

    sections.append(response_style_directive(persona.response_style))

    sections.append(f"Topic for discussion: {topic}")

    if prior_turns:
        sections.append("Conversation so far:\n" + format_transcript(prior_turns))
    else:
        sections.append("You are opening the discussion.")

    sections.append(CLOSING_INSTRUCTION)

    return "\n\n".join(sections)
