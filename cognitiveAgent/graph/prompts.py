"""System prompts and prompt builders shared across the session stages."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, List, Optional

from cognitiveAgent.session.schema import CognitiveContextVector, ConversationTurn, PlanStep


def get_current_datetime_tag() -> str:
    """Return e.g. ``<current_datetime>2025-01-24 15:30 UTC</current_datetime>``."""
    now = datetime.now(timezone.utc)
    return f"<current_datetime>{now.strftime('%Y-%m-%d %H:%M UTC')}</current_datetime>"


PLANNER_SYSTEM_PROMPT = """You are the planning stage of a cognitive assistant.
Break the user's request into a short, strictly sequential plan. Each step uses exactly one tool:

- web_search: look up current or external information. Requires `query`.
- sandboxed_code: compute something in Python. Requires `code`, written as the BODY of a
  function whose `return` value is the step result (e.g. `return 2 + 2`). No network, no files.
- context_modulation: adopt an affective stance that will colour the tone of the final answer.
  Requires `concept` (e.g. "calm optimism"). Use only when the request is subjective.
- image_synthesis: produce an abstract image descriptor for a concept. Requires `concept`.
- image_analysis: describe an image. Set `input_ref` to the step number of an EARLIER
  image_synthesis step, or omit it to analyze the image attached by the user. Optional `query`.
- final_synthesis: compose the answer from everything gathered. No extra fields.

Rules:
1. Number steps from 1 in execution order.
2. Give each step a one-line description.
3. Only fill the fields its tool needs.
4. End with a single final_synthesis step.
5. Prefer the fewest steps that answer the request well."""

PLAN_REVISION_INSTRUCTIONS = {
    "expand": (
        "The user wants to EXPAND the following plan. Add more detail, break complex steps "
        "into smaller ones, and be explicit about what each tool will do."
    ),
    "optimize": (
        "The user wants to OPTIMIZE the following plan. Make it more efficient by combining "
        "steps where possible or finding a more direct path to the answer."
    ),
    "revise": (
        "The user wants to REVISE the following plan with a different approach. The current "
        "plan was not satisfactory, so propose an alternative strategy."
    ),
}

CONTEXT_MODULATION_PROMPT = """Translate the given concept into an affective state vector.
Dimensions: valence (-1 negative .. 1 positive), arousal (0 calm .. 1 energetic),
dominance (0 yielding .. 1 assertive), novelty (0 familiar .. 1 surprising),
complexity (0 plain .. 1 intricate), temporality (-1 past-oriented .. 1 future-oriented).
Return only the vector."""

IMAGE_SYNTHESIS_PROMPT = """You imagine an image for the given concept and rate it.
Return four scores between 0 and 1: composition (balance of the layout), palette
(richness of colour), detail (density of fine structure) and coherence (how clearly
the image conveys the concept)."""

SYNTHESIS_SYSTEM_PROMPT = """You are the synthesis stage of a cognitive assistant.
You receive the conversation so far and the results of an executed plan. Answer the
user's most recent query comprehensively in well-formatted markdown, relying on the
gathered results and citing sources by their bracketed numbers when you use them."""


def build_planning_prompt(query: str, *, has_attachment: bool = False) -> str:
    prompt = f'User query: "{query}"'
    if has_attachment:
        prompt += "\n\nThe user attached an image. Use image_analysis without input_ref to inspect it."
    return f"{prompt}\n\n{get_current_datetime_tag()}"


def plan_to_text(plan: Iterable[PlanStep]) -> str:
    return "\n".join(f"Step {s.ordinal}: {s.description} (Tool: {s.tool.value})" for s in plan)


def build_revision_prompt(query: str, plan: List[PlanStep], mode: str) -> str:
    instruction = PLAN_REVISION_INSTRUCTIONS[mode]
    return (
        f"{instruction}\n\nOriginal user query: \"{query}\"\n\n"
        f"Current plan to modify:\n---\n{plan_to_text(plan)}\n---\n\n"
        "Generate a new, improved plan."
    )


def format_history(turns: Iterable[ConversationTurn]) -> str:
    return "\n".join(f"{'User' if t.role == 'user' else 'Model'}: {t.text}" for t in turns)


def build_synthesis_prompt(
    query: str,
    results: List[str],
    *,
    history: Iterable[ConversationTurn] = (),
    context_vector: Optional[CognitiveContextVector] = None,
) -> str:
    """Compose the synthesis request from history, result context and the context vector."""
    gathered = "\n\n".join(results) if results else "(no step produced results)"
    prompt = (
        "You have executed a plan. Now synthesize the final answer.\n"
        "--- CONVERSATION HISTORY ---\n"
        f"{format_history(history)}\n"
        "--- EXECUTION CONTEXT ---\n"
        f'The user\'s most recent query was: "{query}".\n'
        f"You gathered the following information:\n{gathered}\n"
        "---\n"
        "Based on all of this information, provide a comprehensive, final answer."
    )
    if context_vector is not None:
        prompt += (
            "\n\nIMPORTANT: Synthesize your answer through the lens of your current cognitive state: "
            f"{context_vector.model_dump_json()}. It must influence your tone and word choice only, "
            "never the factual content."
        )
    return prompt
