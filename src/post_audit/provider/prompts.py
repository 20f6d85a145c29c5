"""Prompt and response-schema construction for post evaluation."""

from __future__ import annotations

from typing import Any

from post_audit.config import AuditCriteria
from post_audit.schemas import Item

PROMPT_TEMPLATE = """\
You are evaluating social media posts for a {context}.

Analyze this post and determine if it should be flagged for removal based on these criteria:
- Forbidden words: {forbidden_words}
- Must be professional: {professional}
- Desired tone: {tone}

Post: "{text}"

Should this post be flagged? If yes, explain why and which criteria it violates.
"""


def build_prompt(item: Item, criteria: AuditCriteria) -> str:
    """Render the evaluation prompt for one post."""
    return PROMPT_TEMPLATE.format(
        context=criteria.context,
        forbidden_words=", ".join(criteria.forbidden_words) or "none",
        professional="yes" if criteria.check_professionalism else "no",
        tone=criteria.desired_tone,
        text=item.text,
    )


def build_response_schema() -> dict[str, Any]:
    """JSON schema the provider must follow in its reply."""
    return {
        "type": "object",
        "properties": {
            "should_flag": {
                "type": "boolean",
                "description": "Whether this post should be flagged for removal",
            },
            "rationale": {
                "type": "string",
                "description": "Why the post should be flagged or kept",
            },
            "matched_criteria": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Criteria the post matched",
            },
        },
        "required": ["should_flag", "rationale"],
    }
