"""Ad-hoc questions answered from the user's communications."""

from typing import Any

import structlog

from commsdigest.adapters.attrove import AttroveAdapter
from commsdigest.models import QueryResponse

logger = structlog.get_logger()

DEFAULT_QUERY = "important updates this week"

NO_ANSWER = (
    "No answer was generated. This may mean no relevant messages were found.\n"
    "Try connecting more integrations or using a different query."
)


def render_answer(question: str, response: QueryResponse) -> str:
    """Question, answer and how many messages the answer drew on."""
    lines = [f"Q: {question}", ""]
    lines.append(response.answer or NO_ANSWER)
    if response.used_message_ids:
        lines.append(f"\n(Based on {len(response.used_message_ids)} messages)")
    return "\n".join(lines)


async def ask(attrove: AttroveAdapter, question: str, log: Any = None) -> str:
    """Ask one question and render the answer."""
    log = log or logger
    question = question.strip() or DEFAULT_QUERY

    response = await attrove.query(question, include_sources=True)
    log.info("Answered query", sources=len(response.used_message_ids))
    return render_answer(question, response)
