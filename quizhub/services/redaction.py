"""
Redacted question views

Only whitelisted fields are copied, so correctness flags, the formula and
the explanation can never reach an in-progress session holder.
"""
from typing import Any, Dict

from quizhub.models import Question
from quizhub.models.enums import QuestionKind

CHOICE_KINDS = (QuestionKind.MULTIPLE_CHOICE.value, QuestionKind.TRUE_FALSE.value)


def question_view(question: Question) -> Dict[str, Any]:
    """JSON-ready redacted view of a question"""
    view = {
        "id": str(question.id),
        "text": dict(question.text or {}),
        "kind": question.kind,
        "difficulty": question.difficulty,
        "tags": list(question.tags or []),
        "media": question.media,
    }
    if question.kind in CHOICE_KINDS and question.choices:
        view["choices"] = [
            {"text": dict(choice.get("text") or {}), "media": choice.get("media")}
            for choice in question.choices
        ]
    return view
