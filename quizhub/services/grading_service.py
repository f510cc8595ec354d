"""
Quiz grading service

Multiple choice / true-false: exact set match of choice texts (no partial credit)
Numeric formula: exact string match against the stored formula
"""
import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from quizhub.config import settings
from quizhub.models import Question
from quizhub.models.enums import PassStatus, QuestionKind

logger = logging.getLogger(__name__)


def answer_to_text(value: Any) -> str:
    """String form of a scalar answer; integral numbers lose their decimal point (4.0 -> "4")"""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def normalize_answer(value: Any) -> List[str]:
    """Normalize a text, list or number answer to a list of strings"""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [answer_to_text(item) for item in value]
    return [answer_to_text(value)]


class GradingService:
    """
    Service for grading quiz session responses

    Grading dispatches on the question kind, never on the runtime shape of
    the submitted answer.
    """

    PASS_THRESHOLD = 0.70  # share of the global score needed to pass

    def __init__(self, default_language: str = "en"):
        self.default_language = default_language

    def grade_answer(self, question: Question, user_answer: Any, language: str) -> bool:
        """
        Decide whether a single answer is correct

        Args:
            question: Authoritative question, answer key included
            user_answer: Submitted value (text, list of texts or number)
            language: Session language used to resolve choice texts
        """
        if question.kind in (QuestionKind.MULTIPLE_CHOICE.value, QuestionKind.TRUE_FALSE.value):
            return self._grade_choices(question, user_answer, language)
        if question.kind == QuestionKind.NUMERIC_FORMULA.value:
            return self._grade_formula(question, user_answer)

        logger.warning(f"Unsupported question kind '{question.kind}' for question {question.id}")
        return False

    def score_response(
        self,
        question: Question,
        user_answer: Any,
        language: str,
        point_value: float
    ) -> Tuple[bool, float]:
        """Return (is_correct, score_earned); a correct answer earns the full point value"""
        is_correct = self.grade_answer(question, user_answer, language)
        return is_correct, (point_value if is_correct else 0.0)

    def aggregate(
        self,
        scores: Iterable[float],
        max_possible_score: float,
        global_score: float
    ) -> Tuple[float, float, PassStatus]:
        """
        Weight earned points onto the quiz's global scale

        Returns:
            Tuple of (total_score_earned, final_calculated_score, pass_status)
        """
        total = float(sum(scores))

        if max_possible_score <= 0:
            return total, 0.0, PassStatus.FAILED

        # final / global == total / max; comparing the raw ratio avoids float drift
        ratio = total / max_possible_score
        final = ratio * global_score
        pass_status = PassStatus.PASSED if ratio >= self.PASS_THRESHOLD else PassStatus.FAILED

        return total, final, pass_status

    def _resolve(self, text: Optional[Dict[str, str]], language: str) -> Optional[str]:
        if not text:
            return None
        return text.get(language) or text.get(self.default_language)

    def _grade_choices(self, question: Question, user_answer: Any, language: str) -> bool:
        correct_texts = [
            self._resolve(choice.get("text"), language)
            for choice in question.choices or []
            if choice.get("is_correct")
        ]
        answers = normalize_answer(user_answer)

        if not correct_texts or len(answers) != len(correct_texts):
            return False
        return set(answers) == set(correct_texts)

    def _grade_formula(self, question: Question, user_answer: Any) -> bool:
        if question.correct_answer_formula is None or user_answer is None:
            return False
        if isinstance(user_answer, (list, tuple)):
            return False
        return answer_to_text(user_answer) == question.correct_answer_formula


# Global instance
grading_service = GradingService(default_language=settings.DEFAULT_LANGUAGE)
