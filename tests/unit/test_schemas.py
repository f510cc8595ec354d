"""Unit tests for request validation, id parsing and question redaction"""
import uuid

import pytest
from pydantic import ValidationError as SchemaError

from quizhub.exceptions import InvalidIdFormatError
from quizhub.models import Question
from quizhub.schemas.common import Media, check_localized
from quizhub.schemas.question import QuestionCreate
from quizhub.schemas.session import ResponseSubmission
from quizhub.services.redaction import question_view
from quizhub.utils.ids import parse_id


class TestMedia:

    def test_image_requires_alt_text(self):
        with pytest.raises(SchemaError):
            Media(kind="image", url="https://cdn.example.com/a.png")

        media = Media(kind="image", url="https://cdn.example.com/a.png", alt_text="A triangle")
        assert media.alt_text == "A triangle"

    def test_audio_without_alt_text_is_fine(self):
        assert Media(kind="audio", url="https://cdn.example.com/a.mp3").alt_text is None

    def test_url_must_be_http(self):
        with pytest.raises(SchemaError):
            Media(kind="video", url="ftp://cdn.example.com/a.mp4")


class TestLocalizedText:

    def test_values_are_stripped_and_empty_entries_dropped(self):
        assert check_localized({"en": "  Hello ", "fr": " "}) == {"en": "Hello"}

    def test_unknown_language_rejected(self):
        with pytest.raises(ValueError):
            check_localized({"de": "Hallo"})

    def test_at_least_one_language_required(self):
        with pytest.raises(ValueError):
            check_localized({"en": "   "})


class TestQuestionCreate:

    def base(self, **overrides):
        payload = {
            "chapter_id": str(uuid.uuid4()),
            "text": {"en": "Is the sky blue?"},
            "kind": "true_false",
            "choices": [
                {"text": {"en": "true"}, "is_correct": True},
                {"text": {"en": "false"}, "is_correct": False},
            ],
        }
        payload.update(overrides)
        return payload

    def test_valid_true_false(self):
        question = QuestionCreate(**self.base())
        assert len(question.choices) == 2

    def test_true_false_needs_exactly_two_choices(self):
        choices = [
            {"text": {"en": "true"}, "is_correct": True},
            {"text": {"en": "false"}, "is_correct": False},
            {"text": {"en": "maybe"}, "is_correct": False},
        ]
        with pytest.raises(SchemaError):
            QuestionCreate(**self.base(choices=choices))

    def test_choices_need_a_correct_entry(self):
        choices = [
            {"text": {"en": "A"}, "is_correct": False},
            {"text": {"en": "B"}, "is_correct": False},
        ]
        with pytest.raises(SchemaError):
            QuestionCreate(**self.base(kind="multiple_choice", choices=choices))

    def test_formula_question_rejects_choices(self):
        with pytest.raises(SchemaError):
            QuestionCreate(**self.base(kind="numeric_formula", correct_answer_formula="4"))

    def test_formula_question_requires_formula(self):
        with pytest.raises(SchemaError):
            QuestionCreate(**self.base(kind="numeric_formula", choices=None))


class TestAnswerValues:

    @pytest.mark.parametrize("value", [True, False])
    def test_booleans_stay_booleans(self, value):
        assert ResponseSubmission(question_id="q", user_answer=value).user_answer is value

    def test_numbers_and_lists_kept(self):
        assert ResponseSubmission(question_id="q", user_answer=1).user_answer == 1
        assert type(ResponseSubmission(question_id="q", user_answer=1).user_answer) is int
        assert ResponseSubmission(question_id="q", user_answer=["a", "b"]).user_answer == ["a", "b"]


class TestIds:

    def test_parse_valid_ids(self):
        value = uuid.uuid4()
        assert parse_id(str(value)) == value
        assert parse_id(value) is value

    @pytest.mark.parametrize("value", ["abc", "", 123, None])
    def test_malformed_ids_rejected(self, value):
        with pytest.raises(InvalidIdFormatError):
            parse_id(value, "quiz ID")


class TestRedaction:

    def test_view_strips_answer_key(self):
        question = Question(
            id=uuid.uuid4(),
            text={"en": "2 + 2?"},
            kind="multiple_choice",
            difficulty="easy",
            choices=[{"text": {"en": "4"}, "is_correct": True, "media": None}],
            correct_answer_formula=None,
            explanation={"en": "Because."},
            tags=["math"],
        )

        view = question_view(question)

        assert "explanation" not in view
        assert "correct_answer_formula" not in view
        assert view["choices"] == [{"text": {"en": "4"}, "media": None}]

    def test_formula_view_has_no_choices(self):
        question = Question(
            id=uuid.uuid4(), text={"en": "2 + 2?"}, kind="numeric_formula",
            difficulty="easy", correct_answer_formula="4", tags=[],
        )

        view = question_view(question)

        assert "choices" not in view
        assert "correct_answer_formula" not in view
