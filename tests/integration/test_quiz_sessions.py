"""Integration tests for the quiz session lifecycle against an in-memory database"""
import uuid

import pytest

from quizhub.exceptions import (
    AlreadyCompletedError, AttemptsExceededError, ForbiddenError, InvalidIdFormatError,
    InvalidQuestionError, InvalidQuizError, NotFoundError, StorageUnavailableError, ValidationError
)
from quizhub.models import Notification, QuizSession
from quizhub.repositories import NotificationRepository, QuizSessionRepository
from quizhub.schemas.session import QuizSessionResponse, ResponseSubmission, SessionSubmission
from quizhub.services.quiz_session_service import quiz_session_service


def submission(answers, duration=120):
    """answers: list of (question, user_answer)"""
    return SessionSubmission(
        responses=[
            ResponseSubmission(question_id=str(question.id), user_answer=answer, time_taken_seconds=10)
            for question, answer in answers
        ],
        duration_seconds=duration,
    )


@pytest.fixture
def four_questions(classroom, make_question):
    return [make_question(classroom["chapter"]) for _ in range(4)]


@pytest.fixture
def quiz(classroom, four_questions, make_quiz):
    return make_quiz(classroom["training"], classroom["teacher"], four_questions, global_score=20)


class TestStartSession:

    def test_snapshot_is_redacted(self, db, classroom, make_question, make_quiz):
        questions = [
            make_question(classroom["chapter"]),
            make_question(classroom["chapter"], kind="numeric_formula", formula="42"),
        ]
        quiz = make_quiz(classroom["training"], classroom["teacher"], questions, scores=[2, 3])

        session = quiz_session_service.start_session(db, classroom["student"].id, quiz.id)

        assert session.attempt_number == 1
        assert session.is_completed is False
        assert session.pass_status is None
        assert session.max_possible_score == 5
        assert session.quiz_global_score == 20
        assert [entry["point_value"] for entry in session.responses] == [2, 3]
        for entry in session.responses:
            view = entry["question"]
            assert "correct_answer_formula" not in view
            assert "explanation" not in view
            for choice in view.get("choices", []):
                assert "is_correct" not in choice

        # The public representation validates with the embedded views
        assert QuizSessionResponse.model_validate(session).responses[0].question is not None

    def test_attempt_numbers_increase(self, db, classroom, quiz):
        first = quiz_session_service.start_session(db, classroom["student"].id, quiz.id)
        second = quiz_session_service.start_session(db, classroom["student"].id, str(quiz.id))

        assert (first.attempt_number, second.attempt_number) == (1, 2)

    def test_attempt_cap(self, db, classroom, four_questions, make_quiz):
        quiz = make_quiz(classroom["training"], classroom["teacher"], four_questions, allowed_attempts=1)
        quiz_session_service.start_session(db, classroom["student"].id, quiz.id)

        with pytest.raises(AttemptsExceededError):
            quiz_session_service.start_session(db, classroom["student"].id, quiz.id)

    def test_student_cannot_start_unpublished_quiz(self, db, classroom, four_questions, make_quiz):
        quiz = make_quiz(classroom["training"], classroom["teacher"], four_questions, is_published=False)

        with pytest.raises(ForbiddenError):
            quiz_session_service.start_session(db, classroom["student"].id, quiz.id)

    def test_student_can_start_own_revision_quiz(self, db, classroom, four_questions, make_quiz):
        student = classroom["student"]
        quiz = make_quiz(classroom["training"], student, four_questions, quiz_type="revision", is_published=False)

        session = quiz_session_service.start_session(db, student.id, quiz.id)
        assert session.user_id == student.id

    def test_teacher_can_start_unpublished_quiz(self, db, classroom, four_questions, make_quiz):
        quiz = make_quiz(classroom["training"], classroom["teacher"], four_questions, is_published=False)

        session = quiz_session_service.start_session(db, classroom["teacher"].id, quiz.id)
        assert session.is_completed is False

    def test_missing_questions_are_skipped(self, db, classroom, four_questions, make_quiz):
        quiz = make_quiz(classroom["training"], classroom["teacher"], four_questions[:2])
        quiz.questions = quiz.questions + [{"question_id": str(uuid.uuid4()), "score": 5.0}]
        db.commit()

        session = quiz_session_service.start_session(db, classroom["student"].id, quiz.id)

        assert len(session.responses) == 2
        assert session.max_possible_score == 2

    def test_zero_point_quiz_rejected(self, db, classroom, four_questions, make_quiz):
        quiz = make_quiz(classroom["training"], classroom["teacher"], four_questions[:2], scores=[0.0, 0.0])

        with pytest.raises(InvalidQuizError):
            quiz_session_service.start_session(db, classroom["student"].id, quiz.id)
        assert QuizSessionRepository(db).count() == 0

    def test_unknown_user_and_quiz(self, db, classroom, quiz):
        with pytest.raises(NotFoundError):
            quiz_session_service.start_session(db, uuid.uuid4(), quiz.id)
        with pytest.raises(NotFoundError):
            quiz_session_service.start_session(db, classroom["student"].id, uuid.uuid4())

    def test_malformed_ids(self, db, classroom):
        with pytest.raises(InvalidIdFormatError):
            quiz_session_service.start_session(db, classroom["student"].id, "not-a-uuid")


class TestSubmitSession:

    def test_three_of_four_passes(self, db, classroom, four_questions, quiz):
        session = quiz_session_service.start_session(db, classroom["student"].id, quiz.id)
        answers = [(question, "4") for question in four_questions[:3]] + [(four_questions[3], "5")]

        session = quiz_session_service.submit_session(db, session.id, submission(answers), classroom["student"].id)

        assert session.is_completed is True
        assert session.total_score_earned == 3
        assert session.final_calculated_score == pytest.approx(15)
        assert session.pass_status == "passed"
        assert session.duration_seconds == 120
        assert [entry["is_correct"] for entry in session.responses] == [True, True, True, False]
        assert all("question" not in entry for entry in session.responses)

    def test_two_of_four_fails(self, db, classroom, four_questions, quiz):
        session = quiz_session_service.start_session(db, classroom["student"].id, quiz.id)
        answers = [(question, "4") for question in four_questions[:2]] + [
            (question, "5") for question in four_questions[2:]
        ]

        session = quiz_session_service.submit_session(db, session.id, submission(answers), classroom["student"].id)

        assert session.final_calculated_score == pytest.approx(10)
        assert session.pass_status == "failed"

    def test_grading_ignores_submission_order(self, db, classroom, four_questions, quiz):
        student = classroom["student"]
        answers = [(four_questions[0], "4"), (four_questions[1], "5"), (four_questions[2], "4"), (four_questions[3], "4")]

        first = quiz_session_service.start_session(db, student.id, quiz.id)
        first = quiz_session_service.submit_session(db, first.id, submission(answers), student.id)
        second = quiz_session_service.start_session(db, student.id, quiz.id)
        second = quiz_session_service.submit_session(db, second.id, submission(list(reversed(answers))), student.id)

        assert first.responses == second.responses
        assert first.final_calculated_score == second.final_calculated_score
        assert [entry["question_id"] for entry in first.responses] == [str(q.id) for q in four_questions]

    def test_unanswered_questions_score_zero(self, db, classroom, four_questions, quiz):
        session = quiz_session_service.start_session(db, classroom["student"].id, quiz.id)
        answers = [(four_questions[0], "4"), (four_questions[2], "4")]

        session = quiz_session_service.submit_session(db, session.id, submission(answers), classroom["student"].id)

        assert len(session.responses) == 4
        assert session.responses[1]["user_answer"] is None
        assert session.responses[1]["score_earned"] == 0
        assert session.total_score_earned == 2

    def test_second_submission_rejected_and_results_kept(self, db, classroom, four_questions, quiz):
        student = classroom["student"]
        session = quiz_session_service.start_session(db, student.id, quiz.id)
        wrong = [(question, "5") for question in four_questions]
        right = [(question, "4") for question in four_questions]
        quiz_session_service.submit_session(db, session.id, submission(wrong), student.id)

        with pytest.raises(AlreadyCompletedError):
            quiz_session_service.submit_session(db, session.id, submission(right), student.id)

        stored = QuizSessionRepository(db).refresh(session)
        assert stored.total_score_earned == 0
        assert stored.pass_status == "failed"

    def test_conditional_completion_happens_once(self, db, classroom, quiz):
        session = quiz_session_service.start_session(db, classroom["student"].id, quiz.id)
        repository = QuizSessionRepository(db)

        assert repository.complete(session.id, {"duration_seconds": 1}) is True
        assert repository.complete(session.id, {"duration_seconds": 2}) is False
        assert repository.refresh(session).duration_seconds == 1

    def test_only_owner_can_submit(self, db, classroom, make_user, four_questions, quiz):
        session = quiz_session_service.start_session(db, classroom["student"].id, quiz.id)
        other = make_user("student")

        with pytest.raises(ForbiddenError):
            quiz_session_service.submit_session(db, session.id, submission([]), other.id)

    def test_question_outside_manifest(self, db, classroom, make_question, quiz):
        stranger = make_question(classroom["chapter"])
        session = quiz_session_service.start_session(db, classroom["student"].id, quiz.id)

        with pytest.raises(InvalidQuestionError):
            quiz_session_service.submit_session(
                db, session.id, submission([(stranger, "4")]), classroom["student"].id
            )
        assert QuizSessionRepository(db).refresh(session).is_completed is False

    def test_duplicate_answers_rejected(self, db, classroom, four_questions, quiz):
        session = quiz_session_service.start_session(db, classroom["student"].id, quiz.id)
        answers = [(four_questions[0], "4"), (four_questions[0], "5")]

        with pytest.raises(InvalidQuestionError):
            quiz_session_service.submit_session(db, session.id, submission(answers), classroom["student"].id)

    def test_negative_duration_rejected(self, db, classroom, quiz):
        session = quiz_session_service.start_session(db, classroom["student"].id, quiz.id)

        with pytest.raises(ValidationError):
            quiz_session_service.submit_session(db, session.id, submission([], duration=-1), classroom["student"].id)

    def test_malformed_question_id(self, db, classroom, quiz):
        session = quiz_session_service.start_session(db, classroom["student"].id, quiz.id)
        bad = SessionSubmission(
            responses=[ResponseSubmission(question_id="nope", user_answer="4")], duration_seconds=5
        )

        with pytest.raises(InvalidIdFormatError):
            quiz_session_service.submit_session(db, session.id, bad, classroom["student"].id)

    def test_unknown_session(self, db, classroom):
        with pytest.raises(NotFoundError):
            quiz_session_service.submit_session(db, uuid.uuid4(), submission([]), classroom["student"].id)

    def test_question_deleted_after_start(self, db, classroom, four_questions, quiz):
        session = quiz_session_service.start_session(db, classroom["student"].id, quiz.id)
        answers = submission([(four_questions[0], "4")])
        db.delete(four_questions[0])
        db.commit()

        with pytest.raises(NotFoundError):
            quiz_session_service.submit_session(db, session.id, answers, classroom["student"].id)

    def test_submit_uses_point_values_from_start(self, db, classroom, four_questions, quiz):
        session = quiz_session_service.start_session(db, classroom["student"].id, quiz.id)
        quiz.questions = [{"question_id": entry["question_id"], "score": 10.0} for entry in quiz.questions]
        db.commit()

        session = quiz_session_service.submit_session(
            db, session.id, submission([(q, "4") for q in four_questions]), classroom["student"].id
        )

        assert session.total_score_earned == 4
        assert session.final_calculated_score == pytest.approx(20)


class TestGradingNotifications:

    def test_creator_and_training_teachers_notified_once(self, db, classroom, make_user, four_questions, make_quiz):
        manager = make_user("manager", "Boss")
        quiz = make_quiz(classroom["training"], manager, four_questions)
        session = quiz_session_service.start_session(db, classroom["student"].id, quiz.id)

        quiz_session_service.submit_session(
            db, session.id, submission([(q, "4") for q in four_questions]), classroom["student"].id
        )

        notifications = NotificationRepository(db).find_many({"type": "quiz_graded"})
        assert sorted(n.recipient_id for n in notifications) == sorted([manager.id, classroom["teacher"].id])
        for notification in notifications:
            assert notification.related_entity_id == session.id
            assert notification.related_entity_type == "QuizSession"
            assert "Sam Student" in notification.message
            assert "Weekly check" in notification.message

    def test_creator_who_teaches_training_gets_one_notification(self, db, classroom, four_questions, quiz):
        session = quiz_session_service.start_session(db, classroom["student"].id, quiz.id)
        quiz_session_service.submit_session(
            db, session.id, submission([(four_questions[0], "4")]), classroom["student"].id
        )

        assert NotificationRepository(db).count({"recipient_id": classroom["teacher"].id}) == 1

    def test_notification_failure_does_not_fail_submit(self, db, classroom, four_questions, quiz, monkeypatch):
        def broken_create(self, entity):
            raise StorageUnavailableError("down")

        monkeypatch.setattr(NotificationRepository, "create", broken_create)
        session = quiz_session_service.start_session(db, classroom["student"].id, quiz.id)

        session = quiz_session_service.submit_session(
            db, session.id, submission([(q, "4") for q in four_questions]), classroom["student"].id
        )

        assert session.is_completed is True
        assert db.query(Notification).count() == 0


class TestSessionReads:

    def test_teacher_of_training_can_view(self, db, classroom, make_user, quiz):
        session = quiz_session_service.start_session(db, classroom["student"].id, quiz.id)
        outsider = make_user("teacher")

        assert quiz_session_service.get_session(db, session.id, classroom["teacher"]).id == session.id
        with pytest.raises(ForbiddenError):
            quiz_session_service.get_session(db, session.id, outsider)

    def test_student_sees_only_own_sessions(self, db, classroom, make_user, quiz):
        other = make_user("student")
        mine = quiz_session_service.start_session(db, classroom["student"].id, quiz.id)
        quiz_session_service.start_session(db, other.id, quiz.id)

        listed = quiz_session_service.list_sessions(db, classroom["student"])

        assert [session.id for session in listed] == [mine.id]
        with pytest.raises(ForbiddenError):
            quiz_session_service.get_session(db, mine.id, other)

    def test_listing_by_role(self, db, classroom, make_user, quiz):
        admin = make_user("admin")
        outsider = make_user("teacher")
        quiz_session_service.start_session(db, classroom["student"].id, quiz.id)
        quiz_session_service.start_session(db, classroom["student"].id, quiz.id)

        assert len(quiz_session_service.list_sessions(db, admin)) == 2
        assert len(quiz_session_service.list_sessions(db, classroom["teacher"])) == 2
        assert quiz_session_service.list_sessions(db, outsider) == []
        assert len(quiz_session_service.list_sessions(db, admin, {"is_completed": True})) == 0

    def test_teacher_filter_on_unknown_user(self, db, classroom):
        with pytest.raises(NotFoundError):
            quiz_session_service.list_sessions(db, classroom["teacher"], {"user_id": str(uuid.uuid4())})


class TestDeleteSession:

    def test_student_deletes_own_incomplete_session(self, db, classroom, quiz):
        session = quiz_session_service.start_session(db, classroom["student"].id, quiz.id)
        session_id = session.id

        result = quiz_session_service.delete_session(db, session_id, classroom["student"])

        assert "deleted" in result["message"]
        assert db.get(QuizSession, session_id) is None

    def test_completed_session_only_deleted_by_privileged(self, db, classroom, make_user, four_questions, quiz):
        student = classroom["student"]
        session = quiz_session_service.start_session(db, student.id, quiz.id)
        quiz_session_service.submit_session(db, session.id, submission([(four_questions[0], "4")]), student.id)

        with pytest.raises(ForbiddenError):
            quiz_session_service.delete_session(db, session.id, student)
        with pytest.raises(ForbiddenError):
            quiz_session_service.delete_session(db, session.id, classroom["teacher"])

        quiz_session_service.delete_session(db, session.id, make_user("admin"))
        assert QuizSessionRepository(db).count() == 0


class TestGuestSessions:

    @pytest.fixture
    def public_quiz(self, classroom, four_questions, make_quiz):
        return make_quiz(classroom["training"], classroom["teacher"], four_questions, is_public=True, allowed_attempts=2)

    def test_guest_round_trip(self, db, classroom, four_questions, public_quiz):
        session = quiz_session_service.start_guest_session(db, "guest-1", "Gina Guest", public_quiz.id)
        assert session.user_id is None

        session = quiz_session_service.submit_guest_session(
            db, session.id, "guest-1", submission([(q, "4") for q in four_questions])
        )

        assert session.pass_status == "passed"
        notification = NotificationRepository(db).find_many({"recipient_id": classroom["teacher"].id})[0]
        assert "Gina Guest" in notification.message

    def test_other_guest_cannot_submit(self, db, public_quiz):
        session = quiz_session_service.start_guest_session(db, "guest-1", "Gina", public_quiz.id)

        with pytest.raises(ForbiddenError):
            quiz_session_service.submit_guest_session(db, session.id, "guest-2", submission([]))

    def test_guest_attempts_counted_per_guest(self, db, public_quiz):
        for _ in range(2):
            quiz_session_service.start_guest_session(db, "guest-1", "Gina", public_quiz.id)

        with pytest.raises(AttemptsExceededError):
            quiz_session_service.start_guest_session(db, "guest-1", "Gina", public_quiz.id)
        assert quiz_session_service.start_guest_session(db, "guest-2", "Gus", public_quiz.id).attempt_number == 1

    def test_private_quiz_not_playable_by_guests(self, db, quiz):
        with pytest.raises(NotFoundError):
            quiz_session_service.start_guest_session(db, "guest-1", "Gina", quiz.id)
