"""
Quiz session engine

start:  snapshot the quiz manifest, embed redacted question views
submit: grade against the authoritative questions, weight onto the quiz's
        global score, flip is_completed atomically, notify the teachers
"""
import logging
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.orm import Session

from quizhub.config import settings
from quizhub.exceptions import (
    AlreadyCompletedError, AttemptsExceededError, ConflictError, ForbiddenError,
    InvalidQuestionError, InvalidQuizError, NotFoundError, QuizHubError, ValidationError
)
from quizhub.models import Quiz, QuizSession, User
from quizhub.models.enums import Language, NotificationType, QuizType, UserRole
from quizhub.repositories import (
    QuestionRepository, QuizRepository, QuizSessionRepository, TrainingRepository, UserRepository
)
from quizhub.schemas.session import ResponseSubmission, SessionSubmission
from quizhub.services.access_control import access_policy
from quizhub.services.grading_service import grading_service
from quizhub.services.notification_service import notification_service
from quizhub.services.redaction import question_view
from quizhub.utils.ids import parse_id

logger = logging.getLogger(__name__)


class QuizSessionService:
    """
    Service orchestrating quiz session lifecycle

    A session is created by start, mutated exactly once by submit and is
    read-only afterwards (administrative deletion aside).
    """

    # Start

    def start_session(
        self,
        db: Session,
        user_id: Any,
        quiz_id: Any,
        language: Language = Language.EN
    ) -> QuizSession:
        """
        Start a session for an authenticated user

        Raises:
            InvalidIdFormatError: malformed user or quiz id
            NotFoundError: user or quiz does not exist
            ForbiddenError: student starting an unpublished quiz that is not their own revision quiz
            AttemptsExceededError: allowed attempts already used
            InvalidQuizError: manifest yields no points
            ConflictError: a concurrent start took the same attempt number
        """
        user_uuid = parse_id(user_id, "user ID")
        quiz_uuid = parse_id(quiz_id, "quiz ID")

        user = UserRepository(db).find_by_id(user_uuid)
        if not user:
            raise NotFoundError("User not found.")

        quiz = QuizRepository(db).find_by_id(quiz_uuid)
        if not quiz:
            raise NotFoundError("Quiz not found.")

        is_own_revision = quiz.creator_id == user.id and quiz.quiz_type == QuizType.REVISION.value
        if user.role == UserRole.STUDENT.value and not quiz.is_published and not is_own_revision:
            raise ForbiddenError("Quiz is not published or not accessible to you.")

        return self._open_session(db, quiz, language, user_id=user.id)

    def start_guest_session(
        self,
        db: Session,
        guest_id: str,
        guest_name: str,
        quiz_id: Any,
        language: Language = Language.EN
    ) -> QuizSession:
        """Start a session for an unauthenticated player on a public, published quiz"""
        quiz_uuid = parse_id(quiz_id, "quiz ID")
        guest_id = (guest_id or "").strip()
        guest_name = (guest_name or "").strip()
        if not guest_id or not guest_name:
            raise ValidationError("Guest id and guest name are required.")

        quiz = QuizRepository(db).find_by_id(quiz_uuid)
        if not quiz or not (quiz.is_public and quiz.is_published):
            raise NotFoundError("Public quiz not found or not accessible.")

        return self._open_session(db, quiz, language, guest_id=guest_id, guest_name=guest_name)

    def _open_session(
        self,
        db: Session,
        quiz: Quiz,
        language: Language,
        user_id: Optional[UUID] = None,
        guest_id: Optional[str] = None,
        guest_name: Optional[str] = None
    ) -> QuizSession:
        repository = QuizSessionRepository(db)
        identity = user_id or f"guest:{guest_id}"

        prior_attempts = repository.count_attempts(quiz.id, user_id=user_id, guest_id=guest_id)
        if quiz.allowed_attempts is not None and prior_attempts >= quiz.allowed_attempts:
            logger.warning(f"Attempt cap reached for {identity} on quiz {quiz.id} ({quiz.allowed_attempts})")
            raise AttemptsExceededError(
                f"You have exceeded the maximum number of allowed attempts ({quiz.allowed_attempts}) for this quiz."
            )

        responses, max_possible_score = self._snapshot_manifest(db, quiz)
        if max_possible_score <= 0:
            raise InvalidQuizError("Quiz has no valid questions or question scores defined.")

        session = QuizSession(
            user_id=user_id,
            guest_id=guest_id,
            guest_name=guest_name,
            quiz_id=quiz.id,
            language=Language(language).value,
            attempt_number=prior_attempts + 1,
            responses=responses,
            max_possible_score=max_possible_score,
            quiz_global_score=quiz.global_score,
            total_score_earned=0.0,
            final_calculated_score=0.0,
            duration_seconds=0,
            is_completed=False,
            pass_status=None,
        )

        try:
            session = repository.create(session)
        except ConflictError as e:
            logger.warning(f"Concurrent start for {identity} on quiz {quiz.id}, attempt {prior_attempts + 1}")
            raise ConflictError("Another attempt of this quiz was started at the same time. Please retry.") from e

        logger.info(
            f"Session started: {session.id} quiz={quiz.id} identity={identity} "
            f"attempt={session.attempt_number} max={max_possible_score} global={quiz.global_score}"
        )
        return session

    def _snapshot_manifest(self, db: Session, quiz: Quiz):
        """
        Dereference manifest questions into response placeholders

        Returns:
            Tuple of (responses, max_possible_score); entries whose question
            no longer exists are skipped
        """
        entries = quiz.questions or []
        question_ids = [parse_id(entry["question_id"], "question ID") for entry in entries]
        questions = {question.id: question for question in QuestionRepository(db).find_by_ids(question_ids)}

        responses: List[Dict[str, Any]] = []
        max_possible_score = 0.0

        for question_id, entry in zip(question_ids, entries):
            question = questions.get(question_id)
            if question is None:
                logger.warning(f"Question {question_id} missing for quiz {quiz.id}; skipped")
                continue

            point_value = float(entry.get("score", 1))
            max_possible_score += point_value
            responses.append({
                "question_id": str(question_id),
                "question": question_view(question),
                "point_value": point_value,
                "user_answer": None,
                "is_correct": False,
                "score_earned": 0.0,
                "time_taken_seconds": 0,
            })

        return responses, max_possible_score

    # Submit

    def submit_session(
        self,
        db: Session,
        session_id: Any,
        submission: SessionSubmission,
        requesting_user_id: Any
    ) -> QuizSession:
        """
        Grade and complete a session owned by an authenticated user

        Raises:
            NotFoundError: session (or one of its questions) does not exist
            ForbiddenError: requester does not own the session
            AlreadyCompletedError: session was already submitted
            ValidationError: negative duration
            InvalidQuestionError: answer for a question outside the manifest
        """
        session_uuid = parse_id(session_id, "quiz session ID")
        requester_uuid = parse_id(requesting_user_id, "user ID")
        submitted = self._parse_submission(submission)

        session = self._require_session(db, session_uuid)
        access_policy.ensure_session_owner(session, requester_uuid)

        return self._grade_and_complete(db, session, submitted, submission.duration_seconds)

    def submit_guest_session(
        self,
        db: Session,
        session_id: Any,
        guest_id: str,
        submission: SessionSubmission
    ) -> QuizSession:
        session_uuid = parse_id(session_id, "quiz session ID")
        submitted = self._parse_submission(submission)

        session = self._require_session(db, session_uuid)
        access_policy.ensure_guest_owner(session, (guest_id or "").strip())

        return self._grade_and_complete(db, session, submitted, submission.duration_seconds)

    def _parse_submission(self, submission: SessionSubmission) -> List[Tuple[str, ResponseSubmission]]:
        """Id format checks that need no storage round-trip"""
        return [
            (str(parse_id(item.question_id, "question ID")), item)
            for item in submission.responses
        ]

    def _grade_and_complete(
        self,
        db: Session,
        session: QuizSession,
        submitted: List[Tuple[str, ResponseSubmission]],
        duration_seconds: int
    ) -> QuizSession:
        if session.is_completed:
            raise AlreadyCompletedError("Quiz session already completed.")
        if duration_seconds is None or duration_seconds < 0:
            raise ValidationError("Invalid duration provided.")

        manifest = {entry["question_id"] for entry in session.responses}
        answers: Dict[str, ResponseSubmission] = {}
        for question_id, item in submitted:
            if question_id not in manifest:
                raise InvalidQuestionError(
                    f"Question with ID {question_id} is not part of this quiz or is invalid."
                )
            if question_id in answers:
                raise InvalidQuestionError(f"Question with ID {question_id} was answered more than once.")
            answers[question_id] = item

        # Answer keys are read fresh here and nowhere else
        questions = {
            str(question.id): question
            for question in QuestionRepository(db).find_by_ids([UUID(question_id) for question_id in answers])
        }
        missing = [question_id for question_id in answers if question_id not in questions]
        if missing:
            raise NotFoundError(f"Question(s) no longer available: {', '.join(missing)}")

        graded: List[Dict[str, Any]] = []
        for entry in session.responses:
            question_id = entry["question_id"]
            answer = answers.get(question_id)
            if answer is None:
                graded.append(self._graded_entry(entry, None, False, 0.0, 0))
                continue

            is_correct, score_earned = grading_service.score_response(
                questions[question_id], answer.user_answer, session.language, entry["point_value"]
            )
            graded.append(
                self._graded_entry(entry, answer.user_answer, is_correct, score_earned, answer.time_taken_seconds)
            )

        total, final, pass_status = grading_service.aggregate(
            (entry["score_earned"] for entry in graded),
            session.max_possible_score,
            session.quiz_global_score,
        )

        repository = QuizSessionRepository(db)
        completed = repository.complete(session.id, {
            "responses": graded,
            "total_score_earned": total,
            "final_calculated_score": final,
            "duration_seconds": duration_seconds,
            "pass_status": pass_status.value,
        })
        if not completed:
            logger.warning(f"Concurrent submission lost for session {session.id}")
            raise AlreadyCompletedError("Quiz session already completed.")

        session = repository.refresh(session)
        logger.info(
            f"Session graded: {session.id} total={total}/{session.max_possible_score} "
            f"final={final:.2f}/{session.quiz_global_score} status={pass_status.value}"
        )

        self._notify_graded(db, session)
        return session

    def _graded_entry(
        self,
        entry: Dict[str, Any],
        user_answer: Any,
        is_correct: bool,
        score_earned: float,
        time_taken_seconds: int
    ) -> Dict[str, Any]:
        # The redacted view is dropped; only the question reference is kept
        return {
            "question_id": entry["question_id"],
            "point_value": entry["point_value"],
            "user_answer": user_answer,
            "is_correct": is_correct,
            "score_earned": score_earned,
            "time_taken_seconds": time_taken_seconds,
        }

    def _notify_graded(self, db: Session, session: QuizSession) -> None:
        """Tell the quiz creator and the training's teachers; never fails the submit"""
        try:
            quiz = QuizRepository(db).find_by_id(session.quiz_id)
            if quiz is None:
                return

            recipients = [quiz.creator_id]
            training = TrainingRepository(db).find_by_id(quiz.training_id)
            if training is not None:
                recipients.extend(teacher_id for teacher_id in training.teacher_ids if teacher_id not in recipients)

            student_name = session.guest_name
            if session.user_id is not None:
                student = UserRepository(db).find_by_id(session.user_id)
                student_name = student.display_name if student else "unknown"

            title = quiz.title.get(settings.DEFAULT_LANGUAGE) or next(iter(quiz.title.values()), "")
            message = (
                f'New results are available for quiz "{title}". '
                f"Student {student_name} has completed their session."
            )
        except QuizHubError as e:
            logger.error(f"Could not prepare grading notifications for session {session.id}: {e.message}")
            return

        for recipient_id in recipients:
            notification_service.notify(
                db,
                recipient_id,
                NotificationType.QUIZ_GRADED,
                message,
                related_entity_id=session.id,
                related_entity_type="QuizSession",
            )

    # Reads and deletion

    def list_sessions(
        self,
        db: Session,
        requester: User,
        filters: Optional[Dict[str, Any]] = None,
        page: int = 1,
        limit: int = 10
    ) -> List[QuizSession]:
        """Sessions visible to the requester, most recent first"""
        query_filters: Dict[str, Any] = {}
        filters = filters or {}

        if filters.get("quiz_id") is not None:
            query_filters["quiz_id"] = parse_id(filters["quiz_id"], "quiz ID")
        if filters.get("user_id") is not None:
            target_id = parse_id(filters["user_id"], "user ID")
            if requester.role == UserRole.TEACHER.value and not UserRepository(db).find_by_id(target_id):
                raise NotFoundError("Target user not found.")
            query_filters["user_id"] = target_id
        if filters.get("is_completed") is not None:
            query_filters["is_completed"] = bool(filters["is_completed"])

        clauses = access_policy.session_visibility_clauses(db, requester)
        return QuizSessionRepository(db).find_many(
            query_filters, *clauses, page=page, limit=limit, order_by=QuizSession.quiz_date.desc()
        )

    def get_session(self, db: Session, session_id: Any, requester: User) -> QuizSession:
        session = self._require_session(db, parse_id(session_id, "quiz session ID"))
        access_policy.ensure_can_view_session(db, requester, session)
        return session

    def delete_session(self, db: Session, session_id: Any, requester: User) -> Dict[str, str]:
        session = self._require_session(db, parse_id(session_id, "quiz session ID"))
        access_policy.ensure_can_delete_session(requester, session)

        QuizSessionRepository(db).delete(session)
        logger.info(f"Session deleted: {session_id} by {requester.id}")
        return {"message": "Quiz session deleted successfully."}

    def _require_session(self, db: Session, session_id: UUID) -> QuizSession:
        session = QuizSessionRepository(db).find_by_id(session_id)
        if not session:
            raise NotFoundError("Quiz session not found.")
        return session


# Global instance
quiz_session_service = QuizSessionService()
