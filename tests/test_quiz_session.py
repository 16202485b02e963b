import pytest

from courseconnect.modules.quiz import (
    AnswerType,
    InvalidTransition,
    QuizKind,
    QuizQuestion,
    QuizSession,
    SessionError,
    SessionStatus,
)


def _bank():
    return [
        QuizQuestion(question="2 + 2 = ?", answer="B", options=["3", "4", "5", "6"]),
        QuizQuestion(question="Capital of France?", answer="Paris"),
    ]


def _cards():
    return [
        QuizQuestion(question="Powerhouse of the cell?", answer="Mitochondria"),
        QuizQuestion(question="Formula of water?", answer="H₂O"),
        QuizQuestion(question="Largest planet?", answer="Jupiter"),
    ]


class TestQuestionBankQuiz:
    def test_full_run(self):
        quiz = QuizSession(topic="Mixed", questions=_bank())
        assert quiz.status == SessionStatus.NOT_STARTED

        result = quiz.submit_answer("b")
        assert quiz.status == SessionStatus.IN_PROGRESS
        assert result.is_correct is True
        assert result.user_answer == "4"
        assert result.correct_answer == "4"
        assert result.answer_type == AnswerType.MCQ

        quiz.next()
        result = quiz.submit_answer(" paris ")
        assert result.is_correct is True
        quiz.next()

        assert quiz.status == SessionStatus.REVIEWING
        summary = quiz.summary()
        assert summary.score == 2
        assert summary.percentage == 100
        assert summary.wrong_questions == []

    def test_score_counts_correct_results(self):
        quiz = QuizSession(topic="Mixed", questions=_bank())
        quiz.start()
        quiz.submit_answer("A")
        quiz.next()
        quiz.submit_answer("Paris")
        assert quiz.score == sum(1 for r in quiz.results if r.is_correct) == 1
        assert quiz.question_results() == ["incorrect", "correct"]
        assert quiz.wrong_questions == ["2 + 2 = ?"]

    def test_answer_type_fixed_for_question_bank(self):
        quiz = QuizSession(topic="Mixed", questions=_bank())
        with pytest.raises(InvalidTransition):
            quiz.set_answer_type(AnswerType.TEXT)

    def test_state_hides_answer_key(self):
        quiz = QuizSession(topic="Mixed", questions=_bank())
        state = quiz.to_state().model_dump(by_alias=True)
        assert "answer" not in state["current"]
        assert state["current"]["options"] == ["3", "4", "5", "6"]
        assert state["totalQuestions"] == 2


class TestTransitions:
    def test_needs_questions(self):
        with pytest.raises(SessionError):
            QuizSession(topic="Empty", questions=[])

    def test_next_before_answer(self):
        quiz = QuizSession(topic="Cards", questions=_cards(), kind=QuizKind.FLASHCARDS)
        quiz.start()
        with pytest.raises(InvalidTransition):
            quiz.next()

    def test_double_answer(self):
        quiz = QuizSession(topic="Cards", questions=_cards(), kind=QuizKind.FLASHCARDS)
        quiz.submit_answer("mitochondria")
        with pytest.raises(InvalidTransition):
            quiz.submit_answer("mitochondria")

    def test_start_twice(self):
        quiz = QuizSession(topic="Cards", questions=_cards(), kind=QuizKind.FLASHCARDS)
        quiz.start()
        with pytest.raises(InvalidTransition):
            quiz.start()

    def test_blank_answer(self):
        quiz = QuizSession(topic="Cards", questions=_cards(), kind=QuizKind.FLASHCARDS)
        with pytest.raises(SessionError):
            quiz.submit_answer("  ")

    def test_finish_early_and_restart(self):
        quiz = QuizSession(topic="Cards", questions=_cards(), kind=QuizKind.FLASHCARDS)
        quiz.submit_answer("Mitochondria")
        quiz.finish()
        assert quiz.status == SessionStatus.REVIEWING
        assert quiz.summary().score == 1
        with pytest.raises(InvalidTransition):
            quiz.finish()

        quiz.restart()
        assert quiz.status == SessionStatus.IN_PROGRESS
        assert quiz.current_index == 0
        assert quiz.results == []
        assert quiz.score == 0


class TestFlashcardQuiz:
    def test_lenient_text_grading(self):
        quiz = QuizSession(topic="Cards", questions=_cards(), kind=QuizKind.FLASHCARDS)
        assert quiz.submit_answer("the mitochondria").is_correct is True
        quiz.next()
        assert quiz.submit_answer("H2O").is_correct is True
        quiz.next()
        assert quiz.submit_answer("Saturn").is_correct is False
        quiz.next()
        assert quiz.summary().score == 2

    def test_mcq_needs_options(self):
        quiz = QuizSession(topic="Cards", questions=_cards(), kind=QuizKind.FLASHCARDS)
        with pytest.raises(SessionError):
            quiz.set_answer_type(AnswerType.MCQ)

    def test_mcq_options_fixed_once_set(self):
        quiz = QuizSession(topic="Cards", questions=_cards(), kind=QuizKind.FLASHCARDS)
        first = ["Ribosome", "Mitochondria", "Nucleus", "Golgi"]
        quiz.set_answer_type(AnswerType.MCQ, first)
        quiz.set_answer_type(AnswerType.TEXT)
        quiz.set_answer_type(AnswerType.MCQ, ["a", "b", "c", "d"])
        assert quiz.options_for(0) == first

        result = quiz.submit_answer("B")
        assert result.is_correct is True
        assert result.user_answer == "Mitochondria"
        assert result.answer_type == AnswerType.MCQ

    def test_answer_type_locked_after_answer(self):
        quiz = QuizSession(topic="Cards", questions=_cards(), kind=QuizKind.FLASHCARDS)
        quiz.submit_answer("Mitochondria")
        with pytest.raises(InvalidTransition):
            quiz.set_answer_type(AnswerType.MCQ, ["a", "b", "c", "Mitochondria"])
