"""
Tests for the reducer (practice state transitions).

Tests:
- Answer submission and equality policy
- Reveal / self-grade flow
- Status guards
- Completion and auto-revert
"""

import pytest

from ..engine_core.state import DrillState, PracticeStatus, Progress
from ..engine_core.action import Action, ActionType, Outcome, PersistOp
from ..engine_core.reducer import Reducer, apply_action, initial_state
from ..engine_core.answers import answers_match, display_answer, normalize_answer
from .conftest import make_words

NOW = 100.0


@pytest.fixture
def reducer():
    return Reducer(feedback_delay=2.0)


@pytest.fixture
def three_words():
    return make_words(("cat", "кот"), ("dog", "собака"), ("bird", "птица"))


@pytest.fixture
def idle_state(three_words):
    return initial_state(three_words, Progress(total=3, done=0))


@pytest.fixture
def reviewing_state(reducer, idle_state):
    return reducer.apply(idle_state, Action.declare_known(), NOW).new_state


class TestAnswers:
    """Tests for answer normalization."""

    def test_whitespace_and_case_ignored(self):
        assert answers_match(" Casa ", "casa")
        assert answers_match("CAT", "Cat")

    def test_inner_text_must_match_exactly(self):
        assert not answers_match("ca t", "cat")
        assert not answers_match("café", "cafe")

    def test_normalize(self):
        assert normalize_answer("  HeLLo\n") == "hello"

    def test_display_capitalizes_first_letter_only(self):
        assert display_answer("cat") == "Cat"
        assert display_answer("new York") == "New York"
        assert display_answer("") == ""


class TestSubmitAnswer:
    """Tests for typed answers."""

    def test_correct_answer_advances(self, reducer, idle_state):
        result = reducer.apply(idle_state, Action.submit("cat"), NOW)

        assert result.success
        assert result.outcome == Outcome.ADVANCED
        assert result.persist == PersistOp.UPDATE
        assert result.new_state.status == PracticeStatus.IDLE
        assert result.new_state.progress == Progress(total=3, done=1)
        assert [w.target_text for w in result.new_state.queue] == ["dog", "bird"]

    def test_correct_answer_is_case_and_space_insensitive(self, reducer, idle_state):
        result = reducer.apply(idle_state, Action.submit("  CAT "), NOW)

        assert result.outcome == Outcome.ADVANCED

    def test_wrong_answer_enters_error(self, reducer, idle_state):
        result = reducer.apply(idle_state, Action.submit("dog"), NOW)

        assert result.success
        assert result.outcome == Outcome.MISMATCH
        assert result.persist == PersistOp.NONE
        state = result.new_state
        assert state.status == PracticeStatus.ERROR
        assert state.feedback == "Correct: Cat"
        assert state.revert_at == NOW + 2.0
        assert state.queue == idle_state.queue
        assert state.progress == idle_state.progress

    def test_retry_allowed_in_error(self, reducer, idle_state):
        error_state = reducer.apply(idle_state, Action.submit("x"), NOW).new_state

        again = reducer.apply(error_state, Action.submit("y"), NOW + 1)
        assert again.outcome == Outcome.MISMATCH
        assert again.new_state.revert_at == NOW + 3.0

        right = reducer.apply(error_state, Action.submit("cat"), NOW + 1)
        assert right.outcome == Outcome.ADVANCED
        assert right.new_state.feedback is None

    def test_submit_rejected_while_reviewing(self, reducer, reviewing_state):
        result = reducer.apply(reviewing_state, Action.submit("cat"), NOW)

        assert not result.success
        assert result.error_code == "INVALID_STATE"
        assert result.new_state is None


class TestReviewFlow:
    """Tests for "I know this" and self-grading."""

    def test_declare_known_reveals_answer(self, reviewing_state, idle_state):
        assert reviewing_state.status == PracticeStatus.REVIEWING
        assert reviewing_state.revealed_answer == "Cat"
        assert reviewing_state.queue == idle_state.queue

    def test_declare_known_from_error(self, reducer, idle_state):
        error_state = reducer.apply(idle_state, Action.submit("x"), NOW).new_state
        result = reducer.apply(error_state, Action.declare_known(), NOW)

        assert result.success
        assert result.new_state.status == PracticeStatus.REVIEWING
        assert result.new_state.revert_at is None
        assert result.persist == PersistOp.NONE

    def test_confirm_correct_pops_front(self, reducer, reviewing_state):
        result = reducer.apply(reviewing_state, Action.confirm_correct(), NOW)

        assert result.outcome == Outcome.ADVANCED
        assert result.new_state.current_word.target_text == "dog"
        assert result.new_state.progress.done == 1
        assert result.new_state.revealed_answer is None

    def test_mark_wrong_rotates_to_back(self, reducer, reviewing_state):
        result = reducer.apply(reviewing_state, Action.mark_wrong(), NOW)

        assert result.outcome == Outcome.ROTATED
        assert result.persist == PersistOp.UPDATE
        state = result.new_state
        assert state.status == PracticeStatus.REVIEW_ERROR
        assert state.feedback == "Correct: Cat"
        assert [w.target_text for w in state.queue] == ["dog", "bird", "cat"]
        assert state.progress == reviewing_state.progress

    def test_confirm_rejected_unless_reviewing(self, reducer, idle_state):
        assert not reducer.apply(idle_state, Action.confirm_correct(), NOW).success
        assert not reducer.apply(idle_state, Action.mark_wrong(), NOW).success

    def test_declare_known_rejected_while_reviewing(self, reducer, reviewing_state):
        assert not reducer.apply(reviewing_state, Action.declare_known(), NOW).success

    def test_double_mark_wrong_is_rejected(self, reducer, reviewing_state):
        rotated = reducer.apply(reviewing_state, Action.mark_wrong(), NOW).new_state

        result = reducer.apply(rotated, Action.mark_wrong(), NOW)
        assert not result.success
        assert not reducer.apply(rotated, Action.submit("dog"), NOW).success


class TestCompletion:
    """Tests for finishing the queue."""

    def test_last_word_completes(self, reducer):
        state = initial_state(make_words(("cat", "кот")), Progress(total=3, done=2))
        result = reducer.apply(state, Action.submit("cat"), NOW)

        assert result.success
        assert result.session_finished
        assert result.persist == PersistOp.REMOVE
        assert result.new_state.status == PracticeStatus.COMPLETED
        assert result.new_state.queue == ()
        assert result.new_state.progress == Progress(total=3, done=3)

    def test_completed_rejects_everything(self, reducer):
        state = DrillState(status=PracticeStatus.COMPLETED, queue=(), progress=Progress(1, 1))

        for action in (Action.submit("x"), Action.declare_known(), Action.revert()):
            assert not reducer.apply(state, action, NOW).success


class TestRevert:
    """Tests for auto-revert of transient statuses."""

    def test_revert_after_delay(self, reducer, idle_state):
        error_state = reducer.apply(idle_state, Action.submit("x"), NOW).new_state

        early = reducer.apply(error_state, Action.revert(), NOW + 1.9)
        assert not early.success

        result = reducer.apply(error_state, Action.revert(), NOW + 2.0)
        assert result.outcome == Outcome.REVERTED
        assert result.new_state.status == PracticeStatus.IDLE
        assert result.new_state.feedback is None
        assert result.new_state.queue == idle_state.queue

    def test_review_error_reverts_to_new_front(self, reducer, reviewing_state):
        rotated = reducer.apply(reviewing_state, Action.mark_wrong(), NOW).new_state
        result = reducer.apply(rotated, Action.revert(), NOW + 2.0)

        assert result.new_state.status == PracticeStatus.IDLE
        assert result.new_state.current_word.target_text == "dog"

    def test_revert_rejected_when_idle(self, reducer, idle_state):
        assert not reducer.apply(idle_state, Action.revert(), NOW).success


class TestApplyAction:
    def test_convenience_function(self, idle_state):
        result = apply_action(idle_state, Action.submit("nope"), NOW, feedback_delay=5.0)

        assert result.new_state.revert_at == NOW + 5.0

    def test_action_factories(self):
        assert Action.submit("a").action_type == ActionType.SUBMIT_ANSWER
        assert Action.submit("a").text == "a"
        assert Action.mark_wrong().action_type == ActionType.MARK_WRONG
