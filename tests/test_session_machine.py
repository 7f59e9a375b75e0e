from __future__ import annotations

import pytest

from helpers import make_question, make_sequence

from tet_practice_cbt.models.result_model import IssueReport
from tet_practice_cbt.models.session_state import SessionState, SessionStatus
from tet_practice_cbt.services.exam_service import calculate_score, summarize_review
from tet_practice_cbt.services.session_machine import (
    ExamSession,
    SessionNotActiveError,
    resume_state,
)


def _failing_sink(payload) -> None:
    raise ConnectionError("storage offline")


def test_new_session_defaults(abc_sequence) -> None:
    exam = ExamSession(abc_sequence)

    assert exam.status is SessionStatus.ACTIVE
    assert exam.position == 0
    assert exam.answers == {}
    assert exam.marked_positions == frozenset()
    assert exam.elapsed_seconds == 0
    assert exam.current_question.id == "q0"


def test_empty_sequence_is_rejected() -> None:
    with pytest.raises(ValueError):
        ExamSession([])


def test_select_option_last_call_wins(abc_sequence, recorder) -> None:
    exam = ExamSession(abc_sequence, progress_sink=recorder)

    exam.select_option(1, "A")
    exam.select_option(1, "A")
    assert exam.answers == {1: "A"}

    exam.select_option(1, "C")
    assert exam.answers == {1: "C"}
    assert len(recorder) == 3
    assert recorder[-1].answers == {1: "C"}


def test_select_option_does_not_validate_option_membership(abc_sequence) -> None:
    exam = ExamSession(abc_sequence)

    exam.select_option(0, "nonsense")

    assert exam.answer_at(0) == "nonsense"


def test_select_option_rejects_bad_position(abc_sequence) -> None:
    exam = ExamSession(abc_sequence)

    with pytest.raises(ValueError):
        exam.select_option(3, "A")
    with pytest.raises(ValueError):
        exam.select_option(-1, "A")


def test_clear_answer(abc_sequence) -> None:
    exam = ExamSession(abc_sequence)
    exam.select_option(0, "A")

    exam.clear_answer(0)

    assert exam.answers == {}


def test_duplicate_question_answers_do_not_collide() -> None:
    question = make_question("dup", correct="A")
    exam = ExamSession([question, question, question])

    exam.select_option(0, "A")
    exam.select_option(2, "B")

    assert exam.answers == {0: "A", 2: "B"}
    assert exam.unanswered_positions() == [1]
    outcome = exam.submit(force=True)
    assert outcome.result.correct_count == 1
    assert outcome.result.incorrect_count == 1
    assert outcome.result.skipped_count == 1


def test_toggle_review_mark_flips(abc_sequence, recorder) -> None:
    exam = ExamSession(abc_sequence, progress_sink=recorder)

    assert exam.toggle_review_mark(2) is True
    assert exam.is_marked(2)
    assert exam.toggle_review_mark(2) is False
    assert not exam.is_marked(2)
    assert len(recorder) == 2


def test_navigate_clamps(abc_sequence, recorder) -> None:
    exam = ExamSession(abc_sequence, progress_sink=recorder)

    assert exam.navigate(-1) == 0
    assert exam.navigate(1) == 1
    assert exam.navigate(len(abc_sequence)) == 2
    assert exam.navigate(99) == 2
    assert [snap.position for snap in recorder] == [0, 1, 2, 2]


def test_next_and_previous_stay_in_range(abc_sequence) -> None:
    exam = ExamSession(abc_sequence)

    exam.previous()
    assert exam.position == 0
    exam.next()
    exam.next()
    exam.next()
    assert exam.position == 2
    exam.previous()
    assert exam.position == 1


def test_tick_accumulates_and_emits(abc_sequence, recorder) -> None:
    exam = ExamSession(abc_sequence, progress_sink=recorder)

    for _ in range(5):
        exam.tick()

    assert exam.elapsed_seconds == 5
    assert [snap.elapsed_seconds for snap in recorder] == [1, 2, 3, 4, 5]


def test_snapshots_are_independent_copies(abc_sequence, recorder) -> None:
    exam = ExamSession(abc_sequence, progress_sink=recorder)

    exam.select_option(0, "A")
    recorder[0].answers[1] = "tampered"

    assert exam.answers == {0: "A"}


def test_submit_with_unanswered_returns_warning(abc_sequence, recorder) -> None:
    exam = ExamSession(abc_sequence, completion_sink=recorder)
    exam.select_option(0, "A")

    outcome = exam.submit()

    assert outcome.completed is False
    assert outcome.unanswered_count == 2
    assert outcome.result is None
    assert exam.status is SessionStatus.ACTIVE
    assert recorder == []
    exam.select_option(1, "B")


def test_forced_submit_completes(abc_sequence, recorder) -> None:
    exam = ExamSession(abc_sequence, completion_sink=recorder, subject_name="Mathematics")
    exam.select_option(0, "A")
    exam.select_option(2, "X")
    exam.tick()
    exam.tick()

    outcome = exam.submit(force=True)

    assert outcome.completed is True
    assert outcome.unanswered_count == 1
    assert exam.status is SessionStatus.COMPLETED
    result = outcome.result
    assert (result.correct_count, result.incorrect_count, result.skipped_count) == (1, 1, 1)
    assert result.score_percent == 33
    assert exam.result == result

    (payload,) = recorder
    assert payload.time_taken_seconds == 2
    assert payload.total_questions == 3
    assert payload.subject_name == "Mathematics"
    assert payload.to_payload()["timeTakenSeconds"] == 2
    assert payload.to_payload()["correctCount"] == 1


def test_fully_answered_submit_needs_no_force(abc_sequence) -> None:
    exam = ExamSession(abc_sequence)
    for position, option in enumerate("ABC"):
        exam.select_option(position, option)

    outcome = exam.submit()

    assert outcome.completed is True
    assert outcome.result.score_percent == 100


def test_transitions_rejected_after_completion(abc_sequence) -> None:
    exam = ExamSession(abc_sequence)
    exam.submit(force=True)

    for action in (
        lambda: exam.select_option(0, "A"),
        lambda: exam.toggle_review_mark(0),
        lambda: exam.navigate(1),
        lambda: exam.submit(force=True),
        lambda: exam.exit(),
        lambda: exam.report_issue(0, "typo"),
    ):
        with pytest.raises(SessionNotActiveError):
            action()


def test_tick_after_completion_is_ignored(abc_sequence) -> None:
    exam = ExamSession(abc_sequence)
    exam.tick()
    exam.submit(force=True)

    exam.tick()

    assert exam.elapsed_seconds == 1


def test_review_after_completion_matches_result(abc_sequence) -> None:
    exam = ExamSession(abc_sequence)
    exam.select_option(0, "A")
    exam.select_option(1, "C")

    with pytest.raises(SessionNotActiveError):
        exam.review()

    exam.submit(force=True)
    assert summarize_review(exam.review()) == exam.result
    assert [row["subject_id"] for row in exam.subject_scores()] == ["sub_math"]


def test_exit_discards_state(abc_sequence, recorder) -> None:
    exam = ExamSession(abc_sequence, progress_sink=recorder, completion_sink=recorder)
    exam.select_option(0, "A")

    exam.exit()

    assert exam.status is SessionStatus.EXITED
    assert exam.result is None
    with pytest.raises(SessionNotActiveError):
        exam.snapshot()
    with pytest.raises(SessionNotActiveError):
        exam.select_option(0, "B")
    exam.tick()
    assert len(recorder) == 1


def test_sink_failure_does_not_block_transitions(abc_sequence) -> None:
    exam = ExamSession(
        abc_sequence,
        progress_sink=_failing_sink,
        completion_sink=_failing_sink,
        issue_sink=_failing_sink,
    )

    exam.select_option(0, "A")
    exam.tick()
    report = exam.report_issue(0, "Option text is cut off")
    outcome = exam.submit(force=True)

    assert exam.answers == {0: "A"}
    assert report.question_id == "q0"
    assert outcome.completed is True
    assert outcome.result.correct_count == 1


def test_report_issue(abc_sequence, recorder) -> None:
    exam = ExamSession(abc_sequence, issue_sink=recorder)

    report = exam.report_issue(1, "  Two options are identical  ")

    assert recorder == [report]
    assert isinstance(report, IssueReport)
    assert report.question_id == "q1"
    assert report.question_text == "Question q1?"
    assert report.description == "Two options are identical"
    assert report.to_payload() == {
        "questionId": "q1",
        "questionText": "Question q1?",
        "description": "Two options are identical",
    }


def test_report_issue_requires_description(abc_sequence) -> None:
    exam = ExamSession(abc_sequence)

    with pytest.raises(ValueError):
        exam.report_issue(0, "   ")
    with pytest.raises(ValueError):
        exam.report_issue(5, "out of range")


def test_resume_round_trip(abc_sequence) -> None:
    exam = ExamSession(abc_sequence)
    exam.select_option(0, "B")
    exam.navigate(2)
    exam.toggle_review_mark(1)
    exam.select_option(2, "C")
    exam.tick()
    exam.tick()
    exam.toggle_review_mark(0)
    exam.toggle_review_mark(0)
    before = exam.snapshot()

    resumed = ExamSession.resume(abc_sequence, before)

    assert resumed.snapshot() == before
    assert resumed.status is SessionStatus.ACTIVE


def test_resume_from_serialized_payload(abc_sequence) -> None:
    exam = ExamSession(abc_sequence)
    exam.select_option(1, "B")
    exam.toggle_review_mark(2)
    exam.navigate(1)
    exam.tick()
    payload = exam.snapshot().to_payload()

    assert payload == {
        "position": 1,
        "answers": {"1": "B"},
        "markedPositions": [2],
        "elapsedSeconds": 1,
    }
    assert resume_state(abc_sequence, payload) == exam.snapshot()


def test_resume_drops_stale_entries(abc_sequence) -> None:
    stale = SessionState(
        position=10,
        answers={0: "A", 5: "B"},
        marked_positions={1, 7},
        elapsed_seconds=42,
    )

    state = resume_state(abc_sequence, stale)

    assert state.position == 2
    assert state.answers == {0: "A"}
    assert state.marked_positions == {1}
    assert state.elapsed_seconds == 42
    assert stale.answers == {0: "A", 5: "B"}


def test_resume_floors_negative_counters(abc_sequence) -> None:
    snapshot = {
        "position": -2,
        "answers": {"0": "A", "-1": "B"},
        "markedPositions": [-1, 1],
        "elapsedSeconds": -5,
    }

    state = resume_state(abc_sequence, snapshot)

    assert state.position == 0
    assert state.answers == {0: "A"}
    assert state.marked_positions == {1}
    assert state.elapsed_seconds == 0


def test_constructor_sanitises_supplied_state(abc_sequence) -> None:
    supplied = SessionState(position=9, answers={0: "A", 7: "A"}, marked_positions={8})

    exam = ExamSession(abc_sequence, state=supplied)
    exam.select_option(1, "B")

    assert exam.position == 2
    assert exam.current_question is abc_sequence[2]
    assert exam.answers == {0: "A", 1: "B"}
    assert exam.marked_positions == set()
    assert supplied.answers == {0: "A", 7: "A"}


def test_resumed_session_scores_like_original() -> None:
    sequence = make_sequence("A", "B", "C", "A")
    exam = ExamSession(sequence)
    exam.select_option(0, "A")
    exam.select_option(3, "B")

    resumed = ExamSession.resume(sequence, exam.snapshot().to_payload())
    outcome = resumed.submit(force=True)

    assert outcome.result == calculate_score(sequence, {0: "A", 3: "B"})
