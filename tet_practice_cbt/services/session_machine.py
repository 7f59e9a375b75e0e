"""
services/session_machine.py

응시 중인 시험 세션의 상태 머신.

상태: ACTIVE → SUBMITTING → COMPLETED (종료 상태)
      ACTIVE → EXITED (결과 없이 폐기)

모든 전이는 동기적으로 끝까지 실행되며, 상태를 바꾸는 전이
(select_option, clear_answer, toggle_review_mark, navigate, tick) 직후에는
전체 스냅샷을 진행 상황 싱크로 내보낸다. 이 스냅샷으로 새로고침 후에도
resume()으로 이어서 풀 수 있다.

답안과 검토 표시는 position(출제 순서상 위치)을 키로 한다.
"""

import logging
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Sequence, Tuple, Union

from tet_practice_cbt.models.question_model import Question
from tet_practice_cbt.models.result_model import (
    CompletionPayload,
    IssueReport,
    ReviewItem,
    SessionResult,
    SubmitOutcome,
)
from tet_practice_cbt.models.session_state import SessionState, SessionStatus
from tet_practice_cbt.services.exam_service import (
    calculate_score,
    calculate_subject_scores,
    classify_answers,
)
from tet_practice_cbt.services.sinks import CompletionSink, IssueSink, ProgressSink, deliver

logger = logging.getLogger(__name__)

Snapshot = Union[SessionState, Mapping[str, Any]]


class SessionNotActiveError(RuntimeError):
    """진행 중(ACTIVE)이 아닌 세션에 상태 변경을 시도함."""


def _clamp(value: int, length: int) -> int:
    return max(0, min(value, length - 1))


_COUNTER_KEYS = ("position", "elapsedSeconds", "elapsed_seconds")


def _floor_counters(snapshot: Mapping[str, Any]) -> Dict[str, Any]:
    """음수 position/경과 시간은 검증 전에 0으로 올린다."""
    raw = dict(snapshot)
    for key in _COUNTER_KEYS:
        value = raw.get(key)
        if isinstance(value, (int, float)) and not isinstance(value, bool) and value < 0:
            logger.warning(f"스냅샷의 {key}={value} 를 0으로 보정합니다")
            raw[key] = 0
    return raw


def resume_state(sequence: Sequence[Question], snapshot: Snapshot) -> SessionState:
    """
    이전 스냅샷으로 세션 상태를 복원한다.

    스냅샷이 같은 시퀀스에서 나왔는지는 호출자 책임이다.
    범위를 벗어난 position은 보정하고, 범위 밖의 답안/검토 표시는 버린다.

    Args:
        sequence: 세션 시퀀스 (스냅샷을 만든 것과 같은 시퀀스).
        snapshot: SessionState 또는 camelCase/snake_case 키의 dict.
    """
    if not sequence:
        raise ValueError("빈 시퀀스로는 세션을 복원할 수 없습니다.")
    if isinstance(snapshot, SessionState):
        state = snapshot.model_copy(deep=True)
    else:
        state = SessionState.model_validate(_floor_counters(snapshot))

    length = len(sequence)
    answers = {p: opt for p, opt in state.answers.items() if 0 <= p < length}
    marked = {p for p in state.marked_positions if 0 <= p < length}
    dropped = (len(state.answers) - len(answers)) + (len(state.marked_positions) - len(marked))
    if dropped or state.position >= length:
        logger.warning(
            f"스냅샷이 현재 시퀀스({length}문항)와 맞지 않아 보정합니다 "
            f"(position={state.position}, 버린 항목={dropped})"
        )

    return SessionState(
        position=_clamp(state.position, length),
        answers=answers,
        marked_positions=marked,
        elapsed_seconds=state.elapsed_seconds,
    )


class ExamSession:
    """
    시험 세션 하나를 소유하는 상태 머신.

    Args:
        sequence:        출제 순서가 고정된 Question 리스트 (생성 후 변경 불가).
        progress_sink:   스냅샷을 받는 콜백.
        completion_sink: 제출 결과(CompletionPayload)를 받는 콜백.
        issue_sink:      오류 신고(IssueReport)를 받는 콜백.
        subject_name:    응시 기록에 남길 과목 표시명.
        state:           시작 상태 (resume 용). resume_state와 같이 복사·보정된다.
                         없으면 처음부터.
    """

    def __init__(
        self,
        sequence: Sequence[Question],
        *,
        progress_sink: Optional[ProgressSink] = None,
        completion_sink: Optional[CompletionSink] = None,
        issue_sink: Optional[IssueSink] = None,
        subject_name: str = "Mixed Practice",
        state: Optional[Snapshot] = None,
    ) -> None:
        if not sequence:
            raise ValueError("문제가 없는 시험 세션은 만들 수 없습니다.")
        self._sequence: Tuple[Question, ...] = tuple(sequence)
        self._state: Optional[SessionState] = (
            resume_state(sequence, state) if state is not None else SessionState()
        )
        self._status = SessionStatus.ACTIVE
        self._result: Optional[SessionResult] = None
        self._progress_sink = progress_sink
        self._completion_sink = completion_sink
        self._issue_sink = issue_sink
        self.subject_name = subject_name

    @classmethod
    def resume(cls, sequence: Sequence[Question], snapshot: Snapshot, **kwargs) -> "ExamSession":
        """스냅샷으로 ACTIVE 세션을 다시 만든다."""
        session = cls(sequence, state=snapshot, **kwargs)
        logger.info(
            f"세션 복원: {session.total}문항, position={session.position}, "
            f"답안 {session.answered_count}개"
        )
        return session

    # ── 조회 ─────────────────────────────────────────────────────────────────

    @property
    def sequence(self) -> Tuple[Question, ...]:
        return self._sequence

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def is_active(self) -> bool:
        return self._status is SessionStatus.ACTIVE

    @property
    def total(self) -> int:
        return len(self._sequence)

    @property
    def result(self) -> Optional[SessionResult]:
        return self._result

    def _live_state(self) -> SessionState:
        if self._state is None:
            raise SessionNotActiveError("이미 종료된 시험 세션입니다.")
        return self._state

    @property
    def position(self) -> int:
        return self._live_state().position

    @property
    def answers(self) -> Dict[int, str]:
        return dict(self._live_state().answers)

    @property
    def marked_positions(self) -> FrozenSet[int]:
        return frozenset(self._live_state().marked_positions)

    @property
    def elapsed_seconds(self) -> int:
        return self._live_state().elapsed_seconds

    @property
    def answered_count(self) -> int:
        return len(self._live_state().answers)

    @property
    def current_question(self) -> Question:
        return self._sequence[self.position]

    def question_at(self, position: int) -> Question:
        self._check_position(position)
        return self._sequence[position]

    def answer_at(self, position: int) -> Optional[str]:
        return self._live_state().answers.get(position)

    def is_marked(self, position: int) -> bool:
        return position in self._live_state().marked_positions

    def unanswered_positions(self) -> List[int]:
        answers = self._live_state().answers
        return [p for p in range(self.total) if p not in answers]

    def snapshot(self) -> SessionState:
        """현재 상태의 독립 사본."""
        return self._live_state().model_copy(deep=True)

    # ── 전이 ─────────────────────────────────────────────────────────────────

    def _require_active(self, action: str) -> SessionState:
        if self._status is not SessionStatus.ACTIVE:
            logger.warning(f"{action}: 진행 중이 아닌 세션입니다 (status={self._status.value})")
            raise SessionNotActiveError(f"진행 중인 시험이 아닙니다 (status={self._status.value}).")
        return self._live_state()

    def _check_position(self, position: int) -> None:
        if not 0 <= position < self.total:
            raise ValueError(f"문제 위치가 범위를 벗어났습니다: {position} (0 ~ {self.total - 1})")

    def _emit_progress(self) -> None:
        deliver(self._progress_sink, self.snapshot(), "진행 상황 스냅샷")

    def select_option(self, position: int, option_id: str) -> None:
        """
        position의 답을 option_id로 기록한다 (이전 답은 덮어씀).
        보기가 그 문제에 속하는지는 채점 때 판정한다.
        """
        state = self._require_active("select_option")
        self._check_position(position)
        if not option_id:
            raise ValueError("보기 ID가 비어 있습니다.")
        state.answers[position] = option_id
        self._emit_progress()

    def clear_answer(self, position: int) -> None:
        """position의 답을 지운다 (미응답으로 되돌림)."""
        state = self._require_active("clear_answer")
        self._check_position(position)
        state.answers.pop(position, None)
        self._emit_progress()

    def toggle_review_mark(self, position: int) -> bool:
        """
        검토 표시를 뒤집는다.

        Returns:
            뒤집은 뒤 표시 여부.
        """
        state = self._require_active("toggle_review_mark")
        self._check_position(position)
        if position in state.marked_positions:
            state.marked_positions.discard(position)
            marked = False
        else:
            state.marked_positions.add(position)
            marked = True
        self._emit_progress()
        return marked

    def navigate(self, target_position: int) -> int:
        """
        현재 위치를 옮긴다. 범위를 벗어나면 양 끝으로 보정하며 실패하지 않는다.

        Returns:
            보정된 위치.
        """
        state = self._require_active("navigate")
        state.position = _clamp(target_position, self.total)
        self._emit_progress()
        return state.position

    def next(self) -> int:
        return self.navigate(self.position + 1)

    def previous(self) -> int:
        return self.navigate(self.position - 1)

    def tick(self) -> None:
        """
        경과 시간 1초 증가. 외부 시계가 1초마다 호출한다.
        진행 중이 아니면 무시한다 (취소 직전에 도착한 tick).
        """
        if self._status is not SessionStatus.ACTIVE:
            logger.debug(f"tick 무시 (status={self._status.value})")
            return
        self._live_state().elapsed_seconds += 1
        self._emit_progress()

    def submit(self, force: bool = False) -> SubmitOutcome:
        """
        최종 제출.

        미응답 문제가 있고 force가 아니면 상태를 바꾸지 않고
        미응답 수를 담은 경고(completed=False)를 반환한다.
        그 외에는 SUBMITTING → COMPLETED로 전이하며 채점 결과를 반환하고
        제출 기록을 completion 싱크로 보낸다.
        """
        state = self._require_active("submit")
        unanswered = self.total - sum(1 for p in state.answers if 0 <= p < self.total)
        if unanswered and not force:
            logger.info(f"미응답 {unanswered}문항 - 제출 확인 필요")
            return SubmitOutcome(completed=False, unanswered_count=unanswered)

        self._status = SessionStatus.SUBMITTING
        result = calculate_score(self._sequence, state.answers)
        self._result = result
        self._status = SessionStatus.COMPLETED
        logger.info(
            f"시험 제출: 정답 {result.correct_count} / 오답 {result.incorrect_count} / "
            f"미응답 {result.skipped_count} - {result.score_percent}점, "
            f"{state.elapsed_seconds}초"
        )

        deliver(self._completion_sink, self.completion_payload(), "제출 결과")
        return SubmitOutcome(completed=True, unanswered_count=unanswered, result=result)

    def exit(self) -> None:
        """결과 없이 세션을 폐기한다. 마지막으로 내보낸 스냅샷 외에는 저장하지 않는다."""
        self._require_active("exit")
        self._status = SessionStatus.EXITED
        self._state = None
        logger.info("시험 세션 종료 (제출 없음)")

    def report_issue(self, position: int, description: str) -> IssueReport:
        """
        position의 문제에 대한 오류 신고를 issue 싱크로 보낸다 (best-effort).
        """
        self._require_active("report_issue")
        question = self.question_at(position)
        description = (description or "").strip()
        if not description:
            raise ValueError("신고 내용이 비어 있습니다.")
        report = IssueReport(
            question_id=question.id,
            question_text=question.text,
            description=description,
        )
        deliver(self._issue_sink, report, "오류 신고")
        return report

    # ── 제출 후 ──────────────────────────────────────────────────────────────

    def _require_completed(self) -> SessionState:
        if self._status is not SessionStatus.COMPLETED:
            raise SessionNotActiveError("아직 제출되지 않은 시험입니다.")
        return self._live_state()

    def completion_payload(self) -> CompletionPayload:
        state = self._require_completed()
        result = self._result
        return CompletionPayload(
            correct_count=result.correct_count,
            incorrect_count=result.incorrect_count,
            skipped_count=result.skipped_count,
            time_taken_seconds=state.elapsed_seconds,
            score_percent=result.score_percent,
            total_questions=result.total,
            accuracy=result.score_percent,
            subject_name=self.subject_name,
        )

    def review(self) -> List[ReviewItem]:
        """검토 화면용 위치별 분류."""
        state = self._require_completed()
        return classify_answers(self._sequence, state.answers)

    def subject_scores(self) -> List[Dict[str, object]]:
        state = self._require_completed()
        return calculate_subject_scores(self._sequence, state.answers)
