"""
api/routes.py - FastAPI 엔드포인트
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterator

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

import config
import api.session as session

from tet_practice_cbt.models.question_model import Question
from tet_practice_cbt.models.result_model import CompletionPayload
from tet_practice_cbt.services.exam_service import format_elapsed, is_passed, predict_exam_score
from tet_practice_cbt.services.question_selector import (
    MIXED_SUBJECT, EmptySelection, SelectionCriteria, describe_selection, select_questions,
)
from tet_practice_cbt.services.session_clock import SessionClock
from tet_practice_cbt.services.session_machine import ExamSession, SessionNotActiveError

logger = logging.getLogger(__name__)

router = APIRouter()

# ── Pydantic request bodies ──────────────────────────────────────────────────

class StartQuizBody(BaseModel):
    category: str = Field(..., min_length=1)
    subject_id: str = MIXED_SUBJECT
    subscribed_subjects: list[str] = []
    count: int = Field(config.DEFAULT_QUESTION_COUNT, ge=1, le=config.MAX_QUESTION_COUNT)

class SelectOptionBody(BaseModel):
    position: int
    option_id: str

class PositionBody(BaseModel):
    position: int

class NavigateBody(BaseModel):
    index: int = 0

class VisibilityBody(BaseModel):
    visible: bool

class SubmitBody(BaseModel):
    force: bool = False

class ReportIssueBody(BaseModel):
    position: int
    description: str


# ── 헬퍼 ─────────────────────────────────────────────────────────────────────

def _sid(request: Request) -> str:
    return request.state.session_id


def _question_to_dict(q: Question, reveal: bool = False) -> dict:
    """응시 중에는 정답 표시(is_correct)와 해설을 숨긴다."""
    d = {
        "id": q.id,
        "subject_id": q.subject_id,
        "topic_id": q.topic_id,
        "text": q.text,
        "difficulty": q.difficulty,
        "options": [{"id": o.id, "text": o.text} for o in q.options],
    }
    if reveal:
        d["options"] = [{"id": o.id, "text": o.text, "is_correct": o.is_correct} for o in q.options]
        d["explanation"] = q.explanation
    return d


@contextmanager
def _engine_errors() -> Iterator[None]:
    """엔진 예외 → HTTP 오류."""
    try:
        yield
    except SessionNotActiveError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _require_exam(sid: str) -> ExamSession:
    exam: ExamSession | None = session.get(sid, "exam")
    if exam is None:
        raise HTTPException(status_code=404, detail="시험 세션이 없습니다.")
    return exam


def _stop_clock(sid: str) -> None:
    clock: SessionClock | None = session.get(sid, "clock")
    if clock is not None:
        clock.stop()
        session.put(sid, "clock", None)


def _start_clock(sid: str, exam: ExamSession) -> None:
    _stop_clock(sid)
    clock = SessionClock(exam.tick, interval=config.TICK_INTERVAL_SECONDS)
    clock.start()
    session.put(sid, "clock", clock)


def _sinks(sid: str) -> dict[str, Any]:
    # 세션 dict에 직접 기록 - tick마다 세션 TTL이 갱신되지 않도록
    state = session.get_session(sid)

    def _save_snapshot(snapshot) -> None:
        state["snapshot"] = snapshot.to_payload()

    def _save_history(payload: CompletionPayload) -> None:
        state["history"].insert(0, payload)

    def _save_report(report) -> None:
        session.add_report(report.to_payload())

    return {
        "progress_sink": _save_snapshot,
        "completion_sink": _save_history,
        "issue_sink": _save_report,
    }


# ── 엔드포인트 ───────────────────────────────────────────────────────────────

@router.get("/api/catalog-status")
async def catalog_status(request: Request):
    catalog: list[Question] = request.app.state.catalog
    return {
        "question_count": len(catalog),
        "active_count": sum(1 for q in catalog if q.status == "active"),
        "subjects": sorted({q.subject_id for q in catalog}),
        "subject_names": request.app.state.subject_names,
    }


@router.post("/api/start-quiz")
async def start_quiz(body: StartQuizBody, request: Request):
    sid = _sid(request)
    criteria = SelectionCriteria(
        category=body.category,
        subject_id=body.subject_id,
        subscribed_subjects=set(body.subscribed_subjects),
    )
    try:
        sequence = select_questions(request.app.state.catalog, criteria, body.count)
    except EmptySelection:
        # 기존 세션은 그대로 둔다
        raise HTTPException(
            status_code=422,
            detail="선택한 조건에 출제 가능한 문제가 없습니다. 프로필의 과목 선택을 확인해 주세요.",
        )

    _stop_clock(sid)
    subject_name = describe_selection(criteria, request.app.state.subject_names)
    exam = ExamSession(sequence, subject_name=subject_name, **_sinks(sid))
    session.put(sid, "sequence", sequence)
    session.put(sid, "subject_name", subject_name)
    session.put(sid, "snapshot", exam.snapshot().to_payload())
    session.put(sid, "exam", exam)
    _start_clock(sid, exam)
    logger.info(f"시험 시작: {subject_name} - {len(sequence)}문항")
    return {"total": len(sequence), "subject_name": subject_name, "ok": True}


@router.get("/api/question/{position}")
async def get_question(position: int, request: Request):
    exam = _require_exam(_sid(request))
    if not (0 <= position < exam.total):
        raise HTTPException(status_code=404, detail="문제를 찾을 수 없습니다.")

    with _engine_errors():
        d = _question_to_dict(exam.question_at(position), reveal=not exam.is_active)
        d.update({
            "saved_answer": exam.answer_at(position) or "",
            "marked": exam.is_marked(position),
            "position": position,
            "total": exam.total,
        })
    return d


@router.get("/api/exam-state")
async def get_exam_state(request: Request):
    exam = _require_exam(_sid(request))
    with _engine_errors():
        snapshot = exam.snapshot()
    return {
        **snapshot.to_payload(),
        "status": exam.status.value,
        "total": exam.total,
        "answered_count": len(snapshot.answers),
        "elapsed": format_elapsed(snapshot.elapsed_seconds),
        "subject_name": exam.subject_name,
    }


@router.post("/api/select-option")
async def select_option(body: SelectOptionBody, request: Request):
    exam = _require_exam(_sid(request))
    with _engine_errors():
        exam.select_option(body.position, body.option_id)
    return {"ok": True, "answered_count": exam.answered_count}


@router.post("/api/clear-answer")
async def clear_answer(body: PositionBody, request: Request):
    exam = _require_exam(_sid(request))
    with _engine_errors():
        exam.clear_answer(body.position)
    return {"ok": True, "answered_count": exam.answered_count}


@router.post("/api/toggle-review")
async def toggle_review(body: PositionBody, request: Request):
    exam = _require_exam(_sid(request))
    with _engine_errors():
        marked = exam.toggle_review_mark(body.position)
    return {"ok": True, "marked": marked}


@router.post("/api/navigate")
async def navigate(body: NavigateBody, request: Request):
    exam = _require_exam(_sid(request))
    with _engine_errors():
        idx = exam.navigate(body.index)
    return {"index": idx, "ok": True}


@router.post("/api/visibility")
async def visibility(body: VisibilityBody, request: Request):
    sid = _sid(request)
    exam = _require_exam(sid)
    clock: SessionClock | None = session.get(sid, "clock")
    if body.visible and exam.is_active:
        if clock is None or not clock.running:
            _start_clock(sid, exam)
    else:
        _stop_clock(sid)
    clock = session.get(sid, "clock")
    return {"ok": True, "clock_running": bool(clock and clock.running)}


@router.post("/api/submit-exam")
async def submit_exam(body: SubmitBody, request: Request):
    sid = _sid(request)
    exam = _require_exam(sid)
    with _engine_errors():
        outcome = exam.submit(force=body.force)
    if not outcome.completed:
        return {"ok": False, "unanswered_count": outcome.unanswered_count}

    _stop_clock(sid)
    session.put(sid, "snapshot", None)
    result = outcome.result
    return {
        "ok": True,
        "correct_count": result.correct_count,
        "incorrect_count": result.incorrect_count,
        "skipped_count": result.skipped_count,
        "score": result.score_percent,
        "time_taken_seconds": exam.elapsed_seconds,
    }


@router.post("/api/exit")
async def exit_exam(request: Request):
    sid = _sid(request)
    exam = _require_exam(sid)
    with _engine_errors():
        exam.exit()
    _stop_clock(sid)
    session.put(sid, "exam", None)
    return {"ok": True, "resumable": session.get(sid, "snapshot") is not None}


@router.post("/api/resume")
async def resume_exam(request: Request):
    sid = _sid(request)
    current: ExamSession | None = session.get(sid, "exam")
    if current is not None and current.is_active:
        raise HTTPException(status_code=400, detail="이미 진행 중인 시험이 있습니다.")
    snapshot = session.get(sid, "snapshot")
    sequence = session.get(sid, "sequence", [])
    if not snapshot or not sequence:
        raise HTTPException(status_code=404, detail="이어서 풀 시험이 없습니다.")

    exam = ExamSession.resume(
        sequence, snapshot,
        subject_name=session.get(sid, "subject_name", ""),
        **_sinks(sid),
    )
    session.put(sid, "exam", exam)
    _start_clock(sid, exam)
    return {"ok": True, "total": exam.total, "position": exam.position}


@router.get("/api/results")
async def get_results(request: Request):
    exam = _require_exam(_sid(request))
    if exam.result is None:
        raise HTTPException(status_code=400, detail="시험이 아직 제출되지 않았습니다.")

    result = exam.result
    return {
        "score": result.score_percent,
        "passed": is_passed(result.score_percent, config.PASS_SCORE),
        "total": result.total,
        "correct_count": result.correct_count,
        "incorrect_count": result.incorrect_count,
        "skipped_count": result.skipped_count,
        "time_taken": format_elapsed(exam.elapsed_seconds),
        "subject_name": exam.subject_name,
        "subject_scores": exam.subject_scores(),
    }


@router.get("/api/review")
async def get_review(request: Request):
    exam = _require_exam(_sid(request))
    with _engine_errors():
        items = exam.review()
    return {
        "items": [
            {
                "position": item.position,
                "status": item.status.value,
                "chosen_option_id": item.chosen_option_id,
                "correct_option_id": item.correct_option_id,
                "question": _question_to_dict(item.question, reveal=True),
            }
            for item in items
        ]
    }


@router.post("/api/report-issue")
async def report_issue(body: ReportIssueBody, request: Request):
    exam = _require_exam(_sid(request))
    with _engine_errors():
        report = exam.report_issue(body.position, body.description)
    return {"ok": True, "question_id": report.question_id}


@router.get("/api/reports")
async def get_reports():
    return {"reports": session.list_reports()}


@router.get("/api/history")
async def get_history(request: Request):
    history: list[CompletionPayload] = session.get(_sid(request), "history", [])
    return {"history": [log.to_payload() for log in history]}


@router.get("/api/prediction")
async def get_prediction(request: Request):
    history: list[CompletionPayload] = session.get(_sid(request), "history", [])
    return predict_exam_score(history, total_marks=config.EXAM_TOTAL_MARKS)


@router.post("/api/reset")
async def reset_session(request: Request):
    session.reset(_sid(request))
    return {"ok": True}
