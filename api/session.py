"""
api/session.py - 멀티유저 인메모리 세션 (쿠키 기반)

각 사용자에게 UUID 세션 ID를 발급하고, 세션별로 독립된 상태를 유지.
TTL(기본 1시간) 경과 시 자동 만료. 만료·초기화 시 시험 시계도 함께 멈춘다.
"""

import threading
import time
import uuid
from collections import deque
from typing import Any

import config

_lock = threading.Lock()
_sessions: dict[str, dict[str, Any]] = {}
_timestamps: dict[str, float] = {}
_reports: deque[dict[str, Any]] = deque(maxlen=config.MAX_REPORTS)

SESSION_TTL = config.SESSION_TTL


def _new_state() -> dict[str, Any]:
    return {
        "sequence": [],          # 세션 시퀀스 (list[Question])
        "subject_name": "",
        "exam": None,            # ExamSession
        "clock": None,           # SessionClock
        "snapshot": None,        # 마지막 진행 상황 (camelCase dict)
        "history": [],           # 응시 기록 (list[CompletionPayload])
    }


def _dispose(state: dict[str, Any]) -> None:
    clock = state.get("clock")
    if clock is not None:
        clock.stop()
        state["clock"] = None


def create_session() -> str:
    """새 세션을 생성하고 세션 ID를 반환."""
    sid = uuid.uuid4().hex
    with _lock:
        _sessions[sid] = _new_state()
        _timestamps[sid] = time.time()
    return sid


def get_session(sid: str) -> dict[str, Any] | None:
    """세션 ID로 세션 데이터를 가져옴. 만료되었거나 없으면 None."""
    with _lock:
        if sid not in _sessions:
            return None
        if time.time() - _timestamps[sid] > SESSION_TTL:
            _dispose(_sessions.pop(sid))
            del _timestamps[sid]
            return None
        _timestamps[sid] = time.time()  # 접근 시 갱신
        return _sessions[sid]


def get(sid: str, key: str, default=None):
    """세션에서 값 읽기."""
    session = get_session(sid)
    if session is None:
        return default
    return session.get(key, default)


def put(sid: str, key: str, value) -> None:
    """세션에 값 쓰기."""
    with _lock:
        if sid in _sessions:
            _sessions[sid][key] = value
            _timestamps[sid] = time.time()


def reset(sid: str) -> None:
    """세션 초기화 (응시 기록은 유지)."""
    with _lock:
        if sid in _sessions:
            _dispose(_sessions[sid])
            saved_history = _sessions[sid].get("history", [])
            _sessions[sid] = _new_state()
            _sessions[sid]["history"] = saved_history
            _timestamps[sid] = time.time()


def cleanup_expired() -> int:
    """만료된 세션을 정리. 제거된 수 반환."""
    now = time.time()
    removed = 0
    with _lock:
        expired = [sid for sid, ts in _timestamps.items() if now - ts > SESSION_TTL]
        for sid in expired:
            _dispose(_sessions.pop(sid))
            del _timestamps[sid]
            removed += 1
    return removed


def add_report(report: dict[str, Any]) -> None:
    """오류 신고 저장 (관리자 확인용). 최근 MAX_REPORTS건만 보관한다."""
    with _lock:
        _reports.append(report)


def list_reports() -> list[dict[str, Any]]:
    with _lock:
        return list(reversed(_reports))
