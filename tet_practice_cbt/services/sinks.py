"""
services/sinks.py

진행 상황 스냅샷, 제출 결과, 오류 신고를 외부로 내보내는 싱크(sink) 규약.

싱크 호출은 best-effort(fire-and-forget)다. 저장 실패가 세션 상태 전이나
결과 표시를 막거나 되돌려서는 안 되므로, 예외는 기록만 하고 삼킨다.
"""

import logging
from typing import Callable, Optional, TypeVar

from tet_practice_cbt.models.result_model import CompletionPayload, IssueReport
from tet_practice_cbt.models.session_state import SessionState

logger = logging.getLogger(__name__)

P = TypeVar("P")

ProgressSink = Callable[[SessionState], None]
CompletionSink = Callable[[CompletionPayload], None]
IssueSink = Callable[[IssueReport], None]


def deliver(sink: Optional[Callable[[P], None]], payload: P, label: str) -> bool:
    """
    싱크에 페이로드를 전달한다.

    Returns:
        전달 성공 여부. 싱크가 없으면 False.
    """
    if sink is None:
        return False
    try:
        sink(payload)
    except Exception as e:
        logger.warning(f"{label} 전달 실패 (무시하고 계속): {e}")
        return False
    return True
