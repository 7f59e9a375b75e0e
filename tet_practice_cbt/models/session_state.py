"""
models/session_state.py

시험 진행 상태를 담는 OMR 카드 모델.
Pydantic BaseModel 기반 - 직렬화/역직렬화 및 타입 안전성 확보.
UI 코드 없음.

세션 범위의 모든 상태(답안, 검토 표시)는 문제 ID가 아니라
출제 순서상의 위치(0-based position)를 키로 사용한다.
같은 문제가 한 세션에 두 번 출제될 수 있기 때문이다.
"""

from enum import Enum
from typing import Any, Dict, List, Set

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel


class SessionStatus(str, Enum):
    """세션 상태 머신의 상태값."""

    ACTIVE = "active"
    SUBMITTING = "submitting"
    COMPLETED = "completed"
    EXITED = "exited"


class SessionState(BaseModel):
    """
    사용자의 시험 세션 진행 상태 (스냅샷 단위).

    Attributes:
        position:         현재 보고 있는 문제의 위치 (0-based).
        answers:          답안지. {position: 선택한 보기 ID}
        marked_positions: 검토 표시한 위치 집합.
        elapsed_seconds:  경과 시간 (초). 감소하지 않는다.

    외부 페이로드는 camelCase 키를 사용한다
    (position, answers, markedPositions, elapsedSeconds).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    position: int = Field(
        default=0,
        ge=0,
        description="현재 문제 위치 (0-based)"
    )
    answers: Dict[int, str] = Field(
        default_factory=dict,
        description="답안지. key: position, value: 선택한 보기 ID"
    )
    marked_positions: Set[int] = Field(
        default_factory=set,
        description="검토 표시한 position 집합"
    )
    elapsed_seconds: int = Field(
        default=0,
        ge=0,
        description="경과 시간 (초)"
    )

    @field_serializer("marked_positions")
    def _serialize_marked(self, value: Set[int]) -> List[int]:
        return sorted(value)

    def to_payload(self) -> Dict[str, Any]:
        """진행 상황 저장용 JSON 호환 dict (camelCase 키)."""
        return self.model_dump(mode="json", by_alias=True)
