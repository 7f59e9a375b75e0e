"""
models/result_model.py

채점 결과, 검토 화면용 분류 결과, 외부로 내보내는 페이로드 모델.
모두 제출 시점에 한 번 만들어지고 이후 변경되지 않는다.
"""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from tet_practice_cbt.models.question_model import Question


class SessionResult(BaseModel):
    """
    채점 결과 요약.

    score_percent는 correct_count / total * 100을 반올림한 정수.
    """

    model_config = ConfigDict(frozen=True)

    correct_count: int = Field(0, ge=0, description="정답 수")
    incorrect_count: int = Field(0, ge=0, description="오답 수")
    skipped_count: int = Field(0, ge=0, description="미응답 수")
    score_percent: int = Field(0, ge=0, le=100, description="100점 만점 환산 점수")

    @property
    def total(self) -> int:
        return self.correct_count + self.incorrect_count + self.skipped_count


class ReviewStatus(str, Enum):
    CORRECT = "correct"
    INCORRECT = "incorrect"
    SKIPPED = "skipped"


class ReviewItem(BaseModel):
    """
    검토 화면의 문제 한 칸.

    correct_option_id가 None이면 정답 보기가 지정되지 않은 문제다.
    """

    model_config = ConfigDict(frozen=True)

    position: int = Field(..., ge=0)
    question: Question
    status: ReviewStatus
    chosen_option_id: Optional[str] = None
    correct_option_id: Optional[str] = None


class CompletionPayload(BaseModel):
    """제출 완료 시 기록 저장소로 보내는 응시 기록."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    correct_count: int
    incorrect_count: int
    skipped_count: int
    time_taken_seconds: int
    score_percent: int
    total_questions: int
    accuracy: int
    subject_name: str = "Mixed Practice"

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class IssueReport(BaseModel):
    """응시 중 문제 오류 신고."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    question_id: str
    question_text: str = ""
    description: str = Field(..., min_length=1)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class SubmitOutcome(BaseModel):
    """
    submit() 반환값.

    completed가 False이면 미응답 경고(unanswered_count개)로 제출이 보류된 것이며
    상태는 바뀌지 않는다. 호출자가 확인 후 force=True로 다시 제출한다.
    """

    model_config = ConfigDict(frozen=True)

    completed: bool
    unanswered_count: int = 0
    result: Optional[SessionResult] = None
