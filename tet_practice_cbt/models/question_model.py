from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

Difficulty = Literal["easy", "medium", "hard"]
QuestionCategory = Literal["1", "2", "3", "all"]
QuestionStatus = Literal["active", "inactive"]

# 모든 응시 유형에 공통으로 출제되는 문제의 카테고리 코드
WILDCARD_CATEGORY = "all"


class Option(BaseModel):
    """
    객관식 보기 하나.
    is_correct가 True인 보기가 정답이다.
    """
    id: str = Field(
        ...,
        min_length=1,
        description="보기 식별자 (같은 문제 안에서만 의미가 있음)"
    )
    text: str = Field(
        ...,
        description="보기 내용"
    )
    is_correct: bool = Field(
        False,
        description="정답 보기 여부"
    )


class Question(BaseModel):
    """
    TET 모의고사 문제 모델
    Pydantic v2 적용

    문제 하나에 정답 보기가 정확히 하나라는 전제는 상위(콘텐츠 관리)에서 보장한다.
    여기서는 검증하지 않으며, 채점 단계에서 정답 보기가 없으면 오답으로 처리한다.
    """
    id: str = Field(
        ...,
        min_length=1,
        description="문제 식별자. 한 세션 안에서 중복될 수 있으므로 세션 키로 쓰지 않는다."
    )
    subject_id: str = Field(
        ...,
        min_length=1,
        description="과목 식별자"
    )
    topic_id: Optional[str] = Field(
        None,
        description="단원 식별자"
    )
    text: str = Field(
        ...,
        min_length=1,
        description="발문/문제 내용"
    )
    options: List[Option] = Field(
        ...,
        description="보기 리스트 (순서는 출제 시 섞인다)"
    )
    difficulty: Difficulty = Field(
        "medium",
        description="난이도 (easy / medium / hard)"
    )
    explanation: str = Field(
        "",
        description="해설"
    )
    category: QuestionCategory = Field(
        WILDCARD_CATEGORY,
        description="응시 유형 코드. 'all'이면 모든 유형에 출제"
    )
    status: QuestionStatus = Field(
        "active",
        description="활성 상태. inactive 문제는 출제 대상에서 제외"
    )
    tags: List[str] = Field(
        default_factory=list,
        description="태그"
    )
    mistake_count: int = Field(
        0,
        ge=0,
        description="누적 오답 횟수 (콘텐츠 관리용 통계)"
    )

    @field_validator('options')
    @classmethod
    def validate_options_length(cls, v: List[Option]) -> List[Option]:
        """
        보기는 최소 2개 이상이어야 한다.
        """
        if len(v) < 2:
            raise ValueError("보기(options)는 최소 2개 이상의 항목이 필요합니다.")
        return v

    @property
    def correct_option(self) -> Optional[Option]:
        """정답 표시된 첫 번째 보기. 없으면 None."""
        for option in self.options:
            if option.is_correct:
                return option
        return None
