"""
services/question_selector.py

전체 문제 은행에서 출제 대상을 골라 세션 시퀀스를 만든다.

Public API:
  - is_eligible(question, criteria) -> bool
  - select_questions(catalog, criteria, requested_count, rng) -> List[Question]
  - describe_selection(criteria, subject_names) -> str

원본 문제 객체는 절대 수정하지 않는다. 보기 순서는 문제마다 독립적으로
섞은 사본에만 적용된다.
"""

import logging
import random
from typing import List, Mapping, Optional, Sequence, Set, TypeVar

from pydantic import BaseModel, Field

from tet_practice_cbt.models.question_model import Question, WILDCARD_CATEGORY

logger = logging.getLogger(__name__)

MIXED_SUBJECT = "mixed"

T = TypeVar("T")


class EmptySelection(Exception):
    """조건에 맞는 출제 가능 문제가 하나도 없음."""


class SelectionCriteria(BaseModel):
    """
    출제 조건.

    Attributes:
        category:            응시자의 응시 유형 코드 ("1", "2", "3").
        subject_id:          특정 과목 ID 또는 "mixed".
        subscribed_subjects: 응시자가 구독한 과목 ID 집합 (비어 있으면 제한 없음).
    """
    category: str = Field(..., min_length=1)
    subject_id: str = Field(MIXED_SUBJECT, min_length=1)
    subscribed_subjects: Set[str] = Field(default_factory=set)

    @property
    def is_mixed(self) -> bool:
        return self.subject_id == MIXED_SUBJECT


def is_eligible(question: Question, criteria: SelectionCriteria) -> bool:
    """
    출제 가능 여부.

    - 활성 문제여야 한다.
    - 카테고리가 응시 유형과 같거나 'all'이어야 한다.
    - 과목을 지정했으면 그 과목이어야 한다.
    - 과목을 지정하지 않았고 구독 과목이 있으면 구독 과목 중 하나여야 한다.
    """
    if question.status != "active":
        return False
    if question.category not in (criteria.category, WILDCARD_CATEGORY):
        return False
    if not criteria.is_mixed:
        return question.subject_id == criteria.subject_id
    if criteria.subscribed_subjects:
        return question.subject_id in criteria.subscribed_subjects
    return True


def shuffled(items: Sequence[T], rng: Optional[random.Random] = None) -> List[T]:
    """Fisher-Yates 셔플한 새 리스트를 반환 (입력은 그대로 둔다)."""
    rng = rng or random.Random()
    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        j = rng.randint(0, i)
        result[i], result[j] = result[j], result[i]
    return result


def select_questions(
    catalog: Sequence[Question],
    criteria: SelectionCriteria,
    requested_count: int,
    rng: Optional[random.Random] = None,
) -> List[Question]:
    """
    출제 조건에 맞는 문제를 무작위로 골라 세션 시퀀스를 만든다.

    Args:
        catalog:         전체 문제 리스트.
        criteria:        출제 조건.
        requested_count: 요청 문항 수 (1 이상).
        rng:             난수 생성기 (테스트에서 시드 고정용).

    Returns:
        길이 min(requested_count, 출제 가능 문항 수)의 Question 리스트.
        각 문제는 보기 순서만 섞인 사본이다.

    Raises:
        ValueError:     requested_count가 1 미만.
        EmptySelection: 출제 가능 문제가 없음.
    """
    if requested_count < 1:
        raise ValueError(f"문항 수는 1 이상이어야 합니다: {requested_count}")

    rng = rng or random.Random()
    eligible = [q for q in catalog if is_eligible(q, criteria)]
    if not eligible:
        logger.warning(
            f"출제 가능한 문제가 없습니다 (category={criteria.category}, "
            f"subject={criteria.subject_id}, subscribed={len(criteria.subscribed_subjects)})"
        )
        raise EmptySelection("선택한 조건에 출제 가능한 문제가 없습니다.")

    picked = shuffled(eligible, rng)[:min(requested_count, len(eligible))]
    sequence = [
        q.model_copy(update={"options": shuffled(q.options, rng)})
        for q in picked
    ]
    logger.info(
        f"문제 {len(sequence)}개 선택 (요청 {requested_count}, 출제 가능 {len(eligible)})"
    )
    return sequence


def describe_selection(
    criteria: SelectionCriteria,
    subject_names: Optional[Mapping[str, str]] = None,
) -> str:
    """응시 기록에 남길 과목 표시명."""
    if not criteria.is_mixed:
        return (subject_names or {}).get(criteria.subject_id, "Mixed Practice")
    if criteria.subscribed_subjects:
        return f"Mixed ({len(criteria.subscribed_subjects)} subjects)"
    return "Mixed Practice"
