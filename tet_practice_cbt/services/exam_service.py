"""
services/exam_service.py

시험 채점 및 결과 분석 비즈니스 로직.
순수 Python 함수로 구성 - UI 코드, 전역 상태 변경 없음.

답안지는 항상 {position: 보기 ID} 형태이며, 문제 ID로 답을 찾지 않는다.
채점(calculate_score)과 검토 분류(classify_answers)는 같은 판정 함수
(_judge)를 사용하므로 두 화면의 집계가 어긋나지 않는다.
"""

import logging
import math
from collections import defaultdict
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from tet_practice_cbt.models.question_model import Question
from tet_practice_cbt.models.result_model import (
    CompletionPayload,
    ReviewItem,
    ReviewStatus,
    SessionResult,
)

logger = logging.getLogger(__name__)

DEFAULT_PASS_SCORE = 60.0
DEFAULT_TOTAL_MARKS = 150


def _round_half_up(value: float) -> int:
    # 0.5는 항상 올림 (round()는 은행가 반올림이라 12.5 → 12가 된다)
    return int(math.floor(value + 0.5))


def percent(correct: int, total: int) -> int:
    """correct / total을 반올림한 정수 백분율. total이 0이면 0."""
    if total <= 0:
        return 0
    return _round_half_up(correct / total * 100)


def find_correct_option_id(question: Question) -> Optional[str]:
    """정답 표시된 보기의 ID. 정답 보기가 없으면 None."""
    option = question.correct_option
    return option.id if option is not None else None


def _judge(question: Question, chosen: Optional[str]) -> ReviewStatus:
    """
    한 위치의 판정 규칙.

    - 답이 없으면 SKIPPED
    - 정답 보기가 없는 문제(상위 불변식 위반)는 어떤 답이든 INCORRECT
    - 선택한 보기 ID == 정답 보기 ID 이면 CORRECT, 아니면 INCORRECT
    """
    if chosen is None:
        return ReviewStatus.SKIPPED
    correct_id = find_correct_option_id(question)
    if correct_id is not None and chosen == correct_id:
        return ReviewStatus.CORRECT
    return ReviewStatus.INCORRECT


def calculate_score(
    questions: Sequence[Question],
    answers: Mapping[int, str],
) -> SessionResult:
    """
    사용자 답안을 채점한다.

    Args:
        questions: 출제 순서대로의 Question 리스트 (세션 시퀀스).
        answers:   답안지. {position: 선택한 보기 ID}

    Returns:
        SessionResult. questions가 비어 있으면 모두 0.
        같은 입력이면 항상 같은 결과 (부작용 없음).
    """
    counts = {status: 0 for status in ReviewStatus}

    for position, question in enumerate(questions):
        chosen = answers.get(position)
        if chosen is not None and find_correct_option_id(question) is None:
            logger.warning(
                f"정답 보기가 없는 문제입니다. 오답으로 처리합니다 "
                f"(position={position}, question_id={question.id})"
            )
        counts[_judge(question, chosen)] += 1

    return SessionResult(
        correct_count=counts[ReviewStatus.CORRECT],
        incorrect_count=counts[ReviewStatus.INCORRECT],
        skipped_count=counts[ReviewStatus.SKIPPED],
        score_percent=percent(counts[ReviewStatus.CORRECT], len(questions)),
    )


def classify_answers(
    questions: Sequence[Question],
    answers: Mapping[int, str],
) -> List[ReviewItem]:
    """
    검토 화면용으로 위치별 정답/오답/미응답을 분류한다.

    Returns:
        출제 순서와 같은 순서의 ReviewItem 리스트.
    """
    return [
        ReviewItem(
            position=position,
            question=question,
            status=_judge(question, answers.get(position)),
            chosen_option_id=answers.get(position),
            correct_option_id=find_correct_option_id(question),
        )
        for position, question in enumerate(questions)
    ]


def summarize_review(items: Iterable[ReviewItem]) -> SessionResult:
    """classify_answers() 결과를 채점 요약으로 환원한다."""
    items = list(items)
    correct = sum(1 for item in items if item.status is ReviewStatus.CORRECT)
    incorrect = sum(1 for item in items if item.status is ReviewStatus.INCORRECT)
    return SessionResult(
        correct_count=correct,
        incorrect_count=incorrect,
        skipped_count=len(items) - correct - incorrect,
        score_percent=percent(correct, len(items)),
    )


def calculate_subject_scores(
    questions: Sequence[Question],
    answers: Mapping[int, str],
) -> List[Dict[str, object]]:
    """
    과목별 점수를 계산하여 반환한다.

    Returns:
        [{"subject_id": str, "total": int, "correct": int,
          "incorrect": int, "skipped": int, "score": int}, ...]
        과목 ID 기준 정렬.
    """
    buckets: Dict[str, Dict[str, int]] = defaultdict(
        lambda: {"total": 0, "correct": 0, "incorrect": 0, "skipped": 0}
    )

    for position, q in enumerate(questions):
        bucket = buckets[q.subject_id]
        bucket["total"] += 1
        bucket[_judge(q, answers.get(position)).value] += 1

    result = []
    for subject_id in sorted(buckets):
        b = buckets[subject_id]
        result.append({
            "subject_id": subject_id,
            **b,
            "score": percent(b["correct"], b["total"]),
        })
    return result


def is_passed(score: float, pass_score: float = DEFAULT_PASS_SCORE) -> bool:
    """
    합격 여부를 반환한다.

    Args:
        score:      calculate_score()가 반환한 점수 (0 ~ 100).
        pass_score: 합격 기준 점수 (기본값 60점).
    """
    return score >= pass_score


def predict_exam_score(
    history: Iterable[CompletionPayload],
    total_marks: int = DEFAULT_TOTAL_MARKS,
) -> Dict[str, object]:
    """
    누적 응시 기록으로 본시험 예상 점수와 합격 가능성을 추정한다.

    정답률 = 전체 정답 수 / 전체 문항 수
    예상 점수 = 정답률 * total_marks (반올림)
    가능성: 정답률 0.60 이상 High, 0.45 이상 Medium, 그 외 Low.
    기록이 없으면 score 0, probability "Unknown".
    """
    history = list(history)
    if not history:
        return {"score": 0, "total_marks": total_marks, "accuracy": 0.0, "probability": "Unknown"}

    total_correct = sum(log.correct_count for log in history)
    total_questions = sum(log.total_questions for log in history)
    accuracy = total_correct / total_questions if total_questions > 0 else 0.0

    if accuracy >= 0.60:
        probability = "High"
    elif accuracy >= 0.45:
        probability = "Medium"
    else:
        probability = "Low"

    return {
        "score": _round_half_up(accuracy * total_marks),
        "total_marks": total_marks,
        "accuracy": round(accuracy, 4),
        "probability": probability,
    }


def format_elapsed(seconds: int) -> str:
    """경과 시간을 MM:SS 문자열로."""
    seconds = max(0, int(seconds))
    return f"{seconds // 60:02d}:{seconds % 60:02d}"
