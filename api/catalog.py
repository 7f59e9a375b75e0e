"""
api/catalog.py - 문제 은행 로딩

문제 은행 JSON 형식 (둘 중 하나):
  - [ {question}, ... ]
  - {"subjects": {subject_id: 이름}, "questions": [ {question}, ... ]}

검증에 실패한 문제는 건너뛰고 나머지만 사용한다.
"""

import json
import logging
import os
from typing import Dict, List, Optional, Tuple

from pydantic import ValidationError

import config
from api.sample_questions import SAMPLE_QUESTIONS, SUBJECT_NAMES
from tet_practice_cbt.models.question_model import Question

logger = logging.getLogger(__name__)


def parse_catalog(data: object) -> Tuple[List[Question], Dict[str, str]]:
    """JSON 데이터 → (Question 리스트, 과목 표시명)."""
    subjects: Dict[str, str] = {}
    if isinstance(data, dict):
        subjects = {str(k): str(v) for k, v in (data.get("subjects") or {}).items()}
        items = data.get("questions") or []
    elif isinstance(data, list):
        items = data
    else:
        raise ValueError("문제 은행 형식이 올바르지 않습니다 (list 또는 dict 필요).")

    questions: List[Question] = []
    for idx, item in enumerate(items):
        try:
            questions.append(Question.model_validate(item))
        except (ValidationError, TypeError) as e:
            logger.warning(f"item[{idx}]: Question 생성 실패 - {e}")
            continue
    return questions, subjects


def load_catalog(path: Optional[str] = None) -> Tuple[List[Question], Dict[str, str]]:
    """
    문제 은행을 읽는다. 경로가 없거나 파일이 없으면 내장 샘플을 쓴다.

    Raises:
        ValueError: 파일은 있으나 JSON/형식이 잘못됨.
    """
    path = path if path is not None else config.CATALOG_PATH
    if not path or not os.path.exists(path):
        if path:
            logger.warning(f"문제 은행 파일을 찾을 수 없습니다: {path} - 샘플 문제 사용")
        return list(SAMPLE_QUESTIONS), dict(SUBJECT_NAMES)

    with open(path, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"문제 은행 JSON 파싱 실패: {e}") from e

    questions, subjects = parse_catalog(data)
    logger.info(f"문제 은행 로드: {path} - {len(questions)}문항, 과목 {len(subjects)}개")
    return questions, subjects
