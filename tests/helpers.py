from __future__ import annotations

from typing import Sequence

from tet_practice_cbt.models.question_model import Option, Question


def make_question(
    qid: str,
    correct: str | None = "A",
    option_ids: Sequence[str] = ("A", "B", "C", "X"),
    *,
    subject_id: str = "sub_math",
    category: str = "1",
    status: str = "active",
    difficulty: str = "easy",
) -> Question:
    return Question(
        id=qid,
        subject_id=subject_id,
        text=f"Question {qid}?",
        options=[
            Option(id=oid, text=f"option {oid}", is_correct=(oid == correct))
            for oid in option_ids
        ],
        difficulty=difficulty,
        category=category,
        status=status,
        explanation=f"The answer is {correct}.",
    )


def make_sequence(*correct_ids: str) -> list[Question]:
    return [
        make_question(f"q{idx}", correct=cid)
        for idx, cid in enumerate(correct_ids)
    ]
