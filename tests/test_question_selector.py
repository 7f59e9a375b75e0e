from __future__ import annotations

import random

import pytest

from helpers import make_question

from tet_practice_cbt.services.question_selector import (
    MIXED_SUBJECT,
    EmptySelection,
    SelectionCriteria,
    describe_selection,
    is_eligible,
    select_questions,
    shuffled,
)


def _catalog(count: int, **kwargs) -> list:
    return [make_question(f"q{i}", **kwargs) for i in range(count)]


def _option_signature(question) -> list[tuple[str, bool]]:
    return sorted((o.id, o.is_correct) for o in question.options)


def test_returns_all_eligible_when_fewer_than_requested() -> None:
    catalog = _catalog(12) + _catalog(5, category="2")
    criteria = SelectionCriteria(category="1")

    sequence = select_questions(catalog, criteria, 50)

    assert len(sequence) == 12
    assert {q.id for q in sequence} == {f"q{i}" for i in range(12)}


def test_truncates_to_requested_count() -> None:
    sequence = select_questions(_catalog(12), SelectionCriteria(category="1"), 5)

    assert len(sequence) == 5
    assert len({q.id for q in sequence}) == 5


def test_option_sets_are_permutations_of_source() -> None:
    catalog = _catalog(6)
    by_id = {q.id: q for q in catalog}

    sequence = select_questions(catalog, SelectionCriteria(category="1"), 6)

    for question in sequence:
        assert _option_signature(question) == _option_signature(by_id[question.id])


def test_catalog_is_not_mutated() -> None:
    catalog = _catalog(4, option_ids=("A", "B", "C", "D", "E", "F"))
    before = [[o.id for o in q.options] for q in catalog]

    for seed in range(20):
        select_questions(catalog, SelectionCriteria(category="1"), 4, rng=random.Random(seed))

    assert [[o.id for o in q.options] for q in catalog] == before


def test_selection_is_reproducible_with_seeded_rng() -> None:
    catalog = _catalog(10)
    criteria = SelectionCriteria(category="1")

    first = select_questions(catalog, criteria, 10, rng=random.Random(7))
    second = select_questions(catalog, criteria, 10, rng=random.Random(7))

    assert [q.id for q in first] == [q.id for q in second]
    assert [[o.id for o in q.options] for q in first] == [
        [o.id for o in q.options] for q in second
    ]


def test_empty_selection_raises() -> None:
    catalog = _catalog(3, category="2")

    with pytest.raises(EmptySelection):
        select_questions(catalog, SelectionCriteria(category="1"), 10)


def test_requested_count_must_be_positive() -> None:
    with pytest.raises(ValueError):
        select_questions(_catalog(3), SelectionCriteria(category="1"), 0)


def test_eligibility_rules() -> None:
    criteria = SelectionCriteria(category="1")

    assert is_eligible(make_question("a"), criteria)
    assert is_eligible(make_question("b", category="all"), criteria)
    assert not is_eligible(make_question("c", category="2"), criteria)
    assert not is_eligible(make_question("d", status="inactive"), criteria)


def test_specific_subject_filter() -> None:
    criteria = SelectionCriteria(category="1", subject_id="sub_eng")

    assert is_eligible(make_question("a", subject_id="sub_eng"), criteria)
    assert not is_eligible(make_question("b", subject_id="sub_math"), criteria)


def test_subscription_applies_only_to_mixed() -> None:
    mixed = SelectionCriteria(category="1", subscribed_subjects={"sub_eng"})
    specific = SelectionCriteria(
        category="1", subject_id="sub_math", subscribed_subjects={"sub_eng"}
    )
    math_question = make_question("m", subject_id="sub_math")

    assert mixed.subject_id == MIXED_SUBJECT
    assert not is_eligible(math_question, mixed)
    assert is_eligible(make_question("e", subject_id="sub_eng"), mixed)
    assert is_eligible(math_question, specific)


def test_shuffled_leaves_input_alone() -> None:
    items = list(range(20))

    result = shuffled(items, random.Random(3))

    assert items == list(range(20))
    assert sorted(result) == items


def test_describe_selection() -> None:
    names = {"sub_math": "Mathematics"}

    assert describe_selection(SelectionCriteria(category="1", subject_id="sub_math"), names) == "Mathematics"
    assert describe_selection(SelectionCriteria(category="1", subject_id="sub_x"), names) == "Mixed Practice"
    assert describe_selection(SelectionCriteria(category="1")) == "Mixed Practice"
    assert (
        describe_selection(SelectionCriteria(category="1", subscribed_subjects={"a", "b"}))
        == "Mixed (2 subjects)"
    )
