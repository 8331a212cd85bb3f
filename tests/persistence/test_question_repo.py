"""Tests for the question bank repository."""

import uuid
from datetime import datetime, timezone

import pytest

from satprep.domain.models.question import BlueprintItem, Question
from satprep.domain.models.scoring import Difficulty, SectionType
from satprep.domain.models.session import PracticeSession, SessionType


@pytest.fixture
async def algebra(question_repo):
    domain = await question_repo.upsert_domain("Algebra", SectionType.MATH, domain_id="algebra")
    subunit = await question_repo.upsert_subunit(
        domain.id, "Linear functions", subunit_id="linear-functions"
    )
    return domain, subunit


async def add(question_repo, domain, subunit, difficulty, text="Solve for x"):
    return await question_repo.add_question(
        Question(
            id=str(uuid.uuid4()),
            domain_id=domain.id,
            subunit_id=subunit.id,
            difficulty=difficulty,
            question_text=text,
            choices=["1", "2", "3", "4"],
            answer=2,
            explanation="Because.",
        )
    )


async def test_upsert_domain_is_idempotent(question_repo):
    first = await question_repo.upsert_domain("Algebra", SectionType.MATH)
    second = await question_repo.upsert_domain("Algebra", SectionType.MATH)
    assert first.id == second.id


async def test_upsert_uses_given_ids(algebra):
    domain, subunit = algebra
    assert domain.id == "algebra"
    assert subunit.id == "linear-functions"
    assert subunit.domain_id == "algebra"


async def test_add_and_fetch_round_trip(question_repo, algebra):
    domain, subunit = algebra
    stored = await add(question_repo, domain, subunit, Difficulty.MEDIUM)

    fetched = await question_repo.fetch(domain.id, subunit.id, None, [], 10)
    assert len(fetched) == 1
    assert fetched[0].id == stored.id
    assert fetched[0].choices == ["1", "2", "3", "4"]
    assert fetched[0].answer == 2
    assert fetched[0].created_at is not None


async def test_fetch_filters_by_difficulty(question_repo, algebra):
    domain, subunit = algebra
    hard = await add(question_repo, domain, subunit, Difficulty.HARD)
    await add(question_repo, domain, subunit, Difficulty.EASY)

    fetched = await question_repo.fetch(domain.id, subunit.id, [Difficulty.HARD], [], 10)
    assert [q.id for q in fetched] == [hard.id]


async def test_fetch_excludes_ids(question_repo, algebra):
    domain, subunit = algebra
    first = await add(question_repo, domain, subunit, Difficulty.EASY)
    second = await add(question_repo, domain, subunit, Difficulty.EASY)

    fetched = await question_repo.fetch(domain.id, subunit.id, None, [first.id], 10)
    assert [q.id for q in fetched] == [second.id]


async def test_fetch_short_pool_returns_fewer(question_repo, algebra):
    """A short pool is not an error; the caller gets what exists."""
    domain, subunit = algebra
    await add(question_repo, domain, subunit, Difficulty.MEDIUM)

    fetched = await question_repo.fetch(domain.id, subunit.id, [Difficulty.MEDIUM], [], 5)
    assert len(fetched) == 1


async def test_fetch_respects_limit(question_repo, algebra):
    domain, subunit = algebra
    for _ in range(4):
        await add(question_repo, domain, subunit, Difficulty.MEDIUM)

    assert len(await question_repo.fetch(domain.id, subunit.id, None, [], 2)) == 2
    assert await question_repo.fetch(domain.id, subunit.id, None, [], 0) == []


async def test_fetch_with_empty_difficulty_list(question_repo, algebra):
    domain, subunit = algebra
    await add(question_repo, domain, subunit, Difficulty.MEDIUM)
    assert await question_repo.fetch(domain.id, subunit.id, [], [], 5) == []


async def test_usage_tracking(question_repo, session_repo, algebra):
    domain, subunit = algebra
    first = await add(question_repo, domain, subunit, Difficulty.EASY, "first")
    second = await add(question_repo, domain, subunit, Difficulty.EASY, "second")

    session = await session_repo.create(
        PracticeSession(
            id="session-1",
            user_id="user-1",
            session_type=SessionType.FULL_TEST,
            started_at=datetime.now(timezone.utc),
        ),
        sections=[SectionType.MATH],
    )
    await question_repo.record_usage(
        "user-1",
        [second.id, first.id],
        session.id,
        "full_test",
        section_type=SectionType.MATH,
        module_number=1,
    )

    used = await question_repo.used_question_ids(session.id, "user-1")
    assert set(used) == {first.id, second.id}
    assert await question_repo.used_question_ids(session.id, "someone-else") == []

    served = await question_repo.served_questions(session.id, SectionType.MATH, 1)
    assert [q.id for q in served] == [second.id, first.id]
    assert await question_repo.served_questions(session.id, SectionType.MATH, 2) == []


async def test_get_many(question_repo, algebra):
    domain, subunit = algebra
    stored = await add(question_repo, domain, subunit, Difficulty.EASY)

    found = await question_repo.get_many([stored.id, "missing"])
    assert list(found) == [stored.id]
    assert await question_repo.get_many([]) == {}


async def test_find_subunit_by_names(question_repo, algebra):
    _, subunit = algebra
    found = await question_repo.find_subunit("Algebra", "Linear functions")
    assert found.id == subunit.id
    assert await question_repo.find_subunit("Algebra", "Circles") is None


async def test_list_domains_with_subunits(question_repo, algebra):
    reading = await question_repo.upsert_domain("Craft and Structure", SectionType.READING)
    await question_repo.upsert_subunit(reading.id, "Words in Context")

    domains = await question_repo.list_domains_with_subunits()
    assert [d.name for d in domains] == ["Algebra", "Craft and Structure"]
    assert [s.name for s in domains[0].subunits] == ["Linear functions"]

    math_only = await question_repo.list_domains_with_subunits(SectionType.MATH)
    assert [d.name for d in math_only] == ["Algebra"]


async def test_get_domain(question_repo, algebra):
    domain, _ = algebra
    found = await question_repo.get_domain(domain.id)
    assert found.section_type == SectionType.MATH
    assert await question_repo.get_domain("missing") is None


async def test_blueprint_ordered_by_question_number(question_repo, algebra):
    domain, subunit = algebra
    for number in (3, 1, 2):
        await question_repo.add_blueprint_item(
            BlueprintItem(
                id=f"math-{number:02d}",
                section_type=SectionType.MATH,
                question_number=number,
                domain_id=domain.id,
                subunit_id=subunit.id,
            )
        )

    blueprint = await question_repo.get_blueprint(SectionType.MATH)
    assert [b.question_number for b in blueprint] == [1, 2, 3]
    assert await question_repo.get_blueprint(SectionType.READING) == []
