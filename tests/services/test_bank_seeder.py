"""Tests for writing the bank layout to the database."""

from satprep.domain.models.scoring import SectionType
from satprep.services.bank_seeder import seed_question_bank


async def test_seed_writes_layout(question_repo, bank_layout):
    report = await seed_question_bank(question_repo, bank_layout)

    assert report.domains == len(bank_layout.domains)
    assert report.subunits == sum(len(d.subunits) for d in bank_layout.domains)
    assert report.blueprint_positions == 27 + 22

    domains = await question_repo.list_domains_with_subunits()
    assert {d.id for d in domains} == {d.id for d in bank_layout.domains}

    reading = await question_repo.get_blueprint(SectionType.READING)
    math = await question_repo.get_blueprint(SectionType.MATH)
    assert [b.question_number for b in reading] == list(range(1, 28))
    assert [b.question_number for b in math] == list(range(1, 23))
    assert [b.subunit_id for b in math] == [
        b.subunit_id for b in bank_layout.blueprint[SectionType.MATH]
    ]


async def test_seed_is_idempotent(question_repo, bank_layout):
    await seed_question_bank(question_repo, bank_layout)
    await seed_question_bank(question_repo, bank_layout)

    domains = await question_repo.list_domains_with_subunits()
    assert len(domains) == len(bank_layout.domains)
    assert sum(len(d.subunits) for d in domains) == sum(
        len(d.subunits) for d in bank_layout.domains
    )
    assert len(await question_repo.get_blueprint(SectionType.READING)) == 27
    assert len(await question_repo.get_blueprint(SectionType.MATH)) == 22
