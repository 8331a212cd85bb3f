"""Writes a bank layout (domains, subunits, blueprint) to the database."""

from dataclasses import dataclass

import structlog

from satprep.core.bank_loader import BankLayout
from satprep.persistence.repositories.question_repo import QuestionRepository

log = structlog.get_logger(__name__)


@dataclass
class SeedReport:
    domains: int = 0
    subunits: int = 0
    blueprint_positions: int = 0


async def seed_question_bank(
    question_repo: QuestionRepository, layout: BankLayout
) -> SeedReport:
    """Upsert every domain and subunit, then replace the blueprint positions.

    Safe to re-run: existing domains and subunits are kept and blueprint
    positions are overwritten by (section, question number).
    """
    report = SeedReport()

    for domain in layout.domains:
        stored = await question_repo.upsert_domain(
            domain.name,
            domain.section_type,
            description=domain.description,
            domain_id=domain.id,
        )
        report.domains += 1
        for subunit in domain.subunits:
            await question_repo.upsert_subunit(
                stored.id,
                subunit.name,
                description=subunit.description,
                subunit_id=subunit.id,
            )
            report.subunits += 1

    for items in layout.blueprint.values():
        for item in items:
            await question_repo.add_blueprint_item(item)
            report.blueprint_positions += 1

    log.info(
        "question_bank_seeded",
        domains=report.domains,
        subunits=report.subunits,
        blueprint_positions=report.blueprint_positions,
    )
    return report
