"""Question bank browsing routes."""

from typing import Optional

from fastapi import APIRouter, Query

from satprep.api.dependencies import QuestionRepoDep
from satprep.api.schemas import DomainListResponse, DomainSchema, SubunitSchema
from satprep.domain.models.scoring import SectionType

router = APIRouter(prefix="/domains", tags=["domains"])


@router.get("", response_model=DomainListResponse)
async def list_domains(
    repo: QuestionRepoDep,
    section: Optional[SectionType] = Query(default=None),
):
    """Domains with their subunits, optionally filtered by section."""
    domains = await repo.list_domains_with_subunits(section)
    return DomainListResponse(
        domains=[
            DomainSchema(
                id=d.id,
                name=d.name,
                section_type=d.section_type,
                description=d.description,
                subunits=[
                    SubunitSchema(id=s.id, name=s.name, description=s.description)
                    for s in d.subunits
                ],
            )
            for d in domains
        ]
    )
