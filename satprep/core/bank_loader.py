"""Loader for the question bank layout YAML.

The layout names the content domains, their subunits and the per-section
blueprint. Blueprint entries carry a count and are expanded into numbered
positions here, so callers only ever see one BlueprintItem per question.
"""

from pathlib import Path
from typing import Dict, List, Optional

import structlog
import yaml
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from satprep.core.exceptions import ConfigurationError
from satprep.domain.models.question import BlueprintItem, Domain, Subunit
from satprep.domain.models.scoring import SectionType
from satprep.services.scoring.policy import policy_for

log = structlog.get_logger(__name__)


class _BlueprintEntry(BaseModel):
    domain: str
    subunit: str
    count: int = Field(default=1, ge=1)


class _SubunitEntry(BaseModel):
    id: str
    name: str
    description: Optional[str] = None


class _DomainEntry(BaseModel):
    id: str
    name: str
    section_type: SectionType
    description: Optional[str] = None
    subunits: List[_SubunitEntry] = Field(default_factory=list)


class _LayoutFile(BaseModel):
    domains: List[_DomainEntry]
    blueprint: Dict[SectionType, List[_BlueprintEntry]] = Field(default_factory=dict)


class BankLayout(BaseModel):
    """Domains with subunits plus the expanded blueprint per section."""

    domains: List[Domain]
    blueprint: Dict[SectionType, List[BlueprintItem]]


def load_bank_layout(path: Optional[Path] = None) -> BankLayout:
    """Load and validate config/question_bank.yaml.

    Raises:
        ConfigurationError: Missing file, invalid structure, a blueprint
            entry naming an unknown subunit, or a section whose positions do
            not add up to its module size
    """
    if path is None:
        path = Path(__file__).parent.parent.parent / "config" / "question_bank.yaml"

    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Question bank layout not found: {path}")

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    try:
        raw = _LayoutFile(**data)
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid question bank layout {path}: {e}")

    domains = [
        Domain(
            id=d.id,
            name=d.name,
            section_type=d.section_type,
            description=d.description,
            subunits=[
                Subunit(id=s.id, domain_id=d.id, name=s.name, description=s.description)
                for s in d.subunits
            ],
        )
        for d in raw.domains
    ]
    known = {
        (d.id, s.id): d.section_type for d in domains for s in d.subunits
    }

    blueprint: Dict[SectionType, List[BlueprintItem]] = {}
    for section, entries in raw.blueprint.items():
        items: List[BlueprintItem] = []
        for entry in entries:
            owner = known.get((entry.domain, entry.subunit))
            if owner is None:
                raise ConfigurationError(
                    f"Blueprint entry {entry.domain}/{entry.subunit} names an unknown subunit"
                )
            if owner != section:
                raise ConfigurationError(
                    f"Blueprint entry {entry.domain}/{entry.subunit} belongs to "
                    f"{owner.value}, not {section.value}"
                )
            for _ in range(entry.count):
                number = len(items) + 1
                items.append(
                    BlueprintItem(
                        id=f"{section.value}-{number:02d}",
                        section_type=section,
                        question_number=number,
                        domain_id=entry.domain,
                        subunit_id=entry.subunit,
                    )
                )

        expected = policy_for(section).module_size
        if len(items) != expected:
            raise ConfigurationError(
                f"{section.value} blueprint has {len(items)} positions, expected {expected}"
            )
        blueprint[section] = items

    log.info(
        "bank_layout_loaded",
        path=str(path),
        domains=len(domains),
        positions={s.value: len(items) for s, items in blueprint.items()},
    )
    return BankLayout(domains=domains, blueprint=blueprint)
