"""Adaptive module routing and SAT score scaling."""

from satprep.services.scoring.attempt import SectionAttempt
from satprep.services.scoring.engine import (
    combine_modules,
    composite,
    decide,
    scale,
    select_pool,
)
from satprep.services.scoring.policy import SECTION_POLICIES, SectionPolicy, policy_for

__all__ = [
    "SectionAttempt",
    "combine_modules",
    "composite",
    "decide",
    "scale",
    "select_pool",
    "SECTION_POLICIES",
    "SectionPolicy",
    "policy_for",
]
