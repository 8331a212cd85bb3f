"""
Service protocol definitions (interfaces).

Collaborators of the scoring flow, defined with typing.Protocol so that
services depend on structure rather than on the aiosqlite repositories.
"""

from typing import Iterable, List, Optional, Protocol, Union, runtime_checkable

from satprep.domain.models.question import Question
from satprep.domain.models.scoring import (
    CompositeScore,
    Difficulty,
    ModuleResult,
    ScaledScore,
    SectionType,
)


@runtime_checkable
class IQuestionRepository(Protocol):
    """
    Supplies questions filtered by domain, subunit and difficulty.

    Returns fewer than `limit` questions when the unused pool is short;
    callers handle the shortfall (e.g. by broadening the difficulty filter).
    """

    async def fetch(
        self,
        domain_id: Optional[str],
        subunit_id: Optional[str],
        difficulties: Optional[Iterable[Difficulty]],
        exclude_ids: Iterable[str],
        limit: int,
    ) -> List[Question]:
        ...


@runtime_checkable
class ISessionStore(Protocol):
    """
    Persists module results and final scores for a session.

    The scoring engine never touches storage; the orchestrating service
    writes through this interface after each computation.
    """

    async def record_module_result(
        self, session_id: str, module_number: int, result: ModuleResult
    ) -> None:
        ...

    async def record_final_score(
        self,
        session_id: str,
        score: Union[ScaledScore, CompositeScore],
        section_type: Optional[SectionType] = None,
    ) -> None:
        ...
