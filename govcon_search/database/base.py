"""
Contract Store Interface
Query capabilities the search subsystem needs from a persistent store
"""
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from govcon_search.core.exceptions import PhraseSearchUnavailableError
from govcon_search.core.models.contract import Contract
from govcon_search.core.search.ranking import SEARCH_FIELDS, WeightedTerm


class ContractStore(ABC):
    """
    Read-only query surface over stored contracts

    Implementations return frozen Contract snapshots; the search subsystem
    never writes through this interface.
    """

    name: str = "store"

    @abstractmethod
    def search_contracts(
        self,
        terms: Sequence[WeightedTerm],
        fields: Optional[Sequence[str]] = None,
    ) -> List[Contract]:
        """
        Find contracts where any field contains any term

        Args:
            terms: Weighted terms; matching is case-insensitive substring
            fields: Fields to match and score (defaults to SEARCH_FIELDS)

        Returns:
            Matching contracts with relevance_score set, score > 0,
            ordered by score desc, posted_date desc, created_at desc
        """

    @abstractmethod
    def count_matches(self, terms: Sequence[str], fields: Optional[Sequence[str]] = None) -> int:
        """Number of contracts where any field contains any term"""

    def phrase_search(self, phrase: str, fields: Optional[Sequence[str]] = None) -> List[Contract]:
        """
        Exact phrase match through the store's full-text capability

        Raises:
            PhraseSearchUnavailableError: The store has no phrase capability or it failed
        """
        raise PhraseSearchUnavailableError(f"{self.name} store does not support phrase search")

    @abstractmethod
    def get_all_contracts(self) -> List[Contract]:
        """Full snapshot read used by browse mode and index builders"""

    @abstractmethod
    def count_contracts(self) -> int:
        """Total number of stored contracts"""

    def refresh(self) -> None:
        """Reload any cached snapshot after a data update; no-op for live stores"""

    def health_check(self) -> bool:
        return True

    @staticmethod
    def default_fields(fields: Optional[Sequence[str]]) -> List[str]:
        return list(fields) if fields else list(SEARCH_FIELDS)
