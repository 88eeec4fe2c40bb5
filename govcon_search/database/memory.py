"""
In-Memory Contract Store
Snapshot store used for development, CSV loads and tests
"""
import threading
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from govcon_search.core.logging import get_logger
from govcon_search.core.models.contract import Contract
from govcon_search.core.search.ranking import (
    WeightedTerm,
    contract_matches,
    rank_contracts,
    score,
)
from govcon_search.core.search.text import contains_phrase
from govcon_search.database.base import ContractStore

logger = get_logger(__name__)

ContractLike = Union[Contract, Dict[str, Any]]


class InMemoryContractStore(ContractStore):
    """
    Contract store over an in-process list

    Matching and scoring run the same pure functions the ranking module
    exposes, so results equal what the SQL backend computes.
    """

    name = "memory"

    def __init__(self, contracts: Optional[Iterable[ContractLike]] = None):
        self._lock = threading.Lock()
        self._contracts: List[Contract] = []
        if contracts:
            self.load_contracts(contracts)

    @staticmethod
    def _coerce(items: Iterable[ContractLike]) -> List[Contract]:
        coerced = []
        for item in items:
            contract = item if isinstance(item, Contract) else Contract.from_row(item)
            if contract is not None:
                coerced.append(contract)
        return coerced

    def load_contracts(self, contracts: Iterable[ContractLike]) -> int:
        """
        Replace the snapshot

        Returns:
            Number of contracts loaded (invalid rows are skipped)
        """
        snapshot = self._coerce(contracts)
        with self._lock:
            self._contracts = snapshot
        logger.info(f"Loaded {len(snapshot)} contracts into memory store")
        return len(snapshot)

    def add_contracts(self, contracts: Iterable[ContractLike]) -> Dict[str, int]:
        """
        Insert or update contracts

        An incoming record replaces an existing one when either its id or its
        solicitation number matches.

        Returns:
            Dict with "inserted" and "updated" counts
        """
        incoming = self._coerce(contracts)
        inserted = 0
        updated = 0

        with self._lock:
            snapshot = list(self._contracts)
            by_id = {c.id: i for i, c in enumerate(snapshot)}
            by_solicitation = {
                c.solicitation_number: i for i, c in enumerate(snapshot) if c.solicitation_number
            }

            for contract in incoming:
                index = by_id.get(contract.id)
                if index is None and contract.solicitation_number:
                    index = by_solicitation.get(contract.solicitation_number)

                if index is None:
                    index = len(snapshot)
                    snapshot.append(contract)
                    inserted += 1
                else:
                    snapshot[index] = contract
                    updated += 1

                by_id[contract.id] = index
                if contract.solicitation_number:
                    by_solicitation[contract.solicitation_number] = index

            self._contracts = snapshot

        logger.info(
            f"Memory store upsert: {inserted} inserted, {updated} updated",
            extra={"inserted": inserted, "updated": updated},
        )
        return {"inserted": inserted, "updated": updated}

    def _snapshot(self) -> List[Contract]:
        with self._lock:
            return self._contracts

    def search_contracts(
        self,
        terms: Sequence[WeightedTerm],
        fields: Optional[Sequence[str]] = None,
    ) -> List[Contract]:
        fields = self.default_fields(fields)
        terms = [t for t in terms if t.term]
        if not terms:
            return []

        matches = []
        for contract in self._snapshot():
            relevance = score(contract, terms, fields)
            if relevance > 0:
                matches.append(contract.model_copy(update={"relevance_score": relevance}))
        return rank_contracts(matches)

    def count_matches(self, terms: Sequence[str], fields: Optional[Sequence[str]] = None) -> int:
        fields = self.default_fields(fields)
        terms = [t for t in terms if t]
        if not terms:
            return 0
        return sum(1 for c in self._snapshot() if contract_matches(c, terms, fields))

    def phrase_search(self, phrase: str, fields: Optional[Sequence[str]] = None) -> List[Contract]:
        """Whole-word phrase match, scored with the phrase as a single term"""
        fields = self.default_fields(fields)
        if not phrase or not phrase.strip():
            return []

        weighted = [WeightedTerm(phrase.strip().lower(), 1)]
        matches = []
        for contract in self._snapshot():
            if any(contains_phrase(contract.field_text(f), phrase) for f in fields):
                matches.append(contract.model_copy(update={"relevance_score": score(contract, weighted, fields)}))
        return rank_contracts(matches)

    def get_all_contracts(self) -> List[Contract]:
        return list(self._snapshot())

    def count_contracts(self) -> int:
        return len(self._snapshot())
