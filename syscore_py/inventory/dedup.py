"""
Dedup gate for Syscore.

Sources are presented in strict trust order, so the first record to claim an
identity is kept and later duplicates are dropped untouched.
"""

import logging
from typing import List, Set

from syscore_py.inventory import CandidateRecord

logger = logging.getLogger("syscore.dedup")


class DedupGate:
    """Admits candidates into the growing accepted list."""

    def __init__(self) -> None:
        self.accepted: List[CandidateRecord] = []
        self._names: Set[str] = set()

    def is_duplicate(self, candidate: CandidateRecord) -> bool:
        # An exact (name, install location) match implies a case-insensitive
        # name match, so the name index covers both duplicate rules.
        return candidate.name.casefold() in self._names

    def admit(self, candidate: CandidateRecord) -> bool:
        """
        Accept *candidate* unless it duplicates an accepted record.

        Returns:
            True if the candidate was appended to ``accepted``.
        """
        if self.is_duplicate(candidate):
            logger.debug(
                f"Skipping duplicate {candidate.name!r} from {candidate.source.label}"
            )
            return False
        self.accepted.append(candidate)
        self._names.add(candidate.name.casefold())
        return True

    def __len__(self) -> int:
        return len(self.accepted)
