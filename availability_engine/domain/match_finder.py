"""
Ranks a candidate pool by how much weekly availability it shares with a target user.
"""

import logging
from typing import List, Optional, Sequence

from .exceptions import UserNotFound
from .models import MatchCandidate, UserSlots
from .overlap_calculator import OverlapCalculator
from .validation import MIN_OVERLAP_RANGE, validate_duration

logger = logging.getLogger(__name__)


class MatchFinder:
    """
    Finds users whose availability overlaps a target's by a minimum amount.

    The pool is scanned linearly; callers are expected to bound its size.
    """

    def __init__(self, overlap_calculator: Optional[OverlapCalculator] = None):
        self.overlap_calculator = overlap_calculator or OverlapCalculator()

    def find_matches(
        self,
        target_user_id: str,
        candidate_pool: Sequence[UserSlots],
        min_overlap_minutes: int,
    ) -> List[MatchCandidate]:
        """
        Rank candidates by total overlap with the target.

        Args:
            target_user_id: User to match against; their slots come from the pool
            candidate_pool: Users considered for matching, the target included
            min_overlap_minutes: Inclusive threshold on total weekly overlap

        Returns:
            Matches sorted by total overlap descending, then user id ascending

        Raises:
            UserNotFound: If the target is not part of a non-empty pool
            InvalidTimeFormat: If the threshold is outside 15-1440 minutes
        """
        validate_duration(min_overlap_minutes, *MIN_OVERLAP_RANGE)

        if not candidate_pool:
            return []

        target = self._find_target(target_user_id, candidate_pool)
        matches: List[MatchCandidate] = []

        for candidate in candidate_pool:
            if candidate.user_id == target_user_id:
                continue

            windows = self.overlap_calculator.compute_overlap(target.slots, candidate.slots)
            total = sum(window.duration_minutes for window in windows)

            if total >= min_overlap_minutes:
                matches.append(
                    MatchCandidate(
                        user_id=candidate.user_id,
                        total_overlap_minutes=total,
                        overlap_windows=windows,
                    )
                )

        matches.sort(key=lambda m: (-m.total_overlap_minutes, m.user_id))

        logger.debug(
            "Matched %d of %d candidate(s) for %s (min %d min)",
            len(matches),
            len(candidate_pool) - 1,
            target_user_id,
            min_overlap_minutes,
        )
        return matches

    @staticmethod
    def _find_target(target_user_id: str, candidate_pool: Sequence[UserSlots]) -> UserSlots:
        for entry in candidate_pool:
            if entry.user_id == target_user_id:
                return entry
        raise UserNotFound(target_user_id)
