"""
RankAssigner: rebuilds the per-author ranking of scored moments.
"""
import logging
from typing import List, Optional, Tuple
from uuid import UUID
from django.db import transaction
from moments.models import Moment
from recommendations.collectors import MomentSnapshotRepository
from recommendations.dtos import OwnerScoredMoment

logger = logging.getLogger(__name__)


def assign_ranks(scored_moments: List[OwnerScoredMoment]) -> List[Tuple[UUID, int]]:
    """
    Orders moments by composite score (highest first) and numbers them 1..N.

    The input is expected oldest first; the sort is stable, so moments with
    equal scores keep that order and the older one gets the better rank.

    Returns:
        List of (moment_id, rank) pairs in rank order
    """
    ordered = sorted(scored_moments, key=lambda m: m.composite_score, reverse=True)
    return [(moment.moment_id, position) for position, moment in enumerate(ordered, start=1)]


class RankAssigner:
    """
    Recomputes an owner's whole rank set and writes it in one transaction.
    Ranks are never patched one moment at a time.
    """

    def __init__(self, repository: Optional[MomentSnapshotRepository] = None):
        self.repository = repository or MomentSnapshotRepository()

    def recompute_ranks(self, owner_id: UUID) -> List[Tuple[UUID, int]]:
        """
        Steps:
        1. Lock all of the owner's moments
        2. Fetch the scored ones oldest first and assign ranks
        3. Clear stale ranks on moments that lost their score
        4. Write the new ranks with a single bulk update

        Args:
            owner_id: UserProfile id whose moments are re-ranked

        Returns:
            List of (moment_id, rank) pairs that were written
        """
        with transaction.atomic():
            # Lock every moment of the owner, scored or not, so a concurrent
            # pass for the same owner waits for this one to commit
            list(Moment.objects.select_for_update().filter(author_id=owner_id).values_list('id', flat=True))

            scored_moments = self.repository.fetch_owner_scored_moments(owner_id, for_update=True)
            assignments = assign_ranks(scored_moments)

            Moment.objects.filter(
                author_id=owner_id,
                composite_score__isnull=True,
                rank__isnull=False,
            ).update(rank=None)

            updated = [Moment(id=moment_id, rank=rank) for moment_id, rank in assignments]
            if updated:
                Moment.objects.bulk_update(updated, ['rank'])

        logger.info(f"Recomputed ranks for owner {owner_id}: {len(assignments)} scored moments")
        return assignments


def recompute_ranks(owner_id: UUID) -> List[Tuple[UUID, int]]:
    return RankAssigner().recompute_ranks(owner_id)
