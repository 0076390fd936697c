"""
MomentSnapshotRepository: bulk reads that feed one scoring or ranking pass.
Each method issues a single query so a pass stays O(N) in candidates.
"""
import logging
from functools import wraps
from typing import Dict, List, Set
from uuid import UUID
from django.db import DatabaseError
from locations.models import interest_category_for
from moments.models import Moment
from recommendations.dtos import CandidateMoment, OwnerScoredMoment
from recommendations.exceptions import SnapshotFetchError
from user.models import FollowRelation, UserInterest

logger = logging.getLogger(__name__)


def _snapshot_fetch(source: str):
    """Turns a DatabaseError from the wrapped fetch into SnapshotFetchError"""
    def decorator(func):
        @wraps(func)
        def wrapper(self, user_id, *args, **kwargs):
            try:
                return func(self, user_id, *args, **kwargs)
            except DatabaseError as e:
                logger.error(f"Error fetching {source} for user {user_id}: {str(e)}")
                raise SnapshotFetchError(source, user_id) from e
        return wrapper
    return decorator


class MomentSnapshotRepository:
    """
    Read-only access to the state the scorer and rank assigner consume.
    Views and services go through this class instead of querying the ORM.
    """

    @_snapshot_fetch('candidate moments')
    def fetch_candidate_moments(self, excluding_user_id: UUID) -> List[CandidateMoment]:
        """
        Returns every scored moment not authored by the given user.

        Args:
            excluding_user_id: UserProfile id of the viewer

        Returns:
            List[CandidateMoment]: Candidates with their interest category resolved
        """
        rows = Moment.objects.filter(
            composite_score__isnull=False
        ).exclude(
            author_id=excluding_user_id
        ).values_list(
            'id', 'author_id', 'composite_score', 'like_count',
            'view_count', 'created_at', 'place__category'
        )

        return [
            CandidateMoment(
                moment_id=moment_id,
                author_id=author_id,
                composite_score=composite_score,
                like_count=like_count,
                view_count=view_count,
                created_at=created_at,
                category=interest_category_for(place_category),
            )
            for moment_id, author_id, composite_score, like_count, view_count, created_at, place_category in rows
        ]

    @_snapshot_fetch('interest profile')
    def fetch_interest_profile(self, user_id: UUID) -> Dict[str, int]:
        return dict(
            UserInterest.objects.filter(user_id=user_id).values_list('category', 'weight')
        )

    @_snapshot_fetch('followed ids')
    def fetch_followed_ids(self, user_id: UUID) -> Set[UUID]:
        return set(
            FollowRelation.objects.filter(follower_id=user_id).values_list('following_id', flat=True)
        )

    @_snapshot_fetch('owner scored moments')
    def fetch_owner_scored_moments(self, owner_id: UUID, for_update: bool = False) -> List[OwnerScoredMoment]:
        """
        Returns the owner's scored moments, oldest first.

        Args:
            owner_id: UserProfile id of the owner
            for_update: Lock the rows; only valid inside transaction.atomic()

        Returns:
            List[OwnerScoredMoment]: Ordered by created_at, then id
        """
        queryset = Moment.objects.filter(author_id=owner_id, composite_score__isnull=False)
        if for_update:
            queryset = queryset.select_for_update()

        return [
            OwnerScoredMoment(moment_id=moment_id, composite_score=composite_score)
            for moment_id, composite_score in queryset.order_by('created_at', 'id').values_list('id', 'composite_score')
        ]
