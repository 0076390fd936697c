"""
FeedService: builds a viewer's personalized feed from one snapshot.
"""
import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID
from django.db import transaction
from recommendations.collectors import MomentSnapshotRepository
from recommendations.dtos import FeedPage, ScoredMoment
from recommendations.feed_selector import select_page
from recommendations.models import RecommendationScore
from recommendations.scoring_service import PersonalizationScorer

logger = logging.getLogger(__name__)


class FeedService:
    """
    Orchestrates one scoring pass:
    1. Bulk fetch interests, followed ids and candidates
    2. Score every candidate for the viewer
    3. Order and paginate

    A failed fetch raises SnapshotFetchError and no feed is returned.
    """

    def __init__(
        self,
        repository: Optional[MomentSnapshotRepository] = None,
        scorer: Optional[PersonalizationScorer] = None,
    ):
        self.repository = repository or MomentSnapshotRepository()
        self.scorer = scorer or PersonalizationScorer()

    def score_for_viewer(self, viewer_id: UUID, now: Optional[datetime] = None) -> List[ScoredMoment]:
        """
        Scores every candidate for the viewer from one snapshot.

        The three fetches share a transaction. On PostgreSQL under the default
        READ COMMITTED level each query still sees its own snapshot, so
        interests, follows and candidates are only guaranteed to agree under
        REPEATABLE READ (set through the database OPTIONS).
        """
        with transaction.atomic():
            interests = self.repository.fetch_interest_profile(viewer_id)
            followed_ids = self.repository.fetch_followed_ids(viewer_id)
            candidates = self.repository.fetch_candidate_moments(viewer_id)

        logger.debug(
            f"Scoring {len(candidates)} candidates for {viewer_id} "
            f"({len(interests)} interests, {len(followed_ids)} follows)"
        )
        return self.scorer.score_candidates(candidates, interests, followed_ids, now=now)

    def get_personalized_feed(
        self,
        viewer_id: UUID,
        limit: int = 20,
        offset: int = 0,
        now: Optional[datetime] = None,
    ) -> FeedPage:
        """
        Computes the viewer's feed live and returns one page of it.

        Args:
            viewer_id: UserProfile id of the viewer
            limit: Page size
            offset: Number of ranked moments to skip

        Returns:
            FeedPage: Ordered moment ids plus the total candidate count
        """
        scored = self.score_for_viewer(viewer_id, now=now)
        return select_page(scored, limit, offset)

    def refresh_recommendations(self, viewer_id: UUID, now: Optional[datetime] = None) -> int:
        """
        Recomputes the viewer's scores and replaces the cached set.
        The delete and insert share a transaction, so readers see either the
        old set or the new one.

        Returns:
            int: Number of cached scores written
        """
        scored = self.score_for_viewer(viewer_id, now=now)

        with transaction.atomic():
            RecommendationScore.objects.filter(user_id=viewer_id).delete()
            RecommendationScore.objects.bulk_create([
                RecommendationScore(
                    user_id=viewer_id,
                    moment_id=s.moment_id,
                    score=s.final_score,
                    factors=s.factors,
                )
                for s in scored
            ])

        logger.info(f"Refreshed {len(scored)} recommendation scores for {viewer_id}")
        return len(scored)

    def get_cached_feed(self, viewer_id: UUID, limit: int = 20, offset: int = 0) -> FeedPage:
        """
        Serves a page from the cached scores, with the same ordering as the
        live feed. Falls back to a live pass when nothing is cached.
        """
        cached = [
            ScoredMoment(moment_id=moment_id, final_score=score)
            for moment_id, score in RecommendationScore.objects.filter(
                user_id=viewer_id
            ).values_list('moment_id', 'score')
        ]
        if not cached:
            logger.debug(f"No cached scores for {viewer_id}, computing live feed")
            return self.get_personalized_feed(viewer_id, limit, offset)

        return select_page(cached, limit, offset)


def get_personalized_feed(viewer_id: UUID, limit: int = 20, offset: int = 0) -> FeedPage:
    return FeedService().get_personalized_feed(viewer_id, limit, offset)
