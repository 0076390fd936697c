"""
PersonalizationScorer: The core algorithmic engine for the personalized feed.
Implements an additive heuristic over interest, social, engagement, recency and quality signals.
"""
import math
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence
from uuid import UUID
from django.utils import timezone
from recommendations.conf import get_feed_scoring_config
from recommendations.dtos import CandidateMoment, ScoredMoment

SECONDS_PER_DAY = 86400.0


class PersonalizationScorer:
    """
    Algorithm Service: scores candidate moments for one viewer.

    Score = Interest + Social + Engagement + Recency + Quality

    Each term is computed on its own and multiplied by its weight, so any
    term can be reweighted or switched off (weight 0) without touching the
    others. The score breakdown is kept on every ScoredMoment.
    """

    def __init__(
        self,
        weight_interest: Optional[float] = None,
        weight_social: Optional[float] = None,
        weight_engagement: Optional[float] = None,
        weight_recency: Optional[float] = None,
        weight_quality: Optional[float] = None,
        recency_days: Optional[float] = None,
    ):
        """Initialize scorer with settings weights, overridden by any given here"""
        config = get_feed_scoring_config()
        weights = config['WEIGHTS']

        self.WEIGHT_INTEREST = weights['interest'] if weight_interest is None else weight_interest
        self.WEIGHT_SOCIAL = weights['social'] if weight_social is None else weight_social
        self.WEIGHT_ENGAGEMENT = weights['engagement'] if weight_engagement is None else weight_engagement
        self.WEIGHT_RECENCY = weights['recency'] if weight_recency is None else weight_recency
        self.WEIGHT_QUALITY = weights['quality'] if weight_quality is None else weight_quality
        self.RECENCY_DAYS = config['RECENCY_DAYS'] if recency_days is None else recency_days

    def score_candidates(
        self,
        candidates: Sequence[CandidateMoment],
        interests: Dict[str, int],
        followed_ids: Iterable[UUID],
        now: Optional[datetime] = None,
    ) -> List[ScoredMoment]:
        """
        Scores every candidate of one batch for one viewer.

        Engagement is normalized against the most engaged candidate of this
        batch, so the same moment can score differently in another batch.

        Args:
            candidates: All scored moments not authored by the viewer
            interests: Viewer's interest profile (category -> weight 1-10)
            followed_ids: UserProfile ids the viewer follows
            now: Reference time for recency; defaults to timezone.now()

        Returns:
            List[ScoredMoment]: One entry per candidate, in input order
        """
        if not candidates:
            return []

        now = now or timezone.now()
        followed = set(followed_ids)
        max_engagement = self.max_engagement(candidates)

        return [
            self.compute_score(candidate, interests, followed, max_engagement, now)
            for candidate in candidates
        ]

    def compute_score(
        self,
        candidate: CandidateMoment,
        interests: Dict[str, int],
        followed_ids: set,
        max_engagement: int,
        now: datetime,
    ) -> ScoredMoment:
        """
        Calculates the ranking score of a single candidate.

        Formula:
        Score = 3 * InterestWeight
              + 2 * [author followed]
              + 2 * Engagement / MaxEngagement
              + exp(-AgeDays / 10)
              + CompositeScore / 10
        """
        interest_score = self.WEIGHT_INTEREST * self.interest_affinity(candidate.category, interests)
        social_score = self.WEIGHT_SOCIAL * (1.0 if candidate.author_id in followed_ids else 0.0)
        engagement_score = self.WEIGHT_ENGAGEMENT * self.normalized_engagement(candidate, max_engagement)
        recency_score = self.WEIGHT_RECENCY * self.recency_decay(candidate.created_at, now)
        quality_score = self.WEIGHT_QUALITY * candidate.composite_score

        final_score = interest_score + social_score + engagement_score + recency_score + quality_score

        return ScoredMoment(
            moment_id=candidate.moment_id,
            final_score=final_score,
            interest_score=interest_score,
            social_score=social_score,
            engagement_score=engagement_score,
            recency_score=recency_score,
            quality_score=quality_score,
        )

    # Helper methods
    @staticmethod
    def interest_affinity(category: Optional[str], interests: Dict[str, int]) -> float:
        """Weight of the candidate's category in the viewer's profile, 0 when absent"""
        if not category:
            return 0.0
        return float(interests.get(category, 0))

    @staticmethod
    def max_engagement(candidates: Sequence[CandidateMoment]) -> int:
        # Floor of 1 keeps an all-zero batch from dividing by zero
        return max([candidate.engagement for candidate in candidates] + [1])

    @staticmethod
    def normalized_engagement(candidate: CandidateMoment, max_engagement: int) -> float:
        return candidate.engagement / max(max_engagement, 1)

    def recency_decay(self, created_at: datetime, now: datetime) -> float:
        """
        Exponential decay on the moment's age.

        Formula: score = exp(-age_days / 10)
        Same-day moments score ~1.0, two-week-old moments ~0.25.
        """
        age_days = (now - created_at).total_seconds() / SECONDS_PER_DAY
        return math.exp(-age_days / self.RECENCY_DAYS)
