"""
Data Transfer Objects (DTOs) for snapshots and results in the recommendation system.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID


@dataclass(frozen=True)
class CandidateMoment:
    """
    Read-only view of a moment that may appear in another user's feed.
    category is the interest category of the moment's place, if any.
    """
    moment_id: UUID
    author_id: UUID
    composite_score: float
    like_count: int
    view_count: int
    created_at: datetime
    category: Optional[str] = None

    @property
    def engagement(self) -> int:
        return self.like_count + self.view_count


@dataclass(frozen=True)
class OwnerScoredMoment:
    """A scored moment of one owner, as consumed by the rank assigner"""
    moment_id: UUID
    composite_score: float


@dataclass
class ScoredMoment:
    """
    Candidate with its ranking score for one viewer.
    Returned by PersonalizationScorer.score_candidates().
    """
    moment_id: UUID
    final_score: float

    # Breakdown of score components
    interest_score: float = 0.0
    social_score: float = 0.0
    engagement_score: float = 0.0
    recency_score: float = 0.0
    quality_score: float = 0.0

    @property
    def factors(self) -> Dict[str, float]:
        return {
            'interest': self.interest_score,
            'social': self.social_score,
            'engagement': self.engagement_score,
            'recency': self.recency_score,
            'quality': self.quality_score,
        }


@dataclass
class FeedPage:
    """One page of a personalized feed"""
    ids: List[UUID] = field(default_factory=list)
    total: int = 0
    offset: int = 0

    @property
    def has_more(self) -> bool:
        return self.offset + len(self.ids) < self.total
