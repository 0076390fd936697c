"""
Domain service for moment writes that affect scoring.
Keeps composite scores and author ranks in step with rating changes.
"""
import logging
from typing import Optional
from django.db import transaction
from locations.models import Place
from user.models import UserProfile
from moments.models import Moment
from moments.ranking import RankAssigner

logger = logging.getLogger(__name__)


class MomentService:
    """
    Creates, re-rates and deletes moments.
    Every write that changes an author's set of scored moments is followed
    by a full rank recompute for that author.
    """

    def __init__(self, rank_assigner: Optional[RankAssigner] = None):
        self.rank_assigner = rank_assigner or RankAssigner()

    def create_moment(
        self,
        author: UserProfile,
        place: Optional[Place] = None,
        caption: str = "",
        overall: Optional[int] = None,
        value: Optional[int] = None,
        authenticity: Optional[int] = None,
        crowd: Optional[int] = None,
    ) -> Moment:
        """
        Saves a new moment and, when it is rated, re-ranks the author's moments.

        Args:
            author: UserProfile posting the moment
            place: Optional Place the moment is attached to
            caption: Free text
            overall: Overall rating (1-5); without it the moment is unscored

        Returns:
            Moment: The saved moment
        """
        with transaction.atomic():
            moment = Moment(author=author, place=place, caption=caption)
            moment.apply_ratings(overall, value, authenticity, crowd)
            moment.save()

            if moment.is_scored:
                self.rank_assigner.recompute_ranks(author.id)

        logger.info(f"Moment {moment.id} created by {author.id} (score={moment.composite_score})")
        moment.refresh_from_db(fields=['rank'])
        return moment

    def update_ratings(
        self,
        moment: Moment,
        overall: Optional[int],
        value: Optional[int] = None,
        authenticity: Optional[int] = None,
        crowd: Optional[int] = None,
    ) -> Moment:
        """
        Replaces the sub-ratings of a moment and re-ranks its author.
        Ranks are rebuilt whenever the moment was or is now scored.
        """
        was_scored = moment.is_scored
        previous_score = moment.composite_score

        with transaction.atomic():
            moment.apply_ratings(overall, value, authenticity, crowd)
            moment.save(update_fields=[
                'rating_overall', 'rating_value', 'rating_authenticity',
                'rating_crowd', 'composite_score', 'updated_at',
            ])

            if was_scored or moment.is_scored:
                self.rank_assigner.recompute_ranks(moment.author_id)

        logger.info(f"Moment {moment.id} re-rated: {previous_score} -> {moment.composite_score}")
        moment.refresh_from_db(fields=['rank'])
        return moment

    def delete_moment(self, moment: Moment) -> None:
        """Hard delete; the author's remaining moments are re-ranked if needed"""
        author_id = moment.author_id
        was_scored = moment.is_scored
        moment_id = moment.id

        with transaction.atomic():
            moment.delete()
            if was_scored:
                self.rank_assigner.recompute_ranks(author_id)

        logger.info(f"Moment {moment_id} deleted by {author_id}")
