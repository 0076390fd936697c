import uuid
from typing import Optional
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from django.utils import timezone
from locations.models import Place
from user.models import UserProfile
from moments.scoring import compute_composite_score


RATING_VALIDATORS = [MinValueValidator(1), MaxValueValidator(5)]


class Moment(models.Model):
    """
    A user post tied to a place visit, carrying up to four sub-ratings.

    composite_score is derived from the ratings and stays NULL until the
    moment has an overall rating. rank is the moment's position among its
    author's scored moments and is rebuilt by moments.ranking.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    author = models.ForeignKey(UserProfile, on_delete=models.CASCADE, related_name='moments')
    place = models.ForeignKey(
        Place,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='moments'
    )
    caption = models.TextField(max_length=2000, blank=True, default="")

    # Sub-ratings (1-5); only overall is needed for a composite score
    rating_overall = models.PositiveSmallIntegerField(null=True, blank=True, validators=RATING_VALIDATORS)
    rating_value = models.PositiveSmallIntegerField(null=True, blank=True, validators=RATING_VALIDATORS)
    rating_authenticity = models.PositiveSmallIntegerField(null=True, blank=True, validators=RATING_VALIDATORS)
    rating_crowd = models.PositiveSmallIntegerField(null=True, blank=True, validators=RATING_VALIDATORS)

    composite_score = models.FloatField(
        null=True,
        blank=True,
        help_text="Normalized quality score (2.0 - 10.0) derived from the sub-ratings"
    )
    rank = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text="Position among the author's scored moments, 1 = best"
    )

    like_count = models.PositiveIntegerField(default=0)
    view_count = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'moments_moment'
        indexes = [
            models.Index(fields=['author', 'created_at'], name='moments_author_created_idx'),
            models.Index(fields=['composite_score'], name='moments_composite_score_idx'),
        ]

    def __str__(self):
        return f"Moment {self.id} by {self.author}"

    @property
    def is_scored(self) -> bool:
        return self.composite_score is not None

    def apply_ratings(
        self,
        overall: Optional[int],
        value: Optional[int] = None,
        authenticity: Optional[int] = None,
        crowd: Optional[int] = None,
    ) -> Optional[float]:
        """
        Sets the sub-ratings and recomputes composite_score in memory.
        Without an overall rating the moment is left unscored.

        Returns:
            The new composite score, or None when overall is missing
        """
        self.rating_overall = overall
        self.rating_value = value
        self.rating_authenticity = authenticity
        self.rating_crowd = crowd

        if overall is None:
            self.composite_score = None
        else:
            self.composite_score = compute_composite_score(overall, value, authenticity, crowd)
        return self.composite_score
