import uuid
from django.db import models
from moments.models import Moment
from user.models import UserProfile


class RecommendationScore(models.Model):
    """
    Cached ranking score of one moment for one viewer.
    Written only by FeedService.refresh_recommendations(), which replaces a
    viewer's whole set in one transaction.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(UserProfile, on_delete=models.CASCADE, related_name='recommendation_scores')
    moment = models.ForeignKey(Moment, on_delete=models.CASCADE, related_name='recommendation_scores')
    score = models.FloatField()
    factors = models.JSONField(
        default=dict,
        help_text="Per-term breakdown: interest, social, engagement, recency, quality"
    )
    computed_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'recommendations_score'
        unique_together = ('user', 'moment')
        indexes = [
            models.Index(fields=['user', 'score'], name='reco_user_score_idx'),
        ]

    def __str__(self):
        return f"{self.user} - {self.moment_id}: {self.score:.3f}"
