import uuid

from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models,transaction
from django.conf import settings
from django.db.models import F


class InterestCategory(models.TextChoices):
    """Interest tags a user picks during onboarding"""
    FOOD_DRINK = 'FOOD_DRINK', 'Food & Drink'
    ART_CULTURE = 'ART_CULTURE', 'Art & Culture'
    OUTDOORS_NATURE = 'OUTDOORS_NATURE', 'Outdoors & Nature'
    NIGHTLIFE = 'NIGHTLIFE', 'Nightlife'
    SHOPPING = 'SHOPPING', 'Shopping'
    HISTORY = 'HISTORY', 'History'
    ADVENTURE = 'ADVENTURE', 'Adventure'
    RELAXATION = 'RELAXATION', 'Relaxation'
    LOCAL_EXPERIENCES = 'LOCAL_EXPERIENCES', 'Local Experiences'


class UserProfile(models.Model):
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="profile"
    )
    id = models.UUIDField(primary_key=True,default=uuid.uuid4,editable=False)
    avatar_url = models.URLField(max_length=500,blank=True,null=True)
    bio = models.TextField(editable=True,max_length=200,blank=True,default="")
    followers_count = models.IntegerField(validators=[MinValueValidator(0)],default=0)
    following_count = models.IntegerField(validators=[MinValueValidator(0)],default=0)
    following = models.ManyToManyField(
        'self',
        through='FollowRelation',
        through_fields=('follower','following'),
        symmetrical=False,
        related_name='followers'
    )

    def __str__(self):
        return self.user.username

    def set_interest(self,category:str,weight:int) -> "UserInterest":
        interest, _ = UserInterest.objects.update_or_create(
            user=self,
            category=category,
            defaults={'weight': weight},
        )
        return interest

    def get_interest_profile(self) -> dict:
        return dict(self.interests.values_list('category','weight'))


    def follow(self,target_profile: "UserProfile"):
        if self != target_profile and not self.is_following(target_profile):
            with transaction.atomic():
                FollowRelation.objects.create(follower=self,following=target_profile)

                self.following_count = F('following_count') + 1
                self.save(update_fields=['following_count'])

                target_profile.followers_count = F('followers_count') + 1
                target_profile.save(update_fields=['followers_count'])


    def unfollow(self,target_profile: "UserProfile"):
        if self != target_profile and self.is_following(target_profile):
            with transaction.atomic():
                FollowRelation.objects.filter(follower=self,following=target_profile).delete()

                self.following_count = F('following_count') - 1
                self.save(update_fields=['following_count'])

                target_profile.followers_count = F('followers_count') - 1
                target_profile.save(update_fields=['followers_count'])


    def is_following(self,target_profile):
        return FollowRelation.objects.filter(follower=self,following =target_profile).exists()




class FollowRelation(models.Model) :
    follower = models.ForeignKey(UserProfile, on_delete=models.CASCADE, related_name="following_relation")
    following = models.ForeignKey(UserProfile, on_delete=models.CASCADE, related_name="follower_relation")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = ('follower', 'following')


class UserInterest(models.Model):
    """
    One weighted entry of a user's interest profile.
    Read by the personalized feed to boost moments in matching categories.
    """
    user = models.ForeignKey(UserProfile, on_delete=models.CASCADE, related_name="interests")
    category = models.CharField(max_length=32, choices=InterestCategory.choices)
    weight = models.PositiveSmallIntegerField(
        default=5,
        validators=[MinValueValidator(1), MaxValueValidator(10)],
        help_text="Interest strength from 1 to 10"
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ('user', 'category')

    def __str__(self):
        return f"{self.user} - {self.category} ({self.weight})"
