import uuid
from typing import Optional
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from user.models import InterestCategory


class PlaceCategory(models.TextChoices):
    """Enumeration for place categories"""
    RESTAURANT = 'RESTAURANT', 'Restaurant'
    CAFE = 'CAFE', 'Cafe'
    BAR = 'BAR', 'Bar'
    MUSEUM = 'MUSEUM', 'Museum'
    GALLERY = 'GALLERY', 'Gallery'
    PARK = 'PARK', 'Park'
    BEACH = 'BEACH', 'Beach'
    VIEWPOINT = 'VIEWPOINT', 'Viewpoint'
    NIGHTCLUB = 'NIGHTCLUB', 'Nightclub'
    MARKET = 'MARKET', 'Market'
    SHOP = 'SHOP', 'Shop'
    MONUMENT = 'MONUMENT', 'Monument'
    LANDMARK = 'LANDMARK', 'Landmark'
    TOUR = 'TOUR', 'Tour'
    ACTIVITY = 'ACTIVITY', 'Activity'
    HOTEL = 'HOTEL', 'Hotel'
    HOSTEL = 'HOSTEL', 'Hostel'
    HIDDEN_GEM = 'HIDDEN_GEM', 'Hidden Gem'
    OTHER = 'OTHER', 'Other'


# Which interest a place category speaks to. Categories missing here
# (OTHER) match no interest.
PLACE_TO_INTEREST = {
    PlaceCategory.RESTAURANT: InterestCategory.FOOD_DRINK,
    PlaceCategory.CAFE: InterestCategory.FOOD_DRINK,
    PlaceCategory.BAR: InterestCategory.FOOD_DRINK,
    PlaceCategory.MUSEUM: InterestCategory.ART_CULTURE,
    PlaceCategory.GALLERY: InterestCategory.ART_CULTURE,
    PlaceCategory.PARK: InterestCategory.OUTDOORS_NATURE,
    PlaceCategory.BEACH: InterestCategory.OUTDOORS_NATURE,
    PlaceCategory.VIEWPOINT: InterestCategory.OUTDOORS_NATURE,
    PlaceCategory.NIGHTCLUB: InterestCategory.NIGHTLIFE,
    PlaceCategory.MARKET: InterestCategory.SHOPPING,
    PlaceCategory.SHOP: InterestCategory.SHOPPING,
    PlaceCategory.MONUMENT: InterestCategory.HISTORY,
    PlaceCategory.LANDMARK: InterestCategory.HISTORY,
    PlaceCategory.TOUR: InterestCategory.ADVENTURE,
    PlaceCategory.ACTIVITY: InterestCategory.ADVENTURE,
    PlaceCategory.HOTEL: InterestCategory.RELAXATION,
    PlaceCategory.HOSTEL: InterestCategory.RELAXATION,
    PlaceCategory.HIDDEN_GEM: InterestCategory.LOCAL_EXPERIENCES,
}


def interest_category_for(place_category: Optional[str]) -> Optional[str]:
    """
    Maps a place category to the interest category it belongs to.

    Returns:
        The interest category value, or None when the place has no
        category or the category has no matching interest.
    """
    if not place_category:
        return None
    interest = PLACE_TO_INTEREST.get(place_category)
    return interest.value if interest else None


class Place(models.Model):
    """
    A physical location that moments are attached to.
    Only the category is read by the feed; the rest is display data.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255, help_text="The official name of the place")
    address = models.CharField(max_length=512, blank=True, default="")
    city = models.CharField(max_length=120, blank=True, default="")

    latitude = models.FloatField(
        null=True, blank=True,
        validators=[MinValueValidator(-90), MaxValueValidator(90)]
    )
    longitude = models.FloatField(
        null=True, blank=True,
        validators=[MinValueValidator(-180), MaxValueValidator(180)]
    )

    category = models.CharField(
        max_length=20,
        choices=PlaceCategory.choices,
        null=True,
        blank=True,
        help_text="Classification: RESTAURANT, MUSEUM, PARK etc."
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'locations_place'
        indexes = [
            models.Index(fields=['category'], name='locations_place_category_idx'),
        ]

    def __str__(self):
        return self.name

    @property
    def interest_category(self) -> Optional[str]:
        return interest_category_for(self.category)
