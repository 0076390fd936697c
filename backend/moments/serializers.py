"""
Serializers for the moments module.
"""
from rest_framework import serializers
from locations.models import Place
from moments.models import Moment


class MomentSerializer(serializers.ModelSerializer):
    author = serializers.UUIDField(source='author_id', read_only=True)
    place = serializers.PrimaryKeyRelatedField(read_only=True)

    class Meta:
        model = Moment
        fields = [
            'id', 'author', 'place', 'caption',
            'rating_overall', 'rating_value', 'rating_authenticity', 'rating_crowd',
            'composite_score', 'rank', 'like_count', 'view_count',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields


RATING_FIELDS = ('overall', 'value', 'authenticity', 'crowd')


class RatingsSerializer(serializers.Serializer):
    """
    Sub-ratings of a moment; each must be an integer from 1 to 5.

    When a moment is passed in the context, omitted ratings keep the moment's
    current values and an explicit null clears one.
    """
    overall = serializers.IntegerField(min_value=1, max_value=5, required=False, allow_null=True)
    value = serializers.IntegerField(min_value=1, max_value=5, required=False, allow_null=True)
    authenticity = serializers.IntegerField(min_value=1, max_value=5, required=False, allow_null=True)
    crowd = serializers.IntegerField(min_value=1, max_value=5, required=False, allow_null=True)

    def validate(self, attrs):
        ratings = self.merged_ratings(attrs)
        has_secondary = any(ratings[key] is not None for key in ('value', 'authenticity', 'crowd'))
        if has_secondary and ratings['overall'] is None:
            raise serializers.ValidationError("An overall rating is required when other ratings are given")
        return attrs

    def merged_ratings(self, attrs):
        moment = self.context.get('moment')
        merged = {}
        for key in RATING_FIELDS:
            if key in attrs:
                merged[key] = attrs[key]
            elif moment is not None:
                merged[key] = getattr(moment, f'rating_{key}')
            else:
                merged[key] = None
        return merged


class MomentCreateSerializer(RatingsSerializer):
    place = serializers.PrimaryKeyRelatedField(queryset=Place.objects.all(), required=False, allow_null=True)
    caption = serializers.CharField(max_length=2000, required=False, allow_blank=True, default="")
