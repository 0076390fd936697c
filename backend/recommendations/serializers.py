"""
Serializers for the recommendations module.
"""
from rest_framework import serializers
from recommendations.conf import get_feed_scoring_config


class FeedQuerySerializer(serializers.Serializer):
    """Validates feed query parameters"""
    user_id = serializers.UUIDField()
    limit = serializers.IntegerField(required=False, min_value=0)
    offset = serializers.IntegerField(required=False, default=0, min_value=0)

    def validate_limit(self, value):
        max_page_size = get_feed_scoring_config()['MAX_PAGE_SIZE']
        if value > max_page_size:
            raise serializers.ValidationError(f"limit must be at most {max_page_size}")
        return value

    def validate(self, attrs):
        if attrs.get('limit') is None:
            attrs['limit'] = get_feed_scoring_config()['DEFAULT_PAGE_SIZE']
        return attrs


class RefreshRequestSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()


class FeedPageSerializer(serializers.Serializer):
    """Serializer for FeedPage DTO"""
    ids = serializers.ListField(child=serializers.UUIDField())
    total = serializers.IntegerField()
    offset = serializers.IntegerField()
    has_more = serializers.BooleanField()

