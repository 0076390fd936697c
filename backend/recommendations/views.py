"""
Views for the recommendations module.
"""
import logging
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView
from recommendations.exceptions import SnapshotFetchError
from recommendations.feed_service import FeedService
from recommendations.serializers import (
    FeedQuerySerializer, FeedPageSerializer, RefreshRequestSerializer
)
from user.models import UserProfile

logger = logging.getLogger(__name__)


def _viewer_exists(user_id) -> bool:
    return UserProfile.objects.filter(id=user_id).exists()


class PersonalizedFeedView(APIView):
    """
    API endpoint for a viewer's personalized feed, computed live.

    GET /api/recommendations/feed/?user_id=<uuid>&limit=20&offset=0
    """
    service_class = FeedService

    def get_page(self, service, user_id, limit, offset):
        return service.get_personalized_feed(user_id, limit, offset)

    def get(self, request):
        query = FeedQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return Response(
                {'error': query.errors},
                status=status.HTTP_400_BAD_REQUEST
            )

        user_id = query.validated_data['user_id']
        if not _viewer_exists(user_id):
            return Response(
                {'error': f'User {user_id} not found'},
                status=status.HTTP_404_NOT_FOUND
            )

        try:
            page = self.get_page(
                self.service_class(),
                user_id,
                query.validated_data['limit'],
                query.validated_data['offset'],
            )
        except SnapshotFetchError as e:
            logger.error(f"Feed unavailable for {user_id}: {str(e)}")
            return Response(
                {'error': str(e)},
                status=status.HTTP_503_SERVICE_UNAVAILABLE
            )

        serializer = FeedPageSerializer({
            'ids': page.ids,
            'total': page.total,
            'offset': page.offset,
            'has_more': page.has_more,
        })
        return Response(serializer.data, status=status.HTTP_200_OK)


class CachedFeedView(PersonalizedFeedView):
    """
    API endpoint serving the feed from cached recommendation scores.

    GET /api/recommendations/cached-feed/?user_id=<uuid>&limit=20&offset=0
    """

    def get_page(self, service, user_id, limit, offset):
        return service.get_cached_feed(user_id, limit, offset)


class RefreshRecommendationsView(APIView):
    """
    API endpoint for recomputing a viewer's cached recommendation scores.

    POST /api/recommendations/refresh/
    Body: {"user_id": "uuid"}
    """

    def post(self, request):
        serializer = RefreshRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {'error': serializer.errors},
                status=status.HTTP_400_BAD_REQUEST
            )

        user_id = serializer.validated_data['user_id']
        if not _viewer_exists(user_id):
            return Response(
                {'error': f'User {user_id} not found'},
                status=status.HTTP_404_NOT_FOUND
            )

        try:
            count = FeedService().refresh_recommendations(user_id)
        except SnapshotFetchError as e:
            logger.error(f"Refresh failed for {user_id}: {str(e)}")
            return Response(
                {'error': str(e)},
                status=status.HTTP_503_SERVICE_UNAVAILABLE
            )

        return Response({'count': count}, status=status.HTTP_200_OK)
