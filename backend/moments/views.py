"""
Views for the moments module.
"""
import logging
from django.db.models import F
from rest_framework import mixins, viewsets, status
from rest_framework.decorators import action
from rest_framework.exceptions import NotAuthenticated, PermissionDenied, ValidationError
from rest_framework.permissions import IsAuthenticatedOrReadOnly
from rest_framework.response import Response
from moments.models import Moment
from moments.serializers import MomentSerializer, MomentCreateSerializer, RatingsSerializer
from moments.services import MomentService
from recommendations.exceptions import SnapshotFetchError
from recommendations.feed_service import FeedService
from recommendations.serializers import FeedQuerySerializer

logger = logging.getLogger(__name__)

LIST_FILTERS = ('topRated', 'mostViewed', 'recommended')


class MomentViewSet(mixins.ListModelMixin,
                    mixins.RetrieveModelMixin,
                    viewsets.GenericViewSet):
    """
    ViewSet for moments. Writes go through MomentService so that composite
    scores and author ranks are kept current.

    GET /api/moments/?author_id=<uuid>           author's moments in rank order
    GET /api/moments/?filter=topRated            highest composite score first
    GET /api/moments/?filter=mostViewed          most viewed first
    GET /api/moments/?filter=recommended&limit=20&offset=0
                                                 the caller's feed page
    """
    queryset = Moment.objects.all()
    serializer_class = MomentSerializer
    permission_classes = [IsAuthenticatedOrReadOnly]
    service = MomentService()
    feed_service_class = FeedService

    def get_queryset(self):
        """Filter moments by author if author_id is provided, then apply the list filter"""
        queryset = Moment.objects.all()
        author_id = self.request.query_params.get('author_id')
        list_filter = self.request.query_params.get('filter')

        if author_id:
            queryset = queryset.filter(author_id=author_id)

        if list_filter == 'topRated':
            return queryset.order_by(F('composite_score').desc(nulls_last=True), '-created_at')
        if list_filter == 'mostViewed':
            return queryset.order_by('-view_count', '-created_at')
        if author_id:
            return queryset.order_by(F('rank').asc(nulls_last=True), 'created_at')
        return queryset.order_by('-created_at')

    def list(self, request, *args, **kwargs):
        list_filter = request.query_params.get('filter')
        if list_filter and list_filter not in LIST_FILTERS:
            raise ValidationError({'filter': f"Unknown filter '{list_filter}'"})
        if list_filter == 'recommended':
            return self._list_recommended(request)
        return super().list(request, *args, **kwargs)

    def _list_recommended(self, request):
        """One page of the caller's feed, cached scores first, in feed order"""
        if not request.user or not request.user.is_authenticated:
            raise NotAuthenticated("Recommended moments need a signed-in user")

        viewer_id = request.user.profile.id
        params = {'user_id': viewer_id}
        for key in ('limit', 'offset'):
            if key in request.query_params:
                params[key] = request.query_params[key]
        query = FeedQuerySerializer(data=params)
        query.is_valid(raise_exception=True)

        try:
            page = self.feed_service_class().get_cached_feed(
                viewer_id,
                query.validated_data['limit'],
                query.validated_data['offset'],
            )
        except SnapshotFetchError as e:
            logger.error(f"Recommended moments unavailable for {viewer_id}: {str(e)}")
            return Response({'error': str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)

        queryset = self.get_queryset()
        moments = queryset.filter(id__in=page.ids).in_bulk()
        ordered = [moments[moment_id] for moment_id in page.ids if moment_id in moments]
        return Response(MomentSerializer(ordered, many=True).data, status=status.HTTP_200_OK)

    def _get_owned_moment(self):
        moment = self.get_object()
        if moment.author_id != self.request.user.profile.id:
            raise PermissionDenied("You can only modify your own moments")
        return moment

    def create(self, request):
        serializer = MomentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        moment = self.service.create_moment(
            author=request.user.profile,
            place=data.get('place'),
            caption=data.get('caption', ""),
            overall=data.get('overall'),
            value=data.get('value'),
            authenticity=data.get('authenticity'),
            crowd=data.get('crowd'),
        )
        return Response(MomentSerializer(moment).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        """Change some of the moment's ratings; omitted ones are kept"""
        moment = self._get_owned_moment()
        serializer = RatingsSerializer(data=request.data, context={'moment': moment})
        serializer.is_valid(raise_exception=True)

        if not serializer.validated_data:
            return Response(MomentSerializer(moment).data, status=status.HTTP_200_OK)

        ratings = serializer.merged_ratings(serializer.validated_data)
        moment = self.service.update_ratings(moment, **ratings)
        return Response(MomentSerializer(moment).data, status=status.HTTP_200_OK)

    def destroy(self, request, pk=None):
        moment = self._get_owned_moment()
        self.service.delete_moment(moment)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['post'], url_path='recompute-ranks')
    def recompute_ranks(self, request, pk=None):
        """Rebuild the ranks of the moment author's scored moments"""
        moment = self._get_owned_moment()
        assignments = self.service.rank_assigner.recompute_ranks(moment.author_id)
        return Response(
            {'ranks': [{'moment_id': str(moment_id), 'rank': rank} for moment_id, rank in assignments]},
            status=status.HTTP_200_OK
        )
