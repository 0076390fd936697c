"""
URL configuration for the recommendations module.
"""
from django.urls import path
from recommendations.views import (
    PersonalizedFeedView, CachedFeedView, RefreshRecommendationsView
)

app_name = 'recommendations'

urlpatterns = [
    path('feed/', PersonalizedFeedView.as_view(), name='personalized_feed'),
    path('cached-feed/', CachedFeedView.as_view(), name='cached_feed'),
    path('refresh/', RefreshRecommendationsView.as_view(), name='refresh_recommendations'),
]
