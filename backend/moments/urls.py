"""
URL configuration for the moments module.
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter
from moments.views import MomentViewSet

router = DefaultRouter()
router.register(r'moments', MomentViewSet, basename='moment')

urlpatterns = [
    path('', include(router.urls)),
]
