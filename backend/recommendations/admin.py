"""
Django admin configuration for recommendations models.
"""
from django.contrib import admin
from recommendations.models import RecommendationScore


@admin.register(RecommendationScore)
class RecommendationScoreAdmin(admin.ModelAdmin):
    list_display = ['id', 'user', 'moment', 'score', 'computed_at']
    list_filter = ['computed_at']
    search_fields = ['user__user__username']
    readonly_fields = ['id', 'score', 'factors', 'computed_at']
