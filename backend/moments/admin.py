from django.contrib import admin
from moments.models import Moment


@admin.register(Moment)
class MomentAdmin(admin.ModelAdmin):
    list_display = ['id', 'author', 'place', 'composite_score', 'rank', 'like_count', 'view_count', 'created_at']
    list_filter = ['created_at']
    search_fields = ['author__user__username', 'place__name', 'caption']
    readonly_fields = ['id', 'composite_score', 'rank', 'created_at', 'updated_at']
