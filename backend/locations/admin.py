from django.contrib import admin
from .models import Place


@admin.register(Place)
class PlaceAdmin(admin.ModelAdmin):
    list_display = ['name', 'city', 'category', 'created_at']
    list_filter = ['category', 'created_at']
    search_fields = ['name', 'address', 'city']
    readonly_fields = ['id', 'created_at', 'updated_at']
