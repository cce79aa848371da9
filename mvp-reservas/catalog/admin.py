from django.contrib import admin

from .models import Resource, ResourceType


@admin.register(ResourceType)
class ResourceTypeAdmin(admin.ModelAdmin):
    list_display = ("name", "state")
    search_fields = ("name",)
    list_filter = ("state",)


@admin.register(Resource)
class ResourceAdmin(admin.ModelAdmin):
    list_display = ("name", "resource_type", "location", "capacity", "is_available", "state")
    list_filter = ("resource_type", "is_available", "state")
    search_fields = ("name", "location")
