from django.contrib import admin

from .models import Restaurant


@admin.register(Restaurant)
class RestaurantAdmin(admin.ModelAdmin):
    list_display = ("name", "owner", "is_open", "average_cooking_time", "created_at")
    list_filter = ("is_open",)
    search_fields = ("name", "owner__username", "owner__email")
