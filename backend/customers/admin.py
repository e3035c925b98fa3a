"""
Customer admin interface.
"""
from django.contrib import admin

from .models import Customer


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ("name", "phone_number", "email", "preferred_contact_method", "is_active", "date_joined")
    list_filter = ("preferred_contact_method", "is_active")
    search_fields = ("name", "phone_number", "email")
    readonly_fields = ("id", "date_joined", "updated_at")
