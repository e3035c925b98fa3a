from rest_framework import serializers

from .models import Restaurant


class RestaurantSerializer(serializers.ModelSerializer):
    class Meta:
        model = Restaurant
        fields = [
            "id",
            "name",
            "is_open",
            "max_concurrent_orders",
            "average_cooking_time",
            "created_at",
        ]
        read_only_fields = fields
