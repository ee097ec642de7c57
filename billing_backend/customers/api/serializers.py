# customers/api/serializers.py

from rest_framework import serializers

from customers.models import Customer


class CustomerSerializer(serializers.ModelSerializer):
    class Meta:
        model = Customer
        fields = [
            "id",
            "customer_code",
            "name",
            "client_name",
            "phone",
            "email",
            "address",
            "opening_balance",
            "is_active",
            "created_at",
        ]
        read_only_fields = ("id", "created_at")

    def validate_name(self, value):
        value = (value or "").strip()
        if not value:
            raise serializers.ValidationError("Name is required")
        return value
