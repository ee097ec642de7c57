# customers/admin.py

from django.contrib import admin

from customers.models import Customer


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ("customer_code", "name", "client_name", "phone", "opening_balance", "is_active")
    search_fields = ("customer_code", "name", "client_name", "phone")
    list_filter = ("is_active",)
