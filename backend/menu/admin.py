from django.contrib import admin

from .models import MenuItem


@admin.register(MenuItem)
class MenuItemAdmin(admin.ModelAdmin):
    list_display = (
        "name_en",
        "name_zh",
        "category",
        "display_price",
        "spice_level",
        "is_available",
        "is_popular",
    )
    list_filter = ("category", "is_available", "is_popular", "is_vegetarian", "is_vegan")
    list_editable = ("is_available", "is_popular")
    search_fields = ("name_en", "name_zh", "description_en")
    ordering = ("category", "name_en")
    readonly_fields = ("id", "created_at", "updated_at")

    fieldsets = (
        ("Names", {"fields": ("id", "name_en", "name_zh", "description_en", "description_zh")}),
        ("Pricing", {"fields": ("price_cents", "category")}),
        (
            "Dietary",
            {"fields": ("is_vegetarian", "is_vegan", "spice_level", "allergens")},
        ),
        (
            "Display",
            {"fields": ("is_available", "is_popular", "image_url", "prep_time_minutes")},
        ),
        ("Timestamps", {"fields": ("created_at", "updated_at"), "classes": ("collapse",)}),
    )

    @admin.display(description="Price")
    def display_price(self, obj):
        return obj.display_price
