from rest_framework import serializers

from .models import MenuItem


class MenuItemSerializer(serializers.ModelSerializer):
    """
    Storefront representation of a menu item. Keys follow the storefront's
    camelCase naming; names and descriptions are grouped by language.
    """

    name = serializers.SerializerMethodField()
    description = serializers.SerializerMethodField()
    price = serializers.CharField(source="display_price", read_only=True)
    priceCents = serializers.IntegerField(source="price_cents", read_only=True)
    spiceLevel = serializers.IntegerField(source="spice_level", read_only=True)
    isVegetarian = serializers.BooleanField(source="is_vegetarian", read_only=True)
    isVegan = serializers.BooleanField(source="is_vegan", read_only=True)
    isPopular = serializers.BooleanField(source="is_popular", read_only=True)
    isAvailable = serializers.BooleanField(source="is_available", read_only=True)
    imageUrl = serializers.CharField(source="image_url", read_only=True)
    prepTimeMinutes = serializers.IntegerField(source="prep_time_minutes", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = MenuItem
        fields = [
            "id",
            "name",
            "description",
            "category",
            "price",
            "priceCents",
            "spiceLevel",
            "isVegetarian",
            "isVegan",
            "isPopular",
            "isAvailable",
            "imageUrl",
            "allergens",
            "prepTimeMinutes",
            "createdAt",
            "updatedAt",
        ]

    def get_name(self, obj):
        return {"en": obj.name_en, "zh": obj.name_zh}

    def get_description(self, obj):
        return {"en": obj.description_en, "zh": obj.description_zh}
