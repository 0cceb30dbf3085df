import uuid

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

from core_backend.config import get_currency
from payments.money import format_money


class MenuItem(models.Model):
    """
    A dish on the restaurant's menu. Prices are stored in integer cents; the
    storefront displays them through ``display_price``.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name_en = models.CharField(_("name (English)"), max_length=200)
    name_zh = models.CharField(_("name (Chinese)"), max_length=200, blank=True)
    description_en = models.TextField(_("description (English)"), blank=True)
    description_zh = models.TextField(_("description (Chinese)"), blank=True)
    price_cents = models.PositiveIntegerField(
        help_text=_("Price in cents, e.g. 1599 for $15.99")
    )
    category = models.CharField(max_length=100, db_index=True)
    is_vegetarian = models.BooleanField(default=False)
    is_vegan = models.BooleanField(default=False)
    spice_level = models.PositiveSmallIntegerField(
        default=0,
        validators=[MinValueValidator(0), MaxValueValidator(5)],
        help_text=_("0 (mild) to 5 (extra hot)"),
    )
    allergens = models.JSONField(default=list, blank=True)
    is_available = models.BooleanField(default=True)
    is_popular = models.BooleanField(default=False)
    image_url = models.URLField(max_length=500, blank=True)
    prep_time_minutes = models.PositiveSmallIntegerField(default=15)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "menu_items"
        ordering = ["category", "name_en"]
        verbose_name = _("menu item")
        verbose_name_plural = _("menu items")
        indexes = [
            models.Index(fields=["is_available", "category"], name="menu_item_avail_cat_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(spice_level__lte=5),
                name="menu_item_spice_level_range",
            ),
        ]

    def __str__(self):
        return self.name_en

    @property
    def display_price(self):
        """Price as shown on the menu, e.g. ``"$15.99"``."""
        return format_money(get_currency(), self.price_cents)
