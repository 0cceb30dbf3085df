import uuid

import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="MenuItem",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name_en", models.CharField(max_length=200, verbose_name="name (English)")),
                ("name_zh", models.CharField(blank=True, max_length=200, verbose_name="name (Chinese)")),
                ("description_en", models.TextField(blank=True, verbose_name="description (English)")),
                ("description_zh", models.TextField(blank=True, verbose_name="description (Chinese)")),
                ("price_cents", models.PositiveIntegerField(help_text="Price in cents, e.g. 1599 for $15.99")),
                ("category", models.CharField(db_index=True, max_length=100)),
                ("is_vegetarian", models.BooleanField(default=False)),
                ("is_vegan", models.BooleanField(default=False)),
                (
                    "spice_level",
                    models.PositiveSmallIntegerField(
                        default=0,
                        help_text="0 (mild) to 5 (extra hot)",
                        validators=[
                            django.core.validators.MinValueValidator(0),
                            django.core.validators.MaxValueValidator(5),
                        ],
                    ),
                ),
                ("allergens", models.JSONField(blank=True, default=list)),
                ("is_available", models.BooleanField(default=True)),
                ("is_popular", models.BooleanField(default=False)),
                ("image_url", models.URLField(blank=True, max_length=500)),
                ("prep_time_minutes", models.PositiveSmallIntegerField(default=15)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "menu item",
                "verbose_name_plural": "menu items",
                "db_table": "menu_items",
                "ordering": ["category", "name_en"],
                "indexes": [models.Index(fields=["is_available", "category"], name="menu_item_avail_cat_idx")],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("spice_level__lte", 5)),
                        name="menu_item_spice_level_range",
                    )
                ],
            },
        ),
    ]
