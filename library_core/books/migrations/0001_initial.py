import django.db.models.deletion
from django.db import migrations, models

import library_core.statuses.selectors


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("statuses", "0001_initial"),
        ("genres", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Book",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("deleted_at", models.DateTimeField(blank=True, null=True)),
                ("restored_at", models.DateTimeField(blank=True, null=True)),
                ("title", models.CharField(max_length=255)),
                ("author", models.CharField(max_length=255)),
                ("publisher", models.CharField(max_length=255)),
                ("price", models.PositiveIntegerField()),
                ("availability", models.PositiveIntegerField(default=0)),
                ("image_url", models.CharField(blank=True, max_length=500, null=True)),
                (
                    "genre",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="books",
                        to="genres.genre",
                    ),
                ),
                (
                    "status",
                    models.ForeignKey(
                        default=library_core.statuses.selectors.default_status_id,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="+",
                        to="statuses.status",
                    ),
                ),
            ],
            options={
                "verbose_name": "libro",
                "verbose_name_plural": "libros",
                "indexes": [
                    models.Index(fields=["title"], name="books_title_idx"),
                    models.Index(fields=["author"], name="books_author_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("title", "publisher"), name="uniq_book_title_publisher"),
                ],
            },
        ),
    ]
