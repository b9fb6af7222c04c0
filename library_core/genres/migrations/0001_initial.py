import django.db.models.deletion
from django.db import migrations, models

import library_core.statuses.selectors


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("statuses", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Genre",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("deleted_at", models.DateTimeField(blank=True, null=True)),
                ("restored_at", models.DateTimeField(blank=True, null=True)),
                ("name", models.CharField(max_length=100, unique=True)),
                ("description", models.TextField(blank=True, default="")),
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
                "verbose_name": "género",
                "verbose_name_plural": "géneros",
                "ordering": ["name"],
            },
        ),
    ]
