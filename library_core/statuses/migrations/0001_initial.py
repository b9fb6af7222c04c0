from django.db import migrations, models


def seed_statuses(apps, schema_editor):
    Status = apps.get_model("statuses", "Status")
    for name in ("activo", "eliminado"):
        Status.objects.get_or_create(name=name)


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Status",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=50, unique=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["id"],
                "verbose_name_plural": "statuses",
            },
        ),
        migrations.RunPython(seed_statuses, migrations.RunPython.noop),
    ]
