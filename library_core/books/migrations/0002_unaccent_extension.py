from django.db import migrations

UNACCENT_SQL = "CREATE EXTENSION IF NOT EXISTS unaccent"


def create_unaccent(apps, schema_editor):
    # Accent-insensitive search is PostgreSQL only; other backends fall back to icontains.
    if schema_editor.connection.vendor != "postgresql":
        return
    schema_editor.execute(UNACCENT_SQL)


class Migration(migrations.Migration):

    dependencies = [
        ("books", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(create_unaccent, migrations.RunPython.noop),
    ]
