import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="ResourceType",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(db_column="nombre", max_length=50)),
                ("description", models.CharField(blank=True, db_column="descripcion", max_length=255, null=True)),
                (
                    "state",
                    models.IntegerField(
                        choices=[(0, "Inactivo"), (1, "Activo"), (2, "Eliminado")],
                        db_column="estado",
                        default=1,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "tipo_recursos",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Resource",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(db_column="nombre", max_length=100)),
                ("description", models.TextField(blank=True, db_column="descripcion", null=True)),
                ("location", models.CharField(blank=True, db_column="ubicacion", max_length=150, null=True)),
                ("capacity", models.PositiveIntegerField(blank=True, db_column="capacidad", null=True)),
                ("is_available", models.BooleanField(db_column="disponibilidad_general", default=True)),
                (
                    "state",
                    models.IntegerField(
                        choices=[(0, "Inactivo"), (1, "Activo"), (2, "Eliminado")],
                        db_column="estado",
                        default=1,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "resource_type",
                    models.ForeignKey(
                        db_column="tipo_recurso_id",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="resources",
                        to="catalog.resourcetype",
                    ),
                ),
            ],
            options={
                "db_table": "recursos",
                "ordering": ["name"],
            },
        ),
    ]
