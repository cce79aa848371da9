import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("catalog", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Reservation",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("starts_at", models.DateTimeField(db_column="fecha_inicio")),
                ("ends_at", models.DateTimeField(db_column="fecha_fin")),
                (
                    "status",
                    models.CharField(
                        choices=[("activa", "Activa"), ("cancelada", "Cancelada"), ("finalizada", "Finalizada")],
                        db_column="estado",
                        default="activa",
                        max_length=20,
                    ),
                ),
                ("comment", models.TextField(blank=True, db_column="comentarios", null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "resource",
                    models.ForeignKey(
                        db_column="recurso_id",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reservations",
                        to="catalog.resource",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reservations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "reservas",
                "ordering": ["-starts_at"],
                "indexes": [
                    models.Index(fields=["resource", "status", "starts_at"], name="reserva_recurso_estado_idx"),
                    models.Index(fields=["status", "ends_at"], name="reserva_estado_fin_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ReservationHistory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "action",
                    models.CharField(
                        choices=[
                            ("creada", "Creada"),
                            ("actualizada_admin", "Actualizada por administrador"),
                            ("actualizada_usuario", "Actualizada por usuario"),
                            ("cancelada_admin", "Cancelada por administrador"),
                            ("cancelada_usuario", "Cancelada por usuario"),
                            ("finalizada", "Finalizada automáticamente"),
                        ],
                        db_column="accion",
                        max_length=30,
                    ),
                ),
                ("detail", models.TextField(blank=True, db_column="detalle", null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "actor",
                    models.ForeignKey(
                        blank=True,
                        db_column="user_id",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="reservation_history",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "reservation",
                    models.ForeignKey(
                        db_column="reserva_id",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="history",
                        to="bookings.reservation",
                    ),
                ),
            ],
            options={
                "db_table": "historial_reservas",
                "ordering": ["created_at", "id"],
            },
        ),
    ]
