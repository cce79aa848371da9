from django.conf import settings
from django.db import models


class Notification(models.Model):
    """Aviso persistido en la bandeja del usuario."""

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications",
    )
    category = models.CharField(max_length=70, db_column="tipo")
    title = models.CharField(max_length=100, db_column="titulo")
    body = models.TextField(db_column="mensaje")
    is_read = models.BooleanField(default=False, db_column="leida")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "notificaciones"
        ordering = ["-created_at", "-id"]
        indexes = [models.Index(fields=["user", "is_read"], name="notif_usuario_leida_idx")]

    def __str__(self):
        return f"{self.user_id} · {self.category} · {self.title}"
