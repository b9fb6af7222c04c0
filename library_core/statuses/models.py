# library_core/statuses/models.py
from django.db import models

STATUS_ACTIVE = "activo"
STATUS_DELETED = "eliminado"


class Status(models.Model):
    """
    Lifecycle reference row. Exactly two are expected: "activo" and "eliminado".
    """
    name = models.CharField(max_length=50, unique=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["id"]
        verbose_name_plural = "statuses"

    def __str__(self) -> str:
        return self.name
