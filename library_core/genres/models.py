# library_core/genres/models.py
from __future__ import annotations

from django.db import models

from library_core.common.models import LifecycleModel


class Genre(LifecycleModel):
    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True, default="")

    class Meta:
        verbose_name = "género"
        verbose_name_plural = "géneros"
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name
