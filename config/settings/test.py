# config/settings/test.py
import tempfile

from .base import *  # noqa

DEBUG = False

INSTALLED_APPS = [app for app in INSTALLED_APPS if app != "django.contrib.postgres"]  # noqa: F405

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

LIBRARY_UNACCENT_SEARCH = False

MEDIA_ROOT = tempfile.mkdtemp(prefix="biblioteca-media-")

LIBRARY_AUDIT = {
    **LIBRARY_AUDIT,  # noqa: F405
    "LOG_DIR": tempfile.mkdtemp(prefix="biblioteca-logs-"),
    "ENVIRONMENT": "test",
}

LOGGING["root"]["level"] = "WARNING"  # noqa: F405
