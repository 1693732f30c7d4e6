# config/settings/test.py
from .base import *  # noqa

DEBUG = False
SECRET_KEY = "test-secret-key"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

TIME_ZONE = "Africa/Addis_Ababa"

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

LOGGING["loggers"]["dc_core"]["level"] = "WARNING"  # noqa: F405
# let pytest's caplog see dc_core records
LOGGING["loggers"]["dc_core"]["propagate"] = True  # noqa: F405
