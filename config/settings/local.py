# config/settings/local.py
import os

from .base import *  # noqa

DEBUG = os.getenv("DJANGO_DEBUG", "1") == "1"
