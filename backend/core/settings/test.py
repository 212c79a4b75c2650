"""
Test settings: in-memory database, local mail outbox, generous throttles.
"""
from .base import *  # noqa: F401,F403

DEBUG = False

SECRET_KEY = "test-secret-key"

ALLOWED_HOSTS = ["testserver", "localhost"]

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'

ESCROW_BRAND_NAME = 'SecureEscrow'
ESCROW_ADMIN_EMAIL = 'admin@secureescrow.test'
DEFAULT_FROM_EMAIL = '"SecureEscrow" <noreply@secureescrow.test>'
ESCROW_SITE_URL = 'http://testserver'
ESCROW_NOTIFICATIONS_ENABLED = True
ESCROW_ADMIN_API_KEY = ''

STORAGES = {
    "default": {
        "BACKEND": "django.core.files.storage.InMemoryStorage",
    },
    "staticfiles": {
        "BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage",
    },
}

REST_FRAMEWORK = {
    **REST_FRAMEWORK,  # noqa: F405
    'DEFAULT_THROTTLE_RATES': {
        'submit': '10000/hour',
        'release': '10000/hour',
        'admin': '10000/hour',
    },
}

LOGGING = {
    **LOGGING,  # noqa: F405
    'root': {'handlers': ['null'], 'level': 'WARNING'},
}
