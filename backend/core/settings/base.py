from pathlib import Path
import os
from dotenv import load_dotenv
from core.logging import LOGGING as BASE_LOGGING

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent.parent

SECRET_KEY = os.getenv("SECRET_KEY", "unsafe-dev-key")

DEBUG = os.getenv("DEBUG", "False").lower() in ("1", "true", "yes")

ALLOWED_HOSTS = [host for host in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1").split(",") if host]

INSTALLED_APPS = [

    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',

    'rest_framework',
    'drf_spectacular',
    'corsheaders',

    'common',  # Common utilities and security logging
    'apps.orders',
]


MIDDLEWARE = [

    'django.middleware.security.SecurityMiddleware',
    'whitenoise.middleware.WhiteNoiseMiddleware',

    'corsheaders.middleware.CorsMiddleware',

    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',

    'django.middleware.csrf.CsrfViewMiddleware',

    'django.contrib.auth.middleware.AuthenticationMiddleware',

    # Custom security middleware
    'common.middleware.SecurityLoggingMiddleware',

    'django.contrib.messages.middleware.MessageMiddleware',

    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]


TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [BASE_DIR / 'templates'],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]


DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': os.getenv("DATABASE_PATH", str(BASE_DIR / 'escrow.sqlite3')),
    }
}


ROOT_URLCONF = 'core.urls'
WSGI_APPLICATION = 'core.wsgi.application'
ASGI_APPLICATION = 'core.asgi.application'



STATIC_URL = '/static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'
STORAGES = {
    "default": {
        "BACKEND": "django.core.files.storage.FileSystemStorage",
    },
    "staticfiles": {
        "BACKEND": "whitenoise.storage.CompressedManifestStaticFilesStorage",
    },
}

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_TZ = True

SECURE_BROWSER_XSS_FILTER = True
SECURE_CONTENT_TYPE_NOSNIFF = True
X_FRAME_OPTIONS = 'DENY'

# Cookie Security Settings
CSRF_COOKIE_HTTPONLY = True
SESSION_COOKIE_HTTPONLY = True
SESSION_COOKIE_SECURE = True  # HTTPS only (set to False for development)
CSRF_COOKIE_SECURE = True  # HTTPS only (set to False for development)
CSRF_COOKIE_SAMESITE = 'Lax'
SESSION_COOKIE_SAMESITE = 'Lax'

# CORS Configuration (the intake form may be served from another origin)
CORS_ALLOWED_ORIGINS = [
    origin for origin in os.getenv(
        "CORS_ALLOWED_ORIGINS", "http://localhost:3000,http://localhost:5173"
    ).split(",") if origin
]

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'


# ==================== Email transport ====================
# Defaults match a Gmail app-password setup (SSL on 465).

EMAIL_BACKEND = os.getenv("EMAIL_BACKEND", "django.core.mail.backends.smtp.EmailBackend")
EMAIL_HOST = os.getenv("EMAIL_HOST", "smtp.gmail.com")
EMAIL_PORT = int(os.getenv("EMAIL_PORT", 465))
EMAIL_USE_SSL = os.getenv("EMAIL_USE_SSL", "True").lower() in ("1", "true", "yes")
EMAIL_HOST_USER = os.getenv("COMPANY_EMAIL", "escrowservicecopyright@gmail.com")
EMAIL_HOST_PASSWORD = os.getenv("EMAIL_PASSWORD", os.getenv("EMAIL_PASS", ""))
EMAIL_TIMEOUT = int(os.getenv("EMAIL_TIMEOUT", 20))  # seconds, bounds every SMTP call


# ==================== Escrow service ====================

ESCROW_BRAND_NAME = os.getenv("ESCROW_BRAND_NAME", "SecureEscrow")
ESCROW_ADMIN_EMAIL = os.getenv("ESCROW_ADMIN_EMAIL", EMAIL_HOST_USER)
DEFAULT_FROM_EMAIL = f'"{ESCROW_BRAND_NAME}" <{EMAIL_HOST_USER}>'
ESCROW_SITE_URL = os.getenv("ESCROW_SITE_URL", "http://localhost:8000").rstrip("/")

# Notifications are only sent when a mail password is configured, unless forced.
ESCROW_NOTIFICATIONS_ENABLED = os.getenv(
    "ESCROW_NOTIFICATIONS_ENABLED", "true" if EMAIL_HOST_PASSWORD else "false"
).lower() in ("1", "true", "yes")

# When set, POST /payments/<id>/confirm requires a matching X-Admin-Key header.
ESCROW_ADMIN_API_KEY = os.getenv("ESCROW_ADMIN_API_KEY", "")


# REST Framework Configuration
REST_FRAMEWORK = {
    'DEFAULT_SCHEMA_CLASS': 'drf_spectacular.openapi.AutoSchema',
    # Orders are public; the release token is the only credential
    'DEFAULT_AUTHENTICATION_CLASSES': [],
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.AllowAny',
    ],
    'EXCEPTION_HANDLER': 'common.exceptions.escrow_exception_handler',
    # SECURITY: Rate limiting to prevent abuse and token guessing
    'DEFAULT_THROTTLE_RATES': {
        'submit': os.getenv("THROTTLE_SUBMIT", "300/hour"),
        'release': os.getenv("THROTTLE_RELEASE", "20/hour"),
        'admin': os.getenv("THROTTLE_ADMIN", "600/hour"),
    },
}

# Swagger/OpenAPI Configuration
SPECTACULAR_SETTINGS = {
    'TITLE': 'SecureEscrow Order Intake API',
    'DESCRIPTION': 'Order intake, invoicing and token-gated fund release for escrow deals',
    'VERSION': '1.0.0',
    'SERVE_INCLUDE_SCHEMA': False,
    'COMPONENT_SPLIT_REQUEST': True,

    # Security
    'APPEND_COMPONENTS': {
        'securitySchemes': {
            'adminKey': {
                'type': 'apiKey',
                'in': 'header',
                'name': 'X-Admin-Key',
                'description': 'Admin API key, required on confirm when ESCROW_ADMIN_API_KEY is set',
            }
        }
    },

    # UI Configuration
    'SWAGGER_UI_SETTINGS': {
        'deepLinking': True,
        'displayOperationId': True,
        'filter': True,
        'docExpansion': 'none',
    },

    # Tags for grouping endpoints
    'TAGS': [
        {'name': 'Orders', 'description': 'Order intake form submission'},
        {'name': 'Invoices', 'description': 'Invoice views and PDF downloads'},
        {'name': 'Payments', 'description': 'Payment confirmation and fund release'},
        {'name': 'Health', 'description': 'Liveness checks'},
    ],
}

LOGGING = BASE_LOGGING
