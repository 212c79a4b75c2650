"""
Common app configuration.
Holds security logging, shared services and the error taxonomy.
"""
from django.apps import AppConfig


class CommonConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'common'
    verbose_name = 'Security & Logging'
