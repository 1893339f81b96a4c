# apps/core/apps.py

from django.apps import AppConfig


class CoreConfig(AppConfig):
    """Core app: users, accounts, projects, boards, tags"""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.core'
    verbose_name = 'Core - Accounts and Projects'

    def ready(self):
        """Connects the signal handlers"""
        from . import signals  # noqa: F401
