# apps/board/apps.py

import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class BoardConfig(AppConfig):
    """Board app: tasks, placement, comments and attachments"""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.board'
    verbose_name = 'Board - Kanban'

    def ready(self):
        """
        App initialisation
        Connects signals and checks the column configuration
        """
        from . import signals  # noqa: F401
        from .columns import column_registry

        # Fails fast on a misconfigured intake column
        intake = column_registry.intake
        logger.debug("Board app ready, intake column '%s'", intake.id)
