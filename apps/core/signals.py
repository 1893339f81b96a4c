# apps/core/signals.py

import logging

from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import Board, Project

logger = logging.getLogger(__name__)


@receiver(post_save, sender=Project)
def create_project_board(sender, instance, created, **kwargs):
    """
    Every new project gets its board

    Skipped when the project already has one (fixtures, raw loads).
    """
    if not created or kwargs.get('raw'):
        return
    if instance.boards.exists():
        return

    board = Board.objects.create(
        account_id=instance.account_id,
        project=instance,
        name=f"{instance.name} Board"
    )
    logger.debug("Board %s created for project %s", board.pk, instance.pk)
