# apps/board/signals.py

from django.db import transaction
from django.db.models.signals import post_delete
from django.dispatch import receiver

from .models import Attachment
from .storage import delete_blob


@receiver(post_delete, sender=Attachment)
def delete_attachment_blobs(sender, instance, **kwargs):
    """
    Removes the file and its thumbnail from the object store

    Runs after commit: a rolled back delete keeps its blobs. Covers
    cascades from task, board and project deletion too.
    """
    storage = instance.file.storage
    names = [instance.file.name, instance.thumbnail.name]

    def _delete():
        for name in names:
            delete_blob(storage, name)

    transaction.on_commit(_delete)
