# apps/board/models.py

from django.conf import settings
from django.db import models

from apps.core.models import Board, Tag
from .storage import attachment_upload_to, thumbnail_upload_to, download_url


class Task(models.Model):
    """
    Card of a board

    (column, position) is the placement; it is only written by
    apps.board.placement. Readers order a column by (position, id).
    """

    PRIORITY_HOT = 'hot'
    PRIORITY_WARM = 'warm'
    PRIORITY_NORMAL = 'normal'
    PRIORITY_COLD = 'cold'
    PRIORITY_CHOICES = [
        (PRIORITY_HOT, 'Hot'),
        (PRIORITY_WARM, 'Warm'),
        (PRIORITY_NORMAL, 'Normal'),
        (PRIORITY_COLD, 'Cold'),
    ]

    board = models.ForeignKey(
        Board,
        on_delete=models.CASCADE,
        related_name='tasks'
    )
    title = models.CharField(max_length=500)
    description = models.TextField(blank=True, null=True)

    # === PLACEMENT ===
    column = models.CharField(max_length=50)
    position = models.FloatField(default=0)

    priority = models.CharField(
        max_length=50,
        choices=PRIORITY_CHOICES,
        default=PRIORITY_NORMAL
    )
    due_date = models.DateField(null=True, blank=True)
    assignees = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        related_name='assigned_tasks',
        blank=True
    )
    tags = models.ManyToManyField(
        Tag,
        related_name='tasks',
        blank=True
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='created_tasks'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'task'
        ordering = ['position', 'id']
        indexes = [
            models.Index(fields=['board', 'column', 'position'], name='task_placement_idx'),
        ]

    @classmethod
    def priority_values(cls):
        return [value for value, _ in cls.PRIORITY_CHOICES]

    def to_dict(self):
        return {
            'id': self.id,
            'board_id': self.board_id,
            'title': self.title,
            'description': self.description,
            'column': self.column,
            'position': self.position,
            'priority': self.priority,
            'due_date': self.due_date.isoformat() if self.due_date else None,
            'assignees': [user.to_dict() for user in self.assignees.all()],
            'tags': [tag.to_dict() for tag in self.tags.all()],
            'created_by': self.created_by_id,
            'created_at': self.created_at.isoformat(),
            'updated_at': self.updated_at.isoformat(),
        }

    def __str__(self):
        return f"{self.title} [{self.column}]"


class Comment(models.Model):
    """Comment on a task, oldest first"""

    task = models.ForeignKey(
        Task,
        on_delete=models.CASCADE,
        related_name='comments'
    )
    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='comments'
    )
    body = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'comment'
        ordering = ['created_at', 'id']

    def to_dict(self):
        return {
            'id': self.id,
            'task_id': self.task_id,
            'body': self.body,
            'author': self.author.to_dict(),
            'created_at': self.created_at.isoformat(),
        }

    def __str__(self):
        return f"Comment by {self.author} on {self.task_id}"


class Attachment(models.Model):
    """
    File attached to a task (or to one of its comments)

    The blob lives in the configured object store; `file` and `thumbnail`
    hold the storage keys.
    """

    task = models.ForeignKey(
        Task,
        on_delete=models.CASCADE,
        related_name='attachments'
    )
    comment = models.ForeignKey(
        Comment,
        on_delete=models.CASCADE,
        related_name='attachments',
        null=True,
        blank=True
    )
    uploader = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='attachments'
    )
    original_filename = models.CharField(max_length=500)
    mime_type = models.CharField(max_length=100)
    size_bytes = models.PositiveIntegerField()
    file = models.FileField(upload_to=attachment_upload_to, max_length=500)
    thumbnail = models.FileField(
        upload_to=thumbnail_upload_to,
        max_length=500,
        null=True,
        blank=True
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'attachment'
        ordering = ['created_at', 'id']

    def to_dict(self):
        return {
            'id': self.id,
            'task_id': self.task_id,
            'comment_id': self.comment_id,
            'uploader_id': self.uploader_id,
            'original_filename': self.original_filename,
            'mime_type': self.mime_type,
            'size_bytes': self.size_bytes,
            'storage_key': self.file.name,
            'thumbnail_key': self.thumbnail.name or None,
            'created_at': self.created_at.isoformat(),
            'download_url': download_url(self.file),
            'thumbnail_url': download_url(self.thumbnail),
            'uploader': self.uploader.to_dict(),
        }

    def __str__(self):
        return self.original_filename
