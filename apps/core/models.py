# apps/core/models.py

import secrets
from datetime import timedelta

from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.core.validators import RegexValidator
from django.db import models
from django.db.models.functions import Lower
from django.utils import timezone


hex_color_validator = RegexValidator(
    regex=r'^#[0-9A-Fa-f]{6}$',
    message='Invalid color format. Use hex format like #3b82f6',
)


class User(AbstractUser):
    """
    Custom user

    The email (lowercased) is the login identifier; `username` mirrors it
    so Django's default authentication backend keeps working.
    """

    name = models.CharField(max_length=255)
    email = models.EmailField(unique=True)

    # === METADATA ===
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'user'

    def save(self, *args, **kwargs):
        if self.email:
            self.email = self.email.strip().lower()
            if not self.username:
                self.username = self.email
        super().save(*args, **kwargs)

    def is_member_of(self, account) -> bool:
        return AccountMember.objects.filter(account=account, user=self).exists()

    def get_accessible_boards(self):
        """
        Boards the user may act on

        Always resolved through account membership; callers pick one board
        explicitly by id.
        """
        return Board.objects.filter(account__memberships__user=self).distinct()

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
        }

    def __str__(self):
        return f"{self.name or self.email} <{self.email}>"


class Account(models.Model):
    """A team sharing one or more project boards"""

    name = models.CharField(max_length=255)
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='owned_accounts'
    )
    members = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        through='AccountMember',
        related_name='accounts'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'account'
        ordering = ['created_at']

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'owner_id': self.owner_id,
            'created_at': self.created_at.isoformat(),
        }

    def __str__(self):
        return self.name


class AccountMember(models.Model):
    """Membership of a user in an account"""

    ROLE_OWNER = 'owner'
    ROLE_MEMBER = 'member'
    ROLE_CHOICES = [
        (ROLE_OWNER, 'Owner'),
        (ROLE_MEMBER, 'Member'),
    ]

    account = models.ForeignKey(
        Account,
        on_delete=models.CASCADE,
        related_name='memberships'
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='memberships'
    )
    role = models.CharField(max_length=50, choices=ROLE_CHOICES, default=ROLE_MEMBER)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'account_member'
        ordering = ['created_at']
        constraints = [
            models.UniqueConstraint(fields=['account', 'user'], name='unique_account_member'),
        ]

    def to_dict(self):
        data = self.user.to_dict()
        data.update({
            'role': self.role,
            'joined_at': self.created_at.isoformat(),
        })
        return data

    def __str__(self):
        return f"{self.user} @ {self.account} ({self.role})"


def generate_invite_token() -> str:
    return secrets.token_hex(32)


def default_invite_expiry():
    return timezone.now() + timedelta(days=settings.KANBAN_INVITE_EXPIRY_DAYS)


class Invite(models.Model):
    """Invitation for an email address to join an account"""

    account = models.ForeignKey(
        Account,
        on_delete=models.CASCADE,
        related_name='invites'
    )
    email = models.EmailField(db_index=True)
    token = models.CharField(max_length=255, unique=True, default=generate_invite_token)
    invited_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='sent_invites'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    expires_at = models.DateTimeField(default=default_invite_expiry)
    used_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'invite'
        ordering = ['-created_at']

    @property
    def is_used(self) -> bool:
        return self.used_at is not None

    @property
    def is_expired(self) -> bool:
        return self.expires_at <= timezone.now()

    @property
    def is_active(self) -> bool:
        return not self.is_used and not self.is_expired

    def to_dict(self, include_token=True):
        data = {
            'id': self.id,
            'email': self.email,
            'created_at': self.created_at.isoformat(),
            'expires_at': self.expires_at.isoformat(),
            'used_at': self.used_at.isoformat() if self.used_at else None,
        }
        if include_token:
            data['token'] = self.token
        return data

    def __str__(self):
        return f"Invite {self.email} -> {self.account}"


class Project(models.Model):
    """Project of an account; each project owns its kanban board"""

    account = models.ForeignKey(
        Account,
        on_delete=models.CASCADE,
        related_name='projects'
    )
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='created_projects'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'project'
        ordering = ['created_at', 'id']

    def to_dict(self):
        board = self.boards.order_by('id').first()
        return {
            'id': self.id,
            'account_id': self.account_id,
            'name': self.name,
            'description': self.description,
            'created_by': self.created_by_id,
            'creator_name': self.created_by.name if self.created_by_id else None,
            'board_id': board.id if board else None,
            'created_at': self.created_at.isoformat(),
            'updated_at': self.updated_at.isoformat(),
        }

    def __str__(self):
        return self.name


class Board(models.Model):
    """
    Kanban board

    Columns are not rows: the column set is static configuration
    (see apps.board.columns). The board row doubles as the lock that
    serialises placement changes of its tasks.
    """

    account = models.ForeignKey(
        Account,
        on_delete=models.CASCADE,
        related_name='boards'
    )
    project = models.ForeignKey(
        Project,
        on_delete=models.CASCADE,
        related_name='boards',
        null=True,
        blank=True
    )
    name = models.CharField(max_length=255, default='Team Board')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'board'
        ordering = ['created_at', 'id']

    def to_dict(self):
        return {
            'id': self.id,
            'account_id': self.account_id,
            'project_id': self.project_id,
            'name': self.name,
            'created_at': self.created_at.isoformat(),
        }

    def __str__(self):
        return self.name


class Tag(models.Model):
    """Colored label shared by all boards of an account"""

    DEFAULT_COLOR = '#3b82f6'

    account = models.ForeignKey(
        Account,
        on_delete=models.CASCADE,
        related_name='tags'
    )
    name = models.CharField(max_length=100)
    color = models.CharField(
        max_length=7,
        default=DEFAULT_COLOR,
        validators=[hex_color_validator]
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'tag'
        ordering = ['name']
        constraints = [
            models.UniqueConstraint(
                Lower('name'), 'account',
                name='unique_tag_name_per_account',
            ),
        ]

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'color': self.color,
            'created_at': self.created_at.isoformat(),
        }

    def __str__(self):
        return self.name
