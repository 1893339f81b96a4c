# apps/core/auth_service.py

"""
Authentication service - signup, login and logout behind one interface

Views only translate HTTP; validation, account bootstrap and the session
handling live here.
"""

import logging
from typing import Dict, Optional

from django.conf import settings
from django.contrib.auth import authenticate, login, logout
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db import transaction

from .exceptions import NotAuthenticated, ValidationFailed
from .models import Account, AccountMember, Project, User

logger = logging.getLogger(__name__)


class AuthenticationService:
    """
    Session-cookie authentication

    Signup bootstraps a complete workspace: the user owns a fresh account
    holding one project (and therefore one board).
    """

    DEFAULT_PROJECT_NAME = 'My Project'

    def __init__(self):
        self._session_age = settings.SESSION_COOKIE_AGE

    def signup(self, request, data: Dict) -> User:
        """Creates user + account + default project, then logs the user in"""
        name, email, password = self._validate_signup(data)

        if User.objects.filter(email=email).exists():
            raise ValidationFailed('Email already registered')

        with transaction.atomic():
            user = User.objects.create_user(
                username=email,
                email=email,
                password=password,
                name=name,
            )
            self._bootstrap_account(user)

        self._start_session(request, user)
        logger.info("User %s signed up", user.pk)
        return user

    def login(self, request, email: str, password: str) -> User:
        if not email or not password:
            raise ValidationFailed('Email and password are required')

        user = self._authenticate(request, email, password)
        if user is None:
            logger.info("Failed login for %s", email)
            raise NotAuthenticated('Invalid email or password')

        self._start_session(request, user)
        return user

    def logout(self, request):
        logout(request)

    # =================== PRIVATE ===================

    def _validate_signup(self, data: Dict):
        name = data.get('name')
        email = data.get('email')
        password = data.get('password')

        if not all(isinstance(v, str) and v.strip() for v in (name, email, password)):
            raise ValidationFailed('Name, email, and password are required')

        email = email.strip().lower()
        try:
            validate_email(email)
        except ValidationError:
            raise ValidationFailed('Invalid email')

        try:
            validate_password(password)
        except ValidationError as e:
            raise ValidationFailed(' '.join(e.messages))

        return name.strip(), email, password

    def _bootstrap_account(self, user: User) -> Account:
        account = Account.objects.create(name=f"{user.name}'s Team", owner=user)
        AccountMember.objects.create(
            account=account,
            user=user,
            role=AccountMember.ROLE_OWNER
        )
        # Board comes from the Project post_save signal
        Project.objects.create(
            account=account,
            name=self.DEFAULT_PROJECT_NAME,
            created_by=user
        )
        return account

    def _authenticate(self, request, email: str, password: str) -> Optional[User]:
        """Email is the login identifier; username mirrors it"""
        email = email.strip().lower()
        user = User.objects.filter(email=email, is_active=True).first()
        if user is None:
            return None
        return authenticate(request, username=user.username, password=password)

    def _start_session(self, request, user: User):
        login(request, user, backend='django.contrib.auth.backends.ModelBackend')
        request.session.set_expiry(self._session_age)


# Global service instance
auth_service = AuthenticationService()
