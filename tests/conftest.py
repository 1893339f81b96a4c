import json

import pytest
from django.test import Client

from apps.board.placement import placement_manager
from apps.core.models import Account, AccountMember, Project, User


PASSWORD = 'correct-horse-42'


def make_user(email, name='Test User'):
    return User.objects.create_user(
        username=email,
        email=email,
        password=PASSWORD,
        name=name,
    )


def make_account(owner, name='Team'):
    account = Account.objects.create(name=name, owner=owner)
    AccountMember.objects.create(account=account, user=owner, role=AccountMember.ROLE_OWNER)
    return account


@pytest.fixture
def user(db):
    return make_user('ana@example.com', name='Ana')


@pytest.fixture
def other_user(db):
    return make_user('bruno@example.com', name='Bruno')


@pytest.fixture
def account(user):
    return make_account(user, name="Ana's Team")


@pytest.fixture
def project(account, user):
    return Project.objects.create(account=account, name='Launch', created_by=user)


@pytest.fixture
def board(project):
    return project.boards.get()


@pytest.fixture
def other_board(other_user):
    """Board of an account the main user does not belong to"""
    account = make_account(other_user, name="Bruno's Team")
    project = Project.objects.create(account=account, name='Secret', created_by=other_user)
    return project.boards.get()


@pytest.fixture
def make_task(board, user):
    """Creates tasks through the placement manager"""

    def _make(title, column=None, target_board=None):
        return placement_manager.create_task(
            target_board or board,
            column,
            title=title,
            created_by=user,
        )

    return _make


@pytest.fixture
def api(user):
    """Logged-in client with JSON helpers"""
    client = Client()
    client.force_login(user)
    return JsonClient(client)


@pytest.fixture
def anon():
    return JsonClient(Client())


class JsonClient:
    """Thin wrapper sending and decoding JSON bodies"""

    def __init__(self, client):
        self.client = client

    def get(self, url, **params):
        return self.client.get(url, params)

    def post(self, url, data=None):
        return self.client.post(url, json.dumps(data or {}), content_type='application/json')

    def patch(self, url, data=None):
        return self.client.patch(url, json.dumps(data or {}), content_type='application/json')

    def delete(self, url):
        return self.client.delete(url)

    def upload(self, url, **data):
        return self.client.post(url, data)
