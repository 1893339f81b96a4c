# apps/core/permissions.py

from functools import wraps

from .exceptions import NotFound


class BoardPermissions:
    """
    Access rules of GSD Board

    Everything hangs off account membership: a member sees every project,
    board and tag of the account. Objects outside the caller's accounts are
    reported as not found.
    """

    @staticmethod
    def get_account(user, account_id):
        from .models import Account

        account = Account.objects.filter(id=account_id, memberships__user=user).first()
        if account is None:
            raise NotFound('Account not found')
        return account

    @staticmethod
    def get_board(user, board_id):
        from .models import Board

        board = (
            Board.objects.select_related('account', 'project')
            .filter(id=board_id, account__memberships__user=user)
            .first()
        )
        if board is None:
            raise NotFound('Board not found')
        return board

    @staticmethod
    def get_project(user, project_id):
        from .models import Project

        project = (
            Project.objects.select_related('account', 'created_by')
            .filter(id=project_id, account__memberships__user=user)
            .first()
        )
        if project is None:
            raise NotFound('Project not found')
        return project

    @staticmethod
    def get_tag(user, tag_id):
        from .models import Tag

        tag = Tag.objects.filter(id=tag_id, account__memberships__user=user).first()
        if tag is None:
            raise NotFound('Tag not found')
        return tag


# Decorators for views

def requires_account_access(view_func):
    """
    Resolves `account_id` from the URL to an account of the caller
    and stores it on request.account
    """

    @wraps(view_func)
    def wrapped_view(request, account_id, *args, **kwargs):
        request.account = BoardPermissions.get_account(request.user, account_id)
        return view_func(request, account_id, *args, **kwargs)

    return wrapped_view


def requires_board_access(view_func):
    """
    Resolves `board_id` from the URL to a board of the caller
    and stores it on request.board
    """

    @wraps(view_func)
    def wrapped_view(request, board_id, *args, **kwargs):
        request.board = BoardPermissions.get_board(request.user, board_id)
        return view_func(request, board_id, *args, **kwargs)

    return wrapped_view
