# apps/core/exceptions.py

"""
Typed errors of the JSON API

Each error carries the HTTP status and a machine-readable code so clients
can special-case a rejection (e.g. a full column) without parsing messages.
"""


class KanbanError(Exception):
    """Base for every expected, user-facing error"""

    status_code = 400
    code = 'bad_request'
    default_message = 'Bad request'

    def __init__(self, message=None, **extra):
        self.message = message or self.default_message
        self.extra = extra
        super().__init__(self.message)

    def to_dict(self):
        data = {'error': self.message, 'code': self.code}
        data.update(self.extra)
        return data


class ValidationFailed(KanbanError):
    code = 'validation_error'
    default_message = 'Invalid data'


class NotAuthenticated(KanbanError):
    status_code = 401
    code = 'unauthorized'
    default_message = 'Authentication required'


class PermissionDenied(KanbanError):
    status_code = 403
    code = 'forbidden'
    default_message = 'You do not have permission for this action'


class NotFound(KanbanError):
    status_code = 404
    code = 'not_found'
    default_message = 'Not found'
