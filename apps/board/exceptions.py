# apps/board/exceptions.py

from apps.core.exceptions import KanbanError


class CapacityExceeded(KanbanError):
    """
    Destination column is at its WIP limit

    Recoverable: the user moves another task out first.
    """

    status_code = 409
    code = 'capacity_exceeded'

    def __init__(self, column, limit, title=None):
        self.column = column
        self.limit = limit
        super().__init__(
            f"Column '{title or column}' reached its WIP limit ({limit})",
            column=column,
            limit=limit,
        )


class InvalidDestination(KanbanError):
    """Unknown column or a negative / non-integer index"""

    code = 'invalid_destination'
    default_message = 'Invalid destination'


class FileTooLarge(KanbanError):
    status_code = 413
    code = 'file_too_large'
    default_message = 'File is too large'
