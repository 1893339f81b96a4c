# apps/board/columns.py

"""
Fixed column enumeration of every board

The set, its order, the intake column and the per-column capacity come from
settings.KANBAN_COLUMNS / settings.KANBAN_INTAKE_COLUMN. They are
configuration, not user data.
"""

from dataclasses import dataclass
from typing import List, Optional

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured


@dataclass(frozen=True)
class ColumnSpec:
    id: str
    title: str
    limit: Optional[int] = None

    @property
    def is_limited(self) -> bool:
        return bool(self.limit)

    def to_dict(self):
        return {'id': self.id, 'title': self.title, 'limit': self.limit}


class ColumnRegistry:
    """Reads the column configuration from settings on every access"""

    def all(self) -> List[ColumnSpec]:
        columns = [
            ColumnSpec(
                id=column['id'],
                title=column.get('title', column['id']),
                limit=column.get('limit') or None,
            )
            for column in settings.KANBAN_COLUMNS
        ]
        if not columns:
            raise ImproperlyConfigured('KANBAN_COLUMNS must declare at least one column')
        return columns

    def ids(self) -> List[str]:
        return [column.id for column in self.all()]

    def get(self, column_id) -> Optional[ColumnSpec]:
        for column in self.all():
            if column.id == column_id:
                return column
        return None

    def order_of(self, column_id) -> int:
        """Display index, unknown columns sort last"""
        ids = self.ids()
        return ids.index(column_id) if column_id in ids else len(ids)

    @property
    def intake(self) -> ColumnSpec:
        column = self.get(getattr(settings, 'KANBAN_INTAKE_COLUMN', None))
        if column is None:
            raise ImproperlyConfigured('KANBAN_INTAKE_COLUMN must be one of KANBAN_COLUMNS')
        return column


column_registry = ColumnRegistry()
