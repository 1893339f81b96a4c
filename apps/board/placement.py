# apps/board/placement.py

"""
Task Placement Manager

Owns the (column, position) pair of every task:

- place_on_create: append at the end of a column
- move: land a task at an index of a column, same or different
- remove: delete a task

Positions are sparse floats. A task inserted between two neighbours takes
the midpoint; when the neighbours get too close the column is renumbered to
evenly spaced values first. Within (board, column) the order is
(position, id).

Every write path locks the board row (SELECT ... FOR UPDATE) inside one
transaction, so the capacity count and the write it guards cannot
interleave with another request on the same board.
"""

import logging
from typing import List, Tuple

from django.db import transaction
from django.db.models import Count, Max
from django.db.transaction import TransactionManagementError

from apps.core.exceptions import NotFound
from apps.core.models import Board
from .columns import column_registry, ColumnSpec
from .exceptions import CapacityExceeded, InvalidDestination
from .models import Task

logger = logging.getLogger(__name__)


class TaskPlacementManager:
    """Placement rules of tasks inside the fixed columns of a board"""

    # Distance between consecutive positions after append / renumber
    POSITION_STEP = 1024.0
    # Below this gap two neighbours are renumbered before inserting between them
    MIN_GAP = 1e-6

    def __init__(self, columns=column_registry):
        self.columns = columns

    # === READS ===

    def column_tasks(self, board, column):
        """Tasks of (board, column) in their defined order"""
        return Task.objects.filter(board=board, column=column).order_by('position', 'id')

    def board_tasks(self, board):
        """All tasks of a board grouped by column, in column display order"""
        grouped = {column.id: [] for column in self.columns.all()}
        tasks = (
            Task.objects.filter(board=board)
            .prefetch_related('assignees', 'tags')
            .order_by('position', 'id')
        )
        for task in tasks:
            grouped.setdefault(task.column, []).append(task)
        return grouped

    # === WRITES ===

    def place_on_create(self, board, column=None) -> Tuple[str, float]:
        """
        Placement of a new task: the given column (intake by default),
        after its current last task

        Must run inside the transaction that inserts the task.
        """
        self._require_atomic()
        if column is None:
            column = self.columns.intake.id
        spec = self._validate_column(column)
        self._lock_board(board.pk)
        self._check_capacity(board, spec)

        last = (
            Task.objects.filter(board=board, column=spec.id)
            .aggregate(last=Max('position'))['last']
        )
        position = self.POSITION_STEP if last is None else last + self.POSITION_STEP
        return spec.id, position

    def create_task(self, board, column=None, **fields) -> Task:
        """Inserts a task at the end of its column"""
        with transaction.atomic():
            column, position = self.place_on_create(board, column)
            task = Task.objects.create(board=board, column=column, position=position, **fields)

        logger.info("Task %s created in %s/%s at %s", task.pk, board.pk, column, position)
        return task

    def move(self, task, to_column, to_position) -> Task:
        """
        Moves a task to index `to_position` of `to_column`

        The index counts the destination column without the moved task
        (0 = first). Indices past the end append. Siblings of both columns
        keep their relative order. Nothing is written when the move is
        rejected.
        """
        spec = self._validate_column(to_column)
        index = self._validate_index(to_position)

        with transaction.atomic():
            board = self._lock_board(task.board_id)
            try:
                current = Task.objects.select_for_update().get(pk=task.pk, board_id=board.pk)
            except Task.DoesNotExist:
                raise NotFound('Task not found')

            source = current.column
            if spec.id != source:
                self._check_capacity(board, spec)

            siblings = list(
                self.column_tasks(board, spec.id)
                .exclude(pk=current.pk)
                .values_list('pk', 'position')
            )
            index = min(index, len(siblings))

            current.column = spec.id
            current.position = self._position_at(siblings, index)
            current.save(update_fields=['column', 'position', 'updated_at'])

        logger.info(
            "Task %s moved %s -> %s[%s] on board %s",
            current.pk, source, spec.id, index, board.pk
        )
        return current

    def remove(self, task):
        """Deletes a task; the remaining order needs no compaction"""
        with transaction.atomic():
            self._lock_board(task.board_id)
            deleted, _ = Task.objects.filter(pk=task.pk, board_id=task.board_id).delete()
            if not deleted:
                raise NotFound('Task not found')

        logger.info("Task %s removed from board %s", task.pk, task.board_id)

    def renumber(self, board, column) -> int:
        """Rewrites the positions of a column to evenly spaced values"""
        with transaction.atomic():
            self._lock_board(board.pk)
            siblings = list(self.column_tasks(board, column).values_list('pk', 'position'))
            self._renumber(siblings)
        return len(siblings)

    # === CHECKS ===

    def audit(self, board) -> List[str]:
        """
        Invariant violations of a board

        Unknown column values, columns over capacity and tied positions
        (tolerated by the id tie-break, but reported).
        """
        problems = []
        counts = dict(
            Task.objects.filter(board=board)
            .values('column')
            .annotate(total=Count('id'))
            .values_list('column', 'total')
        )

        for column, total in counts.items():
            spec = self.columns.get(column)
            if spec is None:
                problems.append(f"{total} task(s) in unknown column '{column}'")
            elif spec.is_limited and total > spec.limit:
                problems.append(f"Column '{column}' holds {total} tasks, limit is {spec.limit}")

        ties = (
            Task.objects.filter(board=board)
            .values('column', 'position')
            .annotate(total=Count('id'))
            .filter(total__gt=1)
        )
        for tie in ties:
            problems.append(
                f"Column '{tie['column']}' has {tie['total']} tasks at position {tie['position']}"
            )

        return problems

    # === INTERNALS ===

    def _require_atomic(self):
        if transaction.get_autocommit():
            raise TransactionManagementError(
                'Task placement must run inside transaction.atomic()'
            )

    def _lock_board(self, board_id) -> Board:
        return Board.objects.select_for_update().get(pk=board_id)

    def _validate_column(self, column) -> ColumnSpec:
        spec = self.columns.get(column) if isinstance(column, str) else None
        if spec is None:
            raise InvalidDestination(
                f"Invalid column. Must be one of: {', '.join(self.columns.ids())}",
                column=column,
            )
        return spec

    def _validate_index(self, index) -> int:
        if isinstance(index, bool) or not isinstance(index, int) or index < 0:
            raise InvalidDestination(
                'Position must be an integer index greater than or equal to 0',
                position=index,
            )
        return index

    def _check_capacity(self, board, spec: ColumnSpec):
        if not spec.is_limited:
            return
        occupants = Task.objects.filter(board=board, column=spec.id).count()
        if occupants >= spec.limit:
            raise CapacityExceeded(spec.id, spec.limit, title=spec.title)

    def _position_at(self, siblings, index) -> float:
        """
        Position landing a task at `index` of `siblings`
        (ordered (pk, position) pairs not containing the task)
        """
        if not siblings:
            return self.POSITION_STEP
        if index == 0:
            return siblings[0][1] - self.POSITION_STEP
        if index >= len(siblings):
            return siblings[-1][1] + self.POSITION_STEP

        before = siblings[index - 1][1]
        after = siblings[index][1]
        if after - before > self.MIN_GAP:
            return (before + after) / 2

        self._renumber(siblings)
        return index * self.POSITION_STEP + self.POSITION_STEP / 2

    def _renumber(self, siblings):
        """siblings[i] gets (i + 1) * POSITION_STEP"""
        tasks = [
            Task(pk=pk, position=(i + 1) * self.POSITION_STEP)
            for i, (pk, _) in enumerate(siblings)
        ]
        Task.objects.bulk_update(tasks, ['position'])
        if tasks:
            logger.debug("Renumbered %s task position(s)", len(tasks))


# Module level instance used by views and commands
placement_manager = TaskPlacementManager()
