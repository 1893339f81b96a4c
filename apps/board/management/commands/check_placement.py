# apps/board/management/commands/check_placement.py

from django.core.management.base import BaseCommand, CommandError

from apps.board.columns import column_registry
from apps.board.placement import placement_manager
from apps.core.models import Board


class Command(BaseCommand):
    help = 'Checks task placement of every board (capacity, columns, ties); --fix renumbers columns'

    def add_arguments(self, parser):
        parser.add_argument(
            '--board',
            type=int,
            help='Only check this board id'
        )
        parser.add_argument(
            '--fix',
            action='store_true',
            help='Renumber every column to evenly spaced positions'
        )

    def handle(self, *args, **options):
        boards = Board.objects.order_by('id')
        if options['board']:
            boards = boards.filter(id=options['board'])
            if not boards.exists():
                raise CommandError(f"Board {options['board']} does not exist")

        total_problems = 0
        for board in boards:
            if options['fix']:
                self._renumber(board)

            problems = placement_manager.audit(board)
            total_problems += len(problems)
            if not problems:
                self.stdout.write(f'  Board {board.id} ({board.name}): ok')
                continue

            self.stdout.write(self.style.WARNING(f'  Board {board.id} ({board.name}):'))
            for problem in problems:
                self.stdout.write(f'    - {problem}')

        if total_problems:
            self.stdout.write(self.style.ERROR(f'\n{total_problems} problem(s) found'))
        else:
            self.stdout.write(self.style.SUCCESS('\nAll boards are consistent'))

    def _renumber(self, board):
        for column in column_registry.ids():
            count = placement_manager.renumber(board, column)
            if count:
                self.stdout.write(f'  Board {board.id}: renumbered {count} task(s) in {column}')
