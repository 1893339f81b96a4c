import pytest

from apps.board.models import Task
from apps.core.models import AccountMember, Tag


def url(board, suffix=''):
    return f'/api/boards/{board.id}/{suffix}'


class TestBoardAccess:

    def test_anonymous_gets_401(self, anon, board):
        response = anon.get(url(board))

        assert response.status_code == 401
        assert response.json()['code'] == 'unauthorized'

    def test_foreign_board_is_not_found(self, api, other_board):
        response = api.get(url(other_board, 'tasks/'))

        assert response.status_code == 404
        assert response.json() == {'error': 'Board not found', 'code': 'not_found'}

    def test_wrong_method(self, api, board):
        response = api.client.put(url(board, 'tasks/move/'))

        assert response.status_code == 405
        assert response['Allow'] == 'POST'

    def test_board_list(self, api, board, other_board):
        response = api.get('/api/boards/')

        assert response.status_code == 200
        assert [b['id'] for b in response.json()['boards']] == [board.id]

    def test_board_detail_groups_tasks_by_column(self, api, board, make_task):
        make_task('A')
        make_task('B')
        make_task('C', column='done')

        response = api.get(url(board))

        data = response.json()
        assert data['board']['id'] == board.id
        columns = {c['id']: c for c in data['columns']}
        assert [c['id'] for c in data['columns']][0] == 'backlog'
        assert [t['title'] for t in columns['backlog']['tasks']] == ['A', 'B']
        assert [t['title'] for t in columns['done']['tasks']] == ['C']
        assert columns['in_progress']['limit'] == 3


class TestTaskCrud:

    def test_create_defaults_to_intake(self, api, board):
        response = api.post(url(board, 'tasks/'), {'title': '  Write docs  '})

        assert response.status_code == 201
        task = response.json()['task']
        assert task['title'] == 'Write docs'
        assert task['column'] == 'backlog'
        assert task['priority'] == 'normal'
        assert task['position'] == 1024.0

    def test_create_with_metadata(self, api, board, user, other_user, account):
        AccountMember.objects.create(account=account, user=other_user)

        response = api.post(url(board, 'tasks/'), {
            'title': 'Ship it',
            'column': 'ready',
            'priority': 'hot',
            'due_date': '2026-12-01',
            'assignee_ids': [user.id, other_user.id],
            'tags': ['backend', 'Backend', ' urgent '],
        })

        assert response.status_code == 201
        task = response.json()['task']
        assert task['column'] == 'ready'
        assert task['due_date'] == '2026-12-01'
        assert sorted(a['id'] for a in task['assignees']) == sorted([user.id, other_user.id])
        assert sorted(t['name'] for t in task['tags']) == ['backend', 'urgent']
        assert Tag.objects.filter(account=account).count() == 2

    def test_create_reuses_existing_tag(self, api, board, account):
        tag = Tag.objects.create(account=account, name='Bug', color='#ff0000')

        response = api.post(url(board, 'tasks/'), {'title': 'Fix', 'tags': ['bug']})

        assert response.json()['task']['tags'][0]['id'] == tag.id

    @pytest.mark.parametrize('payload, message', [
        ({}, 'Title is required'),
        ({'title': '   '}, 'Title is required'),
        ({'title': 'x', 'priority': 'urgent'}, 'Invalid priority'),
        ({'title': 'x', 'due_date': 'tomorrow'}, 'due_date'),
        ({'title': 'x', 'assignee_ids': 'me'}, 'assignee_ids'),
        ({'title': 'x', 'tags': 'a,b'}, 'tags'),
        ({'title': 'x', 'description': {'a': 1}}, 'Description must be a string'),
        ({'title': 'x', 'assignee_ids': [10 ** 30]}, 'assignee_ids'),
        ({'title': 'x', 'assignee_ids': [-1]}, 'assignee_ids'),
    ])
    def test_create_validation(self, api, board, payload, message):
        response = api.post(url(board, 'tasks/'), payload)

        assert response.status_code == 400
        assert message in response.json()['error']
        assert not Task.objects.exists()

    def test_assignee_must_be_member(self, api, board, other_user):
        response = api.post(url(board, 'tasks/'), {'title': 'x', 'assignee_ids': [other_user.id]})

        assert response.status_code == 400
        assert response.json()['error'] == 'Assignees must be members of the account'

    def test_create_in_unknown_column(self, api, board):
        response = api.post(url(board, 'tasks/'), {'title': 'x', 'column': 'inbox'})

        assert response.status_code == 400
        assert response.json()['code'] == 'invalid_destination'

    def test_create_in_full_column(self, api, board, make_task):
        for title in ('A', 'B', 'C'):
            make_task(title, column='in_progress')

        response = api.post(url(board, 'tasks/'), {'title': 'D', 'column': 'in_progress'})

        assert response.status_code == 409
        assert response.json()['code'] == 'capacity_exceeded'
        assert not Task.objects.filter(title='D').exists()

    def test_list_filters(self, api, board, user, account, make_task):
        a = make_task('Login page')
        b = make_task('Signup flow', column='done')
        c = make_task('Refactor')
        c.description = 'cleanup of the login module'
        c.save()
        a.assignees.add(user)
        b.tags.add(Tag.objects.create(account=account, name='ui'))

        def listed(**params):
            response = api.get(url(board, 'tasks/'), **params)
            assert response.status_code == 200
            return [t['title'] for t in response.json()['tasks']]

        assert listed() == ['Login page', 'Refactor', 'Signup flow']
        assert listed(column='done') == ['Signup flow']
        assert listed(assignee=user.id) == ['Login page']
        assert listed(tag='UI') == ['Signup flow']
        assert listed(search='LOGIN') == ['Login page', 'Refactor']

    def test_list_orders_by_column_configuration(self, api, board, make_task):
        make_task('Z', column='done')
        make_task('Y', column='ready')
        make_task('X')

        response = api.get(url(board, 'tasks/'))

        assert [t['column'] for t in response.json()['tasks']] == ['backlog', 'ready', 'done']

    def test_update_fields_keeps_placement(self, api, board, make_task):
        make_task('A')
        task = make_task('B')

        response = api.patch(url(board, f'tasks/{task.id}/'), {
            'title': 'B2',
            'priority': 'cold',
            'due_date': None,
            'column': 'done',
            'position': 0,
        })

        assert response.status_code == 200
        data = response.json()['task']
        assert data['title'] == 'B2'
        assert data['priority'] == 'cold'
        assert data['column'] == 'backlog'
        assert data['position'] == task.position

    def test_update_rejects_non_string_description(self, api, board, make_task):
        task = make_task('A')

        response = api.patch(url(board, f'tasks/{task.id}/'), {'description': ['x']})

        assert response.status_code == 400
        task.refresh_from_db()
        assert task.description is None

    def test_update_tags_and_assignees(self, api, board, user, make_task):
        task = make_task('A')

        response = api.patch(url(board, f'tasks/{task.id}/'), {
            'tags': ['infra'],
            'assignee_ids': [user.id],
        })

        data = response.json()['task']
        assert [t['name'] for t in data['tags']] == ['infra']
        assert [a['id'] for a in data['assignees']] == [user.id]

    def test_delete(self, api, board, make_task):
        task = make_task('A')

        response = api.delete(url(board, f'tasks/{task.id}/'))
        assert response.status_code == 200

        response = api.get(url(board, f'tasks/{task.id}/'))
        assert response.status_code == 404
        assert response.json()['error'] == 'Task not found'

    def test_task_of_other_board_not_found(self, api, board, other_board, other_user):
        from apps.board.placement import placement_manager

        foreign = placement_manager.create_task(other_board, title='Hidden', created_by=other_user)

        response = api.get(url(board, f'tasks/{foreign.id}/'))

        assert response.status_code == 404


class TestMoveEndpoint:

    def test_move(self, api, board, make_task):
        make_task('A')
        make_task('B')
        c = make_task('C')

        response = api.post(url(board, 'tasks/move/'), {
            'task_id': c.id,
            'to_column': 'backlog',
            'to_position': 0,
        })

        assert response.status_code == 200
        assert response.json()['task']['column'] == 'backlog'
        order = api.get(url(board, 'tasks/'), column='backlog').json()['tasks']
        assert [t['title'] for t in order] == ['C', 'A', 'B']

    def test_capacity_rejection(self, api, board, make_task):
        for title in ('A', 'B', 'C'):
            make_task(title, column='in_progress')
        d = make_task('D')

        response = api.post(url(board, 'tasks/move/'), {
            'task_id': d.id,
            'to_column': 'in_progress',
            'to_position': 1,
        })

        assert response.status_code == 409
        body = response.json()
        assert body['code'] == 'capacity_exceeded'
        assert body['column'] == 'in_progress'
        assert body['limit'] == 3
        d.refresh_from_db()
        assert d.column == 'backlog'

    @pytest.mark.parametrize('payload', [
        {'to_column': 'nowhere', 'to_position': 0},
        {'to_column': 'done', 'to_position': -3},
        {'to_column': 'done', 'to_position': '1'},
        {'to_column': 'done'},
    ])
    def test_invalid_destination(self, api, board, make_task, payload):
        task = make_task('A')

        response = api.post(url(board, 'tasks/move/'), dict(payload, task_id=task.id))

        assert response.status_code == 400
        assert response.json()['code'] == 'invalid_destination'

    def test_missing_task_id(self, api, board):
        response = api.post(url(board, 'tasks/move/'), {'to_column': 'done', 'to_position': 0})

        assert response.status_code == 400
        assert response.json()['code'] == 'validation_error'

    def test_unknown_task(self, api, board):
        response = api.post(url(board, 'tasks/move/'), {
            'task_id': 999999,
            'to_column': 'done',
            'to_position': 0,
        })

        assert response.status_code == 404

    def test_invalid_json(self, api, board):
        response = api.client.post(url(board, 'tasks/move/'), 'not json', content_type='application/json')

        assert response.status_code == 400
        assert response.json()['error'] == 'Invalid JSON body'


class TestComments:

    def test_create_and_list(self, api, board, user, make_task):
        task = make_task('A')

        first = api.post(url(board, f'tasks/{task.id}/comments/'), {'body': ' First '})
        api.post(url(board, f'tasks/{task.id}/comments/'), {'body': 'Second'})

        assert first.status_code == 201
        assert first.json()['comment']['body'] == 'First'
        assert first.json()['comment']['author']['id'] == user.id

        response = api.get(url(board, f'tasks/{task.id}/comments/'))
        assert [c['body'] for c in response.json()['comments']] == ['First', 'Second']

    def test_empty_body(self, api, board, make_task):
        task = make_task('A')

        response = api.post(url(board, f'tasks/{task.id}/comments/'), {'body': ''})

        assert response.status_code == 400
        assert response.json()['error'] == 'Comment body is required'
