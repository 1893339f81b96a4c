# apps/board/views.py

"""
JSON API of a board: tasks, moves, comments and attachments

Every route carries the board id; requires_board_access resolves it to a
board of the caller (request.board) or answers 404.
"""

import logging
import mimetypes

from django.conf import settings
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from django.db import transaction
from django.db.models import Q
from django.http import HttpResponse, JsonResponse
from django.shortcuts import redirect

from apps.core.api import api_view, id_list, optional_date, optional_text, parse_json_body, required_text
from apps.core.exceptions import NotFound, ValidationFailed
from apps.core.models import Tag
from apps.core.permissions import requires_board_access
from .columns import column_registry
from .exceptions import FileTooLarge
from .models import Attachment, Comment, Task
from .placement import placement_manager
from .storage import (
    attachment_upload_to,
    inline_image_key,
    make_thumbnail,
    store_inline_image,
    thumbnail_upload_to,
)

logger = logging.getLogger(__name__)


# === HELPERS ===

def _get_task(board, task_id):
    task = (
        Task.objects.filter(id=task_id, board=board)
        .prefetch_related('assignees', 'tags')
        .first()
    )
    if task is None:
        raise NotFound('Task not found')
    return task


def _get_attachment(board, attachment_id):
    attachment = (
        Attachment.objects.select_related('uploader')
        .filter(id=attachment_id, task__board=board)
        .first()
    )
    if attachment is None:
        raise NotFound('Attachment not found')
    return attachment


def _clean_priority(value):
    if value not in Task.priority_values():
        raise ValidationFailed(
            f"Invalid priority. Must be one of: {', '.join(Task.priority_values())}"
        )
    return value


def _resolve_assignees(board, value):
    """Users behind `assignee_ids`; each must belong to the board's account"""
    ids = set(id_list(value, 'assignee_ids'))
    users = list(board.account.members.filter(id__in=ids))
    if len(users) != len(ids):
        raise ValidationFailed('Assignees must be members of the account')
    return users


def _resolve_tags(board, value):
    """Tag names to Tag rows of the account, creating the missing ones"""
    if not isinstance(value, list):
        raise ValidationFailed('tags must be an array')

    tags = {}
    for name in value:
        if not isinstance(name, str) or not name.strip():
            continue
        name = name.strip()[:100]
        if name.lower() in tags:
            continue
        tag = Tag.objects.filter(account=board.account, name__iexact=name).first()
        if tag is None:
            tag = Tag.objects.create(account=board.account, name=name)
        tags[name.lower()] = tag
    return list(tags.values())


def _uploaded_file(request):
    uploaded = request.FILES.get('file')
    if uploaded is None:
        raise ValidationFailed('No file uploaded')

    limit = settings.KANBAN_ATTACHMENT_MAX_BYTES
    if uploaded.size > limit:
        raise FileTooLarge(f'File exceeds the {limit // (1024 * 1024)}MB limit')
    return uploaded


def _mime_type(uploaded):
    return (
        uploaded.content_type
        or mimetypes.guess_type(uploaded.name)[0]
        or 'application/octet-stream'
    )


# === BOARDS ===

@api_view(['GET'])
def board_list(request):
    """Boards of every account the user belongs to"""
    boards = request.user.get_accessible_boards().select_related('project')
    return JsonResponse({'boards': [board.to_dict() for board in boards]})


@api_view(['GET'])
@requires_board_access
def board_detail(request, board_id):
    """Board with its columns, each holding its tasks in order"""
    board = request.board
    grouped = placement_manager.board_tasks(board)

    columns = []
    for column in column_registry.all():
        data = column.to_dict()
        data['tasks'] = [task.to_dict() for task in grouped.get(column.id, [])]
        columns.append(data)

    return JsonResponse({'board': board.to_dict(), 'columns': columns})


# === TASKS ===

@api_view(['GET', 'POST'])
@requires_board_access
def task_list(request, board_id):
    """
    GET: tasks of the board, filtered by column / assignee / tag / search
    POST: new task at the end of its column (intake by default)
    """
    board = request.board

    if request.method == 'GET':
        tasks = Task.objects.filter(board=board)

        column = request.GET.get('column')
        if column:
            tasks = tasks.filter(column=column)

        assignee = request.GET.get('assignee')
        if assignee:
            try:
                tasks = tasks.filter(assignees__id=int(assignee))
            except ValueError:
                raise ValidationFailed('assignee must be a user id')

        tag = request.GET.get('tag')
        if tag:
            tasks = tasks.filter(tags__name__iexact=tag)

        search = request.GET.get('search')
        if search:
            tasks = tasks.filter(Q(title__icontains=search) | Q(description__icontains=search))

        tasks = tasks.distinct().prefetch_related('assignees', 'tags')
        ordered = sorted(
            tasks,
            key=lambda t: (column_registry.order_of(t.column), t.position, t.id)
        )
        return JsonResponse({'tasks': [task.to_dict() for task in ordered]})

    data = parse_json_body(request)
    title = required_text(data, 'title', 'Title', max_length=500)
    priority = _clean_priority(data.get('priority', Task.PRIORITY_NORMAL))
    due_date = optional_date(data.get('due_date'), 'due_date')
    assignees = _resolve_assignees(board, data.get('assignee_ids', []))

    with transaction.atomic():
        tags = _resolve_tags(board, data.get('tags', []))
        task = placement_manager.create_task(
            board,
            data.get('column'),
            title=title,
            description=optional_text(data.get('description'), 'Description'),
            priority=priority,
            due_date=due_date,
            created_by=request.user,
        )
        task.assignees.set(assignees)
        task.tags.set(tags)

    return JsonResponse({'task': _get_task(board, task.id).to_dict()}, status=201)


@api_view(['GET', 'PATCH', 'DELETE'])
@requires_board_access
def task_detail(request, board_id, task_id):
    board = request.board
    task = _get_task(board, task_id)

    if request.method == 'GET':
        return JsonResponse({'task': task.to_dict()})

    if request.method == 'DELETE':
        placement_manager.remove(task)
        return JsonResponse({'message': 'Task deleted successfully'})

    # Field edits only; placement changes go through the move endpoint
    data = parse_json_body(request)
    fields = []
    if 'title' in data:
        task.title = required_text(data, 'title', 'Title', max_length=500)
        fields.append('title')
    if 'description' in data:
        task.description = optional_text(data['description'], 'Description')
        fields.append('description')
    if 'priority' in data:
        task.priority = _clean_priority(data['priority'])
        fields.append('priority')
    if 'due_date' in data:
        task.due_date = optional_date(data['due_date'], 'due_date')
        fields.append('due_date')

    assignees = None
    if 'assignee_ids' in data:
        assignees = _resolve_assignees(board, data['assignee_ids'])

    with transaction.atomic():
        if fields:
            task.save(update_fields=fields + ['updated_at'])
        if assignees is not None:
            task.assignees.set(assignees)
        if 'tags' in data:
            task.tags.set(_resolve_tags(board, data['tags']))

    return JsonResponse({'task': _get_task(board, task.id).to_dict()})


@api_view(['POST'])
@requires_board_access
def task_move(request, board_id):
    """Moves a task: {task_id, to_column, to_position}"""
    data = parse_json_body(request)

    task_id = data.get('task_id')
    if isinstance(task_id, bool) or not isinstance(task_id, int):
        raise ValidationFailed('task_id is required')

    task = _get_task(request.board, task_id)
    task = placement_manager.move(task, data.get('to_column'), data.get('to_position'))

    return JsonResponse({'task': _get_task(request.board, task.id).to_dict()})


# === COMMENTS ===

@api_view(['GET', 'POST'])
@requires_board_access
def task_comments(request, board_id, task_id):
    task = _get_task(request.board, task_id)

    if request.method == 'GET':
        comments = task.comments.select_related('author')
        return JsonResponse({'comments': [c.to_dict() for c in comments]})

    data = parse_json_body(request)
    body = required_text(data, 'body', 'Comment body')
    comment = Comment.objects.create(task=task, author=request.user, body=body)
    return JsonResponse({'comment': comment.to_dict()}, status=201)


# === ATTACHMENTS ===

@api_view(['GET', 'POST'])
@requires_board_access
def task_attachments(request, board_id, task_id):
    """
    GET: attachments of a task with fresh download URLs
    POST (multipart `file`, optional `comment_id`): upload

    The blob (and thumbnail) is stored before the metadata row; if the row
    insert fails the blob stays orphaned.
    """
    task = _get_task(request.board, task_id)

    if request.method == 'GET':
        attachments = task.attachments.select_related('uploader')
        return JsonResponse({'attachments': [a.to_dict() for a in attachments]})

    uploaded = _uploaded_file(request)
    mime_type = _mime_type(uploaded)

    comment = None
    comment_id = request.POST.get('comment_id')
    if comment_id:
        comment = task.comments.filter(id=comment_id).first() if comment_id.isdigit() else None
        if comment is None:
            raise NotFound('Comment not found')

    data = uploaded.read()
    storage_key = default_storage.save(
        attachment_upload_to(None, uploaded.name),
        ContentFile(data)
    )

    thumbnail_key = None
    thumbnail = make_thumbnail(data, mime_type)
    if thumbnail is not None:
        base = storage_key.rsplit('/', 1)[-1].rsplit('.', 1)[0]
        thumbnail_key = default_storage.save(thumbnail_upload_to(None, f"{base}.jpg"), thumbnail)

    attachment = Attachment.objects.create(
        task=task,
        comment=comment,
        uploader=request.user,
        original_filename=uploaded.name,
        mime_type=mime_type,
        size_bytes=uploaded.size,
        file=storage_key,
        thumbnail=thumbnail_key,
    )
    logger.info("Attachment %s uploaded to task %s", attachment.pk, task.pk)
    return JsonResponse({'attachment': attachment.to_dict()}, status=201)


@api_view(['GET', 'DELETE'])
@requires_board_access
def attachment_detail(request, board_id, attachment_id):
    attachment = _get_attachment(request.board, attachment_id)

    if request.method == 'GET':
        return JsonResponse({'attachment': attachment.to_dict()})

    # Blobs are removed by the post_delete handler once the row is gone
    attachment.delete()
    return HttpResponse(status=204)


@api_view(['GET'])
@requires_board_access
def attachment_view(request, board_id, attachment_id):
    """Redirects to a fresh URL of the blob (for markdown embeds)"""
    attachment = _get_attachment(request.board, attachment_id)
    return redirect(attachment.file.url)


@api_view(['POST'])
@requires_board_access
def inline_image_upload(request, board_id):
    """Image for a markdown body, stored before any task references it"""
    uploaded = _uploaded_file(request)
    mime_type = _mime_type(uploaded)
    if not mime_type.startswith('image/'):
        raise ValidationFailed('Only image files are allowed for inline uploads')

    key = inline_image_key(request.board.account_id, uploaded.name)
    storage_key, url = store_inline_image(key, uploaded.read())

    return JsonResponse({
        'url': url,
        'storage_key': storage_key,
        'filename': uploaded.name,
        'mime_type': mime_type,
        'size_bytes': uploaded.size,
    }, status=201)
