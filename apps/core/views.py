# apps/core/views.py

import logging

from django.core.cache import cache
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Count
from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.csrf import ensure_csrf_cookie
from django.views.decorators.http import require_GET

from .api import api_view, optional_text, parse_json_body, required_text
from .auth_service import auth_service
from .exceptions import NotFound, PermissionDenied, ValidationFailed
from .models import Account, AccountMember, Invite, Project, Tag, User, hex_color_validator
from .permissions import BoardPermissions, requires_account_access

logger = logging.getLogger(__name__)


# === AUTHENTICATION ===

@ensure_csrf_cookie
@api_view(['GET'], login_required=False)
def csrf_view(request):
    """Sets the CSRF cookie for the SPA"""
    return JsonResponse({'detail': 'CSRF cookie set'})


@api_view(['POST'], login_required=False)
def signup_view(request):
    user = auth_service.signup(request, parse_json_body(request))
    return JsonResponse({'user': user.to_dict()}, status=201)


@api_view(['POST'], login_required=False)
def login_view(request):
    data = parse_json_body(request)
    user = auth_service.login(request, data.get('email'), data.get('password'))
    return JsonResponse({'user': user.to_dict()})


@api_view(['POST'])
def logout_view(request):
    auth_service.logout(request)
    return JsonResponse({'message': 'Logged out successfully'})


@api_view(['GET'])
def me_view(request):
    """Current user and the accounts they belong to"""
    memberships = (
        AccountMember.objects.filter(user=request.user)
        .select_related('account')
        .order_by('created_at')
    )
    accounts = []
    for membership in memberships:
        data = membership.account.to_dict()
        data['role'] = membership.role
        accounts.append(data)

    return JsonResponse({'user': request.user.to_dict(), 'accounts': accounts})


# === ACCOUNTS & INVITES ===

@api_view(['GET'])
@requires_account_access
def account_members(request, account_id):
    memberships = (
        request.account.memberships.select_related('user')
        .order_by('created_at')
    )
    return JsonResponse({'members': [m.to_dict() for m in memberships]})


@api_view(['GET', 'POST'])
@requires_account_access
def account_invites(request, account_id):
    """
    GET: pending (unused, unexpired) invites
    POST: invite an email address
    """
    account = request.account

    if request.method == 'GET':
        pending = account.invites.filter(used_at__isnull=True, expires_at__gt=timezone.now())
        return JsonResponse({'invites': [invite.to_dict() for invite in pending]})

    data = parse_json_body(request)
    email = required_text(data, 'email', 'Email').lower()

    if account.memberships.filter(user__email=email).exists():
        raise ValidationFailed('User is already a member of this account')

    active = account.invites.filter(
        email=email,
        used_at__isnull=True,
        expires_at__gt=timezone.now()
    )
    if active.exists():
        raise ValidationFailed('An active invite already exists for this email')

    invite = Invite.objects.create(account=account, email=email, invited_by=request.user)
    logger.info("Invite %s created for account %s", invite.pk, account.pk)
    return JsonResponse({'invite': invite.to_dict()}, status=201)


@api_view(['GET'], login_required=False)
def invite_preview(request, token):
    """Public: what the invite link is about"""
    invite = Invite.objects.select_related('account').filter(token=token).first()
    if invite is None:
        raise NotFound('Invalid invite token')

    return JsonResponse({
        'invite': {
            'email': invite.email,
            'account_name': invite.account.name,
            'expires_at': invite.expires_at.isoformat(),
            'is_used': invite.is_used,
            'is_expired': invite.is_expired,
            'is_valid': invite.is_active,
        }
    })


@api_view(['POST'])
def invite_join(request):
    """Joins the invite's account; membership and used mark are one unit"""
    data = parse_json_body(request)
    token = required_text(data, 'token', 'Token')

    with transaction.atomic():
        invite = (
            Invite.objects.select_for_update()
            .select_related('account')
            .filter(token=token)
            .first()
        )
        if invite is None:
            raise NotFound('Invalid invite token')
        if invite.is_used:
            raise ValidationFailed('This invite has already been used')
        if invite.is_expired:
            raise ValidationFailed('This invite has expired')
        if invite.email.lower() != request.user.email.lower():
            raise PermissionDenied('This invite is for a different email address')
        if request.user.is_member_of(invite.account):
            raise ValidationFailed('You are already a member of this account')

        AccountMember.objects.create(
            account=invite.account,
            user=request.user,
            role=AccountMember.ROLE_MEMBER
        )
        invite.used_at = timezone.now()
        invite.save(update_fields=['used_at'])

    logger.info("User %s joined account %s", request.user.pk, invite.account_id)
    return JsonResponse({'account': invite.account.to_dict()})


# === PROJECTS ===

@api_view(['GET', 'POST'])
@requires_account_access
def account_projects(request, account_id):
    account = request.account

    if request.method == 'GET':
        projects = account.projects.select_related('created_by').prefetch_related('boards')
        return JsonResponse({'projects': [p.to_dict() for p in projects]})

    data = parse_json_body(request)
    name = required_text(data, 'name', 'Project name', max_length=255)
    description = optional_text(data.get('description'), 'Description')

    with transaction.atomic():
        project = Project.objects.create(
            account=account,
            name=name,
            description=description,
            created_by=request.user
        )

    logger.info("Project %s created in account %s", project.pk, account.pk)
    return JsonResponse({'project': project.to_dict()}, status=201)


@api_view(['GET', 'PATCH', 'DELETE'])
def project_detail(request, project_id):
    project = BoardPermissions.get_project(request.user, project_id)

    if request.method == 'GET':
        return JsonResponse({'project': project.to_dict()})

    if request.method == 'PATCH':
        data = parse_json_body(request)
        if 'name' in data:
            project.name = required_text(data, 'name', 'Project name', max_length=255)
        if 'description' in data:
            project.description = optional_text(data['description'], 'Description')
        project.save()
        return JsonResponse({'project': project.to_dict()})

    with transaction.atomic():
        Account.objects.select_for_update().get(pk=project.account_id)
        remaining = Project.objects.filter(account_id=project.account_id).count()
        if remaining <= 1:
            raise ValidationFailed(
                'Cannot delete the last project. Create another project first.'
            )
        project.delete()

    logger.info("Project %s deleted", project_id)
    return JsonResponse({'message': 'Project deleted successfully'})


# === TAGS ===

def _clean_tag_name(data):
    return required_text(data, 'name', 'Tag name', max_length=100)


def _clean_tag_color(value):
    try:
        hex_color_validator(value)
    except ValidationError:
        raise ValidationFailed('Invalid color format. Use hex format like #3b82f6')
    return value


def _ensure_unique_tag(account, name, exclude_id=None):
    duplicates = Tag.objects.filter(account=account, name__iexact=name)
    if exclude_id is not None:
        duplicates = duplicates.exclude(id=exclude_id)
    if duplicates.exists():
        raise ValidationFailed('A tag with this name already exists')


@api_view(['GET', 'POST'])
@requires_account_access
def account_tags(request, account_id):
    account = request.account

    if request.method == 'GET':
        tags = account.tags.annotate(usage_count=Count('tasks')).order_by('name')
        payload = []
        for tag in tags:
            data = tag.to_dict()
            data['usage_count'] = tag.usage_count
            payload.append(data)
        return JsonResponse({'tags': payload})

    data = parse_json_body(request)
    name = _clean_tag_name(data)
    color = _clean_tag_color(data.get('color') or Tag.DEFAULT_COLOR)
    _ensure_unique_tag(account, name)

    tag = Tag.objects.create(account=account, name=name, color=color)
    return JsonResponse({'tag': tag.to_dict()}, status=201)


@api_view(['GET'])
@requires_account_access
def account_tag_search(request, account_id):
    """Autocomplete: name contains q, first 10 by name"""
    query = request.GET.get('q', '').strip()
    if not query:
        raise ValidationFailed('Search query is required')

    tags = request.account.tags.filter(name__icontains=query).order_by('name')[:10]
    return JsonResponse({'tags': [tag.to_dict() for tag in tags]})


@api_view(['PATCH', 'DELETE'])
def tag_detail(request, tag_id):
    tag = BoardPermissions.get_tag(request.user, tag_id)

    if request.method == 'DELETE':
        tag.delete()
        return JsonResponse({'message': 'Tag deleted successfully'})

    data = parse_json_body(request)
    if 'name' in data:
        name = _clean_tag_name(data)
        _ensure_unique_tag(tag.account_id, name, exclude_id=tag.id)
        tag.name = name
    if 'color' in data:
        tag.color = _clean_tag_color(data['color'])
    tag.save()
    return JsonResponse({'tag': tag.to_dict()})


# === MONITORING ===

@require_GET
def health_check(request):
    """Health check for monitoring"""
    try:
        User.objects.exists()
        cache.set('health_check', 'ok', 60)
        cache.get('health_check')
    except Exception as e:
        logger.error("Health check failed: %s", e)
        return JsonResponse({
            'status': 'unhealthy',
            'error': str(e),
            'timestamp': timezone.now().isoformat(),
        }, status=503)

    return JsonResponse({
        'status': 'healthy',
        'database': 'ok',
        'cache': 'ok',
        'timestamp': timezone.now().isoformat(),
    })
