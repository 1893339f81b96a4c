# apps/core/admin.py

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.html import format_html

from .models import Account, AccountMember, Board, Invite, Project, Tag, User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Admin for the email-login user"""

    list_display = ['email', 'name', 'is_active', 'is_staff', 'date_joined']
    list_filter = ['is_staff', 'is_active', 'date_joined']
    search_fields = ['email', 'name']
    ordering = ['-date_joined']

    fieldsets = BaseUserAdmin.fieldsets + (
        ('Profile', {
            'fields': ('name',)
        }),
    )

    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ('Profile', {
            'fields': ('name', 'email')
        }),
    )


class AccountMemberInline(admin.TabularInline):
    model = AccountMember
    extra = 0
    fields = ['user', 'role', 'created_at']
    readonly_fields = ['created_at']


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    list_display = ['name', 'owner', 'members_count', 'projects_count', 'created_at']
    search_fields = ['name', 'owner__email']
    readonly_fields = ['created_at']
    inlines = [AccountMemberInline]

    def members_count(self, obj):
        return obj.memberships.count()

    members_count.short_description = 'Members'

    def projects_count(self, obj):
        return obj.projects.count()

    projects_count.short_description = 'Projects'


@admin.register(Invite)
class InviteAdmin(admin.ModelAdmin):
    list_display = ['email', 'account', 'invited_by', 'status_badge', 'expires_at']
    list_filter = ['created_at', 'expires_at']
    search_fields = ['email', 'account__name']
    readonly_fields = ['token', 'created_at', 'used_at']

    def status_badge(self, obj):
        """Pending / used / expired"""
        if obj.is_used:
            label, color = 'Used', '#6B7280'
        elif obj.is_expired:
            label, color = 'Expired', '#EF4444'
        else:
            label, color = 'Pending', '#10B981'
        return format_html(
            '<span style="background-color: {}; color: white; '
            'padding: 3px 8px; border-radius: 4px; font-size: 11px;">{}</span>',
            color, label
        )

    status_badge.short_description = 'Status'


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ['name', 'account', 'created_by', 'boards_count', 'created_at']
    list_filter = ['created_at']
    search_fields = ['name', 'description', 'account__name']
    readonly_fields = ['created_at', 'updated_at']

    fieldsets = (
        ('Basic information', {
            'fields': ('account', 'name', 'description', 'created_by')
        }),
        ('Dates', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        })
    )

    def boards_count(self, obj):
        return obj.boards.count()

    boards_count.short_description = 'Boards'


@admin.register(Board)
class BoardAdmin(admin.ModelAdmin):
    list_display = ['name', 'account', 'project', 'tasks_count', 'created_at']
    list_filter = ['created_at']
    search_fields = ['name', 'project__name', 'account__name']
    readonly_fields = ['created_at']

    def tasks_count(self, obj):
        return obj.tasks.count()

    tasks_count.short_description = 'Tasks'


@admin.register(Tag)
class TagAdmin(admin.ModelAdmin):
    list_display = ['name', 'color_swatch', 'account', 'created_at']
    search_fields = ['name', 'account__name']

    def color_swatch(self, obj):
        return format_html(
            '<span style="background-color: {}; padding: 3px 12px; '
            'border-radius: 4px;">&nbsp;</span> {}',
            obj.color, obj.color
        )

    color_swatch.short_description = 'Color'
