# apps/board/admin.py

from django.contrib import admin

from .models import Attachment, Comment, Task


class CommentInline(admin.TabularInline):
    model = Comment
    extra = 0
    fields = ['author', 'body', 'created_at']
    readonly_fields = ['created_at']


class AttachmentInline(admin.TabularInline):
    model = Attachment
    extra = 0
    fields = ['original_filename', 'mime_type', 'size_bytes', 'uploader', 'created_at']
    readonly_fields = fields


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    """
    Placement fields are read-only here: board, column and position
    only change through the placement manager
    """

    list_display = ['title', 'board', 'column', 'position', 'priority', 'due_date', 'updated_at']
    list_filter = ['column', 'priority', 'board']
    search_fields = ['title', 'description']
    readonly_fields = ['board', 'column', 'position', 'created_at', 'updated_at']
    filter_horizontal = ['assignees', 'tags']
    inlines = [CommentInline, AttachmentInline]

    def has_add_permission(self, request):
        return False


@admin.register(Comment)
class CommentAdmin(admin.ModelAdmin):
    list_display = ['task', 'author', 'created_at']
    search_fields = ['body', 'task__title']


@admin.register(Attachment)
class AttachmentAdmin(admin.ModelAdmin):
    list_display = ['original_filename', 'task', 'mime_type', 'size_bytes', 'uploader', 'created_at']
    list_filter = ['mime_type']
    search_fields = ['original_filename']
    readonly_fields = ['file', 'thumbnail', 'size_bytes', 'created_at']
