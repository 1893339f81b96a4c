# apps/board/urls.py

from django.urls import path
from . import views

app_name = 'board'

urlpatterns = [
    # Boards
    path('boards/', views.board_list, name='board_list'),
    path('boards/<int:board_id>/', views.board_detail, name='board_detail'),

    # Tasks and placement
    path('boards/<int:board_id>/tasks/', views.task_list, name='task_list'),
    path('boards/<int:board_id>/tasks/move/', views.task_move, name='task_move'),
    path('boards/<int:board_id>/tasks/<int:task_id>/', views.task_detail, name='task_detail'),

    # Comments
    path('boards/<int:board_id>/tasks/<int:task_id>/comments/', views.task_comments, name='task_comments'),

    # Attachments
    path('boards/<int:board_id>/tasks/<int:task_id>/attachments/', views.task_attachments, name='task_attachments'),
    path('boards/<int:board_id>/attachments/inline/', views.inline_image_upload, name='inline_image_upload'),
    path('boards/<int:board_id>/attachments/<int:attachment_id>/', views.attachment_detail, name='attachment_detail'),
    path('boards/<int:board_id>/attachments/<int:attachment_id>/view/', views.attachment_view, name='attachment_view'),
]
