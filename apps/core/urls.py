# apps/core/urls.py

from django.urls import path
from . import views

app_name = 'core'

urlpatterns = [
    # === AUTHENTICATION ===
    path('api/auth/csrf/', views.csrf_view, name='csrf'),
    path('api/auth/signup/', views.signup_view, name='signup'),
    path('api/auth/login/', views.login_view, name='login'),
    path('api/auth/logout/', views.logout_view, name='logout'),
    path('api/auth/me/', views.me_view, name='me'),

    # === ACCOUNTS & INVITES ===
    path('api/accounts/<int:account_id>/members/', views.account_members, name='account_members'),
    path('api/accounts/<int:account_id>/invites/', views.account_invites, name='account_invites'),
    # join/ before <token>/ so it is not read as a token
    path('api/invites/join/', views.invite_join, name='invite_join'),
    path('api/invites/<str:token>/', views.invite_preview, name='invite_preview'),

    # === PROJECTS ===
    path('api/accounts/<int:account_id>/projects/', views.account_projects, name='account_projects'),
    path('api/projects/<int:project_id>/', views.project_detail, name='project_detail'),

    # === TAGS ===
    path('api/accounts/<int:account_id>/tags/', views.account_tags, name='account_tags'),
    path('api/accounts/<int:account_id>/tags/search/', views.account_tag_search, name='account_tag_search'),
    path('api/tags/<int:tag_id>/', views.tag_detail, name='tag_detail'),

    # === MONITORING ===
    path('health/', views.health_check, name='health'),
]
