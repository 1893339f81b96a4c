# apps/__init__.py

"""
GSD Board - Django applications

- core: users, accounts, invites, projects, boards, tags, auth and permissions
- board: tasks, task placement, comments and attachments
"""

__version__ = '0.1.0'
