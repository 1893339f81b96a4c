# apps/core/__init__.py

"""
Core - accounts and access

Contains:
- Models: User, Account, AccountMember, Invite, Project, Board, Tag
- Session authentication service
- Membership-based permissions
- JSON API helpers and typed errors
"""
