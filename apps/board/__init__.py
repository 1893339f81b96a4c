# apps/board/__init__.py

"""
Board - kanban tasks

Features:
- Fixed, configured columns with a WIP-limited column
- Task Placement Manager (ordered placement and moves)
- Comments and file attachments
"""
