"""Project member permission enum for access control."""

from enum import Enum as PyEnum


class ProjectMemberPermission(str, PyEnum):
    """
    What a member may do inside a project, independent of their role label.

    Permission levels (highest to lowest):
    1. MANAGER - Manage members, edit the project
    2. EDITOR - Edit project content (planning, locations, posts)
    3. VIEWER - Read-only access

    Invited members start as VIEWER; a manager may raise it later.
    """

    MANAGER = "manager"
    EDITOR = "editor"
    VIEWER = "viewer"
