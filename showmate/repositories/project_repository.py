"""Repository for Project model operations."""

from sqlalchemy.orm import Session
from showmate.models.project import Project


class ProjectRepository:
    """Repository for Project model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, project_id: str) -> Project | None:
        """
        Get project by ID.

        Args:
            project_id: Project ID

        Returns:
            Project object or None if not found
        """
        if not project_id:
            return None
        return self.db.get(Project, project_id)

    def create(self, project: Project) -> Project:
        """
        Create a new project.

        Args:
            project: Project object to create

        Returns:
            Created Project object with ID populated
        """
        self.db.add(project)
        self.db.commit()
        self.db.refresh(project)
        return project

    def delete(self, project: Project) -> None:
        """
        Delete a project document.

        WARNING: nothing cascades. Memberships, sub-resources and
        notifications referencing the project must be purged first.

        Args:
            project: Project object to delete
        """
        self.db.delete(project)
        self.db.commit()
