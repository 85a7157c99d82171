"""Repository for ProjectMembership model operations."""

from sqlalchemy.orm import Session
from showmate.models.project_membership import ProjectMembership


class ProjectMembershipRepository:
    """Repository for ProjectMembership model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, membership_id: str) -> ProjectMembership | None:
        """Get membership by document ID"""
        if not membership_id:
            return None
        return self.db.get(ProjectMembership, membership_id)

    def find_by_project_and_user(self, project_id: str, user_id: str) -> ProjectMembership | None:
        """
        Get the membership of a user in a project.

        Used to detect duplicate invites. Nothing prevents two records for
        the same pair; the most recently joined one is returned.

        Args:
            project_id: Project ID
            user_id: User uid

        Returns:
            ProjectMembership object or None if not found
        """
        if not project_id or not user_id:
            return None
        return (
            self.db.query(ProjectMembership)
            .filter(
                ProjectMembership.project_id == project_id,
                ProjectMembership.user_id == user_id,
            )
            .order_by(ProjectMembership.joined_at.desc())
            .first()
        )

    def find_project_members(self, project_id: str) -> list[ProjectMembership]:
        """
        Get all memberships for a project.

        Args:
            project_id: Project ID

        Returns:
            List of ProjectMembership objects for the project
        """
        return (
            self.db.query(ProjectMembership)
            .filter(ProjectMembership.project_id == project_id)
            .order_by(ProjectMembership.joined_at)
            .all()
        )

    def find_user_memberships(self, user_id: str) -> list[ProjectMembership]:
        """
        Get all memberships for a user (all projects they belong to).

        Args:
            user_id: User uid

        Returns:
            List of ProjectMembership objects for the user
        """
        return (
            self.db.query(ProjectMembership)
            .filter(ProjectMembership.user_id == user_id)
            .all()
        )

    def create(self, project_id: str, user_id: str, **data) -> ProjectMembership:
        """
        Create a new project membership.

        The caller is responsible for checking that no active membership
        exists for the pair first; this layer does not enforce uniqueness.

        Args:
            project_id: Project ID
            user_id: User uid
            **data: Remaining ProjectMembership attributes

        Returns:
            Created ProjectMembership object with ID populated
        """
        if not project_id or not user_id:
            raise ValueError("project_id and user_id are required to create a project membership")
        membership = ProjectMembership(project_id=project_id, user_id=user_id, **data)
        self.db.add(membership)
        self.db.commit()
        self.db.refresh(membership)
        return membership

    def update(self, project_id: str, user_id: str, **partial) -> ProjectMembership | None:
        """
        Merge fields into the membership of a user in a project.

        Returns:
            Updated ProjectMembership, or None if there is no such membership
        """
        membership = self.find_by_project_and_user(project_id, user_id)
        if membership is None:
            return None
        return self._apply(membership, partial)

    def update_by_id(self, membership_id: str, **partial) -> ProjectMembership | None:
        """Merge fields into a membership by document ID"""
        membership = self.get_by_id(membership_id)
        if membership is None:
            return None
        return self._apply(membership, partial)

    def delete(self, project_id: str, user_id: str) -> None:
        """
        Remove a user from a project (hard delete).

        Deleting a membership that does not exist is a no-op.
        """
        membership = self.find_by_project_and_user(project_id, user_id)
        if membership is not None:
            self.db.delete(membership)
            self.db.commit()

    def delete_by_id(self, membership_id: str) -> bool:
        """
        Hard delete a membership by document ID.

        Returns:
            True if a record was deleted, False if it was already absent
        """
        membership = self.get_by_id(membership_id)
        if membership is None:
            return False
        self.db.delete(membership)
        self.db.commit()
        return True

    def delete_by_project(self, project_id: str) -> int:
        """Batch delete every membership of a project; returns the count"""
        count = (
            self.db.query(ProjectMembership)
            .filter(ProjectMembership.project_id == project_id)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return count

    def _apply(self, membership: ProjectMembership, partial: dict) -> ProjectMembership:
        for field, value in partial.items():
            if not hasattr(ProjectMembership, field):
                raise AttributeError(f"ProjectMembership has no field '{field}'")
            setattr(membership, field, value)
        self.db.commit()
        self.db.refresh(membership)
        return membership
