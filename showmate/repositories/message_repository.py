from sqlalchemy.orm import Session
from showmate.models.project import Message


class MessageRepository:
    """Repository for project Message data access"""

    def __init__(self, db: Session):
        self.db = db

    def delete_by_project(self, project_id: str) -> int:
        """Batch delete all messages of a project"""
        count = (
            self.db.query(Message)
            .filter(Message.project_id == project_id)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return count
