from sqlalchemy.orm import Session
from showmate.models.user import User


class UserRepository:
    """Repository for User profile lookups"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: str) -> User | None:
        """Get user profile by uid"""
        if not user_id:
            return None
        return self.db.get(User, user_id)
