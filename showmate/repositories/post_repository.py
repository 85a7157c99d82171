from sqlalchemy.orm import Session
from showmate.models.project import Post


class PostRepository:
    """Repository for project Post (role board) data access"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, post: Post) -> Post:
        """Create a new post"""
        self.db.add(post)
        self.db.commit()
        self.db.refresh(post)
        return post

    def get_by_project(self, project_id: str) -> list[Post]:
        return (
            self.db.query(Post)
            .filter(Post.project_id == project_id)
            .order_by(Post.priority, Post.created_at)
            .all()
        )

    def remove_member_everywhere(self, project_id: str, membership_id: str) -> int:
        """Remove a membership id from every post of the project; returns posts touched"""
        touched = 0
        for post in self.get_by_project(project_id):
            if membership_id in post.members:
                post.members = [m for m in post.members if m != membership_id]
                touched += 1
        if touched:
            self.db.commit()
        return touched

    def delete_by_project(self, project_id: str) -> int:
        """Batch delete all posts of a project"""
        count = (
            self.db.query(Post)
            .filter(Post.project_id == project_id)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return count
