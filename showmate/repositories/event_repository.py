from sqlalchemy.orm import Session
from showmate.models.project import Event


class EventRepository:
    """Repository for project Event data access"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id_and_project(self, event_id: str, project_id: str) -> Event | None:
        """Get event by ID, ensuring it belongs to the project"""
        return (
            self.db.query(Event)
            .filter(Event.id == event_id, Event.project_id == project_id)
            .first()
        )

    def get_by_project(self, project_id: str) -> list[Event]:
        return self.db.query(Event).filter(Event.project_id == project_id).all()

    def attach_member(self, project_id: str, event_id: str, membership_id: str) -> Event | None:
        """
        Add a membership id to an event's member list (set semantics).

        Returns:
            Updated Event, or None if the event does not exist in the project
        """
        event = self.get_by_id_and_project(event_id, project_id)
        if event is None:
            return None
        if membership_id not in event.members:
            # Reassign so the JSON column is flagged dirty
            event.members = [*event.members, membership_id]
            self.db.commit()
            self.db.refresh(event)
        return event

    def detach_member_everywhere(self, project_id: str, membership_id: str) -> int:
        """Remove a membership id from every event of the project; returns events touched"""
        touched = 0
        for event in self.get_by_project(project_id):
            if membership_id in event.members:
                event.members = [m for m in event.members if m != membership_id]
                touched += 1
        if touched:
            self.db.commit()
        return touched

    def delete_by_project(self, project_id: str) -> int:
        """Batch delete all events of a project"""
        count = (
            self.db.query(Event)
            .filter(Event.project_id == project_id)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return count
