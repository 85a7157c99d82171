import pytest
from sqlalchemy.exc import SQLAlchemyError
from showmate.models.notification import Notification, NotificationType
from showmate.models.project_membership import ProjectMemberStatus
from showmate.services.notification_service import NotificationService
from tests.conftest import (
    MANAGER_UID,
    TECHNICIAN_UID,
    FailingTransport,
    get_membership,
    get_notifications,
    invitation_payload,
)


@pytest.fixture
def invite_notification(client, db_session, mail_transport, manager_headers, manager, technician, project):
    """A pending invitation of the technician, with its live notification"""
    client.post("/api/project/invite", headers=manager_headers, json=invitation_payload())
    mail_transport.sent.clear()
    return get_notifications(db_session, TECHNICIAN_UID, NotificationType.PROJECT_INVITE)[0]


class TestRespondToNotification:
    """Tests for POST /api/notifications/{id}/respond"""

    def test_accept_approves_membership(self, client, db_session, mail_transport, technician_headers, invite_notification):
        response = client.post(
            f"/api/notifications/{invite_notification.id}/respond",
            headers=technician_headers,
            json={"accepted": True},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == invite_notification.id
        assert data["read"] is True
        assert data["responded"] is True
        assert data["accepted"] is True
        assert data["respondedAt"] is not None

        assert get_membership(db_session).status == ProjectMemberStatus.APPROVED
        # Accepting from the mailbox does not fan out to the inviter
        assert get_notifications(db_session, MANAGER_UID) == []
        assert mail_transport.sent == []

    def test_decline_declines_membership_and_tells_inviter(self, client, db_session, mail_transport, technician_headers, invite_notification):
        response = client.post(
            f"/api/notifications/{invite_notification.id}/respond",
            headers=technician_headers,
            json={"accepted": False},
        )

        assert response.status_code == 200
        assert response.json()["accepted"] is False
        assert get_membership(db_session).status == ProjectMemberStatus.DECLINED

        refused = get_notifications(db_session, MANAGER_UID, NotificationType.INVITATION_REFUSED)
        assert len(refused) == 1
        assert refused[0].context == {
            "project_id": "project-1",
            "invite_id": invite_notification.id,
            "refused_by": TECHNICIAN_UID,
        }
        assert "Tom Martin" in refused[0].message

        assert len(mail_transport.sent) == 1
        assert mail_transport.sent[0]["to"] == "marie.dupont@example.com"
        assert "Tom Martin" in mail_transport.sent[0]["text"]

    def test_decline_survives_email_failure(self, client, db_session, email_service, technician_headers, invite_notification):
        failing = FailingTransport()
        email_service.transport = failing

        response = client.post(
            f"/api/notifications/{invite_notification.id}/respond",
            headers=technician_headers,
            json={"accepted": False},
        )

        assert response.status_code == 200
        assert failing.attempts == 1
        assert get_membership(db_session).status == ProjectMemberStatus.DECLINED
        assert len(get_notifications(db_session, MANAGER_UID, NotificationType.INVITATION_REFUSED)) == 1

    def test_respond_twice_keeps_first_answer(self, client, db_session, mail_transport, technician_headers, invite_notification):
        """A second answer changes nothing: the first decision stands"""
        url = f"/api/notifications/{invite_notification.id}/respond"
        first = client.post(url, headers=technician_headers, json={"accepted": False})

        response = client.post(url, headers=technician_headers, json={"accepted": True})

        assert response.status_code == 200
        assert response.json()["accepted"] is False
        assert response.json()["respondedAt"] == first.json()["respondedAt"]
        assert db_session.get(Notification, invite_notification.id).accepted is False
        assert get_membership(db_session).status == ProjectMemberStatus.DECLINED
        assert len(get_notifications(db_session, MANAGER_UID, NotificationType.INVITATION_REFUSED)) == 1
        assert len(mail_transport.sent) == 1

    def test_decline_survives_refusal_notice_failure(self, client, db_session, monkeypatch, technician_headers, invite_notification):
        """The decline is kept when telling the inviter fails"""

        def broken_notice(*args, **kwargs):
            raise SQLAlchemyError("notifications table locked")

        monkeypatch.setattr(NotificationService, "create_invitation_refused_notification", broken_notice)

        response = client.post(
            f"/api/notifications/{invite_notification.id}/respond",
            headers=technician_headers,
            json={"accepted": False},
        )

        assert response.status_code == 200
        assert response.json()["accepted"] is False
        assert get_membership(db_session).status == ProjectMemberStatus.DECLINED
        assert get_notifications(db_session, MANAGER_UID) == []

    def test_respond_after_membership_removed(self, client, db_session, manager_headers, technician_headers, invite_notification):
        """A membership that no longer exists skips the transition without error"""
        membership = get_membership(db_session)
        client.request(
            "DELETE",
            "/api/project/member",
            headers=manager_headers,
            json={
                "membershipId": membership.id,
                "userId": TECHNICIAN_UID,
                "projectId": "project-1",
                "projectName": "Festival d'été",
            },
        )

        response = client.post(
            f"/api/notifications/{invite_notification.id}/respond",
            headers=technician_headers,
            json={"accepted": True},
        )

        assert response.status_code == 200
        assert response.json()["responded"] is True
        assert get_membership(db_session) is None

    def test_respond_to_non_actionable_notification(self, client, db_session, technician_headers, technician):
        """Answering an informational notification only marks it"""
        notification = Notification(
            user_id=TECHNICIAN_UID,
            type=NotificationType.PROJECT_DELETED,
            message="Le projet a été supprimé.",
            context={"project_id": "project-1"},
            project_id="project-1",
        )
        db_session.add(notification)
        db_session.commit()

        response = client.post(
            f"/api/notifications/{notification.id}/respond",
            headers=technician_headers,
            json={"accepted": False},
        )

        assert response.status_code == 200
        assert response.json()["responded"] is True
        assert get_notifications(db_session, MANAGER_UID) == []

    def test_respond_to_someone_elses_notification_forbidden(self, client, db_session, manager_headers, invite_notification):
        response = client.post(
            f"/api/notifications/{invite_notification.id}/respond",
            headers=manager_headers,
            json={"accepted": True},
        )

        assert response.status_code == 403
        assert get_membership(db_session).status == ProjectMemberStatus.PENDING

    def test_respond_unknown_notification(self, client, technician_headers):
        response = client.post(
            "/api/notifications/does-not-exist/respond",
            headers=technician_headers,
            json={"accepted": True},
        )
        assert response.status_code == 404
        assert response.json() == {"error": "Notification not found"}

    def test_respond_requires_answer(self, client, technician_headers, invite_notification):
        response = client.post(
            f"/api/notifications/{invite_notification.id}/respond",
            headers=technician_headers,
            json={},
        )
        assert response.status_code == 400


class TestListNotifications:
    """Tests for GET /api/notifications and POST /api/notifications/read-all"""

    def test_list_own_notifications(self, client, technician_headers, manager_headers, invite_notification):
        response = client.get("/api/notifications", headers=technician_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["unread"] == 1
        entry = data["notifications"][0]
        assert entry["type"] == "project_invite"
        assert entry["userId"] == TECHNICIAN_UID
        assert entry["projectId"] == "project-1"
        assert entry["context"]["invited_by"] == MANAGER_UID

        # The inviter's mailbox is separate
        assert client.get("/api/notifications", headers=manager_headers).json()["total"] == 0

    def test_mark_all_as_read(self, client, technician_headers, invite_notification):
        response = client.post("/api/notifications/read-all", headers=technician_headers)

        assert response.status_code == 200
        assert response.json() == {"updated": 1}

        data = client.get("/api/notifications", headers=technician_headers).json()
        assert data["unread"] == 0
        # Reading is not answering
        assert data["notifications"][0]["responded"] is False

        again = client.post("/api/notifications/read-all", headers=technician_headers)
        assert again.json() == {"updated": 0}
