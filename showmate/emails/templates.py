"""
Transactional email templates.

Each EmailType maps to an EmailTemplate producing a subject, an html body
and optionally a plain-text body from a data dict. Values coming from
users (names, project names) are html-escaped in the html body.
"""

import re
from dataclasses import dataclass
from datetime import datetime, UTC
from enum import Enum
from html import escape, unescape
from typing import Callable, Optional

from showmate.config import settings


class EmailType(str, Enum):
    PROJECT_INVITATION = "project_invitation"
    PROJECT_ADDED = "project_added"
    INVITATION_ACCEPTED = "invitation_accepted"
    INVITATION_REFUSED = "invitation_refused"
    PROJECT_REMOVED = "project_removed"
    PROJECT_DELETED = "project_deleted"


@dataclass(frozen=True)
class EmailTemplate:
    default_subject: Callable[[dict], str]
    html: Callable[[dict], str]
    text: Optional[Callable[[dict], str]] = None

    def render(self, data: dict) -> tuple[str, str, str]:
        """Return (subject, html, text); text falls back to the html with tags stripped"""
        html = self.html(data)
        text = self.text(data) if self.text else strip_tags(html)
        return self.default_subject(data), html, text


_HEAD_RE = re.compile(r"<head>.*?</head>", re.DOTALL)
_TAG_RE = re.compile(r"<[^>]+>")
_BLANK_LINES_RE = re.compile(r"\n\s*\n+")


def strip_tags(html: str) -> str:
    text = _TAG_RE.sub("", _HEAD_RE.sub("", html))
    return unescape(_BLANK_LINES_RE.sub("\n\n", text)).strip()


def _hello(first_name: Optional[str]) -> str:
    return f"Bonjour {first_name}" if first_name else "Bonjour"


def _layout(title: str, body: str, accent: str = "#111827") -> str:
    return f"""<!DOCTYPE html>
<html lang="fr">
<head>
  <meta charset="UTF-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>{title}</title>
  <style>
    body {{ font-family: Arial, sans-serif; background: #f9fafb; margin: 0; padding: 20px; color: #333; }}
    .container {{ max-width: 600px; margin: auto; background: white; border-radius: 8px; padding: 30px; }}
    h1 {{ font-size: 22px; color: {accent}; }}
    p {{ font-size: 16px; line-height: 1.5; margin: 16px 0; }}
    a.button {{ display: inline-block; padding: 12px 24px; background-color: #2563eb; color: white;
               text-decoration: none; border-radius: 6px; font-weight: 600; }}
    footer {{ font-size: 12px; color: #6b7280; margin-top: 30px; text-align: center; }}
  </style>
</head>
<body>
  <div class="container">
    <h1>{title}</h1>
{body}
    <footer>&copy; {datetime.now(UTC).year} Showmate. Tous droits réservés.</footer>
  </div>
</body>
</html>
"""


def _invitation_html(data: dict) -> str:
    return _layout(
        "Invitation au projet",
        f"""    <p>{escape(_hello(data.get('first_name')))},</p>
    <p>Vous avez été invité à rejoindre le projet <strong>{escape(data['project_name'])}</strong>
    en tant que <strong>{escape(data['role_label'])}</strong>.</p>
    <p>Cliquez sur le bouton ci-dessous pour accepter l'invitation :</p>
    <a href="{escape(data['accept_url'], quote=True)}" class="button">Accepter l'invitation</a>
    <p>Si vous n'avez pas demandé cette invitation, vous pouvez ignorer cet email.</p>""",
    )


def _invitation_text(data: dict) -> str:
    return (
        f"{_hello(data.get('first_name'))},\n\n"
        f"Vous avez été invité à rejoindre le projet \"{data['project_name']}\" "
        f"en tant que {data['role_label']}.\n"
        f"Cliquez ici pour accepter : {data['accept_url']}\n\n"
        "L'équipe Showmate."
    )


def _added_html(data: dict) -> str:
    return _layout(
        "Ajout à un projet",
        f"""    <p>{escape(_hello(data.get('first_name')))},</p>
    <p>Vous avez été ajouté au projet <strong>{escape(data['project_name'])}</strong>
    en tant que <strong>{escape(data.get('role_label') or 'membre')}</strong>.</p>
    <a href="{escape(data['project_url'], quote=True)}" class="button">Ouvrir le projet</a>""",
    )


def _accepted_html(data: dict) -> str:
    return _layout(
        "Invitation acceptée",
        f"""    <p>{escape(_hello(data.get('first_name')))},</p>
    <p><b>{escape(data['member_name'])}</b> a accepté votre invitation à rejoindre le projet
    <b>{escape(data['project_name'])}</b>.</p>""",
    )


def _refused_html(data: dict) -> str:
    return _layout(
        "Invitation refusée",
        f"""    <p>{escape(_hello(data.get('first_name')))},</p>
    <p><b>{escape(data['invited_user_name'])}</b> a refusé votre invitation à rejoindre le projet
    <b>{escape(data['project_name'])}</b>.</p>
    <p>Vous pouvez inviter un autre membre depuis votre espace projet si besoin.</p>
    <a href="{escape(settings.PUBLIC_BASE_URL, quote=True)}/project" class="button">Voir mes projets</a>""",
        accent="#1e293b",
    )


def _refused_text(data: dict) -> str:
    return (
        f"{_hello(data.get('first_name'))},\n\n"
        f"{data['invited_user_name']} a refusé votre invitation à rejoindre le projet "
        f"\"{data['project_name']}\".\n\nL'équipe Showmate."
    )


def _removed_html(data: dict) -> str:
    return _layout(
        "Vous avez été retiré d'un projet",
        f"""    <p>{escape(_hello(data.get('first_name')))},</p>
    <p>Vous avez été retiré du projet <strong>{escape(data['project_name'])}</strong>.</p>
    <p>Vous n'avez plus accès à ce projet. Si vous pensez qu'il s'agit d'une erreur,
    contactez l'équipe Showmate.</p>""",
        accent="#b91c1c",
    )


def _deleted_html(data: dict) -> str:
    return _layout(
        "Projet supprimé",
        f"""    <p>{escape(_hello(data.get('first_name')))},</p>
    <p>Le projet <strong>{escape(data['project_name'])}</strong> auquel vous participiez a été supprimé.</p>""",
        accent="#b91c1c",
    )


def _deleted_text(data: dict) -> str:
    return (
        f"{_hello(data.get('first_name'))},\n\n"
        f"Le projet \"{data['project_name']}\" auquel vous participiez a été supprimé.\n\n"
        "L'équipe Showmate."
    )


EMAIL_TEMPLATES: dict[EmailType, EmailTemplate] = {
    EmailType.PROJECT_INVITATION: EmailTemplate(
        default_subject=lambda d: f"Invitation au projet {d['project_name']}",
        html=_invitation_html,
        text=_invitation_text,
    ),
    EmailType.PROJECT_ADDED: EmailTemplate(
        default_subject=lambda d: f"Vous avez été ajouté au projet {d['project_name']}",
        html=_added_html,
    ),
    EmailType.INVITATION_ACCEPTED: EmailTemplate(
        default_subject=lambda d: f"Invitation acceptée : {d['project_name']}",
        html=_accepted_html,
    ),
    EmailType.INVITATION_REFUSED: EmailTemplate(
        default_subject=lambda d: f"Invitation refusée : {d['project_name']}",
        html=_refused_html,
        text=_refused_text,
    ),
    EmailType.PROJECT_REMOVED: EmailTemplate(
        default_subject=lambda d: f"Retrait du projet {d['project_name']}",
        html=_removed_html,
    ),
    EmailType.PROJECT_DELETED: EmailTemplate(
        default_subject=lambda d: f"Projet supprimé : {d['project_name']}",
        html=_deleted_html,
        text=_deleted_text,
    ),
}
