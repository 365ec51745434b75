"""Notification templates for courtesy events."""

from __future__ import annotations

import html
from dataclasses import dataclass
from datetime import datetime

from eventhub_api.models.courtesy import Courtesy, CourtesyScope
from eventhub_api.models.event import Event
from eventhub_api.models.person import Person


@dataclass
class RenderedTemplate:
    subject: str
    text_body: str
    html_body: str


_COPY = {
    "es": {
        "subject": "Tienes una cortesía para {event}",
        "greeting": "Hola {name},",
        "intro": "Te otorgamos acceso gratuito a {event}.",
        "scope": {
            CourtesyScope.FULL_EVENT: "Tu cortesía incluye acceso a todo el evento.",
            CourtesyScope.SPECIFIC_BLOCKS: "Tu cortesía incluye los siguientes bloques:",
            CourtesyScope.ASSIGNED_SESSIONS_ONLY: "Tu cortesía incluye las sesiones en las que participas como ponente.",
        },
        "valid_until": "Válida hasta: {date}",
        "closing": "Te esperamos,",
        "team": "El equipo de EventHub",
    },
    "en": {
        "subject": "You have a courtesy pass for {event}",
        "greeting": "Hi {name},",
        "intro": "You have been granted free access to {event}.",
        "scope": {
            CourtesyScope.FULL_EVENT: "Your courtesy covers the whole event.",
            CourtesyScope.SPECIFIC_BLOCKS: "Your courtesy covers the following blocks:",
            CourtesyScope.ASSIGNED_SESSIONS_ONLY: "Your courtesy covers the sessions you are speaking at.",
        },
        "valid_until": "Valid until: {date}",
        "closing": "See you there,",
        "team": "The EventHub Team",
    },
}


def _format_date(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.strftime("%Y-%m-%d %H:%M UTC")


def render_courtesy_granted(
    courtesy: Courtesy,
    person: Person,
    event: Event,
    *,
    block_names: list[str] | None = None,
    locale: str = "es",
) -> RenderedTemplate:
    """Render the email sent to the beneficiary of a new courtesy."""

    copy = _COPY.get(locale, _COPY["es"])
    name = person.first_name or person.email
    subject = copy["subject"].format(event=event.title)
    scope_line = copy["scope"][courtesy.scope]
    blocks = block_names or []
    valid_until = _format_date(courtesy.valid_until)

    text_lines = [
        copy["greeting"].format(name=name),
        "",
        copy["intro"].format(event=event.title),
        scope_line,
    ]
    text_lines.extend(f"- {block}" for block in blocks)
    if valid_until:
        text_lines.extend(["", copy["valid_until"].format(date=valid_until)])
    text_lines.extend(["", copy["closing"], copy["team"]])
    text_body = "\n".join(text_lines)

    blocks_html = ""
    if blocks:
        items = "".join(f"<li>{html.escape(block)}</li>" for block in blocks)
        blocks_html = f"\n    <ul>{items}</ul>"
    valid_html = ""
    if valid_until:
        valid_html = f"\n    <p>{html.escape(copy['valid_until'].format(date=valid_until))}</p>"

    html_body = f"""<html>
  <body>
    <p>{html.escape(copy["greeting"].format(name=name))}</p>
    <p>{html.escape(copy["intro"].format(event=event.title))}</p>
    <p>{html.escape(scope_line)}</p>{blocks_html}{valid_html}
    <p>{html.escape(copy["closing"])}<br/>{html.escape(copy["team"])}</p>
  </body>
</html>"""

    return RenderedTemplate(subject=subject, text_body=text_body, html_body=html_body)


__all__ = ["RenderedTemplate", "render_courtesy_granted"]
