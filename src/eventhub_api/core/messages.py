"""Message catalogs and locale resolution for user-facing error payloads."""

from __future__ import annotations

from typing import Any, Mapping

from loguru import logger

from eventhub_api.core.settings import settings


_CATALOGS: dict[str, dict[str, str]] = {
    "es": {
        "courtesies.event_not_found": "El evento no existe o no está activo",
        "courtesies.event_cancelled": "No se pueden otorgar cortesías para un evento cancelado",
        "courtesies.person_required": "Debe indicar una persona existente o los datos de una nueva persona",
        "courtesies.person_not_found": "La persona indicada no existe",
        "courtesies.person_document_taken": "Ya existe una persona con este tipo y número de documento",
        "courtesies.person_email_taken": "Ya existe una persona con este email",
        "courtesies.already_granted": "La persona ya tiene una cortesía activa para este evento",
        "courtesies.blocks_required": "Debe seleccionar al menos un bloque para este alcance",
        "courtesies.invalid_blocks": "Uno o más bloques no pertenecen al evento o no están activos",
        "courtesies.speaker_not_found": "El ponente indicado no existe",
        "courtesies.not_found": "Cortesía no encontrada",
        "courtesies.not_active": "Solo se pueden cancelar cortesías activas",
        "courtesies.concurrent_update": "Otra operación modificó esta cortesía al mismo tiempo, intente nuevamente",
        "courtesies.no_speakers": "El evento no tiene ponentes asignados",
        "courtesies.invalid_transition": "Cambio de estado no permitido",
        "courtesies.speaker_auto_reason": "Cortesía automática para ponente",
        "auth.session_missing": "Falta el contexto de sesión del usuario",
        "auth.session_invalid": "Identificador de sesión inválido",
        "auth.session_not_found": "Usuario de sesión no encontrado",
        "auth.forbidden": "No tiene permisos para realizar esta acción",
    },
    "en": {
        "courtesies.event_not_found": "Event not found or inactive",
        "courtesies.event_cancelled": "Courtesies cannot be granted for a cancelled event",
        "courtesies.person_required": "Provide an existing person id or the data for a new person",
        "courtesies.person_not_found": "Person not found",
        "courtesies.person_document_taken": "A person with this document type and number already exists",
        "courtesies.person_email_taken": "A person with this email already exists",
        "courtesies.already_granted": "This person already holds an active courtesy for the event",
        "courtesies.blocks_required": "Select at least one block for this scope",
        "courtesies.invalid_blocks": "One or more blocks do not belong to the event or are inactive",
        "courtesies.speaker_not_found": "Speaker not found",
        "courtesies.not_found": "Courtesy not found",
        "courtesies.not_active": "Only active courtesies can be cancelled",
        "courtesies.concurrent_update": "A concurrent operation changed this courtesy, please retry",
        "courtesies.no_speakers": "The event has no speakers assigned",
        "courtesies.invalid_transition": "Status change not allowed",
        "courtesies.speaker_auto_reason": "Automatic speaker courtesy",
        "auth.session_missing": "Missing session user context",
        "auth.session_invalid": "Invalid session user identifier",
        "auth.session_not_found": "Session user not found",
        "auth.forbidden": "You are not allowed to perform this action",
    },
}


class MessageLocalizer:
    """Resolve message keys to display strings for a locale."""

    def __init__(
        self,
        *,
        default_locale: str | None = None,
        catalogs: Mapping[str, Mapping[str, str]] | None = None,
    ) -> None:
        self._catalogs = catalogs if catalogs is not None else _CATALOGS
        self._default_locale = (default_locale or settings.default_locale).lower()

    @property
    def default_locale(self) -> str:
        return self._default_locale

    def supports(self, locale: str) -> bool:
        return locale.lower() in self._catalogs

    def translate(self, key: str, locale: str | None = None, **params: Any) -> str:
        """Return the message for ``key``, falling back to the default locale, then the key."""

        for candidate in (locale, self._default_locale):
            if not candidate:
                continue
            catalog = self._catalogs.get(candidate.lower())
            if catalog and key in catalog:
                return self._format(catalog[key], key, params)

        logger.warning("Missing message key", key=key, locale=locale)
        return key

    def negotiate(self, accept_language: str | None) -> str:
        """Pick the best supported locale from an Accept-Language header."""

        if not accept_language:
            return self._default_locale

        weighted: list[tuple[float, str]] = []
        for part in accept_language.split(","):
            entry = part.strip()
            if not entry:
                continue
            tag, _, quality = entry.partition(";q=")
            try:
                weight = float(quality) if quality else 1.0
            except ValueError:
                weight = 0.0
            weighted.append((weight, tag.strip().lower()))

        for _, tag in sorted(weighted, key=lambda item: item[0], reverse=True):
            primary = tag.split("-", 1)[0]
            if primary in settings.supported_locales and self.supports(primary):
                return primary
        return self._default_locale

    @staticmethod
    def _format(template: str, key: str, params: dict[str, Any]) -> str:
        if not params:
            return template
        try:
            return template.format(**params)
        except (KeyError, IndexError):
            logger.warning("Message parameters did not match template", key=key)
            return template


_LOCALIZER = MessageLocalizer()


def get_localizer() -> MessageLocalizer:
    return _LOCALIZER


__all__ = ["MessageLocalizer", "get_localizer"]
