from eventhub_api.core.messages import MessageLocalizer, get_localizer
from eventhub_api.services.courtesies import errors as courtesy_errors
from eventhub_api.services.courtesies.errors import EventNotFoundError
from eventhub_api.services.identity import errors as identity_errors


def test_translate_falls_back_to_default_locale_then_key() -> None:
    localizer = MessageLocalizer(
        default_locale="es",
        catalogs={"es": {"greeting": "Hola {name}"}, "en": {}},
    )

    assert localizer.translate("greeting", "en", name="Ana") == "Hola Ana"
    assert localizer.translate("missing.key", "en") == "missing.key"


def test_translate_ignores_unknown_template_params() -> None:
    localizer = get_localizer()

    message = localizer.translate("courtesies.event_not_found", "en", event_id="abc")

    assert message == "Event not found or inactive"


def test_negotiate_picks_highest_weighted_supported_locale() -> None:
    localizer = get_localizer()

    assert localizer.negotiate(None) == "es"
    assert localizer.negotiate("fr-FR,en;q=0.8,es;q=0.6") == "en"
    assert localizer.negotiate("es-PE") == "es"
    assert localizer.negotiate("de, fr;q=0.5") == "es"
    assert localizer.negotiate("en;q=invalid, es;q=0.1") == "es"


def test_catalogs_cover_every_courtesy_error_key() -> None:
    localizer = get_localizer()

    for module in (courtesy_errors, identity_errors):
        for name in module.__all__:
            key = getattr(module, name).message_key
            if key == "errors.unknown":
                continue
            for locale in ("es", "en"):
                assert localizer.translate(key, locale) != key, (name, locale)


def test_domain_error_carries_key_kind_and_params() -> None:
    error = EventNotFoundError(event_id="42")

    assert error.message_key == "courtesies.event_not_found"
    assert error.kind.value == "not_found"
    assert error.params == {"event_id": "42"}
    assert "EventNotFoundError" in repr(error)
