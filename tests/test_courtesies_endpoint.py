from __future__ import annotations

from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient

from eventhub_api.models.person import DocumentType
from eventhub_api.models.user import UserRoleEnum, UserStatusEnum


def _client(app) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


def _headers(user, **extra: str) -> dict[str, str]:
    return {"X-Session-User": str(user.id), **extra}


@pytest.mark.asyncio
async def test_grant_endpoint_round_trip(app_with_db, seed) -> None:
    app, _ = app_with_db
    admin = await seed.user()
    event = await seed.event()
    block = await seed.block(event)

    async with _client(app) as client:
        response = await client.post(
            "/api/v1/courtesies",
            headers=_headers(admin),
            json={
                "eventId": str(event.id),
                "personData": {
                    "firstName": "Valeria",
                    "lastName": "Huamán",
                    "email": "valeria.huaman@example.com",
                    "documentNumber": "72345678",
                },
                "type": "OTHER",
                "scope": "SPECIFIC_BLOCKS",
                "specificBlockIds": [str(block.id)],
                "reason": "Ganadora del concurso",
            },
        )
        assert response.status_code == 201, response.text
        created = response.json()

        detail = await client.get(f"/api/v1/courtesies/{created['id']}", headers=_headers(admin))
        by_event = await client.get(f"/api/v1/courtesies/event/{event.id}", headers=_headers(admin))
        by_person = await client.get(f"/api/v1/courtesies/person/{created['personId']}", headers=_headers(admin))

    assert created["status"] == "ACTIVE"
    assert created["scope"] == "SPECIFIC_BLOCKS"
    assert created["eventTitle"] == event.title
    assert created["person"]["email"] == "valeria.huaman@example.com"
    assert created["specificBlockIds"] == [str(block.id)]
    assert len(created["blockEnrollmentIds"]) == 1
    assert created["registrationId"] is None
    assert created["grantedById"] == str(admin.id)

    assert detail.status_code == 200
    assert detail.json()["id"] == created["id"]
    assert [item["id"] for item in by_event.json()] == [created["id"]]
    assert [item["id"] for item in by_person.json()] == [created["id"]]


@pytest.mark.asyncio
async def test_duplicate_grant_returns_localized_conflict(app_with_db, seed) -> None:
    app, _ = app_with_db
    admin = await seed.user()
    event = await seed.event()
    person = await seed.person()
    payload = {
        "eventId": str(event.id),
        "personId": str(person.id),
        "type": "VIP",
        "scope": "FULL_EVENT",
    }

    async with _client(app) as client:
        first = await client.post("/api/v1/courtesies", headers=_headers(admin), json=payload)
        spanish = await client.post("/api/v1/courtesies", headers=_headers(admin), json=payload)
        english = await client.post(
            "/api/v1/courtesies",
            headers=_headers(admin, **{"Accept-Language": "en-US,en;q=0.9,es;q=0.5"}),
            json=payload,
        )

    assert first.status_code == 201
    assert spanish.status_code == 409
    assert spanish.json()["detail"] == {
        "code": "courtesies.already_granted",
        "kind": "conflict",
        "message": "La persona ya tiene una cortesía activa para este evento",
    }
    assert english.status_code == 409
    assert english.json()["detail"]["message"] == "This person already holds an active courtesy for the event"


@pytest.mark.asyncio
async def test_grant_error_kinds_map_to_status_codes(app_with_db, seed) -> None:
    app, _ = app_with_db
    admin = await seed.user()
    event = await seed.event()
    person = await seed.person()

    async with _client(app) as client:
        missing_event = await client.post(
            "/api/v1/courtesies",
            headers=_headers(admin),
            json={"eventId": str(uuid4()), "personId": str(person.id), "type": "VIP", "scope": "FULL_EVENT"},
        )
        missing_blocks = await client.post(
            "/api/v1/courtesies",
            headers=_headers(admin),
            json={"eventId": str(event.id), "personId": str(person.id), "type": "VIP", "scope": "SPECIFIC_BLOCKS"},
        )
        missing_person = await client.post(
            "/api/v1/courtesies",
            headers=_headers(admin),
            json={"eventId": str(event.id), "type": "VIP", "scope": "FULL_EVENT"},
        )
        bad_enum = await client.post(
            "/api/v1/courtesies",
            headers=_headers(admin),
            json={"eventId": str(event.id), "personId": str(person.id), "type": "FRIEND", "scope": "FULL_EVENT"},
        )

    assert missing_event.status_code == 404
    assert missing_event.json()["detail"]["code"] == "courtesies.event_not_found"
    assert missing_blocks.status_code == 400
    assert missing_blocks.json()["detail"]["kind"] == "invalid_request"
    assert missing_person.status_code == 400
    assert missing_person.json()["detail"]["code"] == "courtesies.person_required"
    assert bad_enum.status_code == 422


@pytest.mark.asyncio
async def test_cancel_endpoint_and_repeat(app_with_db, seed) -> None:
    app, _ = app_with_db
    admin = await seed.user()
    event = await seed.event()
    person = await seed.person()

    async with _client(app) as client:
        created = await client.post(
            "/api/v1/courtesies",
            headers=_headers(admin),
            json={"eventId": str(event.id), "personId": str(person.id), "type": "PRESS", "scope": "FULL_EVENT"},
        )
        courtesy_id = created.json()["id"]
        empty_reason = await client.request(
            "DELETE", f"/api/v1/courtesies/{courtesy_id}", headers=_headers(admin), json={"reason": ""}
        )
        cancelled = await client.request(
            "DELETE", f"/api/v1/courtesies/{courtesy_id}", headers=_headers(admin), json={"reason": "No asistirá"}
        )
        repeated = await client.request(
            "DELETE", f"/api/v1/courtesies/{courtesy_id}", headers=_headers(admin), json={"reason": "otra vez"}
        )
        unknown = await client.request(
            "DELETE", f"/api/v1/courtesies/{uuid4()}", headers=_headers(admin), json={"reason": "x"}
        )

    assert empty_reason.status_code == 422
    assert cancelled.status_code == 200
    body = cancelled.json()
    assert body["status"] == "CANCELLED"
    assert body["cancellationReason"] == "No asistirá"
    assert body["cancelledById"] == str(admin.id)
    assert repeated.status_code == 409
    assert repeated.json()["detail"]["code"] == "courtesies.not_active"
    assert unknown.status_code == 404


@pytest.mark.asyncio
async def test_stats_and_speaker_batch_endpoints(app_with_db, seed) -> None:
    app, _ = app_with_db
    admin = await seed.user(role=UserRoleEnum.SUPER_ADMIN)
    event = await seed.event()
    speakers = await seed.speakers(event, [("Iván", "Ramos"), ("Sofía", "León")])
    await seed.person(
        first_name="Ocupado",
        last_name="Documento",
        email="ocupado@example.com",
        document_type=DocumentType.OTHER,
        document_number=f"SPEAKER-{speakers[0].id.hex[:8]}",
    )

    async with _client(app) as client:
        batch = await client.post(
            f"/api/v1/courtesies/event/{event.id}/grant-speakers",
            headers=_headers(admin),
            json={},
        )
        stats = await client.get(f"/api/v1/courtesies/event/{event.id}/stats", headers=_headers(admin))
        no_speakers = await client.post(
            f"/api/v1/courtesies/event/{uuid4()}/grant-speakers",
            headers=_headers(admin),
            json={"scope": "FULL_EVENT"},
        )

    assert batch.status_code == 201
    report = batch.json()
    assert [item["speakerId"] for item in report["created"]] == [str(speakers[1].id)]
    assert report["created"][0]["type"] == "SPEAKER"
    assert report["created"][0]["scope"] == "ASSIGNED_SESSIONS_ONLY"
    assert report["skippedSpeakerIds"] == []
    assert [item["speakerId"] for item in report["failed"]] == [str(speakers[0].id)]

    assert stats.status_code == 200
    assert stats.json()["total"] == 1
    assert stats.json()["byType"]["speaker"] == 1
    assert stats.json()["byScope"]["assignedSessions"] == 1

    assert no_speakers.status_code == 404


@pytest.mark.asyncio
async def test_session_and_role_guards(app_with_db, seed) -> None:
    app, _ = app_with_db
    member = await seed.user(email="member@example.com", role=UserRoleEnum.ATTENDEE)
    suspended = await seed.user(
        email="suspended@example.com",
        role=UserRoleEnum.ORG_ADMIN,
        status=UserStatusEnum.SUSPENDED,
    )
    event = await seed.event()
    payload = {"eventId": str(event.id), "personId": str(uuid4()), "type": "VIP", "scope": "FULL_EVENT"}

    async with _client(app) as client:
        anonymous = await client.post("/api/v1/courtesies", json=payload)
        malformed = await client.post("/api/v1/courtesies", headers={"X-Session-User": "not-a-uuid"}, json=payload)
        unknown = await client.post("/api/v1/courtesies", headers={"X-Session-User": str(uuid4())}, json=payload)
        blocked = await client.post("/api/v1/courtesies", headers=_headers(suspended), json=payload)
        forbidden = await client.post(
            "/api/v1/courtesies",
            headers=_headers(member, **{"Accept-Language": "en"}),
            json=payload,
        )
        member_listing = await client.get(f"/api/v1/courtesies/event/{event.id}", headers=_headers(member))
        member_lookup = await client.get(f"/api/v1/courtesies/{uuid4()}", headers=_headers(member))

    assert anonymous.status_code == 401
    assert anonymous.json()["detail"]["code"] == "auth.session_missing"
    assert malformed.status_code == 400
    assert unknown.status_code == 404
    assert blocked.status_code == 404
    assert forbidden.status_code == 403
    assert forbidden.json()["detail"]["message"] == "You are not allowed to perform this action"
    assert member_listing.status_code == 403
    assert member_lookup.status_code == 404
    assert member_lookup.json()["detail"]["code"] == "courtesies.not_found"
