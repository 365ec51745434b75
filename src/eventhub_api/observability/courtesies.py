from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from threading import Lock
from typing import Any, Dict

from loguru import logger


@dataclass
class CourtesySnapshot:
    grants: Dict[str, int]
    cancellations: Dict[str, int]
    provisioning: Dict[str, int]
    speaker_batches: Dict[str, int]
    notifications: Dict[str, int]

    def as_dict(self) -> Dict[str, object]:
        return {
            "grants": dict(self.grants),
            "cancellations": dict(self.cancellations),
            "provisioning": dict(self.provisioning),
            "speakerBatches": dict(self.speaker_batches),
            "notifications": dict(self.notifications),
        }


class CourtesyObservabilityStore:
    """Collect courtesy engine counters for dashboards and alerting."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._grants: Dict[str, int] = defaultdict(int)
        self._cancellations: Dict[str, int] = defaultdict(int)
        self._provisioning: Dict[str, int] = defaultdict(int)
        self._speaker_batches: Dict[str, int] = defaultdict(int)
        self._notifications: Dict[str, int] = defaultdict(int)

    def record_grant(self, outcome: str, scope: str | None = None) -> None:
        with self._lock:
            self._grants[outcome] += 1
            if scope:
                self._grants[f"scope:{scope}"] += 1

    def record_cancellation(self, outcome: str) -> None:
        with self._lock:
            self._cancellations[outcome] += 1

    def record_provisioning(self, outcome: str, count: int = 1) -> None:
        with self._lock:
            self._provisioning[outcome] += count

    def record_speaker_item(self, outcome: str) -> None:
        with self._lock:
            self._speaker_batches[outcome] += 1

    def record_notification(self, outcome: str) -> None:
        with self._lock:
            self._notifications[outcome] += 1

    def snapshot(self) -> CourtesySnapshot:
        with self._lock:
            return CourtesySnapshot(
                grants=dict(self._grants),
                cancellations=dict(self._cancellations),
                provisioning=dict(self._provisioning),
                speaker_batches=dict(self._speaker_batches),
                notifications=dict(self._notifications),
            )

    def reset(self) -> None:
        with self._lock:
            self._grants.clear()
            self._cancellations.clear()
            self._provisioning.clear()
            self._speaker_batches.clear()
            self._notifications.clear()


_STORE = CourtesyObservabilityStore()


def get_courtesy_store() -> CourtesyObservabilityStore:
    return _STORE


class CourtesyAuditTrail:
    """Structured log channel handed to each courtesy component.

    Wraps a loguru logger bound to the component name and mirrors the
    auditable outcomes into the observability store.
    """

    def __init__(
        self,
        component: str,
        *,
        store: CourtesyObservabilityStore | None = None,
        **context: Any,
    ) -> None:
        self.component = component
        self.store = store or get_courtesy_store()
        self._context = context
        self._logger = logger.bind(component=component, **context)

    def child(self, component: str, **context: Any) -> "CourtesyAuditTrail":
        merged = {**self._context, **context}
        return CourtesyAuditTrail(component, store=self.store, **merged)

    def info(self, message: str, **fields: Any) -> None:
        self._logger.info(message, **fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._logger.warning(message, **fields)

    def exception(self, message: str, **fields: Any) -> None:
        self._logger.exception(message, **fields)

    def granted(self, *, courtesy_id: Any, event_id: Any, person_id: Any, scope: str) -> None:
        self.store.record_grant("granted", scope)
        self._logger.info(
            "Courtesy granted",
            courtesy_id=str(courtesy_id),
            event_id=str(event_id),
            person_id=str(person_id),
            scope=scope,
        )

    def grant_rejected(self, *, reason: str, event_id: Any, **fields: Any) -> None:
        self.store.record_grant(f"rejected:{reason}")
        self._logger.warning("Courtesy grant rejected", reason=reason, event_id=str(event_id), **fields)

    def cancelled(self, *, courtesy_id: Any, registrations: int, enrollments: int) -> None:
        self.store.record_cancellation("cancelled")
        self._logger.info(
            "Courtesy cancelled",
            courtesy_id=str(courtesy_id),
            registrations_cancelled=registrations,
            enrollments_cancelled=enrollments,
        )

    def cancel_rejected(self, *, reason: str, courtesy_id: Any) -> None:
        self.store.record_cancellation(f"rejected:{reason}")
        self._logger.warning("Courtesy cancellation rejected", reason=reason, courtesy_id=str(courtesy_id))

    def provisioned(self, *, record: str, record_id: Any, courtesy_id: Any) -> None:
        self.store.record_provisioning(f"created:{record}")
        self._logger.info(
            "Courtesy access provisioned",
            record=record,
            record_id=str(record_id),
            courtesy_id=str(courtesy_id),
        )

    def provisioning_skipped(self, *, record: str, existing_id: Any, courtesy_id: Any) -> None:
        self.store.record_provisioning(f"skipped:{record}")
        self._logger.info(
            "Existing access found, skipping provisioning",
            record=record,
            existing_id=str(existing_id),
            courtesy_id=str(courtesy_id),
        )

    def speaker_outcome(self, outcome: str, *, speaker_id: Any, **fields: Any) -> None:
        self.store.record_speaker_item(outcome)
        if outcome == "failed":
            self._logger.warning("Speaker courtesy failed", speaker_id=str(speaker_id), **fields)
        else:
            self._logger.info(f"Speaker courtesy {outcome}", speaker_id=str(speaker_id), **fields)

    def notification(self, outcome: str, *, courtesy_id: Any, **fields: Any) -> None:
        self.store.record_notification(outcome)
        if outcome == "failed":
            self._logger.warning("Courtesy notification dispatch failed", courtesy_id=str(courtesy_id), **fields)
        else:
            self._logger.info(f"Courtesy notification {outcome}", courtesy_id=str(courtesy_id), **fields)


__all__ = [
    "CourtesyAuditTrail",
    "CourtesyObservabilityStore",
    "CourtesySnapshot",
    "get_courtesy_store",
]
