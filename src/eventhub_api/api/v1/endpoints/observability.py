from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from eventhub_api.api.dependencies.security import require_internal_api_key
from eventhub_api.observability.courtesies import get_courtesy_store


router = APIRouter(prefix="/observability", tags=["Observability"])


@router.get(
    "/courtesies",
    dependencies=[Depends(require_internal_api_key)],
    summary="Courtesy engine observability snapshot",
)
async def get_courtesy_snapshot() -> dict[str, object]:
    """Counters for grants, cancellations, provisioning and speaker batches."""
    return get_courtesy_store().snapshot().as_dict()


def _format_metric(name: str, description: str, value: int | float, labels: dict[str, str] | None = None) -> list[str]:
    label_fragment = ""
    if labels:
        formatted = ",".join(f'{key}="{val}"' for key, val in sorted(labels.items()))
        label_fragment = f"{{{formatted}}}"
    return [
        f"# HELP {name} {description}",
        f"# TYPE {name} gauge",
        f"{name}{label_fragment} {value}",
    ]


_PROMETHEUS_SERIES = (
    ("grants", "eventhub_courtesy_grants_total", "Courtesy grant attempts grouped by outcome"),
    ("cancellations", "eventhub_courtesy_cancellations_total", "Courtesy cancellations grouped by outcome"),
    ("provisioning", "eventhub_courtesy_provisioning_total", "Access records created or skipped for courtesies"),
    ("speakerBatches", "eventhub_courtesy_speaker_items_total", "Speaker batch items grouped by outcome"),
    ("notifications", "eventhub_courtesy_notifications_total", "Courtesy notification hand-offs grouped by outcome"),
)


@router.get(
    "/prometheus",
    dependencies=[Depends(require_internal_api_key)],
    summary="Prometheus-formatted observability metrics",
    response_class=PlainTextResponse,
)
async def get_prometheus_metrics() -> PlainTextResponse:
    snapshot = get_courtesy_store().snapshot().as_dict()
    lines: list[str] = []
    for section, metric, description in _PROMETHEUS_SERIES:
        counters = snapshot.get(section, {})
        for outcome, value in sorted(counters.items()):
            lines.extend(_format_metric(metric, description, value, labels={"outcome": outcome}))
    return PlainTextResponse("\n".join(lines) + "\n")
