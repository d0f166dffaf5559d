"""Prometheus instruments for account gate transitions."""

from __future__ import annotations

from prometheus_client import Counter

GATE_TRANSITIONS = Counter(
    "account_gate_transitions_total",
    "Confirmation and approval gate transitions by event.",
    ["event"],
)


def record(event: str) -> None:
    GATE_TRANSITIONS.labels(event=event).inc()
