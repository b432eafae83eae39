"""Utilities for emitting Kubernetes events."""

from __future__ import annotations

from typing import Any, Protocol

import kopf

from ..constants import (
    EVENT_REASON_CREATED,
    EVENT_REASON_DELETED,
    EVENT_REASON_IMMUTABLE_FIELD,
    EVENT_REASON_RECONCILE_FAILED,
    EVENT_REASON_UPDATED,
    EVENT_TYPE_NORMAL,
    EVENT_TYPE_WARNING,
)


class EventSink(Protocol):
    """Anything that accepts ``(object, reason, message, type_)`` event records."""

    def __call__(
        self,
        body: dict[str, Any],
        reason: str,
        message: str,
        type_: str = EVENT_TYPE_NORMAL,
    ) -> None: ...


def emit_event(
    body: dict[str, Any],
    reason: str,
    message: str,
    type_: str = EVENT_TYPE_NORMAL,
) -> None:
    """Emit a Kubernetes event.

    Args:
        body: Object reference (apiVersion, kind, metadata) the event is about
        reason: Event reason
        message: Event message
        type_: Event type (Normal or Warning)
    """
    kopf.event(
        body,
        reason=reason,
        message=message,
        type=type_,
    )


def emit_resource_created(sink: EventSink, body: dict[str, Any], kind: str, name: str) -> None:
    """Emit child created event."""
    sink(body, EVENT_REASON_CREATED, f"Created {kind} {name}")


def emit_resource_updated(sink: EventSink, body: dict[str, Any], kind: str, name: str) -> None:
    """Emit child updated event."""
    sink(body, EVENT_REASON_UPDATED, f"Updated {kind} {name}")


def emit_resource_deleted(sink: EventSink, body: dict[str, Any], kind: str, name: str) -> None:
    """Emit child deleted event."""
    sink(body, EVENT_REASON_DELETED, f"Deleted {kind} {name}")


def emit_immutable_field(sink: EventSink, body: dict[str, Any], message: str) -> None:
    """Emit a warning about a change that cannot be applied in place."""
    sink(body, EVENT_REASON_IMMUTABLE_FIELD, message, type_=EVENT_TYPE_WARNING)


def emit_reconcile_failed(sink: EventSink, body: dict[str, Any], message: str) -> None:
    """Emit reconcile failed event."""
    sink(body, EVENT_REASON_RECONCILE_FAILED, message, type_=EVENT_TYPE_WARNING)
