"""Suspicious-pattern classifier for telemetry events.

``classify`` is a pure function: the same input always yields the same
flags, in the same order, and nothing is logged or sent. Escalation is the
caller's job.

Checks (evaluated in this order):
    1. excessive_overlay_opens: overlay_opened with openCount > 50
    2. blocked_domain_access: security_block whose reason is the
       allow-list's blocked-domain reason
    3. rapid_clicking: document_clicked with timeSinceLastClick < 100 ms
    4. sheet_edit_attempt: any sheet_edit_accessed event
    5. cors_error: error whose message mentions CORS (flag only, not
       suspicious)
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from docguard.core.constants import (
    BLOCKED_DOMAIN_REASON,
    EXCESSIVE_OVERLAY_OPENS,
    RAPID_CLICK_THRESHOLD_MS,
    TRANSPORT_ERROR_KEYWORD,
)
from docguard.telemetry.models import EventType, Severity, TelemetryEvent


@dataclass(frozen=True, slots=True, kw_only=True)
class ClassificationResult:
    """Outcome of ``classify``.

    Attributes:
        is_suspicious: True if any suspicious check matched.
        flags: Names of every matching check, in check order.
    """

    is_suspicious: bool
    flags: tuple[str, ...]

    @property
    def severity(self) -> Severity | None:
        if self.is_suspicious:
            return Severity.HIGH
        if self.flags:
            return Severity.LOW
        return None


@dataclass(frozen=True, slots=True)
class PatternCheck:
    """One independent check.

    Attributes:
        flag: Flag name added when the check matches.
        suspicious: Whether a match marks the event suspicious.
        matches: Predicate over (event_type, metadata).
    """

    flag: str
    suspicious: bool
    matches: Callable[[str, Mapping[str, Any]], bool]


def _number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _excessive_overlay_opens(event_type: str, metadata: Mapping[str, Any]) -> bool:
    count = _number(metadata.get("openCount"))
    return (
        event_type == EventType.OVERLAY_OPENED
        and count is not None
        and count > EXCESSIVE_OVERLAY_OPENS
    )


def _blocked_domain_access(event_type: str, metadata: Mapping[str, Any]) -> bool:
    return (
        event_type == EventType.SECURITY_BLOCK
        and metadata.get("reason") == BLOCKED_DOMAIN_REASON
    )


def _rapid_clicking(event_type: str, metadata: Mapping[str, Any]) -> bool:
    latency = _number(metadata.get("timeSinceLastClick"))
    return (
        event_type == EventType.DOCUMENT_CLICKED
        and latency is not None
        and latency < RAPID_CLICK_THRESHOLD_MS
    )


def _sheet_edit_attempt(event_type: str, metadata: Mapping[str, Any]) -> bool:
    return event_type == EventType.SHEET_EDIT_ACCESSED


def _cors_error(event_type: str, metadata: Mapping[str, Any]) -> bool:
    message = metadata.get("errorMessage") or metadata.get("message")
    return (
        event_type == EventType.ERROR
        and isinstance(message, str)
        and TRANSPORT_ERROR_KEYWORD in message
    )


PATTERN_CHECKS: tuple[PatternCheck, ...] = (
    PatternCheck("excessive_overlay_opens", True, _excessive_overlay_opens),
    PatternCheck("blocked_domain_access", True, _blocked_domain_access),
    PatternCheck("rapid_clicking", True, _rapid_clicking),
    PatternCheck("sheet_edit_attempt", True, _sheet_edit_attempt),
    PatternCheck("cors_error", False, _cors_error),
)


def classify(event: TelemetryEvent | Mapping[str, Any]) -> ClassificationResult:
    """Run every pattern check against an event.

    Args:
        event: A TelemetryEvent, or a wire-format mapping with ``eventType``
            and ``metadata`` keys (as received by the collector).

    Returns:
        ClassificationResult with flags in check order.
    """
    if isinstance(event, TelemetryEvent):
        event_type = event.event_type.value
        metadata: Mapping[str, Any] = event.metadata
    else:
        event_type = str(event.get("eventType", ""))
        raw_metadata = event.get("metadata")
        metadata = raw_metadata if isinstance(raw_metadata, Mapping) else {}

    flags: list[str] = []
    is_suspicious = False
    for check in PATTERN_CHECKS:
        if check.matches(event_type, metadata):
            flags.append(check.flag)
            is_suspicious = is_suspicious or check.suspicious

    return ClassificationResult(is_suspicious=is_suspicious, flags=tuple(flags))


def apply_classification(
    event: TelemetryEvent, result: ClassificationResult
) -> TelemetryEvent:
    """Return a copy of ``event`` carrying the classifier's flags and severity."""
    if not result.flags:
        return event
    return event.model_copy(
        update={"security_flags": result.flags, "severity": result.severity}
    )
