"""Enumerations describing dispatch decisions and engine lifecycle."""

from __future__ import annotations

from enum import Enum


class OverflowPolicy(Enum):
    """Rule applied when a bounded dispatch queue is full."""

    DROP_NEW = "drop_new"
    DROP_OLD = "drop_old"
    SYNC_FALLBACK = "sync_fallback"

    @classmethod
    def from_name(cls, name: str) -> "OverflowPolicy":
        """Coerce ``name`` (``drop-new``, ``DROP_NEW``, ...) to a policy.

        Examples
        --------
        >>> OverflowPolicy.from_name("drop-old")
        <OverflowPolicy.DROP_OLD: 'drop_old'>
        """

        normalized = name.strip().upper().replace("-", "_")
        try:
            return cls[normalized]
        except KeyError as exc:
            choices = ", ".join(member.value for member in cls)
            raise ValueError(f"Unknown overflow policy: {name!r} (expected one of {choices})") from exc


class AcceptOutcome(Enum):
    """Result of a single :meth:`DispatchEngine.offer` decision."""

    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EVICT_AND_ACCEPT = "evict_and_accept"
    SYNCHRONOUS = "synchronous"
    DISCARDED = "discarded"

    @property
    def queued(self) -> bool:
        """Return ``True`` when the event ended up on the queue."""

        return self in (AcceptOutcome.ACCEPTED, AcceptOutcome.EVICT_AND_ACCEPT)


class LifecycleState(Enum):
    """Close/drain progression of a dispatch engine; ``CLOSED`` is terminal."""

    OPEN = "open"
    CLOSING = "closing"
    DRAINING = "draining"
    CLOSED = "closed"


__all__ = ["AcceptOutcome", "LifecycleState", "OverflowPolicy"]
