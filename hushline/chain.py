"""Runs a sequence of filters over a stream of audit events."""

from __future__ import annotations

import typing

if typing.TYPE_CHECKING:
    from collections.abc import Iterable

    from hushline.filters import base


class FilterChain:
    """Accepts an event only if every filter in the chain accepts it."""

    def __init__(self, filters: list[base.Filter]) -> None:
        """Initialize with a list of filter instances.

        Args:
            filters: Filters consulted, in order, for every event.
        """
        self.filters = filters

    def accept(self, event: base.AuditEvent) -> bool:
        """Return True if no filter suppresses *event*."""
        return all(flt.accept(event) for flt in self.filters)

    def filter(self, events: Iterable[base.AuditEvent]) -> list[base.AuditEvent]:
        """Return the accepted events, preserving their order.

        Args:
            events: Events in the order the checks produced them.

        Returns:
            The events that no filter suppressed.
        """
        return [event for event in events if self.accept(event)]
