"""Event lists produced by reading a replay log."""

from __future__ import annotations

from collections import Counter

from pydantic import BaseModel, ConfigDict, Field

from ps2emu.models.enums import EventType, Section
from ps2emu.models.event import Event

EventList = list[Event]


class ReplayLog(BaseModel):
    """Parsed contents of a ps2emu-record log.

    Version 0 logs fill ``events``; later versions fill ``init_events`` and
    ``main_events`` and leave ``events`` empty.
    """

    model_config = ConfigDict(frozen=True)

    version: int = Field(ge=0)
    events: EventList = Field(default_factory=list)
    init_events: EventList = Field(default_factory=list)
    main_events: EventList = Field(default_factory=list)

    @property
    def is_sectioned(self) -> bool:
        return self.version >= 1

    def lists(self) -> list[tuple[Section | None, EventList]]:
        """Event lists in replay order, labelled with their section."""
        if not self.is_sectioned:
            return [(None, self.events)]
        return [(Section.INIT, self.init_events), (Section.MAIN, self.main_events)]

    def type_counts(self) -> dict[Section | None, Counter[EventType]]:
        return {section: Counter(e.type for e in events) for section, events in self.lists()}
