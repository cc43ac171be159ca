"""Replay report models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from ps2emu.errors import DataMismatchWarning
from ps2emu.models.enums import Section


class ListReport(BaseModel):
    """Outcome of replaying one event list."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    section: Section | None = None
    events_replayed: int = 0
    interrupts_sent: int = 0
    bytes_received: int = 0
    no_data_skipped: int = 0
    max_lateness_us: int = Field(0, description="Worst delay past an interrupt's recorded time")
    mismatches: list[DataMismatchWarning] = Field(default_factory=list)


class ReplayReport(BaseModel):
    """Outcome of replaying a whole log."""

    log_version: int
    lists: list[ListReport] = Field(default_factory=list)

    @property
    def mismatch_count(self) -> int:
        return sum(len(r.mismatches) for r in self.lists)

    @property
    def events_replayed(self) -> int:
        return sum(r.events_replayed for r in self.lists)
