"""Event model — one captured interaction on the PS/2 controller."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ps2emu.models.enums import EventType


class Event(BaseModel):
    """A single interrupt or data byte observed on the i8042 controller.

    Only interrupts may lack data, and only interrupts carry a port and an IRQ.
    """

    model_config = ConfigDict(frozen=True)

    type: EventType
    time: int = Field(ge=0, description="Microseconds since the list origin")
    data: int | None = Field(None, ge=0, le=0xFF)
    port: int | None = Field(None, ge=0)
    irq: int | None = Field(None, ge=0)

    @model_validator(mode="after")
    def _check_type_fields(self) -> Event:
        if self.type != EventType.INTERRUPT:
            if self.data is None:
                raise ValueError(f"{self.type} event requires a data byte")
            if self.port is not None or self.irq is not None:
                raise ValueError(f"{self.type} event cannot carry port or irq")
        return self

    @property
    def has_data(self) -> bool:
        return self.data is not None

    @property
    def is_interrupt(self) -> bool:
        return self.type == EventType.INTERRUPT

    def shifted(self, offset: int) -> Event:
        """Return a copy whose time is moved back by ``offset`` microseconds."""
        if offset > self.time:
            raise ValueError(f"Cannot shift event at {self.time} back by {offset}")
        return self.model_copy(update={"time": self.time - offset})
