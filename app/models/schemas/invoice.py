"""Invoice-related schemas."""
from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class InvoiceCreate(BaseModel):
    amount: Decimal = Field(gt=0)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    client_id: int | None = None
    template_id: str = "modern"
    due_date: dt.datetime | None = None
    notes: str | None = None
    is_recurring: bool = False
    recurrence_interval: Literal["weekly", "monthly", "quarterly", "yearly"] | None = None

    @model_validator(mode="after")
    def _recurring_needs_interval(self) -> InvoiceCreate:
        if self.is_recurring and self.recurrence_interval is None:
            self.recurrence_interval = "monthly"
        return self


class InvoiceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    invoice_id: str
    amount: Decimal
    currency: str
    status: str
    client_id: int | None = None
    template_id: str
    is_recurring: bool
    recurrence_interval: str | None = None
    notes: str | None = None
    due_date: dt.datetime | None = None
    created_at: dt.datetime | None = None
