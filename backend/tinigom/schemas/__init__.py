from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
import datetime
from typing import Optional

from tinigom.core.timeutils import to_naive_utc
from tinigom.models.finance import Person, TodoAssignee, TransactionType


# --- TRANSACTION SCHEMAS ---
class TransactionCreate(BaseModel):
    amount: float = Field(..., gt=0, allow_inf_nan=False)
    type: TransactionType
    category: Optional[str] = None
    reason: Optional[str] = None
    user: Person

    @field_validator("category", "reason")
    @classmethod
    def blank_to_none(cls, v):
        if v is not None and not v.strip():
            return None
        return v


class TransactionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    amount: float
    type: TransactionType
    category: Optional[str] = None
    reason: Optional[str] = None
    user: Person
    date: datetime.datetime
    created_at: Optional[datetime.datetime] = None


# --- SETTINGS SCHEMAS ---
class SettingsUpdate(BaseModel):
    savings_goal: float = Field(..., gt=0, allow_inf_nan=False)
    target_months: Optional[int] = Field(None, gt=0)
    target_start_date: Optional[datetime.datetime] = None

    @field_validator("target_start_date")
    @classmethod
    def naive_utc(cls, v):
        return to_naive_utc(v) if v is not None else None

    @model_validator(mode="after")
    def target_pair(self):
        # Omitting both keeps the stored target; an explicit null pair clears it
        sent = {"target_months", "target_start_date"} & self.model_fields_set
        if sent and (
            len(sent) == 1 or (self.target_months is None) != (self.target_start_date is None)
        ):
            raise ValueError("target_months and target_start_date must be set together")
        return self


class SettingsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    savings_goal: float
    target_months: Optional[int] = None
    target_start_date: Optional[datetime.datetime] = None
    updated_at: Optional[datetime.datetime] = None


# --- TODO SCHEMAS ---
class TodoCreate(BaseModel):
    text: str
    assigned_to: TodoAssignee

    @field_validator("text")
    @classmethod
    def text_not_blank(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Text is required")
        return v


class TodoUpdate(BaseModel):
    id: int
    completed: Optional[bool] = None


class TodoOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    text: str
    completed: bool
    assigned_to: TodoAssignee
    created_at: Optional[datetime.datetime] = None
    updated_at: Optional[datetime.datetime] = None


# --- PROGRESS SCHEMAS ---
class MonthlyPrediction(BaseModel):
    remaining_amount: float
    remaining_months: float
    target_date: datetime.datetime
    required_monthly_saving: float
    current_monthly_saving: float
    is_achievable: bool
    shortfall: float
    target_reached: bool


class ProgressSummary(BaseModel):
    savings_goal: float
    user_totals: dict[str, float]
    contributions: dict[str, float]
    grand_total: float
    progress_percentage: float
    total_income: float
    total_withdrawals: float
    prediction: Optional[MonthlyPrediction] = None
    success_likelihood: int


# --- INVOICE SCHEMAS ---
class InvoiceRequest(BaseModel):
    user: Person
    invoice_number: Optional[str] = Field(None, pattern=r"^#?[0-9]{1,10}$")
    date: datetime.date = Field(default_factory=datetime.date.today)
    due_date: Optional[datetime.date] = None
    from_name: Optional[str] = None
    from_address: str = ""
    from_phone: str = ""
    to_name: str = Field(..., min_length=1)
    to_address: str = ""
    to_phone: str = ""
    service_description: str = Field(..., min_length=1)
    services_rendered: str = ""
    deliverables: str = ""
    amount: float = Field(..., ge=0, allow_inf_nan=False)
    quantity: int = Field(1, gt=0)

    @property
    def total(self) -> float:
        return self.amount * self.quantity

