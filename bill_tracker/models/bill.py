"""
Core Data Models for the Bill Tracker

These models define the schemas for every bill flowing through the system.
They are designed to:
1. Keep amounts finite and non-negative no matter what the form sent
2. Restrict status, filter and sort selections to finite sets
3. Serialize to the plain snapshot shape kept in local storage
4. Rehydrate older or partial snapshots without failing

DESIGN DECISION: Bills are frozen. Only the BillManager replaces them,
and it does so by building a new instance for every update.
"""

import math
import re
import time
import unicodedata
from enum import Enum
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


DEFAULT_CURRENCY = "EUR"

# Leading numeric prefix, the way form input has always been parsed
# ("12.50 EUR" -> 12.5, "abc" -> invalid).
_NUMERIC_PREFIX = re.compile(r"^\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class BillStatus(str, Enum):
    """
    Payment status of a bill.

    Values are the exact strings stored in the snapshot.
    """
    PAID = "Paid"
    UNPAID = "Unpaid"
    PENDING = "Pending"


class BillFilter(str, Enum):
    """Status filter applied to the display list."""
    ALL = "All"
    PAID = "Paid"
    UNPAID = "Unpaid"
    PENDING = "Pending"


class BillSort(str, Enum):
    """Sort order applied to the display list."""
    DEFAULT = "default"
    AMOUNT_HIGH_LOW = "amount-high-low"
    AMOUNT_LOW_HIGH = "amount-low-high"
    NAME_AZ = "name-az"


# =============================================================================
# COERCION HELPERS
# =============================================================================

_last_bill_id = 0


def generate_bill_id() -> str:
    """
    Time-based bill id (nanoseconds since the epoch).

    Strictly increasing within the process, so two bills created within
    the same clock tick still get different ids.
    """
    global _last_bill_id
    now = time.time_ns()
    if now <= _last_bill_id:
        now = _last_bill_id + 1
    _last_bill_id = now
    return str(now)


def coerce_amount_value(raw: Any) -> float:
    """
    Coerce raw form or snapshot input into a bill amount.

    Anything that does not parse to a finite, non-negative number
    becomes 0.0.
    """
    if isinstance(raw, bool) or raw is None:
        return 0.0

    if isinstance(raw, (int, float)):
        value = float(raw)
    elif isinstance(raw, str):
        match = _NUMERIC_PREFIX.match(raw)
        if not match:
            return 0.0
        value = float(match.group(0))
    else:
        try:
            value = float(raw)
        except (TypeError, ValueError):
            return 0.0

    if not math.isfinite(value) or value < 0:
        return 0.0
    return value


def strip_control_chars(text: str) -> str:
    """Drop control characters (NUL, escapes, etc.) from free text."""
    return "".join(ch for ch in text if unicodedata.category(ch) != "Cc")


def parse_status(raw: Any) -> Optional[BillStatus]:
    """
    Parse a status value.

    Returns None for missing/blank input so callers can apply their own
    default. Unknown strings raise ValueError.
    """
    if raw is None:
        return None
    if isinstance(raw, BillStatus):
        return raw
    text = str(raw).strip()
    if not text:
        return None
    for status in BillStatus:
        if text.lower() == status.value.lower():
            return status
    allowed = ", ".join(s.value for s in BillStatus)
    raise ValueError(f"Unknown bill status: {text!r}. Allowed: {allowed}")


# =============================================================================
# CORE BILL MODEL
# =============================================================================

class Amount(BaseModel):
    """Monetary amount of a bill."""
    model_config = ConfigDict(frozen=True)

    value: float = Field(
        default=0.0,
        ge=0,
        description="Amount value, always finite and non-negative"
    )
    currency: str = Field(
        default=DEFAULT_CURRENCY,
        min_length=3,
        max_length=3,
        description="ISO-style 3-letter currency code"
    )

    @field_validator('value', mode='before')
    @classmethod
    def coerce_value(cls, v: Any) -> float:
        return coerce_amount_value(v)

    @field_validator('currency', mode='before')
    @classmethod
    def normalize_currency(cls, v: Any) -> str:
        """Upper-case 3-letter codes; anything else falls back to EUR."""
        if not isinstance(v, str):
            return DEFAULT_CURRENCY
        code = v.strip().upper()
        if len(code) != 3 or not code.isalpha():
            return DEFAULT_CURRENCY
        return code


class Bill(BaseModel):
    """
    A single household bill.

    Accepts the amount either as an Amount/dict or as a bare value with a
    separate top-level currency, which is what form submissions provide.
    The snapshot form uses camelCase keys (displayName, paymentMethod).
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        frozen=True,
        populate_by_name=True,
    )

    # Identity
    id: str = Field(
        default_factory=generate_bill_id,
        description="Unique bill id, time-based when not provided"
    )

    category: str = Field(
        default="",
        description="Free-form category, e.g. Energy, Streaming, Other"
    )
    display_name: Optional[str] = Field(
        default=None,
        alias="displayName",
        description="Shown instead of the category when present"
    )
    payment_method: str = Field(
        default="",
        alias="paymentMethod",
        description="e.g. Credit Card, Direct Debit"
    )
    status: BillStatus = Field(
        default=BillStatus.PENDING,
        description="Payment status"
    )
    amount: Amount = Field(default_factory=Amount)

    @model_validator(mode='before')
    @classmethod
    def fold_amount_and_currency(cls, data: Any) -> Any:
        """Build the nested amount from a bare value plus optional currency."""
        if not isinstance(data, dict):
            return data

        data = dict(data)
        currency = data.pop("currency", None)
        amount = data.get("amount")

        if isinstance(amount, Amount):
            amount = amount.model_dump()
        elif isinstance(amount, dict):
            amount = dict(amount)
        else:
            amount = {"value": amount}

        if currency is not None and "currency" not in amount:
            amount["currency"] = currency

        data["amount"] = amount
        return data

    @field_validator('id', mode='before')
    @classmethod
    def ensure_id(cls, v: Any) -> str:
        if v is None or (isinstance(v, str) and not v.strip()):
            return generate_bill_id()
        return str(v)

    @field_validator('category', 'payment_method', mode='before')
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        if v is None:
            return ""
        if isinstance(v, str):
            return strip_control_chars(v)
        return v

    @field_validator('display_name', mode='before')
    @classmethod
    def blank_to_none(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        text = strip_control_chars(str(v)).strip()
        return text or None

    @field_validator('status', mode='before')
    @classmethod
    def default_status(cls, v: Any) -> BillStatus:
        return parse_status(v) or BillStatus.PENDING

    @property
    def display_label(self) -> str:
        """Name shown in lists: the display name, else the category."""
        return self.display_name or self.category

    def to_snapshot(self) -> dict:
        """Plain dict in the persisted snapshot shape."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_snapshot(cls, data: dict) -> "Bill":
        """Rehydrate a bill from a snapshot entry."""
        return cls.model_validate(data)


# =============================================================================
# INPUT MODELS
# =============================================================================

class BillUpdate(BaseModel):
    """
    Partial update for an existing bill.

    Only the amount value and the status can change. Fields left as None
    are kept as they are.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(
        ...,
        min_length=1,
        description="Id of the bill to update"
    )
    amount: Optional[float] = Field(
        default=None,
        description="New amount value (coerced like form input)"
    )
    status: Optional[BillStatus] = None

    @field_validator('id', mode='before')
    @classmethod
    def id_to_str(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v

    @field_validator('amount', mode='before')
    @classmethod
    def coerce_amount(cls, v: Any) -> Optional[float]:
        if v is None:
            return None
        return coerce_amount_value(v)

    @field_validator('status', mode='before')
    @classmethod
    def parse_optional_status(cls, v: Any) -> Optional[BillStatus]:
        return parse_status(v)

    @property
    def is_empty(self) -> bool:
        return self.amount is None and self.status is None


class BillFormInput(BaseModel):
    """
    Fields submitted by the add-bill form.

    The form has two optional name inputs: one shown for streaming bills
    and one for "Other". Whichever is filled becomes the display name.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        populate_by_name=True,
        extra="ignore",
    )

    category: str = Field(default="", alias="type")
    name_streaming: Optional[str] = Field(default=None, alias="name-streaming")
    name_other: Optional[str] = Field(default=None, alias="name-other")
    payment_method: str = Field(default="", alias="paymentMethod")
    amount: Any = None
    currency: Optional[str] = None
    status: Optional[str] = None

    def to_bill(self, default_currency: str = DEFAULT_CURRENCY) -> Bill:
        """Build a new Bill (fresh id) from the submitted fields."""
        return Bill(
            category=self.category,
            display_name=self.name_streaming or self.name_other,
            payment_method=self.payment_method,
            amount=self.amount,
            currency=self.currency or default_currency,
            status=self.status,
        )
