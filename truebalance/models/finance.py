"""
Core Finance Models for TrueBalance

These models define the schemas of the records the backend collaborators
return. They are designed to:
1. Accept the backend's camelCase JSON as-is
2. Normalize dates and amounts once, at the model boundary
3. Never fail on a bad date or amount; aggregation decides what to skip

DESIGN DECISION: Amounts are floats. Aggregations tolerate rounding noise and
the invariant checks compare within a cent.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from truebalance.parsing.normalizers import parse_currency, parse_datetime, parse_year_month


BILL_DATE_KEYS = ("billDate", "date", "executionDate", "execution_date")


class CamelModel(BaseModel):
    """Base model: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


def _lenient_amount(v: Any) -> Any:
    """Strings go through the currency parser; failures become NaN."""
    if isinstance(v, str):
        return parse_currency(v)
    return v


# =============================================================================
# BILLS
# =============================================================================

class Bill(CamelModel):
    """
    A recurring or one-off bill.

    The execution date may arrive as billDate, date or executionDate.
    An unparseable date becomes None and the bill is skipped by aggregators.
    """

    id: Optional[int] = None
    name: str = ""
    execution_date: Optional[datetime] = None
    total_amount: Optional[float] = None
    number_of_installments: int = Field(
        default=1,
        description="Installments the total is split into"
    )
    installment_amount: Optional[float] = None
    description: Optional[str] = None
    category: Optional[str] = None
    credit_card_id: Optional[int] = None
    is_recurring: bool = False
    is_paid: bool = False

    @model_validator(mode='before')
    @classmethod
    def normalize_date_aliases(cls, data: Any) -> Any:
        """Collapse the date aliases into execution_date."""
        if not isinstance(data, dict):
            return data

        data = dict(data)
        raw_date = None
        for key in BILL_DATE_KEYS:
            value = data.pop(key, None)
            if raw_date is None and value:
                raw_date = value

        data["execution_date"] = parse_datetime(raw_date)
        return data

    @field_validator('name', mode='before')
    @classmethod
    def null_name(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator('total_amount', 'installment_amount', mode='before')
    @classmethod
    def parse_amount(cls, v: Any) -> Any:
        return _lenient_amount(v)

    @field_validator('number_of_installments', mode='before')
    @classmethod
    def default_installments(cls, v: Any) -> Any:
        return 1 if v is None else v

    @model_validator(mode='after')
    def derive_installment_amount(self) -> 'Bill':
        """installment_amount = total_amount / number_of_installments."""
        if self.installment_amount is None and self.total_amount is not None:
            self.installment_amount = self.total_amount / max(self.number_of_installments, 1)
        return self


# =============================================================================
# CREDIT CARDS & INVOICES
# =============================================================================

class CreditCard(CamelModel):
    """A credit card with its billing cycle."""

    id: Optional[int] = None
    name: str = ""
    credit_limit: float = Field(default=0.0, ge=0)
    closing_day: int = Field(default=1, ge=1, le=31)
    due_day: int = Field(default=1, ge=1, le=31)
    allows_partial_payment: bool = True

    @field_validator('credit_limit', mode='before')
    @classmethod
    def parse_limit(cls, v: Any) -> Any:
        return _lenient_amount(v)


class PartialPayment(CamelModel):
    """Money paid towards an invoice before (or instead of) full payment."""

    id: Optional[int] = None
    invoice_id: Optional[int] = None
    amount: float
    description: Optional[str] = None
    payment_date: Optional[datetime] = None


class Installment(CamelModel):
    """One slice of a bill, posted to a card invoice."""

    id: Optional[int] = None
    bill_id: Optional[int] = None
    invoice_id: Optional[int] = None
    installment_number: int = Field(default=1, ge=1)
    amount: float = 0.0
    due_date: Optional[datetime] = None


class Invoice(CamelModel):
    """
    Monthly credit card invoice.

    While the invoice is open its total is expected to equal the sum of its
    installments, unless use_absolute_value pins a manually entered total.
    """

    id: Optional[int] = None
    credit_card_id: Optional[int] = None
    reference_month: str = Field(
        default="",
        description="YYYY-MM or YYYY-MM-DD, as delivered by the backend"
    )
    total_amount: Optional[float] = None
    previous_balance: float = Field(default=0.0, ge=0)
    closed: bool = False
    paid: bool = False
    use_absolute_value: bool = False
    partial_payments: list[PartialPayment] = Field(default_factory=list)

    @field_validator('reference_month', mode='before')
    @classmethod
    def null_reference_month(cls, v: Any) -> Any:
        """A missing month leaves year_month None; aggregators skip it."""
        return "" if v is None else v

    @field_validator('total_amount', mode='before')
    @classmethod
    def parse_total(cls, v: Any) -> Any:
        return _lenient_amount(v)

    @field_validator('partial_payments', mode='before')
    @classmethod
    def null_payments(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator('previous_balance', mode='before')
    @classmethod
    def default_previous_balance(cls, v: Any) -> Any:
        return 0.0 if v is None else _lenient_amount(v)

    @property
    def year_month(self) -> Optional[tuple[int, int]]:
        """(year, month) of the reference month, or None if malformed."""
        return parse_year_month(self.reference_month)

    @property
    def amount_paid(self) -> float:
        """Sum of partial payments. May exceed the invoice total."""
        return sum(p.amount for p in self.partial_payments)

    @property
    def balance_due(self) -> float:
        """Outstanding balance; negative means credit for the next invoice."""
        return (self.total_amount or 0.0) + self.previous_balance - self.amount_paid
