"""
Expense API — Pydantic Request/Response Schemas
=================================================

What:  Pydantic models defining the HTTP contract of the service.
Why:   Validation of the expense form, and a fixed serialized shape for
       every success response.
How:   FastAPI serializes response models by alias, so the capitalized
       workspace property names ("Description", "Date", "Amount") appear in
       the JSON while the Python attributes stay snake_case.
"""

import datetime
import math
import re
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Optional sign and digits at the start of the field, after whitespace
INTEGER_PREFIX = re.compile(r"\s*([+-]?\d+)")


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class ExpenseItem(BaseModel):
    """
    What:  One pending expense, flattened to scalars.
    Who:   Items of GET /expenses.

    Fields are None when the record does not carry that property or the
    full value had no content.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(description="Workspace page id of the expense")
    description: Optional[str] = Field(default=None, alias="Description")
    date: Optional[datetime.date] = Field(default=None, alias="Date")
    amount: Optional[Union[int, float]] = Field(default=None, alias="Amount")


class ExpenseListResponse(BaseModel):
    """Wrapper for GET /expenses. An empty match set gives `pages: []`."""
    pages: List[ExpenseItem] = Field(default_factory=list)


class ExpectedBalanceResponse(BaseModel):
    """
    What:  The `Expected Balance` property of this month's balance record.
    Who:   Returned by GET /expected-balance.

    The preview object from the query is passed through untouched (id, type,
    formula preview, ...) with the freshly fetched number added as `value`.
    """
    model_config = ConfigDict(extra="allow")

    id: str = Field(description="Property id of Expected Balance")
    type: Optional[str] = Field(default=None, description="Property type (formula)")
    value: Optional[Union[int, float]] = Field(
        default=None,
        description="Numeric result of the Expected Balance formula",
    )


class CreatedExpenseResponse(BaseModel):
    """Returned by POST /expense."""
    id: str = Field(description="Workspace page id of the new expense")


class MessageResponse(BaseModel):
    """Body of every 500 response."""
    message: str


class HealthResponse(BaseModel):
    """Liveness response for GET /health."""
    status: str = Field(description="Always 'healthy' when the process answers")
    version: str = Field(description="Application version")
    uptime_seconds: float = Field(description="Seconds since service started")


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class ExpenseSubmission(BaseModel):
    """
    What:  The form fields of POST /expense, validated.

    date:    kept as the submitted ISO string (sent to the workspace as-is),
             but must start with a valid YYYY-MM-DD.
    amount:  the leading integer of the field, the way the web client's
             integer parse has always stored it ("12.99" → 12).
    """
    description: str
    date: str
    amount: int

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: str) -> str:
        datetime.date.fromisoformat(v.strip()[:10])
        return v.strip()

    @field_validator("amount", mode="before")
    @classmethod
    def parse_amount(cls, v: Any) -> int:
        """Leading integer of the field, so "12.99" → 12 and "12abc" → 12."""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            if not math.isfinite(v):
                raise ValueError("amount must be a finite number")
            return int(v)
        match = INTEGER_PREFIX.match(v) if isinstance(v, str) else None
        if match is None:
            raise ValueError(f"amount {v!r} does not start with a number")
        return int(match.group(1))

    def to_properties(
        self,
        balance_relations: List[Dict[str, str]],
        card: str,
        status: str,
    ) -> Dict[str, Any]:
        """Workspace property payload for pages.create."""
        return {
            "Description": {"title": [{"text": {"content": self.description}}]},
            "Date": {"date": {"start": self.date}},
            "Amount": {"number": self.amount},
            "Balance": {"relation": balance_relations},
            "Card": {"select": {"name": card}},
            "Status": {"select": {"name": status}},
        }
