"""Form input schemas"""
from decimal import Decimal, InvalidOperation
from typing import Optional

from pydantic import BaseModel, Field, field_validator

MAX_AMOUNT = Decimal("1000000")
MAX_DESCRIPTION_LENGTH = 255
MAX_NAME_LENGTH = 100


class AddPersonForm(BaseModel):
    """Add-person form"""
    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v


class MoneyForm(BaseModel):
    """Send and receive forms"""
    name: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0, le=MAX_AMOUNT)
    description: Optional[str] = Field(default=None, max_length=MAX_DESCRIPTION_LENGTH)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("amount", mode="before")
    @classmethod
    def convert_amount(cls, v):
        """Convert amount to Decimal"""
        if isinstance(v, str):
            v = v.strip()
        if v is None or v == "":
            raise ValueError("Amount is required")
        try:
            amount = Decimal(str(v))
        except InvalidOperation:
            raise ValueError("Amount must be a number")
        if not amount.is_finite():
            raise ValueError("Amount must be a number")
        return amount

    @field_validator("description", mode="before")
    @classmethod
    def strip_description(cls, v):
        """Blank descriptions are treated as missing"""
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v
