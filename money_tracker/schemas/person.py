"""Person schemas"""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class PersonRef(BaseModel):
    """Reference to a person embedded in a transaction"""

    name: str

    model_config = ConfigDict(extra="ignore")


class Person(BaseModel):
    """Person as returned by the people API"""

    name: str
    balance: Decimal = Field(default=Decimal("0"))
    created_at: Optional[datetime] = None

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )

    @field_validator("balance", mode="before")
    @classmethod
    def convert_balance(cls, v):
        """Missing balances count as zero"""
        if v is None:
            return Decimal("0")
        try:
            return Decimal(str(v))
        except InvalidOperation:
            raise ValueError("Balance must be a number")

    @property
    def balance_class(self) -> str:
        """CSS class describing the sign of the balance"""
        if self.balance > 0:
            return "balance-positive"
        if self.balance < 0:
            return "balance-negative"
        return "balance-zero"
