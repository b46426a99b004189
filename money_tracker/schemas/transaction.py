"""Transaction schemas"""

import enum
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from money_tracker.schemas.person import Person, PersonRef

UNKNOWN_PERSON = "Unknown"


class TransactionType(str, enum.Enum):
    """Direction of a money movement"""
    SEND = "SEND"
    RECEIVE = "RECEIVE"


class Transaction(BaseModel):
    """Transaction as returned by the transactions API"""

    id: Union[int, str]
    type: TransactionType
    amount: Decimal = Field(..., ge=0)
    description: Optional[str] = None
    date: Optional[datetime] = None
    reversed: bool = False
    person: Optional[PersonRef] = None
    person_name: Optional[str] = None

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, v):
        """Accept transaction types in any case"""
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator("amount", mode="before")
    @classmethod
    def convert_amount(cls, v):
        """Convert amount to Decimal"""
        if v is None:
            raise ValueError("Amount is required")
        try:
            return Decimal(str(v))
        except InvalidOperation:
            raise ValueError("Amount must be a number")

    @field_validator("reversed", mode="before")
    @classmethod
    def convert_reversed(cls, v):
        """Only an explicit true marks a transaction reversed"""
        return v is True

    @property
    def owner_name(self) -> str:
        """Name of the person the transaction belongs to"""
        if self.person and self.person.name:
            return self.person.name
        return self.person_name or UNKNOWN_PERSON

    @property
    def signed_amount(self) -> Decimal:
        """Amount with RECEIVE positive and SEND negative"""
        return self.amount if self.type == TransactionType.RECEIVE else -self.amount


class ReverseResult(BaseModel):
    """Response of the reverse endpoint; either part may be absent"""

    person: Optional[Person] = None
    transaction: Optional[Transaction] = None

    model_config = ConfigDict(extra="ignore")
