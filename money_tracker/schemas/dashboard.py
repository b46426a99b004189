"""Dashboard view schemas"""
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from money_tracker.schemas.person import Person
from money_tracker.schemas.transaction import Transaction


class Totals(BaseModel):
    """Sent, received and net totals over non-reversed transactions"""
    sent: Decimal = Decimal("0")
    received: Decimal = Decimal("0")

    @property
    def net(self) -> Decimal:
        return self.received - self.sent


class TransactionGroup(BaseModel):
    """Transactions belonging to one person"""
    person_name: str
    safe_id: str
    transactions: List[Transaction] = Field(default_factory=list)
    expanded: bool = False


class DashboardView(BaseModel):
    """Everything needed to render the dashboard"""
    people: List[Person] = Field(default_factory=list)
    groups: List[TransactionGroup] = Field(default_factory=list)
    totals: Totals = Field(default_factory=Totals)
    expanded_id: Optional[str] = None
    query: Optional[str] = None
    currency_symbol: str = "₹"
