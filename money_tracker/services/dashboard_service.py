"""Dashboard state: cached lists, expanded person, optimistic updates"""

import logging
from typing import List, Optional, Union

from money_tracker.config import Settings, get_settings
from money_tracker.core.exceptions import (
    AppException,
    NotFoundError,
    SessionExpiredError,
    ValidationError,
)
from money_tracker.schemas.dashboard import DashboardView, Totals, TransactionGroup
from money_tracker.schemas.person import Person
from money_tracker.schemas.transaction import ReverseResult, Transaction, TransactionType
from money_tracker.services.api_client import ApiClient
from money_tracker.services.ledger_service import LedgerService, safe_id
from money_tracker.services.notification_service import Notifier

logger = logging.getLogger(__name__)


class DashboardService:
    """
    Holds the last fetched people and transactions and the view state
    derived from them.

    At most one person group is expanded at any time.
    """

    def __init__(self, client: ApiClient, notifier: Notifier, settings: Optional[Settings] = None):
        self.client = client
        self.notifier = notifier
        self.settings = settings or get_settings()
        self.people: List[Person] = []
        self.transactions: List[Transaction] = []
        self.totals = Totals()
        self.expanded_id: Optional[str] = None
        self._group_order: List[str] = []

    # ----- loading -----

    async def reload(self) -> None:
        """
        Fetch people and transactions and rebuild derived state.

        Raises:
            AppException: If either list fails to load
        """
        try:
            people, transactions = await self.client.load_all()
        except SessionExpiredError:
            self.clear()
            raise
        except AppException as e:
            self.notifier.error(f"Failed to load dashboard: {e.message}")
            raise

        self.set_data(people, transactions)

    def set_data(self, people: List[Person], transactions: List[Transaction]) -> None:
        """Replace the cache and recompute totals and group order"""
        self.people = list(people)
        self.transactions = list(transactions)
        self.totals = LedgerService.calculate_totals(self.transactions)

        self._group_order = []
        for transaction in self.transactions:
            if transaction.owner_name not in self._group_order:
                self._group_order.append(transaction.owner_name)

        if self.expanded_id is not None and self.expanded_id not in {
            safe_id(name) for name in self._group_order
        }:
            self.expanded_id = None

    def clear(self) -> None:
        """Drop all cached state (on logout or session expiry)"""
        self.set_data([], [])
        self.expanded_id = None

    # ----- expanded state -----

    def toggle(self, person_safe_id: str, force_open: bool = False) -> bool:
        """
        Expand or collapse a person group.

        Expanding a group collapses every other one.

        Args:
            person_safe_id: Safe id of the group
            force_open: Expand even if the group is already expanded

        Returns:
            Whether the group is expanded afterwards
        """
        known_ids = {safe_id(name) for name in self._group_order}
        if person_safe_id not in known_ids:
            logger.error("No transaction group for %s", person_safe_id)
            return False

        if self.expanded_id == person_safe_id and not force_open:
            self.expanded_id = None
            return False

        self.expanded_id = person_safe_id
        return True

    def mark_active(self, person_name: str) -> None:
        """Auto-expand this person's group on the next render"""
        self.expanded_id = safe_id(person_name)

    # ----- views -----

    @property
    def groups(self) -> List[TransactionGroup]:
        order = {name: index for index, name in enumerate(self._group_order)}
        groups = sorted(
            LedgerService.group_by_person(self.transactions),
            key=lambda g: order.get(g.person_name, len(order)),
        )
        for group in groups:
            group.expanded = group.safe_id == self.expanded_id
        return groups

    def view(self, query: Optional[str] = None) -> DashboardView:
        return DashboardView(
            people=self.people,
            groups=LedgerService.filter_groups(self.groups, query),
            totals=self.totals,
            expanded_id=self.expanded_id,
            query=query,
            currency_symbol=self.settings.currency_symbol,
        )

    def find_transaction(self, transaction_id: Union[int, str]) -> Optional[Transaction]:
        for transaction in self.transactions:
            if str(transaction.id) == str(transaction_id):
                return transaction
        return None

    def find_person(self, name: str) -> Optional[Person]:
        return next((p for p in self.people if p.name == name), None)

    # ----- reverse -----

    async def reverse(self, transaction_id: Union[int, str]) -> ReverseResult:
        """
        Reverse a cached transaction and patch local state without refetching.

        Raises:
            NotFoundError: If the transaction is not in the cache
            ValidationError: If it is already reversed
        """
        transaction = self.find_transaction(transaction_id)
        if transaction is None:
            raise NotFoundError(f"Transaction {transaction_id} not found")
        if transaction.reversed:
            raise ValidationError("Transaction is already reversed")

        result = await self.client.reverse_transaction(transaction.id)
        self.apply_reverse(transaction, result)
        return result

    def apply_reverse(self, transaction: Transaction, result: ReverseResult) -> None:
        """
        Optimistically patch the cache after a successful reverse.

        The transaction is flagged reversed and moved to the bottom of its
        group, the person's balance is taken from the response (or adjusted
        locally when the response has none) and the totals are reduced.
        """
        reversed_transaction = transaction.model_copy(update={"reversed": True})
        self.transactions = [t for t in self.transactions if t is not transaction]
        self.transactions.append(reversed_transaction)

        owner = transaction.owner_name
        if result.person is not None:
            self._replace_person(result.person)
        else:
            person = self.find_person(owner)
            if person is not None:
                self._replace_person(
                    person.model_copy(update={"balance": person.balance - transaction.signed_amount})
                )

        sent, received = self.totals.sent, self.totals.received
        if transaction.type == TransactionType.SEND:
            sent -= transaction.amount
        else:
            received -= transaction.amount
        self.totals = Totals(sent=sent, received=received)

    def _replace_person(self, updated: Person) -> None:
        self.people = [updated if p.name == updated.name else p for p in self.people]
