"""Grouping and totals over transactions"""

import re
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from money_tracker.schemas.dashboard import Totals, TransactionGroup
from money_tracker.schemas.transaction import Transaction, TransactionType
from money_tracker.utils.decimal_utils import sum_decimals

_UNSAFE_ID_CHARS = re.compile(r"[^a-zA-Z0-9]")


def safe_id(name: str) -> str:
    """
    Derive an identifier from a person name.

    Args:
        name: Person name

    Returns:
        Name with every character outside [a-zA-Z0-9] replaced by "_"
    """
    return _UNSAFE_ID_CHARS.sub("_", name)


class LedgerService:
    """Pure calculations over transaction lists"""

    @staticmethod
    def calculate_totals(transactions: Iterable[Transaction]) -> Totals:
        """
        Sum non-reversed transactions by type.

        Args:
            transactions: Transactions to sum

        Returns:
            Totals with sent, received and net
        """
        active = [t for t in transactions if not t.reversed]
        return Totals(
            sent=sum_decimals(t.amount for t in active if t.type == TransactionType.SEND),
            received=sum_decimals(t.amount for t in active if t.type == TransactionType.RECEIVE),
        )

    @staticmethod
    def calculate_balance(transactions: Iterable[Transaction]) -> Decimal:
        """
        Signed sum of non-reversed transactions (RECEIVE positive, SEND negative).

        Args:
            transactions: One person's transactions

        Returns:
            Balance
        """
        return sum_decimals(t.signed_amount for t in transactions if not t.reversed)

    @staticmethod
    def order_transactions(transactions: Iterable[Transaction]) -> List[Transaction]:
        """Non-reversed first, otherwise keeping the input order"""
        return sorted(transactions, key=lambda t: t.reversed)

    @staticmethod
    def group_by_person(transactions: Iterable[Transaction]) -> List[TransactionGroup]:
        """
        Group transactions by owner.

        Groups appear in the order their owner is first seen; within a group
        non-reversed transactions come first.

        Args:
            transactions: Transactions to group

        Returns:
            One group per owner
        """
        grouped: Dict[str, List[Transaction]] = {}
        for transaction in transactions:
            grouped.setdefault(transaction.owner_name, []).append(transaction)

        return [
            TransactionGroup(
                person_name=name,
                safe_id=safe_id(name),
                transactions=LedgerService.order_transactions(items),
            )
            for name, items in grouped.items()
        ]

    @staticmethod
    def filter_groups(groups: Iterable[TransactionGroup], query: Optional[str]) -> List[TransactionGroup]:
        """
        Case-insensitive search over person names and descriptions.

        A group whose person name matches is kept whole; otherwise only the
        transactions whose description matches are kept, and groups left
        empty are dropped.

        Args:
            groups: Groups to search
            query: Search text; blank keeps everything

        Returns:
            Matching groups
        """
        groups = list(groups)
        needle = (query or "").strip().lower()
        if not needle:
            return groups

        result: List[TransactionGroup] = []
        for group in groups:
            if needle in group.person_name.lower():
                result.append(group)
                continue

            matching = [
                t for t in group.transactions
                if t.description and needle in t.description.lower()
            ]
            if matching:
                result.append(group.model_copy(update={"transactions": matching}))

        return result
