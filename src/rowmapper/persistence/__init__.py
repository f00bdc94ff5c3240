"""
Persistence layer components: sessions, transactions and unit of work.
"""

from .session import Session
from .transaction import TransactionManager
from .unit_of_work import Transaction, TransactionState, Work

__all__ = ["Session", "Transaction", "TransactionManager", "TransactionState", "Work"]
