"""
Person Records Module

Customer and Manager records. Both share the Person fields and are told
apart by their PersonType tag; the set of variants is closed.

Customers carry the daily withdrawal bookkeeping: the running total of
withdrawals for the current calendar day, reset when the day changes.
"""

from datetime import date
from dataclasses import dataclass
from typing import ClassVar, Dict, Optional
from enum import Enum

from .currency import Money
from .exceptions import ValidationError, InsufficientFundsError, LimitExceededError


class PersonType(Enum):
    """Kinds of people known to the ledger"""
    CUSTOMER = "Customer"
    MANAGER = "Manager"


@dataclass
class Person:
    """Fields shared by customers and the manager"""
    name: str
    age: int
    contact: str

    person_type: ClassVar[PersonType]

    def display_info(self) -> Dict[str, str]:
        """Printable fields, in display order"""
        return {
            "Name": self.name,
            "Age": str(self.age),
            "Contact": self.contact,
        }


@dataclass
class Customer(Person):
    """
    Bank customer with balance and daily withdrawal tracking.

    Passwords are stored and compared in clear text.
    """
    customer_id: str
    password: str
    balance: Money
    last_transaction_day: date
    daily_total: Optional[Money] = None

    person_type: ClassVar[PersonType] = PersonType.CUSTOMER

    def __post_init__(self):
        if self.daily_total is None:
            self.daily_total = Money.zero(self.balance.currency)

        if self.balance.is_negative():
            raise ValidationError("Balance cannot be negative")

        if self.daily_total.currency != self.balance.currency:
            raise ValidationError("Daily total currency must match balance currency")

    @property
    def currency(self):
        return self.balance.currency

    def verify_password(self, password: str) -> bool:
        """Check a password against the stored one"""
        return self.password == password

    def change_password(self, new_password: str) -> None:
        self.password = new_password

    def reset_daily_limit(self, today: date) -> bool:
        """
        Start a fresh daily total when the calendar day has changed.

        Returns True when a reset happened.
        """
        if today != self.last_transaction_day:
            self.daily_total = Money.zero(self.currency)
            self.last_transaction_day = today
            return True
        return False

    def deposit(self, amount: Money) -> None:
        """Credit the balance; deposits do not count towards the daily limit"""
        if not amount.is_positive():
            raise ValidationError("Deposit must be greater than zero")
        self.balance = self.balance + amount

    def withdraw(self, amount: Money, today: date, daily_limit: Money) -> None:
        """
        Debit the balance subject to the daily withdrawal limit

        Args:
            amount: Amount to withdraw
            today: Current calendar day
            daily_limit: Maximum total withdrawals per calendar day

        Raises:
            ValidationError: Non-positive amount
            InsufficientFundsError: Amount exceeds the balance
            LimitExceededError: Day's total would exceed the limit
        """
        if not amount.is_positive():
            raise ValidationError("Withdrawal must be greater than zero")
        if amount > self.balance:
            raise InsufficientFundsError(
                f"Insufficient funds: balance {self.balance.to_string()}, "
                f"requested {amount.to_string()}"
            )

        # Reset must happen before the limit comparison
        self.reset_daily_limit(today)

        if self.daily_total + amount > daily_limit:
            raise LimitExceededError(
                f"Daily transaction limit exceeded: limit {daily_limit.to_string()}, "
                f"used {self.daily_total.to_string()}, requested {amount.to_string()}",
                limit=daily_limit,
                daily_total=self.daily_total,
                amount=amount
            )

        self.balance = self.balance - amount
        self.daily_total = self.daily_total + amount

    def display_info(self) -> Dict[str, str]:
        info = super().display_info()
        info["ID"] = self.customer_id
        info["Balance"] = self.balance.to_string()
        return info


@dataclass
class Manager(Person):
    """Administrative account; one per ledger, never persisted"""
    password: str

    person_type: ClassVar[PersonType] = PersonType.MANAGER

    def verify_password(self, password: str) -> bool:
        return self.password == password

    def change_password(self, new_password: str) -> None:
        self.password = new_password
