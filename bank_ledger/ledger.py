"""
Account Ledger Module

Owns the in-memory customer roster and the manager account. Handles
customer creation and removal, authenticated deposits and withdrawals with
a per-customer daily withdrawal limit, and the load/save cycle against a
CustomerStore.

Customer ids come from a counter owned by each Ledger instance. Ids are
never reused, even after a customer is removed, and the counter continues
past the highest numeric id loaded from storage.
"""

from decimal import Decimal, InvalidOperation
from datetime import datetime, date
from typing import Callable, Dict, List, Optional, Union

from .config import LedgerConfig
from .codec import CustomerCodec
from .currency import Money, Currency, currency_from_code, decimal_from_string
from .exceptions import (
    AuthError, LimitExceededError, StorageError, ValidationError
)
from .logging_config import get_logger, log_action, setup_logging
from .persons import Customer, Manager
from .storage import CustomerStore, FlatFileCustomerStore


AmountLike = Union[Money, Decimal, int, str]

DEFAULT_DAILY_LIMIT = Decimal('5000.00')
DEFAULT_MINIMUM_DEPOSIT = Decimal('500.00')
DEFAULT_MINIMUM_AGE = 18

SAVE_MODES = ("append", "rewrite")


class Ledger:
    """
    In-memory customer ledger with daily withdrawal limits
    """

    def __init__(
        self,
        manager: Manager,
        store: Optional[CustomerStore] = None,
        currency: Currency = Currency.INR,
        daily_transaction_limit: Optional[Money] = None,
        minimum_initial_deposit: Optional[Money] = None,
        minimum_customer_age: int = DEFAULT_MINIMUM_AGE,
        save_mode: str = "append",
        clock: Optional[Callable[[], datetime]] = None
    ):
        if save_mode not in SAVE_MODES:
            raise ValueError(f"Unknown save mode '{save_mode}', expected one of {SAVE_MODES}")

        self.manager = manager
        self.store = store
        self.currency = currency
        self.daily_transaction_limit = daily_transaction_limit or Money(DEFAULT_DAILY_LIMIT, currency)
        self.minimum_initial_deposit = minimum_initial_deposit or Money(DEFAULT_MINIMUM_DEPOSIT, currency)
        self.minimum_customer_age = minimum_customer_age
        self.save_mode = save_mode
        self._clock = clock or datetime.now
        self._customers: List[Customer] = []
        self._id_counter = 0
        self.logger = get_logger("bank_ledger.ledger")

        for limit in (self.daily_transaction_limit, self.minimum_initial_deposit):
            if limit.currency != currency:
                raise ValueError("Ledger limits must use the ledger currency")

    @classmethod
    def from_config(
        cls,
        config: LedgerConfig,
        store: Optional[CustomerStore] = None,
        clock: Optional[Callable[[], datetime]] = None
    ) -> 'Ledger':
        """Build a ledger, its manager and its file store from configuration, then load"""
        setup_logging(config.log_level, "bank_ledger", config.log_format, config.log_file)

        currency = currency_from_code(config.currency)
        if store is None:
            codec = CustomerCodec(currency=currency, delimiter=config.field_delimiter)
            store = FlatFileCustomerStore(config.data_file, codec=codec)

        manager = Manager(
            name=config.manager_name,
            age=config.manager_age,
            contact=config.manager_contact,
            password=config.manager_password
        )

        ledger = cls(
            manager=manager,
            store=store,
            currency=currency,
            daily_transaction_limit=Money(decimal_from_string(config.daily_transaction_limit), currency),
            minimum_initial_deposit=Money(decimal_from_string(config.minimum_initial_deposit), currency),
            minimum_customer_age=config.minimum_customer_age,
            save_mode=config.save_mode,
            clock=clock
        )
        ledger.load()
        return ledger

    @property
    def customers(self) -> List[Customer]:
        """Snapshot of the customer records in insertion order"""
        return list(self._customers)

    def today(self) -> date:
        return self._clock().date()

    def add_customer(
        self,
        name: str,
        age: int,
        contact: str,
        password: str,
        initial_deposit: AmountLike
    ) -> Customer:
        """
        Open a new customer account

        Args:
            name: Customer name
            age: Age in years, at least the configured minimum
            contact: Free-text contact details
            password: Customer password (stored in clear text)
            initial_deposit: Opening balance, at least the configured minimum

        Returns:
            The new Customer; its customer_id is freshly allocated
        """
        if age < self.minimum_customer_age:
            self._reject("add_customer", None, f"Customer must be at least {self.minimum_customer_age} years old")

        deposit = self._to_money(initial_deposit)
        if deposit < self.minimum_initial_deposit:
            self._reject("add_customer", None,
                         f"Minimum deposit is {self.minimum_initial_deposit.to_string()}")

        self._check_text_fields(name=name, contact=contact)
        self._check_new_password(password)

        customer = Customer(
            name=name,
            age=age,
            contact=contact,
            customer_id=self._next_customer_id(),
            password=password,
            balance=deposit,
            last_transaction_day=self.today()
        )
        self._customers.append(customer)

        log_action(
            self.logger, "info", "Customer added",
            action="add_customer", resource=f"customer:{customer.customer_id}",
            extra={"initial_deposit": deposit.to_string()}
        )
        return customer

    def get_customer(self, customer_id: str) -> Optional[Customer]:
        """Get customer by id without checking credentials"""
        for customer in self._customers:
            if customer.customer_id == customer_id:
                return customer
        return None

    def find_by_credentials(self, customer_id: str, password: str) -> Customer:
        """Get customer by id and password, or raise AuthError"""
        customer = self.get_customer(customer_id)
        if customer is None or not customer.verify_password(password):
            log_action(
                self.logger, "warning", "Customer authentication failed",
                action="authenticate", resource=f"customer:{customer_id}"
            )
            raise AuthError("Invalid ID or password")
        return customer

    def display_customer(self, customer_id: str, password: str) -> Dict[str, str]:
        return self.find_by_credentials(customer_id, password).display_info()

    def deposit(self, customer_id: str, password: str, amount: AmountLike) -> Customer:
        """Authenticated deposit; deposits are not subject to the daily limit"""
        customer = self.find_by_credentials(customer_id, password)
        money = self._to_money(amount)

        try:
            customer.deposit(money)
        except ValidationError as e:
            self._reject("deposit", customer_id, str(e), error=e)

        log_action(
            self.logger, "info", "Deposit successful",
            action="deposit", resource=f"customer:{customer_id}",
            extra={"amount": money.to_string(), "balance": customer.balance.to_string()}
        )
        return customer

    def withdraw(self, customer_id: str, password: str, amount: AmountLike) -> Customer:
        """
        Authenticated withdrawal under the daily transaction limit

        The day's running total is reset first when the calendar day has
        changed since the customer's last limit check.

        Raises:
            AuthError: Unknown id or wrong password
            ValidationError: Non-positive amount or insufficient funds
            LimitExceededError: Day's total would exceed the limit
        """
        customer = self.find_by_credentials(customer_id, password)
        money = self._to_money(amount)

        try:
            customer.withdraw(money, self.today(), self.daily_transaction_limit)
        except (ValidationError, LimitExceededError) as e:
            self._reject("withdraw", customer_id, str(e), error=e)

        log_action(
            self.logger, "info", "Withdrawal successful",
            action="withdraw", resource=f"customer:{customer_id}",
            extra={
                "amount": money.to_string(),
                "balance": customer.balance.to_string(),
                "daily_total": customer.daily_total.to_string()
            }
        )
        return customer

    def change_password(self, customer_id: str, password: str, new_password: str) -> Customer:
        customer = self.find_by_credentials(customer_id, password)
        self._check_new_password(new_password)
        customer.change_password(new_password)
        log_action(
            self.logger, "info", "Customer password changed",
            action="change_password", resource=f"customer:{customer_id}"
        )
        return customer

    def remove_customer(self, customer_id: str) -> bool:
        """
        Remove the first customer with this id

        Returns:
            True if a customer was removed, False if none matched
        """
        for index, customer in enumerate(self._customers):
            if customer.customer_id == customer_id:
                del self._customers[index]
                log_action(
                    self.logger, "info", "Customer removed",
                    action="remove_customer", resource=f"customer:{customer_id}"
                )
                return True

        log_action(
            self.logger, "warning", "Customer not found for removal",
            action="remove_customer", resource=f"customer:{customer_id}"
        )
        return False

    def manager_login(self, password: str) -> List[Dict[str, str]]:
        """Verify the manager password and list every customer's details"""
        if not self.manager.verify_password(password):
            log_action(
                self.logger, "warning", "Manager authentication failed",
                action="manager_login", resource="manager"
            )
            raise AuthError("Access denied")

        log_action(
            self.logger, "info", "Manager logged in",
            action="manager_login", resource="manager",
            extra={"customer_count": len(self._customers)}
        )
        return [customer.display_info() for customer in self._customers]

    def change_manager_password(self, password: str, new_password: str) -> None:
        if not self.manager.verify_password(password):
            raise AuthError("Access denied")
        if not new_password:
            raise ValidationError("Password cannot be empty")
        self.manager.change_password(new_password)
        log_action(
            self.logger, "info", "Manager password changed",
            action="change_password", resource="manager"
        )

    def load(self) -> int:
        """
        Load persisted customers into the ledger

        Later records with an id already in memory replace the earlier one,
        since append-only saves repeat records. Malformed lines are skipped
        by the store and left in its ``load_errors``.

        Returns:
            Number of records read
        """
        if self.store is None:
            return 0

        # A strict store can fail midway; admit nothing until every record is read
        records = list(self.store.load_all(self.today()))
        for customer in records:
            self._admit_loaded(customer)
        loaded = len(records)

        log_action(
            self.logger, "info", "Customers loaded",
            action="load_customers", resource=self.store.describe(),
            extra={
                "records": loaded,
                "customers": len(self._customers),
                "skipped": len(self.store.load_errors)
            }
        )
        return loaded

    def save(self) -> int:
        """
        Write every in-memory customer to the store

        In append mode each save adds a line per customer, so saving twice
        repeats every record in the file. Rewrite mode replaces the contents.

        Returns:
            Number of records written
        """
        if self.store is None:
            raise StorageError("Ledger has no store configured")

        if self.save_mode == "rewrite":
            written = self.store.rewrite_all(self._customers)
        else:
            written = self.store.append_all(self._customers)

        log_action(
            self.logger, "info", "Customers saved",
            action="save_customers", resource=self.store.describe(),
            extra={"records": written, "mode": self.save_mode}
        )
        return written

    def _admit_loaded(self, customer: Customer) -> None:
        for index, existing in enumerate(self._customers):
            if existing.customer_id == customer.customer_id:
                self._customers[index] = customer
                log_action(
                    self.logger, "warning", "Duplicate customer record replaced by later line",
                    action="load_customers", resource=f"customer:{customer.customer_id}"
                )
                break
        else:
            self._customers.append(customer)

        if customer.customer_id.isdigit():
            self._id_counter = max(self._id_counter, int(customer.customer_id))

    def _next_customer_id(self) -> str:
        self._id_counter += 1
        return str(self._id_counter)

    def _to_money(self, amount: AmountLike) -> Money:
        if isinstance(amount, Money):
            if amount.currency != self.currency:
                raise ValidationError(
                    f"Amount currency {amount.currency.code} does not match ledger currency {self.currency.code}"
                )
            return amount

        # Floats are refused; bool is an int subclass
        if isinstance(amount, bool) or not isinstance(amount, (Decimal, int, str)):
            raise ValidationError(f"Unsupported amount type: {type(amount).__name__}")

        try:
            value = decimal_from_string(amount) if isinstance(amount, str) else Decimal(amount)
        except (ValueError, InvalidOperation):
            raise ValidationError(f"Invalid amount: {amount!r}")

        if not value.is_finite():
            raise ValidationError(f"Invalid amount: {amount!r}")
        return Money(value, self.currency)

    def _check_text_fields(self, **fields: str) -> None:
        codec = self.store.codec if self.store is not None else CustomerCodec(currency=self.currency)
        for field_name, value in fields.items():
            if not codec.is_encodable(value):
                raise ValidationError(f"{field_name.capitalize()} cannot contain '{codec.delimiter}' or line breaks")

    def _check_new_password(self, new_password: str) -> None:
        if not new_password:
            raise ValidationError("Password cannot be empty")
        self._check_text_fields(password=new_password)

    def _reject(self, action: str, customer_id: Optional[str], message: str,
                error: Optional[Exception] = None) -> None:
        log_action(
            self.logger, "warning", f"Operation rejected: {message}",
            action=action,
            resource=f"customer:{customer_id}" if customer_id else None
        )
        if error is not None:
            raise error
        raise ValidationError(message)
