"""
Customer Line Codec

Converts a Customer to one delimited text line and back. Field order is
fixed: id, name, age, contact, balance, password. Values are not escaped,
so a value containing the delimiter or a line break cannot be encoded.

Daily usage (daily total and last transaction day) is not part of the line.
Decoded customers start the day with a zero total, so restarting the process
clears any usage already counted against the daily limit.
"""

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import List, Sequence

from .currency import Money, Currency
from .exceptions import ParseError, ValidationError
from .persons import Customer


FIELD_NAMES = ("id", "name", "age", "contact", "balance", "password")
DEFAULT_DELIMITER = ","
LINE_BREAKS = ("\n", "\r")


class CustomerCodec:
    """Encodes and decodes customer records as delimited lines"""

    def __init__(self, currency: Currency = Currency.INR, delimiter: str = DEFAULT_DELIMITER):
        if not delimiter or any(ch in delimiter for ch in LINE_BREAKS):
            raise ValueError("Delimiter must be a non-empty string without line breaks")
        self.currency = currency
        self.delimiter = delimiter

    def is_encodable(self, value: str) -> bool:
        """Check whether a free-text value can be written without escaping"""
        if self.delimiter in value:
            return False
        return not any(ch in value for ch in LINE_BREAKS)

    def encode(self, customer: Customer) -> str:
        """Encode a customer as a single line (without terminator)"""
        fields = [
            customer.customer_id,
            customer.name,
            str(customer.age),
            customer.contact,
            customer.balance.to_plain_string(),
            customer.password,
        ]
        for field_name, value in zip(FIELD_NAMES, fields):
            if not self.is_encodable(value):
                raise ValidationError(
                    f"Field '{field_name}' of customer {customer.customer_id} "
                    f"contains the delimiter or a line break"
                )
        return self.delimiter.join(fields)

    def decode(self, line: str, today: date) -> Customer:
        """
        Decode one line into a Customer

        Args:
            line: Encoded line, with or without its terminator
            today: Day to record as the last transaction day

        Returns:
            Customer with a zero daily total

        Raises:
            ParseError: Wrong field count or an unparseable field
        """
        fields = self._split(line)

        customer_id, name, age_str, contact, balance_str, password = fields

        if not customer_id.strip():
            raise ParseError("Empty customer id", line=line)

        try:
            age = int(age_str.strip())
        except ValueError:
            raise ParseError(f"Age is not an integer: {age_str!r}", line=line)

        try:
            amount = Decimal(balance_str.strip())
        except InvalidOperation:
            raise ParseError(f"Balance is not a number: {balance_str!r}", line=line)

        if not amount.is_finite() or amount < 0:
            raise ParseError(f"Balance must be a non-negative number: {balance_str!r}", line=line)

        return Customer(
            name=name,
            age=age,
            contact=contact,
            customer_id=customer_id.strip(),
            password=password,
            balance=Money(amount, self.currency),
            last_transaction_day=today,
        )

    def encode_all(self, customers: Sequence[Customer]) -> List[str]:
        """Encode several customers, one line each"""
        return [self.encode(customer) for customer in customers]

    def _split(self, line: str) -> List[str]:
        stripped = line.rstrip("\r\n")
        fields = stripped.split(self.delimiter)
        if len(fields) != len(FIELD_NAMES):
            raise ParseError(
                f"Expected {len(FIELD_NAMES)} fields, got {len(fields)}",
                line=stripped
            )
        return fields
