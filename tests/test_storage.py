"""
Tests for customer storage backends
"""

import os
import stat

import pytest
from decimal import Decimal
from datetime import date

from bank_ledger.codec import CustomerCodec
from bank_ledger.currency import Money, Currency
from bank_ledger.exceptions import ParseError, StorageError
from bank_ledger.persons import Customer
from bank_ledger.storage import InMemoryCustomerStore, FlatFileCustomerStore


TODAY = date(2024, 6, 1)


def make_customer(customer_id: str, name: str = "Test", balance: str = "500.00") -> Customer:
    return Customer(
        name=name,
        age=30,
        contact="contact",
        customer_id=customer_id,
        password="pw",
        balance=Money(Decimal(balance), Currency.INR),
        last_transaction_day=TODAY
    )


class TestInMemoryCustomerStore:
    """Test the in-memory backend"""

    def test_append_and_load(self):
        store = InMemoryCustomerStore()
        written = store.append_all([make_customer("1"), make_customer("2")])

        assert written == 2
        assert store.lines == ["1,Test,30,contact,500.00,pw", "2,Test,30,contact,500.00,pw"]
        assert [c.customer_id for c in store.load_all(TODAY)] == ["1", "2"]

    def test_append_twice_duplicates_records(self):
        store = InMemoryCustomerStore()
        customers = [make_customer("1")]
        store.append_all(customers)
        store.append_all(customers)

        assert len(store.lines) == 2

    def test_rewrite_replaces_records(self):
        store = InMemoryCustomerStore()
        store.append_all([make_customer("1"), make_customer("2")])
        store.rewrite_all([make_customer("2")])

        assert store.lines == ["2,Test,30,contact,500.00,pw"]

    def test_permissive_load_skips_bad_lines(self):
        store = InMemoryCustomerStore(lines=[
            "1,Good,30,c,500.00,pw",
            "broken line",
            "",
            "3,Also Good,41,c,750.25,pw",
            "4,Bad Age,x,c,750.25,pw",
        ])

        loaded = list(store.load_all(TODAY))

        assert [c.customer_id for c in loaded] == ["1", "3"]
        assert [e.line_number for e in store.load_errors] == [2, 5]
        assert all(isinstance(e, ParseError) for e in store.load_errors)

    def test_load_errors_reset_between_loads(self):
        store = InMemoryCustomerStore(lines=["broken"])
        list(store.load_all(TODAY))
        assert len(store.load_errors) == 1

        store.lines = ["1,Good,30,c,500.00,pw"]
        list(store.load_all(TODAY))
        assert store.load_errors == []

    def test_strict_load_raises(self):
        store = InMemoryCustomerStore(lines=["1,Good,30,c,500.00,pw", "broken"], strict=True)

        with pytest.raises(ParseError) as exc_info:
            list(store.load_all(TODAY))

        assert exc_info.value.line_number == 2
        assert "line 2" in str(exc_info.value)


class TestFlatFileCustomerStore:
    """Test the flat-file backend"""

    def test_missing_file_loads_nothing(self, tmp_path):
        store = FlatFileCustomerStore(tmp_path / "customers.txt")
        assert list(store.load_all(TODAY)) == []

    def test_append_creates_and_extends_file(self, tmp_path):
        path = tmp_path / "customers.txt"
        store = FlatFileCustomerStore(path)

        store.append_all([make_customer("1", name="Asha")])
        store.append_all([make_customer("2", name="Ravi", balance="1200.5")])

        assert path.read_text(encoding="utf-8") == (
            "1,Asha,30,contact,500.00,pw\n"
            "2,Ravi,30,contact,1200.50,pw\n"
        )

        loaded = list(store.load_all(TODAY))
        assert [c.name for c in loaded] == ["Asha", "Ravi"]
        assert loaded[1].balance == Money(Decimal('1200.50'), Currency.INR)

    def test_rewrite_leaves_one_line_per_record(self, tmp_path):
        path = tmp_path / "customers.txt"
        store = FlatFileCustomerStore(path)
        customers = [make_customer("1"), make_customer("2")]

        store.append_all(customers)
        store.append_all(customers)
        store.rewrite_all(customers)

        assert path.read_text(encoding="utf-8").splitlines() == [
            "1,Test,30,contact,500.00,pw",
            "2,Test,30,contact,500.00,pw",
        ]
        # No temp files left behind
        assert [p.name for p in tmp_path.iterdir()] == ["customers.txt"]

    def test_rewrite_keeps_file_mode(self, tmp_path):
        path = tmp_path / "customers.txt"
        store = FlatFileCustomerStore(path)
        store.append_all([make_customer("1")])
        os.chmod(path, 0o644)

        store.rewrite_all([make_customer("2")])

        assert stat.S_IMODE(os.stat(path).st_mode) == 0o644
        assert path.read_text(encoding="utf-8") == "2,Test,30,contact,500.00,pw\n"

    def test_rewrite_new_file_matches_append_mode(self, tmp_path):
        appended = tmp_path / "appended.txt"
        rewritten = tmp_path / "rewritten.txt"
        FlatFileCustomerStore(appended).append_all([make_customer("1")])
        FlatFileCustomerStore(rewritten).rewrite_all([make_customer("1")])

        assert stat.S_IMODE(os.stat(rewritten).st_mode) == stat.S_IMODE(os.stat(appended).st_mode)

    def test_custom_codec(self, tmp_path):
        path = tmp_path / "customers.txt"
        store = FlatFileCustomerStore(path, codec=CustomerCodec(delimiter=";"))
        store.append_all([make_customer("1", name="Kumar, Ravi")])

        assert path.read_text(encoding="utf-8") == "1;Kumar, Ravi;30;contact;500.00;pw\n"
        assert next(store.load_all(TODAY)).name == "Kumar, Ravi"

    def test_skips_corrupt_lines_in_file(self, tmp_path):
        path = tmp_path / "customers.txt"
        path.write_text("1,Asha,30,c,500.00,pw\nnot a record\n2,Ravi,31,c,600.00,pw\n", encoding="utf-8")
        store = FlatFileCustomerStore(path)

        assert [c.customer_id for c in store.load_all(TODAY)] == ["1", "2"]
        assert store.load_errors[0].line_number == 2

    def test_unwritable_location(self, tmp_path):
        store = FlatFileCustomerStore(tmp_path / "missing-dir" / "customers.txt")

        with pytest.raises(StorageError, match="Cannot write customer file"):
            store.append_all([make_customer("1")])

    def test_describe(self, tmp_path):
        path = tmp_path / "customers.txt"
        assert FlatFileCustomerStore(path).describe() == str(path)
        assert InMemoryCustomerStore().describe() == "InMemoryCustomerStore"
