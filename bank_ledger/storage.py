"""
Customer Storage Module

Provides an abstract customer store and implementations for in-memory
(testing) and flat-file (persistence) backends. Records are written with
the CustomerCodec, one line each.

Loading is permissive by default: a line that cannot be decoded is skipped,
logged and kept in ``load_errors`` so callers can report it.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Iterable, Iterator, List, Optional, Union
from pathlib import Path
import os
import stat
import tempfile

from .codec import CustomerCodec
from .exceptions import ParseError, StorageError
from .logging_config import get_logger, log_action
from .persons import Customer


class CustomerStore(ABC):
    """Abstract interface for customer storage backends"""

    def __init__(self, codec: Optional[CustomerCodec] = None, strict: bool = False):
        self.codec = codec or CustomerCodec()
        self.strict = strict
        self.load_errors: List[ParseError] = []
        self.logger = get_logger("bank_ledger.storage")

    @abstractmethod
    def read_lines(self) -> Iterator[str]:
        """Yield stored lines from the start"""
        pass

    @abstractmethod
    def write_lines(self, lines: List[str], append: bool) -> None:
        """Write encoded lines, appending or replacing the contents"""
        pass

    def load_all(self, today: date) -> Iterator[Customer]:
        """
        Decode every stored record

        Args:
            today: Day recorded as each customer's last transaction day

        Yields:
            Decoded customers in file order

        Raises:
            ParseError: Only when the store is strict
        """
        self.load_errors = []
        for line_number, line in enumerate(self.read_lines(), start=1):
            if not line.strip():
                continue
            try:
                yield self.codec.decode(line, today)
            except ParseError as e:
                e.line_number = line_number
                if self.strict:
                    raise
                self.load_errors.append(e)
                log_action(
                    self.logger, "warning", f"Skipping malformed customer record: {e}",
                    action="load_customers", resource=self.describe(),
                    extra={"line_number": line_number}
                )

    def append_all(self, customers: Iterable[Customer]) -> int:
        """Append one line per customer; returns the number written"""
        lines = self.codec.encode_all(list(customers))
        self.write_lines(lines, append=True)
        return len(lines)

    def rewrite_all(self, customers: Iterable[Customer]) -> int:
        """Replace the stored records with exactly these customers"""
        lines = self.codec.encode_all(list(customers))
        self.write_lines(lines, append=False)
        return len(lines)

    def describe(self) -> str:
        return type(self).__name__


class InMemoryCustomerStore(CustomerStore):
    """In-memory store for testing; keeps the encoded lines"""

    def __init__(self, lines: Optional[Iterable[str]] = None,
                 codec: Optional[CustomerCodec] = None, strict: bool = False):
        super().__init__(codec=codec, strict=strict)
        self.lines: List[str] = list(lines or [])

    def read_lines(self) -> Iterator[str]:
        return iter(list(self.lines))

    def write_lines(self, lines: List[str], append: bool) -> None:
        if append:
            self.lines.extend(lines)
        else:
            self.lines = list(lines)


class FlatFileCustomerStore(CustomerStore):
    """Plain text file store, one customer per line, no header"""

    def __init__(self, path: Union[str, Path], codec: Optional[CustomerCodec] = None,
                 strict: bool = False):
        super().__init__(codec=codec, strict=strict)
        self.path = Path(path)

    def describe(self) -> str:
        return str(self.path)

    def read_lines(self) -> Iterator[str]:
        # A missing file just means nothing has been saved yet
        if not self.path.exists():
            return
        try:
            with open(self.path, "r", encoding="utf-8", newline="") as f:
                for line in f:
                    yield line
        except OSError as e:
            raise StorageError(f"Cannot read customer file {self.path}: {e}") from e

    def write_lines(self, lines: List[str], append: bool) -> None:
        payload = "".join(line + "\n" for line in lines)
        try:
            if append:
                with open(self.path, "a", encoding="utf-8", newline="") as f:
                    f.write(payload)
            else:
                self._replace(payload)
        except OSError as e:
            raise StorageError(f"Cannot write customer file {self.path}: {e}") from e

    def _file_mode(self) -> int:
        """Mode of the existing file, or the umask default for a new one"""
        if self.path.exists():
            return stat.S_IMODE(os.stat(self.path).st_mode)
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask

    def _replace(self, payload: str) -> None:
        fd, temp_path = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(payload)
            os.chmod(temp_path, self._file_mode())
            os.replace(temp_path, self.path)
        except OSError:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise
