from __future__ import annotations

from datetime import date, timedelta

LOAN_PERIOD_DAYS = 14


def _require_int(data: dict, key: str) -> int:
    value = data[key]
    # bool is an int subclass; a flag in an id slot means the record is damaged
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"Field '{key}' must be an integer, got {value!r}")
    return value


def _require_str(data: dict, key: str) -> str:
    value = data[key]
    if not isinstance(value, str):
        raise TypeError(f"Field '{key}' must be a string, got {value!r}")
    return value


def _require_date(data: dict, key: str) -> date:
    return date.fromisoformat(_require_str(data, key))


class Book:
    """Represents a single book item in the catalog."""

    def __init__(self, id: int, title: str, author: str, issued: bool = False) -> None:
        self._id = id
        self.title = title
        self.author = author
        self.issued = issued

    @property
    def id(self) -> int:
        return self._id

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Book):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"Book(id={self.id!r}, title={self.title!r}, author={self.author!r}, issued={self.issued!r})"

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        status = "Issued" if self.issued else "Available"
        return f"ID: {self.id:<5d} | Title: {self.title:<30s} | Author: {self.author:<25s} | Status: {status}"

    def to_dict(self) -> dict:
        return {"id": self.id, "title": self.title, "author": self.author, "issued": self.issued}

    @staticmethod
    def from_dict(data: dict) -> "Book":
        issued = data.get("issued", False)
        if not isinstance(issued, bool):
            raise TypeError(f"Field 'issued' must be a boolean, got {issued!r}")
        return Book(
            id=_require_int(data, "id"),
            title=_require_str(data, "title"),
            author=_require_str(data, "author"),
            issued=issued,
        )


class Member:
    """A registered library member."""

    def __init__(self, id: int, name: str) -> None:
        self._id = id
        self.name = name

    @property
    def id(self) -> int:
        return self._id

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Member):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"Member(id={self.id!r}, name={self.name!r})"

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"ID: {self.id:<5d} | Name: {self.name}"

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name}

    @staticmethod
    def from_dict(data: dict) -> "Member":
        return Member(id=_require_int(data, "id"), name=_require_str(data, "name"))


class Transaction:
    """An active loan of one book to one member.

    The due date is fixed at creation time: issue date plus LOAN_PERIOD_DAYS,
    unless an explicit due date is supplied (used when restoring saved state).
    """

    def __init__(self, book_id: int, member_id: int, issue_date: date, due_date: date | None = None) -> None:
        self._book_id = book_id
        self._member_id = member_id
        self._issue_date = issue_date
        self._due_date = due_date or issue_date + timedelta(days=LOAN_PERIOD_DAYS)

    @property
    def book_id(self) -> int:
        return self._book_id

    @property
    def member_id(self) -> int:
        return self._member_id

    @property
    def issue_date(self) -> date:
        return self._issue_date

    @property
    def due_date(self) -> date:
        return self._due_date

    def is_overdue(self, today: date) -> bool:
        return today > self.due_date

    def overdue_days(self, today: date) -> int:
        return max(0, (today - self.due_date).days)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Transaction):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return (
            f"Transaction(book_id={self.book_id!r}, member_id={self.member_id!r}, "
            f"issue_date={self.issue_date!r}, due_date={self.due_date!r})"
        )

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return (
            f"Book ID: {self.book_id:<5d} | Member ID: {self.member_id:<5d} | "
            f"Issue Date: {self.issue_date} | Due Date: {self.due_date}"
        )

    def to_dict(self) -> dict:
        return {
            "book_id": self.book_id,
            "member_id": self.member_id,
            "issue_date": self.issue_date.isoformat(),
            "due_date": self.due_date.isoformat(),
        }

    @staticmethod
    def from_dict(data: dict) -> "Transaction":
        return Transaction(
            book_id=_require_int(data, "book_id"),
            member_id=_require_int(data, "member_id"),
            issue_date=_require_date(data, "issue_date"),
            due_date=_require_date(data, "due_date"),
        )
