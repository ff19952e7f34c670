import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import List, Optional, Dict, Any

from book import Book, Member, Transaction

logger = logging.getLogger(__name__)

FINE_PER_DAY = 1


class ErrorKind(Enum):
    DUPLICATE_BOOK = "duplicate_book"
    DUPLICATE_MEMBER = "duplicate_member"
    BOOK_NOT_FOUND = "book_not_found"
    MEMBER_NOT_FOUND = "member_not_found"
    ALREADY_ISSUED = "already_issued"
    NOT_ISSUED = "not_issued"
    NOTHING_TO_UPDATE = "nothing_to_update"


@dataclass
class OperationResult:
    """Outcome of a catalog operation.

    A failed result always carries an ErrorKind and leaves the catalog untouched.
    A successful return may carry an overdue fine, which is informational.
    """

    success: bool
    message: str
    error: Optional[ErrorKind] = None
    overdue_days: int = 0
    fine: int = 0
    inconsistent: bool = False

    def __bool__(self) -> bool:
        return self.success

    @classmethod
    def ok(cls, message: str, **extra: Any) -> "OperationResult":
        return cls(True, message, **extra)

    @classmethod
    def fail(cls, error: ErrorKind, message: str) -> "OperationResult":
        return cls(False, message, error=error)


class Library:
    """Manages books, members and active loans in memory.

    Referential integrity between the three collections is enforced by the
    methods below; callers must not mutate the lists returned by the getters.
    """

    def __init__(
        self,
        books: Optional[List[Book]] = None,
        members: Optional[List[Member]] = None,
        transactions: Optional[List[Transaction]] = None,
    ) -> None:
        self.books: List[Book] = list(books or [])
        self.members: List[Member] = list(members or [])
        self.transactions: List[Transaction] = list(transactions or [])

    # ------------------------- Books ------------------------- #
    def add_book(self, id: int, title: str, author: str) -> OperationResult:
        if self.find_book_by_id(id):
            return OperationResult.fail(ErrorKind.DUPLICATE_BOOK, f"Book with ID {id} already exists.")
        self.books.append(Book(id, title, author))
        return OperationResult.ok("Book added successfully!")

    def find_book_by_id(self, id: int) -> Optional[Book]:
        for book in self.books:
            if book.id == id:
                return book
        return None

    def update_book(self, id: int, *, title: Optional[str] = None, author: Optional[str] = None) -> OperationResult:
        """Update title and/or author of a book.

        Values are stored as given, like add_book; blank values leave the field unchanged.
        """
        if not (title and title.strip()) and not (author and author.strip()):
            return OperationResult.fail(ErrorKind.NOTHING_TO_UPDATE, "Nothing to update. Provide title and/or author.")

        book = self.find_book_by_id(id)
        if not book:
            return OperationResult.fail(ErrorKind.BOOK_NOT_FOUND, "Book not found.")

        if title and title.strip():
            book.title = title
        if author and author.strip():
            book.author = author
        return OperationResult.ok("Book updated successfully.")

    def search_books(self, query: str) -> List[Book]:
        """Search for books by title or author."""
        q = query.lower().strip()
        return [b for b in self.books if q in b.title.lower() or q in b.author.lower()]

    def get_all_books(self) -> List[Book]:
        return self.books

    # ------------------------- Members ------------------------- #
    def add_member(self, id: int, name: str) -> OperationResult:
        if self.find_member_by_id(id):
            return OperationResult.fail(ErrorKind.DUPLICATE_MEMBER, f"Member with ID {id} already exists.")
        self.members.append(Member(id, name))
        return OperationResult.ok("Member added successfully!")

    def find_member_by_id(self, id: int) -> Optional[Member]:
        for member in self.members:
            if member.id == id:
                return member
        return None

    def get_all_members(self) -> List[Member]:
        return self.members

    # ------------------------- Loans ------------------------- #
    def issue_book(self, book_id: int, member_id: int, today: Optional[date] = None) -> OperationResult:
        book = self.find_book_by_id(book_id)
        if not book:
            return OperationResult.fail(ErrorKind.BOOK_NOT_FOUND, "Book not found.")
        if not self.find_member_by_id(member_id):
            return OperationResult.fail(ErrorKind.MEMBER_NOT_FOUND, "Member not found.")
        if book.issued:
            return OperationResult.fail(ErrorKind.ALREADY_ISSUED, "Book is already issued.")

        transaction = Transaction(book_id, member_id, today or date.today())
        book.issued = True
        self.transactions.append(transaction)
        return OperationResult.ok(f"Book issued successfully. Due on {transaction.due_date.isoformat()}.")

    def return_book(self, book_id: int, today: Optional[date] = None) -> OperationResult:
        book = self.find_book_by_id(book_id)
        if not book:
            return OperationResult.fail(ErrorKind.BOOK_NOT_FOUND, "Book not found.")
        if not book.issued:
            return OperationResult.fail(ErrorKind.NOT_ISSUED, "Book is not currently issued.")

        today = today or date.today()
        transaction = self._find_active_transaction(book_id)
        book.issued = False

        if transaction is None:
            # Issued flag without a loan record; release the book without a fine.
            logger.warning(f"Book {book_id} was marked issued but has no active transaction")
            return OperationResult.ok("Book returned successfully. No loan record was found.", inconsistent=True)

        self.transactions.remove(transaction)
        overdue_days = transaction.overdue_days(today)
        if overdue_days > 0:
            fine = overdue_days * FINE_PER_DAY
            return OperationResult.ok(
                f"Book is overdue by {overdue_days} days. Fine to be paid: {fine}",
                overdue_days=overdue_days,
                fine=fine,
            )
        return OperationResult.ok("Book returned successfully.")

    def _find_active_transaction(self, book_id: int) -> Optional[Transaction]:
        for transaction in self.transactions:
            if transaction.book_id == book_id:
                return transaction
        return None

    # ------------------------- Reporting ------------------------- #
    def get_overdue_transactions(self, today: Optional[date] = None) -> List[Transaction]:
        today = today or date.today()
        return [t for t in self.transactions if t.is_overdue(today)]

    def get_all_transactions(self) -> List[Transaction]:
        return self.transactions

    def get_statistics(self, today: Optional[date] = None) -> Dict[str, Any]:
        """Get library statistics."""
        issued = sum(1 for b in self.books if b.issued)
        return {
            "total_books": len(self.books),
            "issued_books": issued,
            "available_books": len(self.books) - issued,
            "total_members": len(self.members),
            "active_transactions": len(self.transactions),
            "overdue_transactions": len(self.get_overdue_transactions(today)),
        }
