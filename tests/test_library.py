import logging
from datetime import date, timedelta

import pytest

from book import Book, Member, Transaction, LOAN_PERIOD_DAYS
from library import Library, ErrorKind, FINE_PER_DAY

ISSUE_DAY = date(2024, 3, 1)
DUE_DAY = ISSUE_DAY + timedelta(days=LOAN_PERIOD_DAYS)


def _snapshot(lib):
    return (
        [b.to_dict() for b in lib.get_all_books()],
        [m.to_dict() for m in lib.get_all_members()],
        [t.to_dict() for t in lib.get_all_transactions()],
    )


@pytest.fixture
def stocked(lib):
    lib.add_book(1, "Dune", "Herbert")
    lib.add_book(2, "Emma", "Austen")
    lib.add_member(1, "Alice")
    lib.add_member(2, "Bob")
    return lib


@pytest.mark.parametrize("book_id,title,author", [
    (1, "Dune", "Herbert"),
    (0, "", ""),
    (-7, "  Padded Title ", "Ünïcode Author"),
    (2**40, "Big", "Id"),
])
def test_add_book_then_find(lib, book_id, title, author):
    result = lib.add_book(book_id, title, author)
    assert result.success
    assert result.error is None

    book = lib.find_book_by_id(book_id)
    assert book is not None
    assert (book.id, book.title, book.author, book.issued) == (book_id, title, author, False)


def test_add_duplicate_book_leaves_catalog_unchanged(stocked):
    before = _snapshot(stocked)
    result = stocked.add_book(1, "Another", "Writer")

    assert not result
    assert result.error is ErrorKind.DUPLICATE_BOOK
    assert _snapshot(stocked) == before
    assert stocked.find_book_by_id(1).title == "Dune"


def test_add_member_then_find(lib):
    assert lib.add_member(5, "Carol")
    member = lib.find_member_by_id(5)
    assert (member.id, member.name) == (5, "Carol")
    assert lib.find_member_by_id(6) is None


def test_add_duplicate_member(stocked):
    before = _snapshot(stocked)
    result = stocked.add_member(2, "Someone Else")

    assert result.error is ErrorKind.DUPLICATE_MEMBER
    assert _snapshot(stocked) == before


def test_find_missing_book(lib):
    assert lib.find_book_by_id(42) is None


def test_ids_are_read_only(stocked):
    with pytest.raises(AttributeError):
        stocked.find_book_by_id(1).id = 99
    with pytest.raises(AttributeError):
        stocked.find_member_by_id(1).id = 99


def test_issue_book(stocked):
    result = stocked.issue_book(1, 2, today=ISSUE_DAY)

    assert result.success
    assert stocked.find_book_by_id(1).issued is True
    active = [t for t in stocked.get_all_transactions() if t.book_id == 1]
    assert len(active) == 1
    assert active[0].member_id == 2
    assert active[0].issue_date == ISSUE_DAY
    assert active[0].due_date == ISSUE_DAY + timedelta(days=14)


def test_issue_defaults_to_today(stocked):
    stocked.issue_book(1, 1)
    transaction = stocked.get_all_transactions()[0]
    assert transaction.issue_date == date.today()
    assert transaction.due_date - transaction.issue_date == timedelta(days=14)


@pytest.mark.parametrize("book_id,member_id,expected", [
    (99, 1, ErrorKind.BOOK_NOT_FOUND),
    (1, 99, ErrorKind.MEMBER_NOT_FOUND),
    # book lookup is checked before member lookup
    (99, 99, ErrorKind.BOOK_NOT_FOUND),
])
def test_issue_missing_references(stocked, book_id, member_id, expected):
    before = _snapshot(stocked)
    result = stocked.issue_book(book_id, member_id, today=ISSUE_DAY)

    assert result.error is expected
    assert _snapshot(stocked) == before


def test_issue_already_issued(stocked):
    stocked.issue_book(1, 1, today=ISSUE_DAY)
    before = _snapshot(stocked)

    result = stocked.issue_book(1, 2, today=ISSUE_DAY)
    assert result.error is ErrorKind.ALREADY_ISSUED
    assert result.message == "Book is already issued."
    assert _snapshot(stocked) == before

    # missing member wins over already issued
    assert stocked.issue_book(1, 99).error is ErrorKind.MEMBER_NOT_FOUND


@pytest.mark.parametrize("days_late", [1, 3, 30])
def test_return_late_reports_fine(stocked, days_late):
    stocked.issue_book(1, 1, today=ISSUE_DAY)
    result = stocked.return_book(1, today=DUE_DAY + timedelta(days=days_late))

    assert result.success
    assert result.error is None
    assert result.overdue_days == days_late
    assert result.fine == days_late * FINE_PER_DAY
    assert stocked.find_book_by_id(1).issued is False
    assert stocked.get_all_transactions() == []


@pytest.mark.parametrize("returned_on", [ISSUE_DAY, ISSUE_DAY + timedelta(days=5), DUE_DAY])
def test_return_on_time_has_no_fine(stocked, returned_on):
    stocked.issue_book(1, 1, today=ISSUE_DAY)
    result = stocked.return_book(1, today=returned_on)

    assert result.success
    assert result.fine == 0
    assert result.overdue_days == 0
    assert stocked.find_book_by_id(1).issued is False
    assert stocked.get_all_transactions() == []


def test_return_errors(stocked):
    before = _snapshot(stocked)
    assert stocked.return_book(99).error is ErrorKind.BOOK_NOT_FOUND
    assert stocked.return_book(1).error is ErrorKind.NOT_ISSUED
    assert _snapshot(stocked) == before


def test_return_only_removes_matching_transaction(stocked):
    stocked.issue_book(1, 1, today=ISSUE_DAY)
    stocked.issue_book(2, 2, today=ISSUE_DAY)

    stocked.return_book(1, today=ISSUE_DAY)

    assert [t.book_id for t in stocked.get_all_transactions()] == [2]
    assert stocked.find_book_by_id(2).issued is True


def test_return_without_transaction_still_releases_book(caplog):
    lib = Library(books=[Book(7, "Orphan", "Nobody", issued=True)])

    with caplog.at_level(logging.WARNING, logger="library"):
        result = lib.return_book(7, today=ISSUE_DAY)

    assert result.success
    assert result.inconsistent is True
    assert result.fine == 0
    assert lib.find_book_by_id(7).issued is False
    assert "no active transaction" in caplog.text


def test_overdue_transactions(stocked):
    stocked.add_book(3, "Ulysses", "Joyce")
    stocked.issue_book(2, 1, today=ISSUE_DAY)
    stocked.issue_book(3, 2, today=ISSUE_DAY + timedelta(days=10))
    stocked.issue_book(1, 2, today=ISSUE_DAY - timedelta(days=2))

    assert stocked.get_overdue_transactions(today=DUE_DAY) == [stocked.get_all_transactions()[2]]
    overdue = stocked.get_overdue_transactions(today=DUE_DAY + timedelta(days=1))
    assert [t.book_id for t in overdue] == [2, 1]
    assert stocked.get_overdue_transactions(today=ISSUE_DAY) == []


def test_collections_keep_insertion_order(lib):
    for book_id in (5, 1, 3):
        lib.add_book(book_id, f"Title {book_id}", "Author")
    for member_id in (9, 2):
        lib.add_member(member_id, f"Member {member_id}")

    assert [b.id for b in lib.get_all_books()] == [5, 1, 3]
    assert [m.id for m in lib.get_all_members()] == [9, 2]


def test_update_book(stocked):
    result = stocked.update_book(1, title="Dune Messiah")
    assert result.success
    book = stocked.find_book_by_id(1)
    assert book.title == "Dune Messiah"
    assert book.author == "Herbert"

    stocked.update_book(1, author="  Frank Herbert ", title="   ")
    assert book.title == "Dune Messiah"
    assert book.author == "  Frank Herbert "


def test_add_and_update_store_text_the_same_way(lib):
    lib.add_book(1, " Dune ", " Herbert ")
    lib.add_book(2, "Emma", "Austen")
    lib.update_book(2, title=" Dune ", author=" Herbert ")

    first, second = lib.get_all_books()
    assert (first.title, first.author) == (second.title, second.author) == (" Dune ", " Herbert ")


def test_update_book_errors(stocked):
    assert stocked.update_book(1).error is ErrorKind.NOTHING_TO_UPDATE
    assert stocked.update_book(99, title="X").error is ErrorKind.BOOK_NOT_FOUND


def test_search_books(stocked):
    stocked.add_book(3, "Children of Dune", "Frank Herbert")
    assert [b.id for b in stocked.search_books("dune")] == [1, 3]
    assert [b.id for b in stocked.search_books("AUSTEN")] == [2]
    assert stocked.search_books("tolkien") == []


def test_statistics(stocked):
    stocked.issue_book(1, 1, today=ISSUE_DAY)
    stats = stocked.get_statistics(today=DUE_DAY + timedelta(days=1))
    assert stats == {
        "total_books": 2,
        "issued_books": 1,
        "available_books": 1,
        "total_members": 2,
        "active_transactions": 1,
        "overdue_transactions": 1,
    }


def test_scenario_issue_and_late_return(lib):
    assert lib.add_book(1, "Dune", "Herbert")
    assert lib.add_member(1, "Alice")

    assert lib.issue_book(1, 1, today=ISSUE_DAY)
    assert lib.find_book_by_id(1).issued

    lib.add_member(2, "Bob")
    second = lib.issue_book(1, 2, today=ISSUE_DAY)
    assert second.error is ErrorKind.ALREADY_ISSUED

    result = lib.return_book(1, today=DUE_DAY + timedelta(days=3))
    assert result.fine == 3
    assert lib.find_book_by_id(1).issued is False
    assert lib.get_all_transactions() == []


def test_transaction_overdue_helpers():
    t = Transaction(1, 1, ISSUE_DAY)
    assert t.due_date == DUE_DAY
    assert not t.is_overdue(DUE_DAY)
    assert t.is_overdue(DUE_DAY + timedelta(days=1))
    assert t.overdue_days(ISSUE_DAY) == 0
    assert t.overdue_days(DUE_DAY + timedelta(days=4)) == 4


def test_member_equality():
    assert Member(1, "Alice") == Member(1, "Alice")
    assert Member(1, "Alice") != Member(1, "Alicia")
