import json
import logging
import os
import tempfile
from typing import Any, Dict, Optional

from book import Book, Member, Transaction
from config import settings
from library import Library

logger = logging.getLogger(__name__)

# Identifies catalog files; bump SCHEMA_VERSION whenever the layout below changes.
FORMAT_NAME = "library-catalog"
SCHEMA_VERSION = 1


class PersistenceError(Exception):
    pass


def _resolve_path(path: Optional[str]) -> str:
    return path or settings.data_file


def encode_library(library: Library) -> Dict[str, Any]:
    """Convert the whole catalog into a JSON-serializable document."""
    return {
        "format": FORMAT_NAME,
        "version": SCHEMA_VERSION,
        "books": [b.to_dict() for b in library.get_all_books()],
        "members": [m.to_dict() for m in library.get_all_members()],
        "transactions": [t.to_dict() for t in library.get_all_transactions()],
    }


def decode_library(document: Any) -> Library:
    """Rebuild a catalog from a document produced by encode_library.

    Raises ValueError, KeyError or TypeError when the document is not a
    catalog this version understands.
    """
    if not isinstance(document, dict):
        raise TypeError("Catalog document must be a JSON object")
    if document.get("format") != FORMAT_NAME:
        raise ValueError(f"Unrecognized catalog format: {document.get('format')!r}")
    if document.get("version") != SCHEMA_VERSION:
        raise ValueError(f"Unsupported catalog version: {document.get('version')!r}")

    sections = {}
    for key in ("books", "members", "transactions"):
        items = document[key]
        if not isinstance(items, list) or not all(isinstance(item, dict) for item in items):
            raise TypeError(f"Section '{key}' must be a list of objects")
        sections[key] = items

    books = [Book.from_dict(item) for item in sections["books"]]
    members = [Member.from_dict(item) for item in sections["members"]]
    transactions = [Transaction.from_dict(item) for item in sections["transactions"]]
    _check_integrity(books, members, transactions)
    return Library(books=books, members=members, transactions=transactions)


def _check_integrity(books, members, transactions) -> None:
    """Reject documents the catalog operations could never have produced."""
    if len({b.id for b in books}) != len(books):
        raise ValueError("Duplicate book ids")
    if len({m.id for m in members}) != len(members):
        raise ValueError("Duplicate member ids")

    member_ids = {m.id for m in members}
    loaned = [t.book_id for t in transactions]
    if len(set(loaned)) != len(loaned):
        raise ValueError("More than one active transaction for a book")
    for t in transactions:
        if t.member_id not in member_ids:
            raise ValueError(f"Transaction references unknown member {t.member_id}")
    # issued iff an active transaction references the book
    issued = {b.id for b in books if b.issued}
    if issued != set(loaned):
        raise ValueError("Issued flags do not match active transactions")


def _target_mode(path: str) -> int:
    # mkstemp creates 0600 files; keep the existing mode, or the umask default for a new file
    try:
        return os.stat(path).st_mode & 0o777
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def save_library(library: Library, path: Optional[str] = None) -> None:
    """Write the whole catalog to disk, replacing any previous file.

    The document is written to a temporary file in the target directory and
    renamed over the target, so a failed write leaves the old file intact.
    """
    path = _resolve_path(path)
    directory = os.path.dirname(os.path.abspath(path))
    payload = json.dumps(encode_library(library), indent=2, ensure_ascii=False)

    tmp_path = None
    try:
        fd, tmp_path = tempfile.mkstemp(prefix=".library-", suffix=".tmp", dir=directory)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_path, _target_mode(path))
        os.replace(tmp_path, path)
        tmp_path = None
    except OSError as e:
        raise PersistenceError(f"Could not save catalog to {path}: {e}") from e
    finally:
        if tmp_path and os.path.exists(tmp_path):
            os.remove(tmp_path)

    logger.info(
        f"Catalog saved to {path}: {len(library.books)} books, "
        f"{len(library.members)} members, {len(library.transactions)} transactions"
    )


def load_library(path: Optional[str] = None) -> Library:
    """Load the catalog from disk.

    A missing file starts a new catalog. An unreadable or damaged file also
    yields an empty catalog, with a warning; its contents are not recovered.
    """
    path = _resolve_path(path)
    if not os.path.exists(path):
        logger.info(f"No existing data file found at {path}. Starting with a new library.")
        return Library()

    try:
        with open(path, "r", encoding="utf-8") as f:
            document = json.load(f)
        library = decode_library(document)
    except (OSError, ValueError, KeyError, TypeError) as e:
        logger.warning(f"Error loading data from {path}: {e}. Starting with an empty library.")
        return Library()

    logger.info(
        f"Catalog loaded from {path}: {len(library.books)} books, "
        f"{len(library.members)} members, {len(library.transactions)} transactions"
    )
    return library
