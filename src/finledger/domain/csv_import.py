"""CSV import domain service with external-ID deduplication."""

import csv
import hashlib
import logging
import re
from collections import Counter
from dataclasses import dataclass, replace
from datetime import date
from pathlib import Path
from typing import Optional, Sequence

from finledger.database.base import Database
from finledger.domain.account import normalize_currency
from finledger.domain.balance import apply_account_sums, sum_by_account
from finledger.domain.entities import ImportBatch, ImportResult, ImportRow
from finledger.domain.errors import (
    NotFoundError,
    ValidationError,
    account_not_found,
    import_batch_not_found,
)
from finledger.domain.rules import build_match_text, match_category, order_rules
from finledger.utils.amount_parser import parse_amount_cents
from finledger.utils.date_parser import parse_date

logger = logging.getLogger(__name__)

# Rows per INSERT statement
INSERT_CHUNK_SIZE = 100

_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class CSVColumns:
    """Names of the CSV header columns to read each field from."""

    date: str = "Date"
    amount: str = "Amount"
    description: str = "Description"
    merchant: Optional[str] = None
    external_id: Optional[str] = None
    currency: Optional[str] = None


def generate_external_id(row: ImportRow, occurrence: int = 0) -> str:
    """Content hash of an import row.

    ``occurrence`` separates identical rows inside one file (two equal
    coffees on the same day) while keeping re-imports of the file stable.
    """
    description = _WHITESPACE.sub(" ", row.description).strip().casefold()
    key = f"{row.account_id}|{row.date.isoformat()}|{row.amount_cents}|{description}|{occurrence}"
    return hashlib.sha256(key.encode("utf-8")).hexdigest()[:32]


def read_csv_rows(
    csv_file_path: str,
    account_id: int,
    columns: CSVColumns = CSVColumns(),
    day_first: bool = True,
    currency: str = "EUR",
    generate_ids: bool = True,
) -> tuple[list[ImportRow], list[str]]:
    """Parse a bank CSV export into import rows.

    Args:
        csv_file_path: Path to CSV file
        account_id: Account every row belongs to
        columns: Header names to read
        day_first: Read ambiguous numeric dates as day/month/year
        currency: Currency used when the file has no currency column
        generate_ids: Hash row content into an external ID when the file
            has no ID column

    Returns:
        Tuple of (rows, errors), one error message per unreadable row

    Raises:
        FileNotFoundError: If CSV file doesn't exist
        ValidationError: If required columns are missing
    """
    csv_path = Path(csv_file_path)
    if not csv_path.exists():
        raise FileNotFoundError(f"CSV file not found: {csv_file_path}")

    rows: list[ImportRow] = []
    errors: list[str] = []
    seen: Counter[tuple] = Counter()

    with open(csv_path, "r", encoding="utf-8-sig", newline="") as f:
        sample = f.read(4096)
        f.seek(0)
        try:
            dialect = csv.Sniffer().sniff(sample, delimiters=",;\t|")
            reader = csv.DictReader(f, dialect=dialect)
        except csv.Error:
            reader = csv.DictReader(f)

        if reader.fieldnames is None:
            raise ValidationError("CSV file has no columns")
        required = {columns.date, columns.amount, columns.description}
        missing = required - set(reader.fieldnames)
        if missing:
            raise ValidationError(f"CSV file missing required columns: {', '.join(sorted(missing))}")

        def cell(row: dict, column: Optional[str]) -> Optional[str]:
            if column is None:
                return None
            value = (row.get(column) or "").strip()
            return value or None

        # Header is row 1
        for row_num, raw in enumerate(reader, start=2):
            date_str = cell(raw, columns.date)
            amount_str = cell(raw, columns.amount)
            description = cell(raw, columns.description)
            if not date_str or not amount_str or not description:
                errors.append(f"Row {row_num}: Missing date, amount or description")
                continue
            try:
                row = ImportRow(
                    account_id=account_id,
                    date=parse_date(date_str, day_first=day_first),
                    amount_cents=parse_amount_cents(amount_str),
                    description=description,
                    merchant=cell(raw, columns.merchant),
                    currency=normalize_currency(cell(raw, columns.currency) or currency),
                    external_id=cell(raw, columns.external_id),
                )
            except ValueError as e:
                errors.append(f"Row {row_num}: {e}")
                continue

            if row.external_id is None and generate_ids:
                content = (row.date, row.amount_cents, row.description)
                row = replace(row, external_id=generate_external_id(row, seen[content]))
                seen[content] += 1
            rows.append(row)

    return rows, errors


class ImportService:
    """Service for importing transactions and undoing imports."""

    def __init__(self, db: Database):
        """Initialize import service.

        Args:
            db: Database instance
        """
        self.db = db

    def _validate_rows(self, rows: Sequence[ImportRow]) -> list[ImportRow]:
        """Check every row before anything is written; returns normalized rows."""
        for index, row in enumerate(rows, start=1):
            if not isinstance(row.account_id, int) or isinstance(row.account_id, bool):
                raise ValidationError(f"Row {index}: account ID must be an integer")
            if not isinstance(row.date, date):
                raise ValidationError(f"Row {index}: date must be a date")

        for account_id in sorted({row.account_id for row in rows}):
            if self.db.get_account(account_id) is None:
                raise NotFoundError(account_not_found(account_id))

        normalized = []
        for index, row in enumerate(rows, start=1):
            if not isinstance(row.amount_cents, int) or isinstance(row.amount_cents, bool):
                raise ValidationError(f"Row {index}: amount must be an integer number of cents")
            description = (row.description or "").strip()
            if not description:
                raise ValidationError(f"Row {index}: description cannot be empty")
            try:
                currency = normalize_currency(row.currency)
            except ValidationError as e:
                raise ValidationError(f"Row {index}: {e}") from None
            normalized.append(replace(row, description=description, currency=currency))
        return normalized

    def import_with_dedup(
        self,
        rows: Sequence[ImportRow],
        filename: Optional[str] = None,
        preserve_balance: bool = False,
        auto_categorize: bool = False,
    ) -> ImportResult:
        """Import rows, skipping any whose external ID is already known.

        Rows without an external ID are always imported. Zero-amount rows and
        rows repeating an external ID seen earlier in the same call are
        skipped too. The batch record, the inserted transactions and the
        balance update are written atomically.

        Args:
            rows: Rows to import
            filename: Optional source file name stored on the batch
            preserve_balance: Historical import; move opening balances
                instead of current balances
            auto_categorize: Run the category rules over the new rows

        Returns:
            ImportResult with imported/skipped counts and the new batch ID
            (None when nothing was imported)

        Raises:
            ValidationError: If any row is invalid (nothing is written)
            NotFoundError: If a row references a missing account
        """
        rows = self._validate_rows(rows)

        existing = self.db.find_existing_external_ids(row.external_id for row in rows)
        seen: set[str] = set()
        accepted: list[ImportRow] = []
        for row in rows:
            if row.amount_cents == 0:
                continue
            if row.external_id:
                if row.external_id in existing or row.external_id in seen:
                    continue
                seen.add(row.external_id)
            accepted.append(row)

        skipped = len(rows) - len(accepted)
        if not accepted:
            logger.info("Import of %s: nothing new, %d rows skipped", filename or "rows", skipped)
            return ImportResult(imported=0, skipped=skipped, batch_id=None)

        category_ids = None
        if auto_categorize:
            rules = order_rules(self.db.list_category_rules(active_only=True))
            category_ids = [
                match_category(build_match_text(row.description, row.merchant), rules)
                for row in accepted
            ]

        sums = sum_by_account((row.account_id, row.amount_cents) for row in accepted)
        with self.db.transaction():
            batch_id = self.db.create_import_batch(
                filename=filename,
                transaction_count=len(accepted),
                total_amount_cents=sum(sums.values()),
                account_id=next(iter(sums)) if len(sums) == 1 else None,
                preserve_balance=preserve_balance,
            )
            self.db.insert_transactions(
                accepted,
                import_batch_id=batch_id,
                category_ids=category_ids,
                chunk_size=INSERT_CHUNK_SIZE,
            )
            apply_account_sums(self.db, sums, preserve_balance=preserve_balance)

        logger.info(
            "Imported %d transactions from %s as batch %d (%d skipped%s)",
            len(accepted),
            filename or "rows",
            batch_id,
            skipped,
            ", balance preserved" if preserve_balance else "",
        )
        return ImportResult(imported=len(accepted), skipped=skipped, batch_id=batch_id)

    def import_csv(
        self,
        csv_file_path: str,
        account_id: int,
        columns: CSVColumns = CSVColumns(),
        day_first: bool = True,
        preserve_balance: bool = False,
        auto_categorize: bool = True,
    ) -> tuple[ImportResult, list[str]]:
        """Read a CSV file and import it into one account.

        Returns:
            Tuple of (ImportResult, per-row parse errors)
        """
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        rows, errors = read_csv_rows(
            csv_file_path,
            account_id,
            columns=columns,
            day_first=day_first,
            currency=account.currency,
        )
        result = self.import_with_dedup(
            rows,
            filename=Path(csv_file_path).name,
            preserve_balance=preserve_balance,
            auto_categorize=auto_categorize,
        )
        return result, errors

    def list_batches(self) -> list[ImportBatch]:
        """List import batches, newest first."""
        return self.db.list_import_batches()

    def delete_import_batch(self, batch_id: int) -> int:
        """Undo an import: delete its transactions and reverse their balance effect.

        The amount reversed is the sum of the batch's own transactions, taken
        from the same field the import adjusted.

        Returns:
            Number of transactions deleted
        """
        batch = self.db.get_import_batch(batch_id)
        if batch is None:
            raise NotFoundError(import_batch_not_found(batch_id))

        with self.db.transaction():
            sums = self.db.sum_transactions_by_account(import_batch_id=batch_id)
            apply_account_sums(self.db, sums, preserve_balance=batch.preserve_balance, reverse=True)
            deleted = self.db.delete_import_batch(batch_id)

        logger.info("Deleted import batch %d (%d transactions)", batch_id, deleted)
        return deleted

    def delete_all_transactions(self) -> int:
        """Delete every transaction and batch, reversing each account's balance.

        Returns:
            Number of transactions deleted
        """
        with self.db.transaction():
            sums = self.db.sum_transactions_by_account()
            apply_account_sums(self.db, sums, reverse=True)
            deleted = self.db.delete_all_transactions()

        logger.info("Deleted all %d transactions", deleted)
        return deleted
