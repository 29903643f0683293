"""Tests for the import orchestrator."""

import io
import json
import pytest
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime
from decimal import Decimal
from openpyxl import Workbook

from spendtrack.database.base import StoreError
from spendtrack.domain.csv_import import ImportService
from spendtrack.domain.entities import ImportOptions, SessionStatus
from spendtrack.domain.errors import (
    EmptyFileError,
    FileTooLargeError,
    FormatError,
    MissingColumnsError,
    UnsupportedFileTypeError,
)


def assert_session_invariant(session):
    assert session.imported_count + session.duplicate_count + session.error_count <= session.total_rows


def test_import_round_trip(import_service, transaction_service):
    """Test that a row's fields survive import exactly."""
    content = b"date,amount,description,category\n2025-01-01,-50.00,Grocery Store,Food\n"

    result = import_service.import_file(content, "bank.csv")

    assert result.session.status is SessionStatus.COMPLETED
    assert result.session.imported_count == 1
    txn = transaction_service.get_transaction(result.imported[0].id)
    assert txn.date == date(2025, 1, 1)
    assert txn.amount == Decimal("-50.00")
    assert txn.description == "Grocery Store"
    assert txn.category == "Food"
    assert txn.id is not None
    assert isinstance(txn.created_at, datetime)


def test_import_without_category_column(import_service):
    """Test that category is None, not a placeholder, when absent."""
    result = import_service.import_file(b"Date,Amount,Description\n2025-01-01,5,Snack\n", "a.csv")
    assert result.imported[0].category is None


def test_reimport_is_idempotent(import_service, transaction_service, sample_csv):
    """Test that importing the same file twice adds nothing the second time."""
    first = import_service.import_file(sample_csv, "bank.csv")
    second = import_service.import_file(sample_csv, "bank.csv")

    assert first.session.imported_count == 3
    assert second.session.imported_count == 0
    assert second.session.duplicate_count == 3
    assert second.session.status is SessionStatus.COMPLETED
    assert [d.existing_id for d in second.duplicates] == [t.id for t in first.imported]
    assert transaction_service.count_transactions() == 3
    assert_session_invariant(second.session)


def test_partial_success(import_service):
    """Test that bad rows are reported while good rows import."""
    content = (
        b"Date,Amount,Description\n"
        b"2025-01-01,-50.00,Grocery Store\n"
        b"2025-13-45,-10.00,Bad Date\n"
        b"2025-01-02,abc,Bad Amount\n"
        b"2025-01-03,,Blank Amount\n"
        b"2025-01-04,100.00,Paycheck\n"
    )

    result = import_service.import_file(content, "bank.csv")

    assert result.session.total_rows == 5
    assert result.session.imported_count == 2
    assert result.session.error_count == 3
    assert len(result.errors) == 3
    assert all(e.row > 1 for e in result.errors)
    assert result.session.status is SessionStatus.COMPLETED
    assert_session_invariant(result.session)


def test_column_order_independence(temp_db):
    """Test that reordered columns give identical transactions."""
    service = ImportService(temp_db)
    first = service.import_file(
        b"Date,Amount,Description,Category\n2025-01-01,-50.00,Grocery Store,Food\n", "a.csv"
    )
    second = service.import_file(
        b"Description,Category,Amount,Date\nGrocery Store,Food,-50.00,2025-01-01\n", "b.csv"
    )

    assert first.session.imported_count == 1
    assert second.session.duplicate_count == 1
    assert second.duplicates[0].existing_id == first.imported[0].id


def test_validate_only(import_service, transaction_service):
    """Test that a dry run saves nothing but completes the session."""
    content = b"Date,Amount,Description\n2025-01-01,-50.00,Grocery Store\n"

    result = import_service.import_file(content, "a.csv", ImportOptions(validate_only=True))

    assert result.session.status is SessionStatus.COMPLETED
    assert result.session.imported_count == 0
    assert result.imported == []
    assert transaction_service.count_transactions() == 0


def test_validate_only_reports_duplicates(import_service, sample_csv):
    """Test duplicate checks during a dry run."""
    import_service.import_file(sample_csv, "bank.csv")
    result = import_service.import_file(sample_csv, "bank.csv", ImportOptions(validate_only=True))

    assert result.session.duplicate_count == 3
    assert all(d.existing_id is not None for d in result.duplicates)


def test_zero_amount_boundary(import_service):
    """Test zero single-column amount versus zero debit/credit."""
    single = import_service.import_file(
        b"Date,Amount,Description\n2025-01-01,0.00,Fee waived\n", "a.csv"
    )
    split = import_service.import_file(
        b"Date,Debit,Credit,Description\n2025-01-01,0.00,0.00,Nothing\n", "b.csv"
    )

    assert single.session.imported_count == 1
    assert single.imported[0].amount == Decimal("0.00")
    assert split.session.imported_count == 0
    assert split.session.error_count == 1
    assert split.errors[0].field == "amount"


def test_debit_credit_file(import_service, fixtures_dir):
    """Test a semicolon-delimited bank export with debit/credit columns."""
    result = import_service.import_path(str(fixtures_dir / "bank_debit_credit.csv"))

    assert result.session.total_rows == 3
    assert sorted(t.amount for t in result.imported) == [Decimal("-1500.00"), Decimal("45.99")]
    assert [e.row for e in result.errors] == [4]


def test_import_path_with_synonym_headers(import_service, fixtures_dir):
    """Test header synonyms and mixed date and amount notations."""
    result = import_service.import_path(str(fixtures_dir / "sample_transactions.csv"))

    assert result.session.imported_count == 3
    amounts = {t.description: t.amount for t in result.imported}
    assert amounts == {
        "Grocery Store": Decimal("-50.00"),
        "Paycheck": Decimal("1200.00"),
        "Gas Station": Decimal("-23.45"),
    }
    assert result.session.filename == "sample_transactions.csv"


def test_import_path_missing_file(import_service, tmp_path):
    """Test importing a path that doesn't exist."""
    with pytest.raises(FileNotFoundError):
        import_service.import_path(str(tmp_path / "missing.csv"))


def test_import_xlsx(import_service):
    """Test importing a spreadsheet."""
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Transactions"
    sheet.append(["Date", "Amount", "Description"])
    sheet.append([datetime(2025, 3, 1), -19.99, "Streaming"])
    buffer = io.BytesIO()
    workbook.save(buffer)

    result = import_service.import_file(buffer.getvalue(), "export.xlsx")

    assert result.session.imported_count == 1
    assert result.imported[0].date == date(2025, 3, 1)
    assert result.imported[0].amount == Decimal("-19.99")


def test_format_errors_raised_before_session(import_service, session_tracker):
    """Test that rejected files never open a session."""
    with pytest.raises(UnsupportedFileTypeError):
        import_service.import_file(b"x", "statement.txt")
    with pytest.raises(EmptyFileError):
        import_service.import_file(b"", "statement.csv")
    with pytest.raises(MissingColumnsError):
        import_service.import_file(b"Date,Amount\n2025-01-01,1\n", "statement.csv")

    assert session_tracker.list_recent() == []


def test_file_too_large(temp_db):
    """Test the configurable size ceiling."""
    service = ImportService(temp_db, max_bytes=16)
    with pytest.raises(FileTooLargeError):
        service.import_file(b"Date,Amount,Description\n", "a.csv")


def test_header_only_file(import_service):
    """Test that a file with no data rows is an empty file."""
    with pytest.raises(EmptyFileError):
        import_service.import_file(b"Date,Amount,Description\n\n", "a.csv")


def test_all_rows_invalid_still_completes(import_service):
    """Test that a file of only bad rows completes with errors."""
    result = import_service.import_file(b"Date,Amount,Description\nbad,1,x\n", "a.csv")

    assert result.session.status is SessionStatus.COMPLETED
    assert result.session.total_rows == 1
    assert result.session.error_count == 1
    assert result.imported == []


def test_store_fault_fails_session(temp_db, transaction_service, monkeypatch):
    """Test that a commit fault is reported on the session, not raised."""

    def broken_atomic():
        raise StoreError("database is locked")

    monkeypatch.setattr(temp_db, "atomic", broken_atomic)
    service = ImportService(temp_db)
    content = b"Date,Amount,Description\n2025-01-01,1,ok\n2025-01-02,bad,nope\n"

    result = service.import_file(content, "a.csv")

    assert result.session.status is SessionStatus.FAILED
    assert "database is locked" in result.session.error_message
    assert result.session.imported_count == 0
    assert result.session.duplicate_count == 0
    assert result.session.error_count == 1
    assert len(result.errors) == 1
    assert result.imported == []
    assert result.duplicates == []
    assert not result.accepted
    assert transaction_service.count_transactions() == 0


def test_skip_duplicates_false_not_accepted(import_service, sample_csv):
    """Test that duplicates make the result unacceptable when not skipped."""
    import_service.import_file(sample_csv, "bank.csv")

    skipped = import_service.import_file(sample_csv, "bank.csv")
    strict = import_service.import_file(
        sample_csv, "bank.csv", ImportOptions(skip_duplicates=False)
    )

    assert skipped.accepted
    assert not strict.accepted
    assert strict.session.status is SessionStatus.COMPLETED
    assert strict.session.duplicate_count == 3


def test_result_to_dict_is_json_ready(import_service, sample_csv):
    """Test the JSON representation of a result."""
    result = import_service.import_file(sample_csv, "bank.csv")

    data = json.loads(json.dumps(result.to_dict()))

    assert data["session"]["status"] == "completed"
    assert data["imported"][0]["date"] == "2025-01-01"
    assert data["imported"][0]["amount"] == -50.0
    assert data["duplicates"] == []


def test_preview(import_service, sample_csv):
    """Test previewing a file."""
    preview = import_service.preview(sample_csv, "bank.csv", max_rows=2)

    assert preview["is_valid"]
    assert preview["headers"] == ["Date", "Amount", "Description", "Category"]
    assert preview["canonical_headers"] == ["date", "amount", "description", "category"]
    assert preview["row_count"] == 3
    assert len(preview["sample_rows"]) == 2
    assert preview["sample_rows"][0]["description"] == "Grocery Store"
    assert preview["errors"] == []


def test_preview_reports_problems(import_service):
    """Test that preview reports instead of raising."""
    unsupported = import_service.preview(b"x", "notes.txt")
    missing = import_service.preview(b"Memo,Amount\nCoffee,1\n", "a.csv")

    assert not unsupported["is_valid"]
    assert unsupported["errors"]
    assert not missing["is_valid"]
    assert missing["missing_columns"] == ["date"]


def test_oversized_amount_is_row_error(import_service):
    """Test that an amount too large to round is reported, not raised."""
    content = (
        b"Date,Amount,Description\n"
        b"2025-01-01,-50.00,Grocery Store\n"
        b"2025-01-02,1e30,Weird\n"
    )

    result = import_service.import_file(content, "bank.csv")

    assert result.session.status is SessionStatus.COMPLETED
    assert result.session.imported_count == 1
    assert [(e.row, e.field) for e in result.errors] == [(3, "amount")]


def test_oversized_credit_is_row_error(import_service):
    """Test the same for a debit/credit file."""
    content = (
        b"Date,Description,Debit,Credit\n"
        b"2025-01-01,Coffee,4.50,\n"
        b"2025-01-02,Lottery,,99999999999999999999999999999\n"
    )

    result = import_service.import_file(content, "bank.csv")

    assert result.session.imported_count == 1
    assert [(e.row, e.field) for e in result.errors] == [(3, "amount")]


def test_day_first_date_is_row_error(import_service):
    """Test that a slash date with an impossible month is not reread day first."""
    content = b"Date,Amount,Description\n12/01/2025,-6.00,Month first\n13/01/2025,-6.00,Day first\n"

    result = import_service.import_file(content, "bank.csv")

    assert [t.date for t in result.imported] == [date(2025, 12, 1)]
    assert [(e.row, e.field) for e in result.errors] == [(3, "date")]


def test_concurrent_imports_have_one_winner(temp_db, transaction_service, session_tracker):
    """Test that parallel imports of one file insert each row exactly once."""
    lines = [b"Date,Amount,Description"]
    lines += [b"2025-02-%02d,-%d.00,Purchase %d" % (day, day, day) for day in range(1, 29)]
    content = b"\n".join(lines) + b"\n"

    def run_import(_):
        return ImportService(temp_db).import_file(content, "bank.csv")

    with ThreadPoolExecutor(max_workers=6) as executor:
        results = list(executor.map(run_import, range(6)))

    assert all(r.session.status is SessionStatus.COMPLETED for r in results)
    assert sum(r.session.imported_count for r in results) == 28
    for r in results:
        assert r.session.imported_count + r.session.duplicate_count == 28
        assert r.session.error_count == 0
    assert transaction_service.count_transactions() == 28
    assert not session_tracker.has_pending()


def test_unexpected_error_fails_session_and_propagates(import_service, session_tracker, monkeypatch):
    """Test that a non-store error still leaves the session terminal."""

    def broken_commit(candidates, dry_run=False):
        raise RuntimeError("boom")

    monkeypatch.setattr(import_service.committer, "commit", broken_commit)

    with pytest.raises(RuntimeError, match="boom"):
        import_service.import_file(b"Date,Amount,Description\n2025-01-01,1,ok\n", "a.csv")

    session = session_tracker.list_recent()[0]
    assert session.status is SessionStatus.FAILED
    assert "boom" in session.error_message
    assert not session_tracker.has_pending()


def test_preview_row_count_matches_import(import_service):
    """Test that preview counts rows the way an import does."""
    content = (
        b"Date,Amount,Description,Category\n"
        b"2025-01-01,-50.00,Grocery Store,Food\n"
        b",,Note without a transaction,\n"
        b"2025-01-02,-5.00,Coffee,\n"
    )

    preview = import_service.preview(content, "bank.csv")
    result = import_service.import_file(content, "bank.csv")

    assert preview["row_count"] == 2
    assert result.session.total_rows == 2
    assert [row["description"] for row in preview["sample_rows"]] == ["Grocery Store", "Coffee"]
