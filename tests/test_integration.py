"""Integration tests for end-to-end workflows."""

from datetime import date

from dateutil.relativedelta import relativedelta

from finledger.cli.main import cli


def invoke(cli_runner, temp_db, *args, **kwargs):
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args], **kwargs)
    assert result.exit_code == 0, result.output
    return result


def write_statement(path, rows):
    lines = ["Date,Amount,Description"]
    lines.extend(f"{day.isoformat()},{amount},{description}" for day, amount, description in rows)
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return str(path)


def test_full_workflow(cli_runner, temp_db, tmp_path, account_service):
    """Test accounts -> rules -> import -> transfers -> subscriptions -> summary."""
    invoke(cli_runner, temp_db, "init-categories")
    invoke(cli_runner, temp_db, "account", "create", "Checking", "--balance", "1000.00")
    invoke(cli_runner, temp_db, "account", "create", "Savings", "--type", "savings")
    invoke(cli_runner, temp_db, "rule", "create", "spotify", "Subscriptions")

    start = date(2024, 1, 15)
    checking_rows = [(start + relativedelta(months=i), "-9.99", "SPOTIFY P1234") for i in range(4)]
    checking_rows.append((date(2024, 2, 1), "-200.00", "Transfer to savings"))
    savings_rows = [(date(2024, 2, 1), "200.00", "Transfer from checking")]

    result = invoke(
        cli_runner, temp_db, "import", write_statement(tmp_path / "checking.csv", checking_rows), "--account", "Checking"
    )
    assert "Imported: 5 transactions" in result.output
    invoke(cli_runner, temp_db, "import", write_statement(tmp_path / "savings.csv", savings_rows), "--account", "Savings")

    result = invoke(cli_runner, temp_db, "transaction", "uncategorized")
    assert "2 uncategorized transactions" in result.output

    result = invoke(cli_runner, temp_db, "transfer", "scan", "--mark-high")
    assert "[high  ]" in result.output
    assert "Marked 1 transfers." in result.output

    result = invoke(cli_runner, temp_db, "transfer", "stats")
    assert "Marked transfer transactions: 2" in result.output

    result = invoke(cli_runner, temp_db, "subscription", "detect", "--accept")
    assert "SPOTIFY" in result.output
    assert "Added 1 subscriptions." in result.output

    result = invoke(cli_runner, temp_db, "subscription", "detect")
    assert "No new subscriptions detected." in result.output

    result = invoke(cli_runner, temp_db, "subscription", "list")
    assert "next 2024-05-15" in result.output

    result = invoke(cli_runner, temp_db, "summary", "dashboard", "--month", "2024-02")
    figures = dict(line.split(":", 1) for line in result.output.splitlines() if ":" in line)
    assert figures["Expenses"].strip() == "9.99"
    assert figures["Net worth"].strip() == "960.04"

    result = invoke(cli_runner, temp_db, "summary", "categories", "--start-date", "2024-01-01", "--end-date", "2024-04-30")
    assert "Subscriptions" in result.output
    assert "Uncategorized" not in result.output

    result = invoke(cli_runner, temp_db, "account", "check")
    assert "All balances consistent." in result.output

    temp_db.disconnect()
    checking = account_service.list_accounts()[0]
    assert checking.current_balance == 100000 - 4 * 999 - 20000


def test_subscription_add_list_remove(cli_runner, temp_db, sample_account):
    result = invoke(
        cli_runner,
        temp_db,
        "subscription",
        "add",
        "Netflix",
        "--account",
        "Checking",
        "--amount",
        "-15.99",
        "--start-date",
        "2024-03-05",
        "--day",
        "5",
    )
    assert "Added subscription 'Netflix' (ID: 1), next due 2024-03-05" in result.output

    result = invoke(cli_runner, temp_db, "subscription", "list")
    assert "Netflix" in result.output
    assert "-15.99" in result.output

    invoke(cli_runner, temp_db, "subscription", "remove", "1")
    result = invoke(cli_runner, temp_db, "subscription", "list")
    assert "No subscriptions." in result.output
    result = invoke(cli_runner, temp_db, "subscription", "list", "--all")
    assert "(inactive)" in result.output


def test_transfer_mark_and_unmark(cli_runner, temp_db, sample_account, savings_account, transaction_service):
    out = transaction_service.create_transaction(
        account_id=sample_account.id, date=date(2024, 1, 3), amount_cents=-5000, description="To savings"
    )
    inc = transaction_service.create_transaction(
        account_id=savings_account.id, date=date(2024, 1, 5), amount_cents=5000, description="From checking"
    )

    result = invoke(cli_runner, temp_db, "transfer", "scan")
    assert "[medium]" in result.output

    invoke(cli_runner, temp_db, "transfer", "mark", str(out.id), str(inc.id))
    result = invoke(cli_runner, temp_db, "transfer", "scan")
    assert "No probable transfers found." in result.output

    invoke(cli_runner, temp_db, "transfer", "unmark", str(inc.id))
    temp_db.disconnect()
    assert transaction_service.get_transaction(out.id).is_transfer is False


def test_transfer_mark_rejects_same_account(cli_runner, temp_db, sample_account, transaction_service):
    out = transaction_service.create_transaction(
        account_id=sample_account.id, date=date(2024, 1, 3), amount_cents=-5000, description="Out"
    )
    inc = transaction_service.create_transaction(
        account_id=sample_account.id, date=date(2024, 1, 3), amount_cents=5000, description="In"
    )

    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "transfer", "mark", str(out.id), str(inc.id)]
    )

    assert result.exit_code == 1
    assert "different accounts" in result.output


def test_summary_trends(cli_runner, temp_db):
    result = invoke(cli_runner, temp_db, "summary", "trends", "--months", "3")

    assert len(result.output.strip().splitlines()) == 3


def test_mortgage(cli_runner, temp_db):
    result = invoke(
        cli_runner,
        temp_db,
        "mortgage",
        "--principal",
        "1000",
        "--rate",
        "12",
        "--years",
        "1",
        "--start-date",
        "2024-01-31",
        "--schedule",
    )

    assert "Monthly payment: 88.85" in result.output
    assert "Payments:        12" in result.output
    assert "2024-02-29" in result.output


def test_mortgage_invalid(cli_runner, temp_db):
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "mortgage", "--principal", "0", "--rate", "3"]
    )

    assert result.exit_code == 1
    assert "Principal must be positive" in result.output
