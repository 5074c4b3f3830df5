"""Tests for account, category and init-categories commands."""

from datetime import date

from finledger.cli.main import cli


def invoke(cli_runner, temp_db, *args, **kwargs):
    return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args], **kwargs)


def test_create_account(cli_runner, temp_db, account_service):
    """Test creating an account with an initial balance."""
    result = invoke(
        cli_runner, temp_db, "account", "create", "Main", "--balance", "1250.00", "--institution", "ING"
    )

    assert result.exit_code == 0
    assert "Created account 'Main' (ID: 1)" in result.output

    temp_db.disconnect()
    account = account_service.get_account(1)
    assert account.opening_balance == account.current_balance == 125000
    assert account.institution == "ING"


def test_create_account_duplicate(cli_runner, temp_db, sample_account):
    """Test that a duplicate name is reported as an error."""
    result = invoke(cli_runner, temp_db, "account", "create", "Checking")

    assert result.exit_code == 1
    assert "Error:" in result.output
    assert "already exists" in result.output


def test_create_account_bad_balance(cli_runner, temp_db):
    result = invoke(cli_runner, temp_db, "account", "create", "Main", "--balance", "lots")

    assert result.exit_code == 1
    assert "Invalid amount" in result.output


def test_list_accounts(cli_runner, temp_db, sample_account, savings_account):
    """Test listing accounts shows balances."""
    result = invoke(cli_runner, temp_db, "account", "list")

    assert result.exit_code == 0
    assert "Checking" in result.output
    assert "Savings" in result.output
    assert "1,000.00 EUR" in result.output


def test_list_accounts_empty(cli_runner, temp_db):
    result = invoke(cli_runner, temp_db, "account", "list")

    assert result.exit_code == 0
    assert "No accounts found." in result.output


def test_show_account_by_name(cli_runner, temp_db, sample_account):
    result = invoke(cli_runner, temp_db, "account", "show", "checking")

    assert result.exit_code == 0
    assert "Name:            Checking" in result.output
    assert "Opening balance: 1,000.00 EUR" in result.output


def test_show_unknown_account(cli_runner, temp_db):
    result = invoke(cli_runner, temp_db, "account", "show", "Nope")

    assert result.exit_code == 1
    assert "not found" in result.output


def test_update_account(cli_runner, temp_db, sample_account, account_service):
    result = invoke(cli_runner, temp_db, "account", "update", "Checking", "--name", "Main", "--hide")

    assert result.exit_code == 0
    temp_db.disconnect()
    account = account_service.get_account(sample_account.id)
    assert account.name == "Main"
    assert account.hide_from_dashboard is True


def test_update_account_nothing(cli_runner, temp_db, sample_account):
    result = invoke(cli_runner, temp_db, "account", "update", "Checking")

    assert result.exit_code == 0
    assert "Nothing to update." in result.output


def test_link_and_unlink(cli_runner, temp_db, sample_account, savings_account, account_service):
    result = invoke(cli_runner, temp_db, "account", "link", "Savings", "Checking")
    assert result.exit_code == 0
    temp_db.disconnect()
    assert account_service.get_account(savings_account.id).linked_to_account_id == sample_account.id

    result = invoke(cli_runner, temp_db, "account", "link", "Savings")
    assert result.exit_code == 0
    assert "Unlinked" in result.output
    temp_db.disconnect()
    assert account_service.get_account(savings_account.id).linked_to_account_id is None


def test_link_to_itself(cli_runner, temp_db, sample_account):
    result = invoke(cli_runner, temp_db, "account", "link", "Checking", "Checking")

    assert result.exit_code == 1
    assert "itself" in result.output


def test_delete_account_with_confirmation(cli_runner, temp_db, sample_account, account_service):
    result = invoke(cli_runner, temp_db, "account", "delete", "Checking", input="n\n")
    assert "Deletion cancelled." in result.output

    result = invoke(cli_runner, temp_db, "account", "delete", "Checking", "--yes")
    assert result.exit_code == 0
    temp_db.disconnect()
    assert account_service.get_account(sample_account.id).is_active is False


def test_check_and_recalculate(cli_runner, temp_db, sample_account, transaction_service):
    """Test drift detection and repair of a stored balance."""
    transaction_service.create_transaction(
        account_id=sample_account.id, date=date(2024, 1, 1), amount_cents=-500, description="Coffee"
    )
    result = invoke(cli_runner, temp_db, "account", "check")
    assert result.exit_code == 0
    assert "All balances consistent." in result.output

    temp_db.set_account_current_balance(sample_account.id, 0)
    result = invoke(cli_runner, temp_db, "account", "check")
    assert result.exit_code == 1
    assert "Checking: off by -995.00 EUR" in result.output

    result = invoke(cli_runner, temp_db, "account", "recalculate", "Checking")
    assert result.exit_code == 0
    assert "0.00 -> 995.00" in result.output

    result = invoke(cli_runner, temp_db, "account", "check")
    assert result.exit_code == 0


def test_init_categories(cli_runner, temp_db):
    result = invoke(cli_runner, temp_db, "init-categories")
    assert result.exit_code == 0
    assert "Created" in result.output

    result = invoke(cli_runner, temp_db, "init-categories")
    assert "Default categories already exist." in result.output


def test_create_and_list_categories(cli_runner, temp_db):
    result = invoke(cli_runner, temp_db, "category", "create", "Pets", "--color", "#10B981")
    assert result.exit_code == 0
    assert "Created category 'Pets'" in result.output

    result = invoke(cli_runner, temp_db, "category", "create", "Side Gig", "--income")
    assert result.exit_code == 0

    result = invoke(cli_runner, temp_db, "category", "list")
    assert "Pets" in result.output
    assert "income" in result.output


def test_create_category_bad_color(cli_runner, temp_db):
    result = invoke(cli_runner, temp_db, "category", "create", "Pets", "--color", "green")

    assert result.exit_code == 1
    assert "#RRGGBB" in result.output


def test_help_does_not_need_database(cli_runner, tmp_path):
    result = cli_runner.invoke(cli, ["--db-path", str(tmp_path / "nothing.db"), "--help"])

    assert result.exit_code == 0
    assert "personal finance ledger" in result.output
    assert not (tmp_path / "nothing.db").exists()
