from datetime import date

from conftest import FakeApi
from models.account import AccountHistory
from services.account_service import AccountService
from services.history_csv import parse_history_csv


def test_import_skips_header_and_malformed_rows():
    api = FakeApi()
    text = (
        "Date,Balance,Notes\n"
        "2024-01-31,150000,\"January, salary\"\n"
        "\n"
        "31/01/2024,150000,wrong date format\n"
        "2024-02-30,1,not a real day\n"
        "2024-02-29,abc,balance unreadable\n"
        "2024-03-31,162000\n"
        "oops\n"
    )
    result = AccountService(api).import_history_csv(4, text)

    assert result.imported == 3
    assert result.skipped == 3
    assert [(h.date, h.balance, h.notes) for h in api.account_history] == [
        (date(2024, 1, 31), 150000, "January, salary"),
        (date(2024, 2, 29), 0, "balance unreadable"),
        (date(2024, 3, 31), 162000, None),
    ]


def test_import_without_header():
    api = FakeApi()
    result = AccountService(api).import_history_csv(1, "2024-01-31,100,\n")
    assert result.imported == 1
    assert api.account_history[0].account_id == 1


def test_import_counts_backend_rejections():
    api = FakeApi()
    api.failing.add("create_account_history")
    result = AccountService(api).import_history_csv(1, "2024-01-31,100,x\n2024-02-29,200,y")
    assert (result.imported, result.failed) == (0, 2)


def test_parse_value_columns():
    result = parse_history_csv("2024-01-31, 5 , 7 ,note", value_columns=2)
    assert result.rows[0].values == [5.0, 7.0]
    assert result.rows[0].notes == "note"


def test_export_history_csv():
    history = [
        AccountHistory(1, 4, date(2024, 1, 31), 150000.0, 'said "hi"'),
        AccountHistory(2, 4, date(2024, 2, 29), 162000.25, None),
    ]
    data = AccountService(FakeApi()).export_history_csv(history)
    assert data == (
        b'"Date","Balance","Notes"\n'
        b'"2024-01-31",150000,"said ""hi"""\n'
        b'"2024-02-29",162000.25,""'
    )


def test_exported_history_imports_back():
    history = [
        AccountHistory(1, 4, date(2024, 1, 31), 150000.0, 'bonus, "Q4"'),
        AccountHistory(2, 4, date(2024, 2, 29), 162000.25, None),
    ]
    exported = AccountService(FakeApi()).export_history_csv(history).decode("utf-8")

    api = FakeApi()
    result = AccountService(api).import_history_csv(4, exported)

    assert (result.imported, result.skipped) == (2, 0)
    assert [(h.date, h.balance, h.notes) for h in api.account_history] == [
        (date(2024, 1, 31), 150000, 'bonus, "Q4"'),
        (date(2024, 2, 29), 162000.25, None),
    ]


def test_export_empty_history_is_header_only():
    assert AccountService(FakeApi()).export_history_csv([]) == b'"Date","Balance","Notes"'
