"""
sheets/services.py 테스트 (스냅샷 생성)
"""
from unittest.mock import Mock

import httplib2
import pytest

from apps.sheets.client import SheetRange, with_backoff
from apps.sheets.exceptions import SheetFetchError
from apps.sheets.services import SheetSnapshot, build_snapshot, load_snapshot


@pytest.fixture
def expense_range():
    return SheetRange.from_values([
        ['Date', 'Div', 'Amount', ' Payees '],
        ['2025-01-05', 'Expense', '$100.00', 'Costco'],
        ['2025-01-20', 'Expense'],
    ])


@pytest.fixture
def sales_range():
    return SheetRange.from_values([
        ['Date', 'Total'],
        ['2025-01-10', '$500.00'],
        ['??', '$1.00'],
    ])


def _client(expense_range, sales_range):
    ranges = {'Expense!A:K': expense_range, 'Sales!A:I': sales_range}
    client = Mock()
    client.get_range.side_effect = lambda name: ranges[name]
    return client


class TestBuildSnapshot:

    def test_rows_are_normalized(self, expense_range, sales_range):
        snapshot = build_snapshot(expense_range, sales_range)

        assert snapshot.expense_headers == ('Date', 'Div', 'Amount', 'Payees')
        assert snapshot.expense_rows[0]['Payees'] == 'Costco'
        assert snapshot.expense_rows[1]['Amount'] is None
        assert [r['row_index'] for r in snapshot.expense_rows] == [2, 3]
        assert [r['MONTH'] for r in snapshot.sales_rows] == ['2025-01', 'Invalid Date']
        assert snapshot.error is None
        assert not snapshot.is_empty

    def test_snapshot_is_immutable(self, expense_range, sales_range):
        snapshot = build_snapshot(expense_range, sales_range)
        with pytest.raises(AttributeError):
            snapshot.error = 'x'


class TestLoadSnapshot:

    def test_success(self, settings, expense_range, sales_range):
        settings.SHEETS_EXPENSE_RANGE = 'Expense!A:K'
        settings.SHEETS_SALES_RANGE = 'Sales!A:I'

        snapshot = load_snapshot(_client(expense_range, sales_range))

        assert len(snapshot.expense_rows) == 2
        assert len(snapshot.sales_rows) == 2
        assert snapshot.error is None

    def test_fetch_error_returns_empty_snapshot(self):
        """예외를 던지지 않고 에러 메시지를 담은 빈 스냅샷"""
        client = Mock()
        client.get_range.side_effect = SheetFetchError('Sheets API 오류 (코드 403)', status=403)

        snapshot = load_snapshot(client)

        assert snapshot.is_empty
        assert snapshot.expense_headers == ()
        assert snapshot.error == '데이터 로드 실패: Sheets API 오류 (코드 403)'

    def test_connection_failure_returns_empty_snapshot(self):
        """서버를 찾지 못해도 500 대신 에러 메시지를 담은 스냅샷"""
        client = Mock()
        client.get_range = with_backoff(max_attempts=1)(
            Mock(side_effect=httplib2.ServerNotFoundError('Unable to find the server'))
        )

        snapshot = load_snapshot(client)

        assert snapshot.is_empty
        assert snapshot.error.startswith('데이터 로드 실패: Sheets API 연결 실패')

    def test_missing_configuration(self, settings):
        settings.GOOGLE_SHEET_ID = ''

        snapshot = load_snapshot()

        assert snapshot.is_empty
        assert 'GOOGLE_SHEET_ID' in snapshot.error

    def test_default_snapshot_is_empty(self):
        assert SheetSnapshot().is_empty
