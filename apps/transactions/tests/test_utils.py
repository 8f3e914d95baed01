"""
transactions/utils.py 테스트 (Pytest)

시트 원본 행 처리:
- parse_currency() / format_currency() 금액 변환
- to_month_key() 월 키
- normalize_row() 행 정규화
- sort_transactions() 정렬 규칙
"""
import pytest
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from io import BytesIO

from openpyxl import load_workbook

from apps.transactions.utils import (
    INVALID_MONTH,
    ROW_INDEX_FIELD,
    SORT_ASCENDING,
    SORT_DESCENDING,
    SortSpec,
    export_transactions_to_excel,
    filter_by_month,
    format_currency,
    get_available_months,
    get_available_years,
    get_filtered_sorted_transactions,
    normalize_row,
    normalize_rows,
    normalize_sales_rows,
    parse_currency,
    parse_sheet_date,
    sort_transactions,
    to_month_key,
)


class TestParseCurrency:
    """parse_currency() 함수 테스트"""

    @pytest.mark.parametrize("raw,expected", [
        ('$1,234.56', Decimal('1234.56')),
        ('$0.99', Decimal('0.99')),
        ('-$30.00', Decimal('-30.00')),
        ('$-30.00', Decimal('-30.00')),
        ('1000', Decimal('1000')),
        ('  $ 12 ', Decimal('12')),
        ('₩15,000', Decimal('15000')),
        # 앞쪽 숫자 부분만 사용
        ('1234.56-', Decimal('1234.56')),
        ('1.2.3', Decimal('1.2')),
        ('12.', Decimal('12')),
        ('.5', Decimal('0.5')),
    ])
    def test_formatted_strings(self, raw, expected):
        """통화 기호/쉼표 제거 후 변환"""
        assert parse_currency(raw) == expected

    @pytest.mark.parametrize("raw", [None, '', '-', '.', 'abc', 'N/A', '--5', '-.'])
    def test_unparseable_is_zero(self, raw):
        """해석 불가 값은 0 (예외 없음)"""
        assert parse_currency(raw) == Decimal('0')

    def test_numbers_pass_through(self):
        assert parse_currency(15) == Decimal('15')
        assert parse_currency(12.5) == Decimal('12.5')
        assert parse_currency(Decimal('7.25')) == Decimal('7.25')

    def test_non_finite_is_zero(self):
        assert parse_currency(float('nan')) == Decimal('0')
        assert parse_currency(float('inf')) == Decimal('0')
        assert parse_currency(Decimal('NaN')) == Decimal('0')


class TestFormatCurrency:
    """format_currency() 함수 테스트"""

    def test_thousands_and_cents(self):
        assert format_currency(Decimal('1234.5')) == '$1,234.50'
        assert format_currency('1234567.891') == '$1,234,567.89'

    def test_negative(self):
        assert format_currency(Decimal('-30')) == '$-30.00'

    def test_tiny_values_are_zero(self):
        """반올림하면 0인 값은 $-0.00 대신 $0.00"""
        assert format_currency(Decimal('-0.001')) == '$0.00'
        assert format_currency(None) == '$0.00'
        assert format_currency('garbage') == '$0.00'

    @pytest.mark.parametrize("raw", ['$1,234.56', '-$30', '0.005', '$99.999', '12', ''])
    def test_round_trip(self, raw):
        """parse -> format -> parse 가 소수점 2자리 기준 같은 값"""
        value = parse_currency(raw)
        again = parse_currency(format_currency(value))
        assert again == value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


class TestMonthKey:
    """날짜 -> "YYYY-MM" 변환"""

    @pytest.mark.parametrize("raw,expected", [
        ('2025-01-05', '2025-01'),
        ('2025-12-31 23:59:59', '2025-12'),
        ('2025/03/07', '2025-03'),
        ('3/7/2025', '2025-03'),
        ('10/15/25', '2025-10'),
        ('2025.11.02', '2025-11'),
        ('Jan 5, 2025', '2025-01'),
        ('January 5, 2025', '2025-01'),
        ('1/5/2025 10:30', '2025-01'),
        ('2025-01-05T10:00:00.000Z', '2025-01'),
        ('2025-01-31T23:30:00+09:00', '2025-01'),
        (date(2024, 2, 29), '2024-02'),
        (datetime(2024, 7, 1, 9, 30), '2024-07'),
    ])
    def test_valid_dates(self, raw, expected):
        assert to_month_key(raw) == expected

    @pytest.mark.parametrize("raw", [None, '', 'not-a-date', '2025-13-01', '2025-02-30', '   '])
    def test_invalid_dates(self, raw):
        """해석 불가 날짜는 None (예외 없음)"""
        assert to_month_key(raw) is None
        assert parse_sheet_date(raw) is None


class TestNormalizeRow:
    """normalize_row() 테스트"""

    def test_maps_headers_and_row_index(self):
        row = normalize_row(['Date', 'Div', 'Amount'], ['2025-01-05', 'Expense', '$10'], 0)

        assert row == {
            'Date': '2025-01-05',
            'Div': 'Expense',
            'Amount': '$10',
            ROW_INDEX_FIELD: 2,  # 첫 데이터 행 = 시트 2행
        }

    def test_missing_trailing_cells_are_none(self):
        """API가 잘라낸 뒤쪽 빈 셀은 None"""
        row = normalize_row(['Date', 'Div', 'Amount', 'Concept'], ['2025-01-05'], 4)

        assert row['Div'] is None
        assert row['Concept'] is None
        assert row[ROW_INDEX_FIELD] == 6

    def test_header_whitespace_and_blank_headers(self):
        row = normalize_row([' Amount ', '', 'CASH'], ['$1', 'ignored', '$2'], 0)

        assert row == {'Amount': '$1', 'CASH': '$2', ROW_INDEX_FIELD: 2}

    def test_normalize_rows_sequential_index(self):
        rows = normalize_rows(['Date'], [['2025-01-01'], ['2025-01-02'], []])

        assert [r[ROW_INDEX_FIELD] for r in rows] == [2, 3, 4]
        assert rows[2]['Date'] is None

    def test_sales_rows_get_month(self):
        rows = normalize_sales_rows(['Date', 'Total'], [['2025-01-10', '$500'], ['??', '$1']])

        assert rows[0]['MONTH'] == '2025-01'
        assert rows[1]['MONTH'] == INVALID_MONTH


class TestAvailablePeriods:
    """연도/월 선택 목록"""

    def test_years_and_months_from_both_sheets(self):
        expense = [{'Date': '2024-12-01'}, {'Date': '2025-01-05'}, {'Date': 'bad'}]
        sales = [{'Date': '2025-03-01'}, {'Date': '2025-01-20'}]

        assert get_available_years(expense, sales) == [2025, 2024]
        assert get_available_months(2025, expense, sales) == ['2025-03', '2025-01']
        assert get_available_months(2023, expense, sales) == []


@pytest.fixture
def month_rows():
    return [
        {'Date': '2025-01-20', 'Payees': 'b', 'Amount': '$50.00', ROW_INDEX_FIELD: 2},
        {'Date': '2025-01-05', 'Payees': 'A', 'Amount': '$100.00', ROW_INDEX_FIELD: 3},
        {'Date': None, 'Payees': 'c', 'Amount': None, ROW_INDEX_FIELD: 4},
        {'Date': '2025-01-10', 'Payees': None, 'Amount': '$9.99', ROW_INDEX_FIELD: 5},
        {'Date': '2025-02-01', 'Payees': 'z', 'Amount': '$1.00', ROW_INDEX_FIELD: 6},
    ]


def _indexes(rows):
    return [r[ROW_INDEX_FIELD] for r in rows]


class TestSortTransactions:
    """sort_transactions() 정렬 규칙"""

    def test_date_ascending_and_descending(self, month_rows):
        asc = sort_transactions(month_rows, SortSpec('Date', SORT_ASCENDING))
        desc = sort_transactions(month_rows, SortSpec('Date', SORT_DESCENDING))

        assert _indexes(asc) == [3, 5, 2, 6, 4]
        # 날짜 없는 행은 내림차순에서도 맨 뒤
        assert _indexes(desc) == [6, 2, 5, 3, 4]

    def test_unparseable_date_sorts_last(self):
        rows = [
            {'Date': 'garbage', ROW_INDEX_FIELD: 2},
            {'Date': '2025-01-02', ROW_INDEX_FIELD: 3},
        ]
        for direction in (SORT_ASCENDING, SORT_DESCENDING):
            assert _indexes(sort_transactions(rows, SortSpec('Date', direction)))[-1] == 2

    def test_currency_is_numeric(self, month_rows):
        """$9.99 < $50.00 < $100.00 (문자열 비교가 아님)"""
        asc = sort_transactions(month_rows, SortSpec('Amount', SORT_ASCENDING))
        assert _indexes(asc) == [6, 5, 2, 3, 4]

    def test_text_is_case_sensitive(self, month_rows):
        asc = sort_transactions(month_rows, SortSpec('Payees', SORT_ASCENDING))
        # 대문자가 소문자보다 앞, 값 없는 행은 맨 뒤
        assert _indexes(asc) == [3, 2, 4, 6, 5]

    def test_sort_is_idempotent(self, month_rows):
        spec = SortSpec('Amount', SORT_DESCENDING)
        once = sort_transactions(month_rows, spec)
        assert sort_transactions(once, spec) == once

    def test_reverse_direction_reverses_present_values(self, month_rows):
        present = [r for r in month_rows if r['Amount']]
        asc = sort_transactions(present, SortSpec('Amount', SORT_ASCENDING))
        desc = sort_transactions(asc, SortSpec('Amount', SORT_DESCENDING))
        assert desc == list(reversed(asc))

    def test_input_is_not_mutated(self, month_rows):
        before = list(month_rows)
        sort_transactions(month_rows, SortSpec('Amount', SORT_ASCENDING))
        assert month_rows == before


class TestSortSpec:
    """SortSpec 파라미터/토글"""

    def test_defaults(self):
        spec = SortSpec.from_params(None, None)
        assert spec == SortSpec('Date', SORT_DESCENDING)

    def test_invalid_direction_falls_back(self):
        assert SortSpec.from_params('Amount', 'sideways').direction == SORT_DESCENDING

    def test_toggle(self):
        spec = SortSpec('Date', SORT_DESCENDING)
        assert spec.toggled('Amount') == SortSpec('Amount', SORT_ASCENDING)
        assert spec.toggled('Date') == SortSpec('Date', SORT_ASCENDING)
        assert SortSpec('Date', SORT_ASCENDING).toggled('Date') == SortSpec('Date', SORT_DESCENDING)


class TestFilterAndSort:

    def test_filter_by_month(self, month_rows):
        assert _indexes(filter_by_month(month_rows, '2025-01')) == [2, 3, 5]
        assert filter_by_month(month_rows, '') == []

    def test_filtered_sorted_default_is_newest_first(self, month_rows):
        result = get_filtered_sorted_transactions(month_rows, '2025-01')
        assert _indexes(result) == [2, 5, 3]


class TestExportTransactionsToExcel:
    """export_transactions_to_excel() 테스트"""

    def test_export_columns_and_numbers(self):
        rows = [
            {'Date': '2025-01-05', 'Payees': 'Costco', 'Amount': '$1,100.50', ROW_INDEX_FIELD: 2},
            {'Date': '2025-01-06', 'Payees': None, 'Amount': '', ROW_INDEX_FIELD: 3},
        ]
        output = export_transactions_to_excel(rows, ['Date', 'Payees', 'Amount'], title='2025-01')

        wb = load_workbook(BytesIO(output.read()))
        ws = wb.active
        values = list(ws.iter_rows(values_only=True))

        assert ws.title == '2025-01'
        assert values[0] == ('Date', 'Payees', 'Amount')
        assert values[1] == ('2025-01-05', 'Costco', 1100.5)
        assert values[2][2] == 0
