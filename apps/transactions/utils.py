"""
시트 거래 행(Row) 처리 유틸리티

Google Sheets에서 읽어온 원본 행을 다루는 순수 함수 모음:
    - 통화 문자열 파싱/포맷 ("$1,234.56" <-> Decimal)
    - 날짜 -> "YYYY-MM" 월 키 변환
    - 헤더 + 값 리스트 -> dict 변환 (row_index 부여)
    - 월 필터링 및 컬럼 정렬
    - 필터링된 거래 엑셀 내보내기

시트 데이터는 깨끗하지 않다고 가정합니다.
잘못된 금액은 0, 잘못된 날짜는 집계에서 제외되며 예외를 던지지 않습니다.
"""
import math
import re
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from io import BytesIO

import openpyxl


# ========================================
# 시트 컬럼 이름 (Google Sheets 헤더와 일치해야 함)
# ========================================
DATE_FIELD = 'Date'
DIVISION_FIELD = 'Div'
CATEGORY_FIELD = 'Category'
PAYEE_FIELD = 'Payees'
AMOUNT_FIELD = 'Amount'
CASH_FIELD = 'CASH'
TOTAL_FIELD = 'TOTAL'
CONCEPT_FIELD = 'Concept'

# Sales 시트
SALES_CASH_FIELD = 'Cash'
SALES_DEPOSIT_FIELD = 'Deposit'
SALES_TOTAL_FIELD = 'Total'
SALES_COLUMNS = ['Cash', 'Card', 'Deposit', 'SVC', 'Tips', 'Tax', 'C-Tips', 'Total']

DIVISION_INCOME = 'Income'
DIVISION_EXPENSE = 'Expense'

DEFAULT_CATEGORY = '기타'
DEFAULT_PAYEE = '기타 Payee'

# 통화 형식으로 다루는 지출 시트 컬럼
CURRENCY_FIELDS = (AMOUNT_FIELD, CASH_FIELD, TOTAL_FIELD)

# 행 번호 (시트 실제 행 번호, 헤더가 1행)
ROW_INDEX_FIELD = 'row_index'
HEADER_ROW_COUNT = 1

MONTH_FIELD = 'MONTH'
INVALID_MONTH = 'Invalid Date'

ZERO = Decimal('0')
CENT = Decimal('0.01')
HALF_CENT = Decimal('0.005')

# 숫자, 마이너스, 소수점 이외 문자 제거용
_NON_NUMERIC = re.compile(r'[^0-9.\-]+')

# 앞쪽 숫자 부분만 사용 ("1234.56-" -> 1234.56, "1.2.3" -> 1.2)
_LEADING_NUMBER = re.compile(r'-?(\d+\.?\d*|\.\d+)')

# %y 를 %Y 보다 먼저 시도 ("1/5/25" 가 서기 25년으로 읽히는 것 방지)
DATE_FORMATS = [
    '%Y-%m-%d',
    '%Y-%m-%d %H:%M:%S',
    '%Y-%m-%d %H:%M',
    '%Y-%m-%dT%H:%M:%S',
    '%Y/%m/%d',
    '%Y.%m.%d',
    '%m/%d/%y',
    '%m/%d/%Y',
    '%m/%d/%Y %H:%M',
    '%m/%d/%Y %H:%M:%S',
    '%b %d, %Y',
    '%B %d, %Y',
]


# ========================================
# 통화
# ========================================

def parse_currency(value):
    """
    화면 표시용 금액 문자열을 Decimal로 변환

    "$1,234.56" -> Decimal('1234.56')
    "", "-", None, 해석 불가 -> Decimal('0')

    절대 예외를 던지지 않습니다.
    """
    if value is None or isinstance(value, bool):
        return ZERO

    if isinstance(value, Decimal):
        return value if value.is_finite() else ZERO

    if isinstance(value, int):
        return Decimal(value)

    if isinstance(value, float):
        if not math.isfinite(value):
            return ZERO
        # 문자열로 변환 후 Decimal (부동소수점 오차 방지)
        return Decimal(str(value))

    cleaned = _NON_NUMERIC.sub('', str(value))
    match = _LEADING_NUMBER.match(cleaned)
    if not match:
        return ZERO

    try:
        return Decimal(match.group(0))
    except (InvalidOperation, ValueError):
        return ZERO


def format_currency(value):
    """금액을 "$1,234.56" 형식으로 (음수는 "$-30.00")"""
    amount = parse_currency(value)
    # 아주 작은 값은 "$-0.00" 대신 "$0.00"
    if abs(amount) < HALF_CENT:
        return '$0.00'
    amount = amount.quantize(CENT, rounding=ROUND_HALF_UP)
    return f'${amount:,.2f}'


# ========================================
# 날짜 / 월 키
# ========================================

def parse_sheet_date(value):
    """
    시트의 날짜 값을 date로 변환 (실패 시 None)

    시간대 변환은 하지 않습니다. 시트에 적힌 달력 날짜를 그대로 사용하며,
    지출/매출 시트 모두 같은 규칙을 적용해야 월별 합계가 어긋나지 않습니다.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if value is None:
        return None

    text = str(value).strip()
    if not text:
        return None

    # ISO 8601 (밀리초, "Z" 포함). 시간대는 무시하고 적힌 날짜 사용
    iso_text = text[:-1] + '+00:00' if text.endswith('Z') else text
    try:
        return datetime.fromisoformat(iso_text).date()
    except ValueError:
        pass

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def to_month_key(value):
    """날짜 값 -> "YYYY-MM" (해석 불가 시 None)"""
    parsed = parse_sheet_date(value)
    if parsed is None:
        return None
    return f'{parsed.year:04d}-{parsed.month:02d}'


def row_month_key(row):
    return to_month_key(row.get(DATE_FIELD))


# ========================================
# 행 정규화
# ========================================

def normalize_row(headers, values, position):
    """
    헤더 리스트 + 값 리스트 -> {헤더: 값} dict

    Args:
        headers: 시트 1행 (컬럼 이름)
        values: 데이터 행 값 (뒤쪽 빈 셀은 API가 잘라서 보냄)
        position: 데이터 행의 0부터 시작하는 위치

    row_index는 시트의 실제 행 번호입니다. (첫 데이터 행 = 2)
    """
    row = {}
    for col, header in enumerate(headers):
        name = str(header).strip() if header is not None else ''
        if not name:
            continue
        row[name] = values[col] if col < len(values) else None

    row[ROW_INDEX_FIELD] = position + HEADER_ROW_COUNT + 1
    return row


def normalize_rows(headers, data_rows):
    return [
        normalize_row(headers, values, position)
        for position, values in enumerate(data_rows)
    ]


def normalize_sales_rows(headers, data_rows):
    """Sales 행 정규화 + MONTH 컬럼 부여"""
    rows = normalize_rows(headers, data_rows)
    for row in rows:
        row[MONTH_FIELD] = row_month_key(row) or INVALID_MONTH
    return rows


# ========================================
# 기간 선택 (연도/월 목록)
# ========================================

def get_available_years(*row_sets):
    """행 집합들에 등장하는 연도 (최신순)"""
    years = set()
    for rows in row_sets:
        for row in rows:
            parsed = parse_sheet_date(row.get(DATE_FIELD))
            if parsed:
                years.add(parsed.year)
    return sorted(years, reverse=True)


def get_available_months(year, *row_sets):
    """해당 연도의 "YYYY-MM" 목록 (최신순)"""
    prefix = f'{year}-'
    months = set()
    for rows in row_sets:
        for row in rows:
            month_key = row_month_key(row)
            if month_key and month_key.startswith(prefix):
                months.add(month_key)
    return sorted(months, reverse=True)


# ========================================
# 월 필터 + 정렬
# ========================================

SORT_ASCENDING = 'ascending'
SORT_DESCENDING = 'descending'


@dataclass(frozen=True)
class SortSpec:
    """정렬 기준 (컬럼 + 방향)"""

    field: str = DATE_FIELD
    direction: str = SORT_DESCENDING

    @classmethod
    def from_params(cls, field=None, direction=None):
        """GET 파라미터에서 생성 (잘못된 값은 기본값)"""
        field = (field or '').strip() or DATE_FIELD
        if direction not in (SORT_ASCENDING, SORT_DESCENDING):
            direction = SORT_DESCENDING
        return cls(field=field, direction=direction)

    @property
    def descending(self):
        return self.direction == SORT_DESCENDING

    def toggled(self, field):
        """
        컬럼 헤더 클릭 시 다음 정렬 기준

        같은 컬럼이 오름차순이면 내림차순, 그 외에는 오름차순
        """
        if self.field == field and self.direction == SORT_ASCENDING:
            return SortSpec(field, SORT_DESCENDING)
        return SortSpec(field, SORT_ASCENDING)


def _sort_key(row, field):
    """정렬용 비교 값 (None이면 맨 뒤로)"""
    value = row.get(field)
    if value is None or (isinstance(value, str) and not value.strip()):
        return None

    if field == DATE_FIELD:
        return parse_sheet_date(value)
    if field in CURRENCY_FIELDS:
        return parse_currency(value)
    return str(value)


def sort_transactions(rows, sort_spec):
    """
    정렬 규칙:
        - 값이 없는 행은 방향과 상관없이 맨 뒤
        - Date: 날짜 비교 (해석 불가 날짜도 맨 뒤)
        - Amount/CASH/TOTAL: 금액 비교
        - 나머지: 문자열 비교 (대소문자 구분)
    내림차순은 오름차순을 뒤집은 것입니다. (stable)
    """
    keyed = []
    missing = []
    for row in rows:
        key = _sort_key(row, sort_spec.field)
        if key is None:
            missing.append(row)
        else:
            keyed.append((key, row))

    keyed.sort(key=lambda pair: pair[0], reverse=sort_spec.descending)
    return [row for _, row in keyed] + missing


def filter_by_month(rows, month_key):
    if not month_key:
        return []
    return [row for row in rows if row_month_key(row) == month_key]


def get_filtered_sorted_transactions(expense_rows, month_key, sort_spec=None):
    """선택한 월의 거래만 골라 정렬"""
    return sort_transactions(
        filter_by_month(expense_rows, month_key),
        sort_spec or SortSpec(),
    )


# ========================================
# 엑셀 내보내기
# ========================================

def export_transactions_to_excel(rows, headers, title='지출내역'):
    """
    필터링된 거래 행을 엑셀로 내보내기

    금액 컬럼(Amount/CASH/TOTAL)은 숫자로 변환해서 저장
    """
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = title[:31]  # 엑셀 시트 이름 최대 31자

    columns = [h for h in headers if h and h != ROW_INDEX_FIELD]
    ws.append(columns)

    for row in rows:
        values = []
        for column in columns:
            value = row.get(column)
            if column in CURRENCY_FIELDS:
                # Decimal을 float으로 변환 (엑셀 호환)
                values.append(float(parse_currency(value)))
            else:
                values.append(value if value is not None else '')
        ws.append(values)

    output = BytesIO()
    wb.save(output)
    output.seek(0)
    return output
