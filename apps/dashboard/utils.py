"""
월별/연도별 재무 집계

정규화된 지출(Expense) 행과 매출(Sales) 행을 받아
월별 요약, 카테고리별 분석, 매출 연간 요약을 계산합니다.

모든 함수는 입력만 보고 새 결과를 만드는 순수 함수입니다.
(DB 저장 없음, 요청마다 다시 계산)

금액 정의:
    - 매출(revenue)  = Sales.Total 합계
    - Deposit        = Sales.Deposit 합계 (은행 입금분)
    - Cash           = Sales.Cash 합계 (현금, 미입금분)
    - 지출(expense)  = Expense 행의 Amount 합계
    - 공식수익       = Deposit - 지출
    - 비공식수익     = (Deposit + Cash) - 지출
    - 수수료         = (Deposit + Cash) - 매출
"""
from collections import defaultdict
from decimal import Decimal

from apps.transactions.utils import (
    AMOUNT_FIELD,
    CASH_FIELD,
    CATEGORY_FIELD,
    DATE_FIELD,
    DEFAULT_CATEGORY,
    DEFAULT_PAYEE,
    DIVISION_EXPENSE,
    DIVISION_FIELD,
    PAYEE_FIELD,
    SALES_CASH_FIELD,
    SALES_COLUMNS,
    SALES_DEPOSIT_FIELD,
    SALES_TOTAL_FIELD,
    TOTAL_FIELD,
    filter_by_month,
    parse_currency,
    parse_sheet_date,
    row_month_key,
)

ZERO = Decimal('0')
HUNDRED = Decimal('100')

MONTH_NAMES = ['Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun',
               'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec']


def percentage_of(amount, total):
    """비율(%) 계산, 분모가 0이면 0"""
    if not total:
        return ZERO
    return amount / total * HUNDRED


def is_expense(row):
    return row.get(DIVISION_FIELD) == DIVISION_EXPENSE


def category_of(row):
    category = row.get(CATEGORY_FIELD)
    if category is None or not str(category).strip():
        return DEFAULT_CATEGORY
    return str(category).strip()


# ============================================================
# 월별 요약
# ============================================================

def _empty_month():
    return {
        'total_revenue': ZERO,
        'total_expense': ZERO,
        'total_deposit': ZERO,
        'total_cash': ZERO,
    }


def _finish_month(month, totals):
    """합계에서 수익/수수료 파생값 계산"""
    revenue = totals['total_revenue']
    deposit = totals['total_deposit']
    cash = totals['total_cash']
    expense = totals['total_expense']
    commission = (deposit + cash) - revenue

    return {
        'month': month,
        'total_revenue': revenue,
        'total_deposit': deposit,
        'total_cash': cash,
        'total_expense': expense,
        'official_net_income': deposit - expense,
        'unofficial_net_income': (deposit + cash) - expense,
        'commission': commission,
        'commission_percentage': percentage_of(commission, revenue),
    }


def get_monthly_summaries(expense_rows, sales_rows, amount_field=AMOUNT_FIELD):
    """
    월별 매출/지출/수익 요약 (최신 월 순)

    Args:
        expense_rows: 정규화된 지출 시트 행
        sales_rows: 정규화된 매출 시트 행
        amount_field: 지출 합계에 사용할 컬럼 (Amount 또는 TOTAL)

    날짜를 해석할 수 없는 행은 조용히 제외합니다.
    """
    months = defaultdict(_empty_month)

    for row in expense_rows:
        if not is_expense(row):
            continue
        month = row_month_key(row)
        if month is None:
            continue
        months[month]['total_expense'] += parse_currency(row.get(amount_field))

    for row in sales_rows:
        # Total/Deposit/Cash 모두 비어 있는 행은 건너뜀
        if not (row.get(SALES_TOTAL_FIELD) or row.get(SALES_DEPOSIT_FIELD)
                or row.get(SALES_CASH_FIELD)):
            continue
        month = row_month_key(row)
        if month is None:
            continue
        totals = months[month]
        totals['total_revenue'] += parse_currency(row.get(SALES_TOTAL_FIELD))
        totals['total_deposit'] += parse_currency(row.get(SALES_DEPOSIT_FIELD))
        totals['total_cash'] += parse_currency(row.get(SALES_CASH_FIELD))

    # "YYYY-MM"은 고정 길이라 문자열 정렬 = 날짜 정렬
    return [
        _finish_month(month, months[month])
        for month in sorted(months, reverse=True)
    ]


def get_period_summary(expense_rows, sales_rows, month_key, amount_field=AMOUNT_FIELD):
    """선택한 월 하나의 요약 (데이터가 없으면 0으로 채운 요약)"""
    summaries = get_monthly_summaries(
        filter_by_month(expense_rows, month_key),
        filter_by_month(sales_rows, month_key),
        amount_field=amount_field,
    )
    if summaries:
        return summaries[0]
    return _finish_month(month_key, _empty_month())


# ============================================================
# 카테고리별 분석
# ============================================================

def _sum_by_month_and_category(expense_rows, amount_field):
    """{month: {category: amount}}"""
    sums = defaultdict(lambda: defaultdict(lambda: ZERO))
    for row in expense_rows:
        if not is_expense(row):
            continue
        month = row_month_key(row)
        if month is None:
            continue
        sums[month][category_of(row)] += parse_currency(row.get(amount_field))
    return sums


def _rank_categories(category_amounts):
    """카테고리 금액 -> 비율 포함 리스트 (금액 큰 순)"""
    month_total = sum(category_amounts.values(), ZERO)
    ranked = [
        {
            'category': category,
            'amount': amount,
            'percentage': percentage_of(amount, month_total),
        }
        for category, amount in category_amounts.items()
    ]
    ranked.sort(key=lambda item: item['amount'], reverse=True)
    return ranked, month_total


def get_category_breakdown(expense_rows, month_key, amount_field=AMOUNT_FIELD):
    """
    선택한 월의 카테고리별 지출 (금액 큰 순)

    Returns:
        [{'category': ..., 'amount': Decimal, 'percentage': Decimal}, ...]
    """
    sums = _sum_by_month_and_category(expense_rows, amount_field)
    if month_key not in sums:
        return []
    ranked, _ = _rank_categories(sums[month_key])
    return ranked


def get_monthly_category_breakdown(expense_rows, year=None, amount_field=AMOUNT_FIELD):
    """
    월별 카테고리 지출 (최신 월 순)

    Returns:
        {
            '2025-02': {'categories': [...금액 큰 순...], 'total': Decimal},
            '2025-01': {...},
        }
    """
    sums = _sum_by_month_and_category(expense_rows, amount_field)
    prefix = f'{year}-' if year else ''

    breakdown = {}
    for month in sorted(sums, reverse=True):
        if not month.startswith(prefix):
            continue
        ranked, month_total = _rank_categories(sums[month])
        breakdown[month] = {'categories': ranked, 'total': month_total}
    return breakdown


def get_category_pivot(expense_rows, year=None, amount_field=AMOUNT_FIELD):
    """
    카테고리 x 월 교차표

    'cells'는 {(month, category): amount} 평면 구조이고,
    나머지는 표 렌더링용으로 미리 계산한 값입니다.
    """
    sums = _sum_by_month_and_category(expense_rows, amount_field)
    prefix = f'{year}-' if year else ''

    cells = {}
    for month, category_amounts in sums.items():
        if not month.startswith(prefix):
            continue
        for category, amount in category_amounts.items():
            cells[(month, category)] = amount

    months = sorted({month for month, _ in cells})
    categories = sorted({category for _, category in cells})

    rows = []
    for category in categories:
        amounts = [cells.get((month, category), ZERO) for month in months]
        rows.append({
            'category': category,
            'amounts': amounts,
            'total': sum(amounts, ZERO),
        })

    monthly_totals = [
        sum((cells.get((month, category), ZERO) for category in categories), ZERO)
        for month in months
    ]

    return {
        'cells': cells,
        'months': months,
        'categories': categories,
        'rows': rows,
        'monthly_totals': monthly_totals,
        'grand_total': sum(monthly_totals, ZERO),
    }


# ============================================================
# 월 상세 (카테고리 -> 거래처)
# ============================================================

def group_by_category_and_payee(expense_rows, month_key):
    """
    선택한 월의 지출을 카테고리별, 다시 거래처(Payee)별로 묶기

    카테고리/거래처 모두 이름순 정렬
    """
    filtered = [row for row in filter_by_month(expense_rows, month_key) if is_expense(row)]

    by_category = defaultdict(lambda: defaultdict(list))
    for row in filtered:
        payee = row.get(PAYEE_FIELD)
        payee = str(payee).strip() if payee and str(payee).strip() else DEFAULT_PAYEE
        by_category[category_of(row)][payee].append(row)

    categories = []
    for category in sorted(by_category):
        payees = []
        for payee in sorted(by_category[category]):
            payee_rows = by_category[category][payee]
            payees.append({
                'payee': payee,
                'rows': payee_rows,
                'amount': sum((parse_currency(r.get(AMOUNT_FIELD)) for r in payee_rows), ZERO),
                'cash': sum((parse_currency(r.get(CASH_FIELD)) for r in payee_rows), ZERO),
            })
        category_rows = [r for p in payees for r in p['rows']]
        categories.append({
            'category': category,
            'payees': payees,
            'amount': sum((p['amount'] for p in payees), ZERO),
            'cash': sum((p['cash'] for p in payees), ZERO),
            'total': sum((parse_currency(r.get(TOTAL_FIELD)) for r in category_rows), ZERO),
        })

    return {
        'categories': categories,
        'monthly_total': sum((c['amount'] for c in categories), ZERO),
    }


# ============================================================
# 매출 연간 요약
# ============================================================

def get_sales_year_summary(sales_rows, year):
    """
    선택한 연도의 월별(Jan~Dec) 매출 컬럼 합계

    Returns:
        {
            'columns': SALES_COLUMNS,
            'months': [{'month': 'Jan', 'values': [...컬럼 순...]}, ...],
            'totals': [...컬럼 순...],
        }
    데이터가 있는 월만 포함합니다.
    """
    monthly = {}
    totals = {column: ZERO for column in SALES_COLUMNS}

    for row in sales_rows:
        parsed = parse_sheet_date(row.get(DATE_FIELD))
        if parsed is None or parsed.year != int(year):
            continue
        sums = monthly.setdefault(parsed.month, {column: ZERO for column in SALES_COLUMNS})
        for column in SALES_COLUMNS:
            value = parse_currency(row.get(column))
            sums[column] += value
            totals[column] += value

    return {
        'columns': SALES_COLUMNS,
        'months': [
            {
                'month': MONTH_NAMES[month - 1],
                'values': [monthly[month][column] for column in SALES_COLUMNS],
            }
            for month in sorted(monthly)
        ],
        'totals': [totals[column] for column in SALES_COLUMNS],
    }
