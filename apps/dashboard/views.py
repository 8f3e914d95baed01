"""
대시보드 / 보고서 뷰

모든 페이지는 로그인 필요.
요청마다 시트 스냅샷을 새로 읽고, 선택한 연도/월/정렬 기준으로 다시 계산합니다.
"""
import logging
from urllib.parse import urlencode

from django.conf import settings
from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.http import HttpResponse
from django.shortcuts import render
from django.utils import timezone

from apps.sheets.services import load_snapshot
from apps.transactions.utils import (
    CURRENCY_FIELDS,
    ROW_INDEX_FIELD,
    SortSpec,
    export_transactions_to_excel,
    get_available_months,
    get_available_years,
    get_filtered_sorted_transactions,
)
from .utils import (
    get_category_breakdown,
    get_category_pivot,
    get_monthly_category_breakdown,
    get_monthly_summaries,
    get_period_summary,
    get_sales_year_summary,
    group_by_category_and_payee,
)

logger = logging.getLogger(__name__)


# ============================================================
# 공통: 연도/월/정렬 선택
# ============================================================

def _load(request):
    """스냅샷 로드 + 실패 메시지 표시"""
    snapshot = load_snapshot()
    if snapshot.error:
        messages.error(request, snapshot.error)
    return snapshot


def _selected_year(request, available_years):
    """GET year 파라미터 (잘못된 값이면 최신 연도)"""
    default_year = available_years[0] if available_years else timezone.localdate().year
    try:
        year = int(request.GET.get('year', default_year))
        if year < 2000 or year > 2100:
            year = default_year
    except (TypeError, ValueError):
        year = default_year
    return year


def _selected_month(request, available_months):
    """GET month 파라미터 ("YYYY-MM", 목록에 없으면 최신 월)"""
    month = request.GET.get('month', '')
    if month in available_months:
        return month
    return available_months[0] if available_months else ''


def _select_period(request, snapshot):
    years = get_available_years(snapshot.expense_rows, snapshot.sales_rows)
    year = _selected_year(request, years)
    months = get_available_months(year, snapshot.expense_rows, snapshot.sales_rows)
    month = _selected_month(request, months)
    return years, year, months, month


def _build_columns(headers, sort_spec, year, month):
    """표 헤더 (클릭 시 다음 정렬 기준 링크)"""
    columns = []
    for header in headers:
        if not header or header == ROW_INDEX_FIELD:
            continue
        next_spec = sort_spec.toggled(header)
        columns.append({
            'name': header,
            'is_currency': header in CURRENCY_FIELDS,
            'is_sorted': header == sort_spec.field,
            'direction': sort_spec.direction,
            'sort_query': urlencode({
                'year': year,
                'month': month,
                'sort': next_spec.field,
                'dir': next_spec.direction,
            }),
        })
    return columns


def _build_table_rows(rows, columns):
    """템플릿에서 컬럼 순서대로 출력할 수 있게 셀 리스트로 변환"""
    return [
        {
            'row_index': row.get(ROW_INDEX_FIELD),
            'cells': [
                {'value': row.get(column['name']), 'is_currency': column['is_currency']}
                for column in columns
            ],
        }
        for row in rows
    ]


# ============================================================
# 대시보드
# ============================================================

@login_required
def index(request):
    """
    대시보드

    - 전체 월별 요약 (매출, Deposit, Cash, 지출, 공식/비공식 수익)
    - 연도/월 선택
    - 선택한 월 요약 카드
    - 선택한 월 지출 내역 (컬럼 정렬)
    """
    snapshot = _load(request)
    amount_field = settings.EXPENSE_AMOUNT_FIELD
    years, year, months, month = _select_period(request, snapshot)
    sort_spec = SortSpec.from_params(request.GET.get('sort'), request.GET.get('dir'))

    transactions = get_filtered_sorted_transactions(snapshot.expense_rows, month, sort_spec)
    columns = _build_columns(snapshot.expense_headers, sort_spec, year, month)

    context = {
        'year': year,
        'month': month,
        'year_list': years,
        'month_list': months,
        'sort': sort_spec,
        'monthly_summaries': get_monthly_summaries(
            snapshot.expense_rows, snapshot.sales_rows, amount_field=amount_field
        ),
        'period_summary': get_period_summary(
            snapshot.expense_rows, snapshot.sales_rows, month, amount_field=amount_field
        ),
        'category_breakdown': get_category_breakdown(
            snapshot.expense_rows, month, amount_field=amount_field
        ),
        'columns': columns,
        'transactions': transactions,
        'table_rows': _build_table_rows(transactions, columns),
        'export_query': urlencode({
            'year': year, 'month': month,
            'sort': sort_spec.field, 'dir': sort_spec.direction,
        }),
    }
    return render(request, 'dashboard/index.html', context)


@login_required
def export_transactions(request):
    """선택한 월 지출 내역 엑셀 다운로드 (화면과 같은 정렬)"""
    snapshot = _load(request)
    _, _, _, month = _select_period(request, snapshot)
    sort_spec = SortSpec.from_params(request.GET.get('sort'), request.GET.get('dir'))

    rows = get_filtered_sorted_transactions(snapshot.expense_rows, month, sort_spec)
    excel_file = export_transactions_to_excel(rows, snapshot.expense_headers, title=month or '지출내역')
    logger.info(f"지출 내역 내보내기: {request.user.username}, {month}, {len(rows)}건")

    filename = f"expense_{month or 'empty'}.xlsx"
    response = HttpResponse(
        excel_file.read(),
        content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
    )
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    return response


# ============================================================
# 보고서
# ============================================================

@login_required
def report(request):
    """연도별 카테고리 월별 지출 + 카테고리 x 월 교차표"""
    snapshot = _load(request)
    amount_field = settings.EXPENSE_AMOUNT_FIELD
    years = get_available_years(snapshot.expense_rows)
    year = _selected_year(request, years)

    context = {
        'year': year,
        'year_list': years,
        'monthly_breakdown': get_monthly_category_breakdown(
            snapshot.expense_rows, year=year, amount_field=amount_field
        ),
        'pivot': get_category_pivot(snapshot.expense_rows, year=year, amount_field=amount_field),
    }
    return render(request, 'dashboard/report.html', context)


@login_required
def report_detail(request):
    """월별 상세 경비 (카테고리 -> Payee 소계)"""
    snapshot = _load(request)
    years, year, months, month = _select_period(request, snapshot)

    context = {
        'year': year,
        'month': month,
        'year_list': years,
        'month_list': months,
        'detail': group_by_category_and_payee(snapshot.expense_rows, month),
    }
    return render(request, 'dashboard/report_detail.html', context)


@login_required
def sales_report(request):
    """연간 Sales 요약 (월별 컬럼 합계)"""
    snapshot = _load(request)
    years = get_available_years(snapshot.sales_rows)
    year = _selected_year(request, years)

    context = {
        'year': year,
        'year_list': years,
        'sales': get_sales_year_summary(snapshot.sales_rows, year),
    }
    return render(request, 'dashboard/sales_report.html', context)
