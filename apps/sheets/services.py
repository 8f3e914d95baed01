"""
시트 스냅샷

한 번의 요청에서 읽어온 Expense/Sales 행을 묶은 불변 객체입니다.
뷰는 요청마다 load_snapshot()으로 새 스냅샷을 만들고,
집계 함수에는 스냅샷의 행을 인자로 넘깁니다. (전역 상태 없음)
"""
import logging
from dataclasses import dataclass
from typing import Optional

from apps.transactions.utils import normalize_rows, normalize_sales_rows
from .client import SheetsClient, fetch_expense_rows, fetch_sales_rows
from .exceptions import SheetsError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SheetSnapshot:
    """
    Fields:
        expense_rows: 정규화된 Expense 행 (row_index 포함)
        sales_rows: 정규화된 Sales 행 (MONTH 포함)
        expense_headers: Expense 시트 헤더 (표 컬럼 순서)
        error: 로드 실패 메시지 (성공 시 None)
    """

    expense_rows: tuple = ()
    sales_rows: tuple = ()
    expense_headers: tuple = ()
    error: Optional[str] = None

    @property
    def is_empty(self):
        return not self.expense_rows and not self.sales_rows


def build_snapshot(expense_range, sales_range):
    """SheetRange 두 개 -> SheetSnapshot"""
    return SheetSnapshot(
        expense_rows=tuple(normalize_rows(expense_range.headers, expense_range.rows)),
        sales_rows=tuple(normalize_sales_rows(sales_range.headers, sales_range.rows)),
        expense_headers=tuple(str(h).strip() for h in expense_range.headers),
    )


def load_snapshot(client=None):
    """
    Expense + Sales 시트를 읽어 스냅샷 생성

    실패해도 예외를 던지지 않고, 빈 행 + error 메시지를 담은 스냅샷을 반환합니다.
    (집계는 빈 결과, 메시지 표시는 뷰 담당)
    """
    try:
        client = client or SheetsClient()
        expense_range = fetch_expense_rows(client)
        sales_range = fetch_sales_rows(client)
    except SheetsError as e:
        logger.error(f"시트 데이터 로드 실패: {e}")
        return SheetSnapshot(error=f"데이터 로드 실패: {e}")

    snapshot = build_snapshot(expense_range, sales_range)
    logger.info(
        f"시트 데이터 로드: Expense {len(snapshot.expense_rows)}행, "
        f"Sales {len(snapshot.sales_rows)}행"
    )
    return snapshot
