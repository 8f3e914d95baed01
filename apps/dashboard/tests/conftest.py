"""
dashboard 앱 테스트용 공통 fixture
"""
import pytest
from django.contrib.auth.models import User

from apps.sheets.services import SheetSnapshot
from apps.transactions.utils import normalize_rows, normalize_sales_rows

EXPENSE_HEADERS = ['Date', 'Div', 'Category', 'Payees', 'Concept', 'Amount', 'CASH', 'TOTAL']
SALES_HEADERS = ['Date', 'Cash', 'Card', 'Deposit', 'SVC', 'Tips', 'Tax', 'C-Tips', 'Total']


@pytest.fixture
def test_user(db):
    """테스트용 사용자"""
    return User.objects.create_user(username='tester', password='pass')


@pytest.fixture
def auth_client(client, test_user):
    """로그인된 클라이언트"""
    client.login(username='tester', password='pass')
    return client


@pytest.fixture
def expense_rows():
    """2025-01 지출 2건 + Income 1건 + 날짜 오류 1건 + 2024-12 지출 1건"""
    return normalize_rows(EXPENSE_HEADERS, [
        ['2025-01-05', 'Expense', 'Food', 'Costco', '식자재', '$100.00', '$0.00', '$100.00'],
        ['2025-01-20', 'Expense', 'Rent', 'Landlord', '임대료', '$50.00', '', '$50.00'],
        ['2025-01-21', 'Income', 'Refund', 'Costco', '환불', '$999.00'],
        ['not-a-date', 'Expense', 'Food', 'Costco', '', '$7.00'],
        ['2024-12-15', 'Expense', '', 'Mart', '', '$25.00'],
    ])


@pytest.fixture
def sales_rows():
    return normalize_sales_rows(SALES_HEADERS, [
        ['2025-01-10', '$20.00', '$480.00', '$450.00', '', '', '', '', '$500.00'],
        ['2024-12-31', '$0.00', '$100.00', '$100.00', '', '', '', '', '$100.00'],
    ])


@pytest.fixture
def snapshot(expense_rows, sales_rows):
    return SheetSnapshot(
        expense_rows=tuple(expense_rows),
        sales_rows=tuple(sales_rows),
        expense_headers=tuple(EXPENSE_HEADERS),
    )
