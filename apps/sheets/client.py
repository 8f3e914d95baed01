"""
Google Sheets 읽기 클라이언트

서비스 계정으로 인증하여 Expense/Sales 시트 범위를 읽습니다.
할당량 초과(429)는 지수 백오프 + Jitter로 재시도하고,
그 외 오류나 최종 실패는 SheetFetchError로 변환합니다.
"""
import json
import logging
import random
import time
from dataclasses import dataclass
from functools import wraps

import httplib2
from django.conf import settings
from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import Error as GoogleApiClientError, HttpError

from .exceptions import SheetFetchError, SheetsConfigurationError

logger = logging.getLogger(__name__)

SCOPES = ['https://www.googleapis.com/auth/spreadsheets.readonly']

RATE_LIMIT_STATUS = 429


@dataclass(frozen=True)
class SheetRange:
    """시트 범위 읽기 결과 (1행 = 헤더)"""

    headers: tuple
    rows: tuple

    @classmethod
    def from_values(cls, values):
        values = values or []
        if not values:
            return cls(headers=(), rows=())
        return cls(
            headers=tuple(values[0]),
            rows=tuple(tuple(row) for row in values[1:]),
        )


def with_backoff(max_attempts=None, base_delay=None):
    """
    429 응답 재시도 데코레이터

    n번째 실패 후 대기: base_delay * 2^n + [0, base_delay) 랜덤
    (기본 1초 -> 2~3초, 4~5초 ...)

    Args:
        max_attempts: 최대 호출 횟수 (기본 settings.SHEETS_MAX_RETRIES)
        base_delay: 초 단위 기준 대기 (기본 settings.SHEETS_RETRY_BASE_DELAY)
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            attempts = max_attempts or settings.SHEETS_MAX_RETRIES
            delay = settings.SHEETS_RETRY_BASE_DELAY if base_delay is None else base_delay

            for attempt in range(1, attempts + 1):
                try:
                    return func(*args, **kwargs)
                except HttpError as error:
                    status = error.resp.status
                    if status == RATE_LIMIT_STATUS and attempt < attempts:
                        wait = delay * (2 ** attempt) + random.uniform(0, delay)
                        logger.warning(
                            f"Sheets API 호출 실패 (코드 {status}). "
                            f"{wait:.1f}초 후 재시도... ({attempt}/{attempts - 1})"
                        )
                        time.sleep(wait)
                        continue

                    logger.error(f"Sheets API 호출 최종 실패 (코드 {status}): {error}")
                    raise SheetFetchError(f"Sheets API 오류 (코드 {status})", status=status) from error
                except (GoogleAuthError, httplib2.HttpLib2Error, OSError) as error:
                    logger.error(f"Sheets API 연결/인증 실패: {error}")
                    raise SheetFetchError(f"Sheets API 연결 실패: {error}") from error

            # attempts가 0 이하로 설정된 경우
            raise SheetFetchError("최대 재시도 횟수를 초과했습니다.")
        return wrapper
    return decorator


class SheetsClient:
    """스프레드시트 하나에 대한 읽기 전용 클라이언트"""

    def __init__(self, spreadsheet_id=None, credentials_json=None):
        self._spreadsheet_id = spreadsheet_id or settings.GOOGLE_SHEET_ID
        credentials_json = credentials_json or settings.GOOGLE_SERVICE_ACCOUNT_CREDENTIALS

        if not self._spreadsheet_id:
            raise SheetsConfigurationError("GOOGLE_SHEET_ID가 설정되지 않았습니다.")
        if not credentials_json:
            raise SheetsConfigurationError("GOOGLE_SERVICE_ACCOUNT_CREDENTIALS가 설정되지 않았습니다.")

        try:
            info = json.loads(credentials_json)
            self._credentials = service_account.Credentials.from_service_account_info(
                info, scopes=SCOPES
            )
            self._service = build("sheets", "v4", credentials=self._credentials, cache_discovery=False)
        except ValueError as e:
            raise SheetsConfigurationError(f"서비스 계정 정보가 올바르지 않습니다: {e}") from e
        except (GoogleApiClientError, GoogleAuthError, httplib2.HttpLib2Error, OSError) as e:
            logger.error(f"Sheets 서비스 생성 실패: {e}")
            raise SheetsConfigurationError(f"Sheets 서비스 생성 실패: {e}") from e

    @with_backoff()
    def _get_values(self, range_name):
        return (
            self._service.spreadsheets()
            .values()
            .get(spreadsheetId=self._spreadsheet_id, range=range_name)
            .execute()
        )

    def get_range(self, range_name):
        """범위 읽기 -> SheetRange"""
        response = self._get_values(range_name)
        sheet_range = SheetRange.from_values(response.get("values", []))
        logger.debug(f"{range_name}: {len(sheet_range.rows)}행 읽음")
        return sheet_range


def fetch_expense_rows(client=None):
    """Expense 시트 읽기 (실패 시 SheetsError)"""
    client = client or SheetsClient()
    return client.get_range(settings.SHEETS_EXPENSE_RANGE)


def fetch_sales_rows(client=None):
    """Sales 시트 읽기 (실패 시 SheetsError)"""
    client = client or SheetsClient()
    return client.get_range(settings.SHEETS_SALES_RANGE)
