"""
Google Sheets 연동 예외

    SheetsError
    ├── SheetsConfigurationError  : 시트 ID/서비스 계정 설정 누락
    └── SheetFetchError           : API 호출 실패 (재시도 후 최종 실패 포함)
"""


class SheetsError(Exception):
    """Sheets 연동 최상위 예외"""


class SheetsConfigurationError(SheetsError):
    """설정 누락 또는 잘못된 서비스 계정 JSON"""


class SheetFetchError(SheetsError):
    """시트 읽기 실패"""

    def __init__(self, message, status=None):
        super().__init__(message)
        self.status = status
