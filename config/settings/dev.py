from .base import *

DEBUG = True

ALLOWED_HOSTS = ['localhost', '127.0.0.1', '0.0.0.0', 'testserver']

# 개발용 추가 앱들 (필요시)
INSTALLED_APPS += [
    # 'debug_toolbar',  # Django Debug Toolbar 사용하려면 주석 해제
]

MIDDLEWARE += [
    # 'debug_toolbar.middleware.DebugToolbarMiddleware',  # Debug Toolbar 사용시
]

# Debug Toolbar 설정 (사용시)
INTERNAL_IPS = [
    '127.0.0.1',
]

# 개발 환경 로깅 (상세하게)
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'DEBUG',
    },
    'loggers': {
        'googleapiclient.discovery_cache': {
            'handlers': ['console'],
            'level': 'ERROR',  # file_cache 경고 숨김
        },
        'apps.sheets': {
            'handlers': ['console'],
            'level': 'DEBUG',  # 시트 호출/재시도 로그
            'propagate': False,
        },
    },
}
