from django.apps import AppConfig


class SheetsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.sheets'
    verbose_name = 'Google Sheets 연동'
