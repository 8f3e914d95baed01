from django.urls import path
from . import views

app_name = 'dashboard'

urlpatterns = [
    path('', views.index, name='index'),
    path('export/', views.export_transactions, name='export'),

    # 보고서
    path('report/', views.report, name='report'),
    path('report/detail/', views.report_detail, name='report_detail'),
    path('sales-report/', views.sales_report, name='sales_report'),
]
