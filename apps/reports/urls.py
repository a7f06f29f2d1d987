from django.urls import path

from . import views

urlpatterns = [
    path("reports/daily/", views.daily_report, name="report-daily"),
    path("reports/weekly/", views.weekly_report, name="report-weekly"),
    path("reports/monthly/", views.monthly_report, name="report-monthly"),
    path("reports/charts/", views.report_charts, name="report-charts"),
    path("reports/export/sales.csv", views.export_sales_csv, name="export-sales-csv"),
    path("reports/export/expenses.csv", views.export_expenses_csv, name="export-expenses-csv"),
    path("reports/export/report.json", views.export_report_json, name="export-report-json"),
    path("reports/export/report.pdf", views.export_report_pdf, name="export-report-pdf"),
    path("reports/export/report.html", views.export_report_html, name="export-report-html"),
]
