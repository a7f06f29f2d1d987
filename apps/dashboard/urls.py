from django.urls import path

from . import views

urlpatterns = [
    path("", views.dashboard, name="dashboard"),
    path("products/", views.products_page, name="products"),
    path("products/<uuid:pk>/delete/", views.product_delete, name="product-delete"),
    path("sales/", views.sales_page, name="sales"),
    path("sales/<uuid:pk>/delete/", views.sale_delete, name="sale-delete"),
    path("expenses/", views.expenses_page, name="expenses"),
    path(
        "expenses/<uuid:pk>/approve/",
        views.expense_status,
        {"status": "approved"},
        name="expense-mark-approved",
    ),
    path(
        "expenses/<uuid:pk>/reject/",
        views.expense_status,
        {"status": "rejected"},
        name="expense-mark-rejected",
    ),
    path("debts/", views.debts_page, name="debts"),
    path("debts/<uuid:pk>/payment/", views.debt_payment, name="debt-pay"),
    path("reports/", views.reports_page, name="reports"),
]
