import logging

from django.contrib import messages
from django.shortcuts import get_object_or_404, redirect, render
from django.views.decorators.http import require_POST
from rest_framework.exceptions import APIException

from apps.core.cache import invalidate_dashboard_cache
from apps.debts.models import Debt
from apps.debts.services import record_payment
from apps.debts.views import debt_summary
from apps.expenses.models import Expense
from apps.expenses.views import expense_summary, weekly_expenses
from apps.inventory.models import Product
from apps.reports import charts as report_charts
from apps.reports.generator import ReportGenerator
from apps.reports.services import REPORT_TYPES, build_report
from apps.sales.models import Sale
from apps.sales.services import create_sale, delete_sale
from apps.sales.views import sales_summary

from . import services
from .forms import DebtForm, DebtPaymentForm, ExpenseForm, ProductForm, SaleForm

logger = logging.getLogger(__name__)

PAGE_LIMIT = 200


def _api_error(request, exc: APIException) -> None:
    detail = exc.detail
    if isinstance(detail, dict):
        detail = "; ".join(str(value[0] if isinstance(value, list) else value) for value in detail.values())
    elif isinstance(detail, list):
        detail = "; ".join(str(item) for item in detail)
    messages.error(request, str(detail))


def dashboard(request):
    context = {
        "stats": services.get_stats(),
        "charts": services.get_charts(),
        "weekly": services.plain(weekly_expenses()),
        "alerts": services.build_alerts(),
        "activities": services.recent_activities(10),
    }
    return render(request, "dashboard/index.html", context)


def products_page(request):
    edit_product = None
    edit_id = request.GET.get("edit")
    if edit_id:
        edit_product = get_object_or_404(Product, pk=edit_id)

    if request.method == "POST":
        instance = None
        product_id = request.POST.get("product_id")
        if product_id:
            instance = get_object_or_404(Product, pk=product_id)
        form = ProductForm(request.POST, instance=instance)
        if form.is_valid():
            product = form.save()
            invalidate_dashboard_cache()
            messages.success(request, f"{product.name} saved")
            return redirect("products")
    else:
        form = ProductForm(instance=edit_product)

    products = Product.objects.active()
    search = (request.GET.get("search") or "").strip()
    if search:
        products = products.filter(name__icontains=search)
    return render(
        request,
        "dashboard/products.html",
        {
            "form": form,
            "edit_product": edit_product,
            "products": products[:PAGE_LIMIT],
            "search": search,
        },
    )


@require_POST
def product_delete(request, pk):
    product = get_object_or_404(Product, pk=pk)
    if product.has_sales_records():
        product.is_active = False
        product.save(update_fields=["is_active", "updated_at"])
        logger.info("Product %s deactivated instead of deleted", product.pk)
        messages.warning(request, f"{product.name} has sales records and was deactivated instead")
    else:
        product.delete()
        messages.success(request, f"{product.name} deleted")
    invalidate_dashboard_cache()
    return redirect("products")


def sales_page(request):
    if request.method == "POST":
        form = SaleForm(request.POST)
        if form.is_valid():
            try:
                sale = create_sale(form.cleaned_data, user=request.user)
            except APIException as exc:
                _api_error(request, exc)
            else:
                invalidate_dashboard_cache()
                messages.success(request, f"Sale recorded: {sale.product_name}")
                return redirect("sales")
    else:
        form = SaleForm()

    sales = Sale.objects.select_related("product").order_by("-created_at")
    payment_method = (request.GET.get("payment_method") or "").strip()
    if payment_method:
        sales = sales.filter(payment_method=payment_method)
    return render(
        request,
        "dashboard/sales.html",
        {
            "form": form,
            "sales": sales[:PAGE_LIMIT],
            "summary": sales_summary(sales),
            "payment_method": payment_method,
            "payment_choices": Sale.PAYMENT_CHOICES,
        },
    )


@require_POST
def sale_delete(request, pk):
    sale = get_object_or_404(Sale, pk=pk)
    delete_sale(sale)
    invalidate_dashboard_cache()
    messages.success(request, "Sale deleted and stock restored")
    return redirect("sales")


def expenses_page(request):
    if request.method == "POST":
        form = ExpenseForm(request.POST)
        if form.is_valid():
            expense = form.save(commit=False)
            expense.created_by = request.user
            expense.save()
            invalidate_dashboard_cache()
            messages.success(request, "Expense recorded")
            return redirect("expenses")
    else:
        form = ExpenseForm()

    expenses = Expense.objects.all()
    return render(
        request,
        "dashboard/expenses.html",
        {"form": form, "expenses": expenses[:PAGE_LIMIT], "summary": expense_summary(expenses)},
    )


@require_POST
def expense_status(request, pk, status):
    expense = get_object_or_404(Expense, pk=pk)
    if expense.status != Expense.STATUS_PENDING:
        messages.warning(request, f"Expense is already {expense.status}")
    else:
        expense.set_status(status, request.user)
        invalidate_dashboard_cache()
        messages.success(request, f"Expense {status}")
    return redirect("expenses")


def debts_page(request):
    if request.method == "POST":
        form = DebtForm(request.POST)
        if form.is_valid():
            debt = form.save(commit=False)
            debt.created_by = request.user
            debt.save()
            invalidate_dashboard_cache()
            messages.success(request, f"Debt recorded for {debt.customer_name}")
            return redirect("debts")
    else:
        form = DebtForm()

    debts = Debt.objects.all()
    status = (request.GET.get("status") or "").strip()
    if status:
        debts = debts.filter(status=status)
    return render(
        request,
        "dashboard/debts.html",
        {
            "form": form,
            "payment_form": DebtPaymentForm(),
            "debts": debts[:PAGE_LIMIT],
            "summary": debt_summary(Debt.objects.all()),
            "status": status,
            "status_choices": Debt.STATUS_CHOICES,
        },
    )


@require_POST
def debt_payment(request, pk):
    debt = get_object_or_404(Debt, pk=pk)
    form = DebtPaymentForm(request.POST)
    if not form.is_valid():
        messages.error(request, "Valid payment amount is required")
        return redirect("debts")
    data = form.cleaned_data
    try:
        _, debt = record_payment(
            debt.pk,
            data["amount"],
            data["payment_method"],
            user=request.user,
            mpesa_code=data.get("mpesa_code", ""),
            notes=data.get("notes", ""),
        )
    except APIException as exc:
        _api_error(request, exc)
        return redirect("debts")
    invalidate_dashboard_cache()
    messages.success(request, f"Payment recorded. Balance for {debt.customer_name}: {debt.balance}")
    return redirect("debts")


def reports_page(request):
    report_type = (request.GET.get("type") or "daily").strip().lower()
    if report_type not in REPORT_TYPES:
        report_type = "daily"
    try:
        report = build_report(report_type, request.GET)
    except APIException as exc:
        _api_error(request, exc)
        report_type = "daily"
        report = build_report(report_type, {})

    params = request.GET.copy()
    params["type"] = report_type
    query = params.urlencode()
    generator = ReportGenerator(report.sales, report.expenses, Product.objects.all())
    period = report_charts.DAILY if report_type != "monthly" else report_charts.WEEKLY
    chart_data = {
        "sales": report_charts.sales_chart(report.sales, period),
        "expenses": report_charts.expense_chart(report.expenses, period),
        "profit": report_charts.profit_chart(report.sales, report.expenses, period),
        "categories": report_charts.category_chart(report.sales, generator.products),
        "payment_methods": generator.generate_payment_method_breakdown(),
    }
    return render(
        request,
        "dashboard/reports.html",
        {
            "report": report,
            "report_type": report_type,
            "report_types": REPORT_TYPES,
            "categories": generator.generate_category_breakdown(),
            "charts": chart_data,
            "query": query,
        },
    )
