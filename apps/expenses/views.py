import logging
from datetime import date, timedelta

from django.db.models import Count, Q, Sum
from django.db.models.functions import TruncMonth
from django.utils import timezone
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response

from apps.core.cache import invalidate_dashboard_cache
from apps.core.filters import filter_date_range, positive_int_param
from apps.reports.currency import to_money

from .models import Expense
from .serializers import ExpenseSerializer

logger = logging.getLogger(__name__)


def expense_summary(queryset) -> dict:
    totals = queryset.aggregate(total_expenses=Count("id"), total_amount=Sum("amount"))
    return {
        "total_expenses": totals["total_expenses"] or 0,
        "total_amount": to_money(totals["total_amount"]),
    }


def expenses_by_category(queryset=None) -> list:
    queryset = Expense.objects.all() if queryset is None else queryset
    rows = (
        queryset.values("category")
        .annotate(total_amount=Sum("amount"), count=Count("id"))
        .order_by("-total_amount", "category")
    )
    return [
        {"category": row["category"], "total_amount": to_money(row["total_amount"]), "count": row["count"]}
        for row in rows
    ]


def monthly_expenses(months: int, today=None) -> list:
    today = today or timezone.localdate()
    year, month = today.year, today.month - (months - 1)
    while month < 1:
        month += 12
        year -= 1
    start = date(year, month, 1)
    rows = (
        Expense.objects.filter(expense_date__gte=start)
        .annotate(month=TruncMonth("expense_date"))
        .values("month")
        .annotate(total_amount=Sum("amount"), total_expenses=Count("id"))
        .order_by("month")
    )
    return [
        {
            "month": row["month"].strftime("%Y-%m"),
            "total_expenses": row["total_expenses"],
            "total_amount": to_money(row["total_amount"]),
        }
        for row in rows
    ]


def weekly_expenses(today=None) -> dict:
    """Current Monday..Sunday totals, one entry per day even when empty."""
    today = today or timezone.localdate()
    monday = today - timedelta(days=today.weekday())
    days = [monday + timedelta(days=offset) for offset in range(7)]
    rows = (
        Expense.objects.filter(expense_date__gte=days[0], expense_date__lte=days[-1])
        .values("expense_date")
        .annotate(total_amount=Sum("amount"), total_expenses=Count("id"))
    )
    by_date = {row["expense_date"]: row for row in rows}
    return {
        "week": {"start": days[0].isoformat(), "end": days[-1].isoformat()},
        "days": [
            {
                "date": day.isoformat(),
                "total_expenses": by_date.get(day, {}).get("total_expenses", 0),
                "total_amount": to_money(by_date.get(day, {}).get("total_amount")),
            }
            for day in days
        ],
    }


class ExpenseViewSet(viewsets.ModelViewSet):
    queryset = Expense.objects.all()
    serializer_class = ExpenseSerializer

    def get_queryset(self):
        qs = super().get_queryset()
        if self.action not in ("list", "summary"):
            return qs
        params = self.request.query_params
        qs = filter_date_range(qs, params, "expense_date")
        if self.action == "summary":
            return qs
        category = params.get("category", "").strip()
        if category:
            qs = qs.filter(category=category)
        status_value = params.get("status", "").strip()
        if status_value:
            qs = qs.filter(status=status_value)
        search = params.get("search", "").strip()
        if search:
            qs = qs.filter(
                Q(description__icontains=search) | Q(notes__icontains=search) | Q(receipt_number__icontains=search)
            )
        return qs

    def perform_create(self, serializer):
        expense = serializer.save(created_by=self.request.user)
        logger.info("Expense recorded: %s %s", expense.description, expense.amount)
        invalidate_dashboard_cache()

    def perform_update(self, serializer):
        serializer.save()
        invalidate_dashboard_cache()

    def perform_destroy(self, instance):
        instance.delete()
        invalidate_dashboard_cache()

    def _change_status(self, new_status: str, verb: str):
        expense = self.get_object()
        if expense.status == new_status:
            raise ValidationError(f"Expense is already {new_status}")
        expense.set_status(new_status, self.request.user)
        logger.info("Expense %s %s by %s", expense.pk, verb, self.request.user)
        invalidate_dashboard_cache()
        return Response(self.get_serializer(expense).data)

    @action(detail=True, methods=["patch"])
    def approve(self, request, pk=None):
        return self._change_status(Expense.STATUS_APPROVED, "approved")

    @action(detail=True, methods=["patch"])
    def reject(self, request, pk=None):
        return self._change_status(Expense.STATUS_REJECTED, "rejected")

    @action(detail=False, methods=["get"])
    def summary(self, request):
        return Response(expense_summary(self.get_queryset()))

    @action(detail=False, methods=["get"])
    def categories(self, request):
        return Response(expenses_by_category())

    @action(detail=False, methods=["get"])
    def monthly(self, request):
        months = positive_int_param(request.query_params.get("months"), default=12, maximum=120)
        return Response(monthly_expenses(months))
