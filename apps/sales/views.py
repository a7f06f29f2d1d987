import logging
from datetime import timedelta
from decimal import Decimal

from django.db.models import Count, Q, Sum
from django.utils import timezone
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.core.cache import invalidate_dashboard_cache
from apps.core.filters import filter_date_range, positive_int_param
from apps.core.pagination import OptionalPageNumberPagination
from apps.reports.currency import to_money

from .models import Sale
from .serializers import SaleSerializer, SaleStatusSerializer
from .services import delete_sale

logger = logging.getLogger(__name__)


def sales_summary(queryset) -> dict:
    totals = queryset.aggregate(
        total_sales=Count("id"),
        total_revenue=Sum("total"),
        cash_sales=Sum("total", filter=Q(payment_method=Sale.PAYMENT_CASH)),
        mpesa_sales=Sum("total", filter=Q(payment_method=Sale.PAYMENT_MPESA)),
        debt_sales=Sum("total", filter=Q(payment_method=Sale.PAYMENT_DEBT)),
    )
    return {
        "total_sales": totals["total_sales"] or 0,
        "total_revenue": to_money(totals["total_revenue"]),
        "cash_sales": to_money(totals["cash_sales"]),
        "mpesa_sales": to_money(totals["mpesa_sales"]),
        "debt_sales": to_money(totals["debt_sales"]),
    }


def daily_sales(days: int, today=None) -> list:
    today = today or timezone.localdate()
    start = today - timedelta(days=days - 1)
    rows = (
        Sale.objects.filter(date__gte=start, date__lte=today)
        .values("date")
        .annotate(revenue=Sum("total"), transactions=Count("id"))
    )
    by_day = {row["date"]: row for row in rows}
    result = []
    for offset in range(days):
        day = start + timedelta(days=offset)
        row = by_day.get(day, {})
        result.append(
            {
                "date": day.isoformat(),
                "revenue": to_money(row.get("revenue")),
                "transactions": row.get("transactions", 0),
            }
        )
    return result


def top_selling_products(limit: int, queryset=None) -> list:
    queryset = Sale.objects.all() if queryset is None else queryset
    rows = (
        queryset.values("product_id", "product_name")
        .annotate(quantity_sold=Sum("quantity"), revenue=Sum("total"), transactions=Count("id"))
        .order_by("-revenue", "product_name")[:limit]
    )
    return [
        {
            "product_id": row["product_id"],
            "product_name": row["product_name"],
            "quantity_sold": row["quantity_sold"] or Decimal("0"),
            "revenue": to_money(row["revenue"]),
            "transactions": row["transactions"],
        }
        for row in rows
    ]


class SaleViewSet(viewsets.ModelViewSet):
    queryset = Sale.objects.select_related("product").all()
    serializer_class = SaleSerializer
    pagination_class = OptionalPageNumberPagination

    def get_queryset(self):
        qs = super().get_queryset()
        if self.action not in ("list", "summary"):
            return qs
        params = self.request.query_params
        qs = filter_date_range(qs, params, "date")
        if self.action == "summary":
            return qs
        payment_method = params.get("payment_method", "").strip()
        if payment_method:
            qs = qs.filter(payment_method=payment_method)
        status_value = params.get("status", "").strip()
        if status_value:
            qs = qs.filter(status=status_value)
        customer_name = params.get("customer_name", "").strip()
        if customer_name:
            qs = qs.filter(customer_name__icontains=customer_name)
        return qs.order_by("-created_at")

    def perform_create(self, serializer):
        serializer.save()
        invalidate_dashboard_cache()

    def perform_update(self, serializer):
        serializer.save()
        invalidate_dashboard_cache()

    def perform_destroy(self, instance):
        delete_sale(instance)
        invalidate_dashboard_cache()

    @action(detail=True, methods=["patch"], url_path="status")
    def set_status(self, request, pk=None):
        sale = self.get_object()
        serializer = SaleStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        sale.status = serializer.validated_data["status"]
        sale.save(update_fields=["status", "updated_at"])
        invalidate_dashboard_cache()
        return Response(self.get_serializer(sale).data, status=status.HTTP_200_OK)

    @action(detail=False, methods=["get"])
    def summary(self, request):
        return Response(sales_summary(self.get_queryset()))

    @action(detail=False, methods=["get"])
    def daily(self, request):
        days = positive_int_param(request.query_params.get("days"), default=7, maximum=365)
        return Response(daily_sales(days))

    @action(detail=False, methods=["get"], url_path="top-products")
    def top_products(self, request):
        limit = positive_int_param(request.query_params.get("limit"), default=10, maximum=100)
        return Response(top_selling_products(limit))
