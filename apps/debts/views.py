import logging

from django.db.models import Count, Q, Sum
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.accounts.permissions import IsShopAdmin
from apps.core.cache import invalidate_dashboard_cache
from apps.core.filters import filter_date_range
from apps.reports.currency import to_money

from .models import Debt
from .serializers import DebtPaymentSerializer, DebtSerializer
from .services import record_payment

logger = logging.getLogger(__name__)


def debt_summary(queryset) -> dict:
    totals = queryset.aggregate(
        total_debts=Count("id"),
        total_amount=Sum("amount"),
        total_paid=Sum("amount_paid"),
        outstanding_balance=Sum("balance"),
        pending_amount=Sum("amount", filter=Q(status=Debt.STATUS_PENDING)),
        partial_amount=Sum("amount", filter=Q(status=Debt.STATUS_PARTIAL)),
        paid_amount=Sum("amount", filter=Q(status=Debt.STATUS_PAID)),
    )
    summary = {"total_debts": totals.pop("total_debts") or 0}
    summary.update({key: to_money(value) for key, value in totals.items()})
    return summary


class DebtViewSet(viewsets.ModelViewSet):
    queryset = Debt.objects.all()
    serializer_class = DebtSerializer

    def get_permissions(self):
        if self.action == "destroy":
            return [IsShopAdmin()]
        return [IsAuthenticated()]

    def get_queryset(self):
        qs = super().get_queryset()
        if self.action not in ("list", "summary"):
            return qs
        params = self.request.query_params
        qs = filter_date_range(qs, params, "created_at__date")
        if self.action == "summary":
            return qs
        status_value = params.get("status", "").strip()
        if status_value:
            qs = qs.filter(status=status_value)
        customer_name = params.get("customer_name", "").strip()
        if customer_name:
            qs = qs.filter(customer_name__icontains=customer_name)
        customer_phone = params.get("customer_phone", "").strip()
        if customer_phone:
            qs = qs.filter(customer_phone__icontains=customer_phone)
        if params.get("overdue", "").lower() == "true":
            qs = qs.overdue()
        return qs.order_by("-created_at")

    def perform_create(self, serializer):
        debt = serializer.save(created_by=self.request.user)
        logger.info("Debt created for %s: %s", debt.customer_name, debt.amount)
        invalidate_dashboard_cache()

    def perform_update(self, serializer):
        serializer.save()
        invalidate_dashboard_cache()

    def perform_destroy(self, instance):
        instance.delete()
        invalidate_dashboard_cache()

    @action(detail=True, methods=["post"])
    def payment(self, request, pk=None):
        debt = self.get_object()
        serializer = DebtPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        payment, debt = record_payment(
            debt.pk,
            data["amount"],
            data["payment_method"],
            user=request.user,
            mpesa_code=data.get("mpesa_code", ""),
            notes=data.get("notes", ""),
        )
        invalidate_dashboard_cache()
        return Response(
            {"payment": DebtPaymentSerializer(payment).data, "debt": DebtSerializer(debt).data},
            status=status.HTTP_201_CREATED,
        )

    @action(detail=True, methods=["get"])
    def payments(self, request, pk=None):
        debt = self.get_object()
        history = debt.payments.order_by("-created_at")
        return Response(DebtPaymentSerializer(history, many=True).data)

    @action(detail=False, methods=["get"])
    def summary(self, request):
        return Response(debt_summary(self.get_queryset()))

    @action(detail=False, methods=["get"])
    def grouped(self, request):
        rows = (
            Debt.objects.values("customer_name", "customer_phone")
            .annotate(
                total_amount=Sum("amount"),
                total_paid=Sum("amount_paid"),
                total_balance=Sum("balance"),
                count=Count("id"),
            )
            .order_by("customer_name", "customer_phone")
        )
        return Response(
            [
                {
                    "customer_name": row["customer_name"],
                    "customer_phone": row["customer_phone"],
                    "total_amount": to_money(row["total_amount"]),
                    "total_paid": to_money(row["total_paid"]),
                    "total_balance": to_money(row["total_balance"]),
                    "count": row["count"],
                }
                for row in rows
            ]
        )

    @action(detail=False, methods=["get"])
    def overdue(self, request):
        debts = Debt.objects.overdue().order_by("due_date")
        return Response(self.get_serializer(debts, many=True).data)
