import logging

from django.db.models import Q
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.core.cache import invalidate_dashboard_cache
from apps.core.exceptions import ProductInUse

from .models import Product
from .serializers import ProductSerializer, StockUpdateSerializer
from .services import adjust_stock

logger = logging.getLogger(__name__)


class ProductViewSet(viewsets.ModelViewSet):
    queryset = Product.objects.all()
    serializer_class = ProductSerializer

    def get_queryset(self):
        qs = super().get_queryset()
        if self.action != "list":
            return qs
        params = self.request.query_params
        if params.get("include_inactive", "").lower() != "true":
            qs = qs.active()
        category = params.get("category", "").strip()
        if category:
            qs = qs.filter(category=category)
        if params.get("low_stock", "").lower() == "true":
            qs = qs.low_stock()
        search = params.get("search", "").strip()
        if search:
            qs = qs.filter(Q(name__icontains=search) | Q(barcode__icontains=search))
        return qs.order_by("name")

    def perform_create(self, serializer):
        product = serializer.save()
        logger.info("Product created: %s", product.name)
        invalidate_dashboard_cache()

    def perform_update(self, serializer):
        serializer.save()
        invalidate_dashboard_cache()

    def perform_destroy(self, instance):
        if instance.has_sales_records():
            raise ProductInUse()
        logger.info("Product deleted: %s", instance.name)
        instance.delete()
        invalidate_dashboard_cache()

    @action(detail=False, methods=["get"])
    def categories(self, request):
        names = (
            Product.objects.active()
            .order_by("category")
            .values_list("category", flat=True)
            .distinct()
        )
        return Response(list(names))

    @action(detail=False, methods=["get"], url_path="low-stock")
    def low_stock(self, request):
        products = Product.objects.active().low_stock().order_by("stock_quantity")
        return Response(self.get_serializer(products, many=True).data)

    @action(detail=True, methods=["get"], url_path="can-delete")
    def can_delete(self, request, pk=None):
        product = self.get_object()
        has_sales = product.has_sales_records()
        return Response(
            {
                "can_delete": not has_sales,
                "has_sales_records": has_sales,
                "message": (
                    "Product has sales records and cannot be deleted"
                    if has_sales
                    else "Product can be safely deleted"
                ),
            }
        )

    @action(detail=True, methods=["patch"])
    def stock(self, request, pk=None):
        product = self.get_object()
        serializer = StockUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        quantity = serializer.validated_data["quantity"]
        if serializer.validated_data["operation"] == "subtract":
            quantity = -quantity
        product = adjust_stock(product.pk, quantity)
        invalidate_dashboard_cache()
        return Response(self.get_serializer(product).data)
