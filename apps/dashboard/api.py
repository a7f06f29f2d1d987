from rest_framework.decorators import api_view
from rest_framework.response import Response

from apps.core.filters import positive_int_param
from apps.expenses.views import weekly_expenses

from . import services


@api_view(["GET"])
def stats(request):
    return Response(services.get_stats())


@api_view(["GET"])
def charts(request):
    return Response(services.get_charts())


@api_view(["GET"])
def weekly_expenses_view(request):
    return Response(weekly_expenses())


@api_view(["GET"])
def recent_activities(request):
    limit = positive_int_param(request.query_params.get("limit"), default=10, maximum=100)
    return Response(services.recent_activities(limit))


@api_view(["GET"])
def alerts(request):
    return Response(services.build_alerts())
