from django.urls import path

from . import api

urlpatterns = [
    path("dashboard/stats/", api.stats, name="dashboard-stats"),
    path("dashboard/charts/", api.charts, name="dashboard-charts"),
    path("dashboard/weekly-expenses/", api.weekly_expenses_view, name="dashboard-weekly-expenses"),
    path("dashboard/recent-activities/", api.recent_activities, name="dashboard-recent-activities"),
    path("dashboard/alerts/", api.alerts, name="dashboard-alerts"),
]
