from django.urls import path
from . import views

app_name = 'reports'

urlpatterns = [
    # Live metrics API for auto-refreshing production dashboards
    path('api/metrics/', views.metrics_api, name='metrics_api'),
    path('waste/export/xlsx/', views.waste_report_export, name='waste_export'),
]
