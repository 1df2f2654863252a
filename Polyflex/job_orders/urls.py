"""URL configuration for the job_orders app.

The empty path lists job orders with their live production figures so
that ``/job-orders/`` can be polled by dashboards.
"""

from django.urls import path
from . import views


app_name = 'job_orders'

urlpatterns = [
    path('', views.job_order_list_view, name='job_order_list'),
    path('add/', views.job_order_add_view, name='job_order_add'),
    path('<int:pk>/', views.job_order_detail_view, name='job_order_detail'),
    path('<int:pk>/refresh/', views.job_order_refresh_view, name='job_order_refresh'),
    path('bulk_delete/', views.job_order_bulk_delete_view, name='job_order_bulk_delete'),
    path('export/xlsx/', views.job_orders_list_export_xlsx, name='export_xlsx'),
]
