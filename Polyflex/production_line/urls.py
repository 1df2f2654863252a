from django.urls import path
from . import views

app_name = 'production_line'

urlpatterns = [
    # Roll ledger writes
    path('rolls/', views.api_roll_create, name='roll_create'),
    path('rolls/<int:pk>/advance/', views.api_roll_advance, name='roll_advance'),
    path('rolls/<int:pk>/delete/', views.api_roll_delete, name='roll_delete'),

    # Reads: per job order, per stage queue, QR lookup
    path('rolls/job-order/<int:job_order_id>/', views.api_rolls_by_job_order, name='rolls_by_job_order'),
    path('rolls/status/<str:status>/', views.api_rolls_by_status, name='rolls_by_status'),
    path('rolls/validate/<str:code>/', views.api_roll_validate, name='roll_validate'),

    # Printable QR label
    path('rolls/<int:pk>/qr.svg', views.roll_qr_svg, name='roll_qr'),
]
