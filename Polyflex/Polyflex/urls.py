from django.contrib import admin
from django.urls import path, include
from django.views.generic import RedirectView

from .views import dashboard_view

urlpatterns = [
    path('admin/', admin.site.urls),

    # Landing page routes each role to its work list
    path('', dashboard_view, name='dashboard'),
    path('dashboard/', RedirectView.as_view(pattern_name='dashboard', permanent=False)),

    # Apps
    path('job-orders/', include('job_orders.urls')),
    path('production/', include('production_line.urls')),
    path('reports/', include('reports.urls')),
]
