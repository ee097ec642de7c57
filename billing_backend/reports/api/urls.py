# reports/api/urls.py

from django.urls import path

from reports.api.views import ReportView

urlpatterns = [
    path("<slug:key>/", ReportView.as_view(), name="report"),
]
