"""
PATH: sales/urls.py

SALES URLS

- GET  sales/                      list (page, page_size, status)
- GET  sales/<sale_id>/            retrieve
- POST sales/<sale_id>/void/       void (reason)
- POST sales/<sale_id>/return/     return (reason)
"""

from django.urls import path

from sales.views.sale import SaleDetailView, SaleListView, SaleReturnView, SaleVoidView

app_name = "sales"

urlpatterns = [
    path("", SaleListView.as_view(), name="sales"),
    path("<str:sale_id>/", SaleDetailView.as_view(), name="sale"),
    path("<str:sale_id>/void/", SaleVoidView.as_view(), name="sale-void"),
    path("<str:sale_id>/return/", SaleReturnView.as_view(), name="sale-return"),
]
