"""
PATH: quotes/urls.py

Mounted under registers/<register_id>/quotes/ by pos.urls.
"""

from django.urls import path

from quotes.views import QuoteConvertView, QuoteDetailView, QuoteListView

app_name = "quotes"

urlpatterns = [
    path("", QuoteListView.as_view(), name="quotes"),
    path("<str:quote_id>/", QuoteDetailView.as_view(), name="quote"),
    path("<str:quote_id>/convert/", QuoteConvertView.as_view(), name="quote-convert"),
]
