# sales/apps.py

"""
SALES APP CONFIG

Sale lifecycle for the register:
- create (submit a frozen cart snapshot)
- void / return (reason-gated reversals of a completed sale)
- reference database backend that owns receipt numbers and stock writes
"""

from django.apps import AppConfig


class SalesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "sales"
    verbose_name = "Sales"
