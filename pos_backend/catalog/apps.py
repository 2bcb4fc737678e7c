# catalog/apps.py

"""
CATALOG APP CONFIG

Read-only collaborators consumed by the register engine:
- Product catalog (price + on-hand counts)
- Customer directory
- Tax rules
- Coupons / promotions
"""

from django.apps import AppConfig


class CatalogConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "catalog"
    verbose_name = "Catalog"
