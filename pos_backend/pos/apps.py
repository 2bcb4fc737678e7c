# pos/apps.py

"""
POS APP CONFIG

The register engine:
- cart aggregate, pricing & tax
- hold registry
- checkout state machine
- register sessions (one live cart per register)
"""

from django.apps import AppConfig


class PosConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "pos"
    verbose_name = "Point of Sale"
