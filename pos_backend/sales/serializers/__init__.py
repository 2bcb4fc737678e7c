from .sale import SaleListQuerySerializer, SaleReasonInputSerializer, SaleRecordSerializer
from .sale_item import SaleLineSerializer

__all__ = [
    "SaleLineSerializer",
    "SaleListQuerySerializer",
    "SaleReasonInputSerializer",
    "SaleRecordSerializer",
]
