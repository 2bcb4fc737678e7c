# sales/views/sale.py

"""
SALE API VIEWS

- list (paginated, optional status filter) / retrieve
- void / return (reason required; backend confirms and restores stock)

All calls go through the SaleLifecycleManager, never straight to the ORM,
so a deployment pointing SALE_BACKEND elsewhere keeps working.
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from pos.services.registry import build_sale_manager
from pos.views.errors import HANDLED_ERRORS, register_error_response
from sales.serializers import (
    SaleListQuerySerializer,
    SaleReasonInputSerializer,
    SaleRecordSerializer,
)


class SaleAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get_manager(self):
        return build_sale_manager()

    def handle_exception(self, exc):
        if isinstance(exc, HANDLED_ERRORS):
            return register_error_response(exc)
        return super().handle_exception(exc)


class SaleListView(SaleAPIView):
    @extend_schema(
        parameters=[SaleListQuerySerializer],
        responses={200: dict},
        description="Sales, newest first (page / page_size / status)",
    )
    def get(self, request):
        query = SaleListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        page = self.get_manager().list_sales(
            page=query.validated_data["page"],
            page_size=query.validated_data["page_size"],
            status=query.validated_data.get("status"),
        )
        return Response(
            {
                "count": page.total,
                "page": page.page,
                "page_size": page.page_size,
                "pages": page.pages,
                "results": SaleRecordSerializer(page.items, many=True).data,
            }
        )


class SaleDetailView(SaleAPIView):
    @extend_schema(responses={200: SaleRecordSerializer}, description="Retrieve a sale")
    def get(self, request, sale_id):
        sale = self.get_manager().get_sale(sale_id)
        return Response(SaleRecordSerializer(sale).data)


class SaleVoidView(SaleAPIView):
    @extend_schema(
        request=SaleReasonInputSerializer,
        responses={200: SaleRecordSerializer},
        description="Void a completed sale (reason required)",
    )
    def post(self, request, sale_id):
        serializer = SaleReasonInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        sale = self.get_manager().void_sale(sale_id, serializer.validated_data["reason"])
        return Response(SaleRecordSerializer(sale).data, status=status.HTTP_200_OK)


class SaleReturnView(SaleAPIView):
    @extend_schema(
        request=SaleReasonInputSerializer,
        responses={200: SaleRecordSerializer},
        description="Return a completed sale (reason required)",
    )
    def post(self, request, sale_id):
        serializer = SaleReasonInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        sale = self.get_manager().process_return(sale_id, serializer.validated_data["reason"])
        return Response(SaleRecordSerializer(sale).data, status=status.HTTP_200_OK)
