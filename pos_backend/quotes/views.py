# quotes/views.py

"""
QUOTE API VIEWS

- list (with search) / save live cart as quote
- convert a pending quote into the live cart
- delete in any status
"""

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.response import Response

from pos.serializers import HeldTransactionSerializer
from pos.views.api import RegisterAPIView
from quotes.serializers import QuoteSerializer


class QuoteListView(RegisterAPIView):
    @extend_schema(
        parameters=[OpenApiParameter("q", str, description="quote id / customer / item name")],
        responses={200: QuoteSerializer(many=True)},
        description="Quotes of this register, newest first; statuses re-derived on every read",
    )
    def get(self, request, register_id):
        quotes = self.get_session().list_quotes(request.query_params.get("q", ""))
        return Response(QuoteSerializer(quotes, many=True).data)

    @extend_schema(request=None, responses={201: dict}, description="Save the live cart as a quote and clear it")
    def post(self, request, register_id):
        session = self.get_session()
        quote = session.save_as_quote()
        return self.state_response(
            session,
            http_status=status.HTTP_201_CREATED,
            quote=QuoteSerializer(quote).data,
        )


class QuoteDetailView(RegisterAPIView):
    @extend_schema(responses={204: None}, description="Delete a quote regardless of status")
    def delete(self, request, register_id, quote_id):
        self.get_session().delete_quote(quote_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class QuoteConvertView(RegisterAPIView):
    @extend_schema(
        request=None,
        responses={200: dict},
        description="Convert a pending quote into the live cart (terminal for the quote)",
    )
    def post(self, request, register_id, quote_id):
        session = self.get_session()
        auto_held = session.convert_quote(quote_id)
        return self.state_response(
            session,
            quote=QuoteSerializer(session.quotes.get(quote_id)).data,
            auto_held=HeldTransactionSerializer(auto_held).data if auto_held else None,
        )
