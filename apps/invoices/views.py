from rest_framework import mixins, viewsets
from rest_framework.decorators import action
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema, OpenApiParameter
from .models import Invoice
from .serializers import InvoiceSerializer, InvoiceListSerializer
from .services import search_invoices, get_refundable_invoices


class InvoicePagination(PageNumberPagination):
    """Custom pagination for invoices."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


INVOICE_FILTERS = [
    OpenApiParameter('search', str, description='Invoice number, client, lot or title'),
    OpenApiParameter('brand_code', str, description='Filter by brand'),
    OpenApiParameter('auction', str, description='Filter by auction name'),
]


class InvoiceViewSet(mixins.ListModelMixin,
                     mixins.RetrieveModelMixin,
                     viewsets.GenericViewSet):
    """
    Read-only access to invoices.

    list: All invoices (with filters)
    retrieve: Full invoice snapshot
    for_refund: Paid invoices a refund may be raised against
    """

    queryset = Invoice.objects.all()
    serializer_class = InvoiceSerializer
    pagination_class = InvoicePagination

    def _filters(self):
        params = self.request.query_params
        return {
            'search': params.get('search'),
            'brand_code': params.get('brand_code'),
            'auction': params.get('auction'),
        }

    def get_queryset(self):
        if self.action == 'list':
            return search_invoices(status=self.request.query_params.get('status'), **self._filters())
        return super().get_queryset()

    def get_serializer_class(self):
        if self.action in ('list', 'for_refund'):
            return InvoiceListSerializer
        return InvoiceSerializer

    @extend_schema(parameters=INVOICE_FILTERS + [
        OpenApiParameter('status', str, description='Filter by invoice status'),
    ])
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    @extend_schema(parameters=INVOICE_FILTERS)
    @action(detail=False, methods=['get'], url_path='for-refund')
    def for_refund(self, request):
        """Paid invoices eligible as refund sources."""
        queryset = get_refundable_invoices(**self._filters())
        page = self.paginate_queryset(queryset)
        serializer = self.get_serializer(page, many=True)
        return self.get_paginated_response(serializer.data)
