from rest_framework import mixins, viewsets, status, serializers
from rest_framework.decorators import action
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from apps.finance.exceptions import IllegalTransitionError
from apps.invoices.services import InvoicesServiceError
from .models import Refund
from .serializers import (
    RefundSerializer,
    RefundListSerializer,
    RefundCreateSerializer,
    RefundFilterSerializer,
    RefundStatisticsSerializer,
    RefundApprovalInputSerializer,
    RefundProcessInputSerializer,
    RefundCancelInputSerializer,
)
from .services import (
    create_refund,
    approve_refund,
    process_refund,
    cancel_refund,
    search_refunds,
    get_refund_statistics,
    RefundsServiceError,
    RefundNotFoundError,
    RefundForbiddenError,
)


class ErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField()
    code = serializers.CharField()


def error_response(exc):
    """Map a domain error to {'error', 'code'} with the matching status."""
    if isinstance(exc, IllegalTransitionError):
        return Response(
            {'error': str(exc), 'code': 'illegal_transition'},
            status=status.HTTP_409_CONFLICT
        )
    if isinstance(exc, RefundNotFoundError):
        http_status = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, RefundForbiddenError):
        http_status = status.HTTP_403_FORBIDDEN
    else:
        http_status = status.HTTP_400_BAD_REQUEST
    return Response({'error': str(exc), 'code': exc.code}, status=http_status)


TRANSITION_RESPONSES = {
    200: RefundSerializer,
    400: ErrorResponseSerializer,
    403: ErrorResponseSerializer,
    404: ErrorResponseSerializer,
    409: ErrorResponseSerializer,
}


class RefundPagination(PageNumberPagination):
    """Custom pagination for refunds."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class RefundViewSet(mixins.CreateModelMixin,
                    mixins.ListModelMixin,
                    mixins.RetrieveModelMixin,
                    viewsets.GenericViewSet):
    """
    ViewSet for refunds.

    A refund's content is fixed at creation; afterwards only its status
    moves (approve, process, cancel). Refunds are never deleted.

    list: Get refunds (with filters)
    create: Raise a refund against a paid invoice
    retrieve: Get a specific refund
    approve: Director approval of a pending refund
    process: Accountant records processing, completion or failure
    cancel: Withdraw a refund that has not been processed
    stats: Totals by type, method and status
    """

    queryset = Refund.objects.select_related(
        'invoice', 'created_by', 'item_returned_by',
        'approved_by', 'processed_by', 'cancelled_by',
    )
    serializer_class = RefundSerializer
    pagination_class = RefundPagination

    def get_queryset(self):
        """Filter refunds using input serializer validation."""
        if self.action != 'list':
            return super().get_queryset()

        filter_serializer = RefundFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        return search_refunds(**filter_serializer.validated_data)

    def get_serializer_class(self):
        """Use different serializers for different actions."""
        if self.action == 'list':
            return RefundListSerializer
        elif self.action == 'create':
            return RefundCreateSerializer
        return RefundSerializer

    @extend_schema(parameters=[RefundFilterSerializer])
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    @extend_schema(
        request=RefundCreateSerializer,
        responses={201: RefundSerializer, 400: ErrorResponseSerializer},
    )
    def create(self, request, *args, **kwargs):
        """Raise a refund; the amount is derived server-side."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = serializer.validated_data.copy()
        invoice_id = data.pop('invoice')

        try:
            refund = create_refund(
                created_by=request.user,
                invoice_id=invoice_id,
                **data
            )
        except (RefundsServiceError, InvoicesServiceError) as e:
            return error_response(e)

        return Response(
            RefundSerializer(refund).data,
            status=status.HTTP_201_CREATED
        )

    @extend_schema(
        parameters=[OpenApiParameter('brand_code', str, description='Filter by brand')],
        responses={200: RefundStatisticsSerializer},
    )
    @action(detail=False, methods=['get'])
    def stats(self, request):
        """Totals by type, method and status."""
        stats = get_refund_statistics(brand_code=request.query_params.get('brand_code'))
        return Response(RefundStatisticsSerializer(stats).data)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @extend_schema(request=RefundApprovalInputSerializer, responses=TRANSITION_RESPONSES)
    @action(detail=True, methods=['put'])
    def approve(self, request, pk=None):
        """
        Director approval.

        PUT /api/refunds/{id}/approve/
        Body: {"comments": "optional"}
        """
        input_serializer = RefundApprovalInputSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        try:
            refund = approve_refund(
                refund_id=pk,
                actor=request.user,
                **input_serializer.validated_data
            )
        except (RefundsServiceError, IllegalTransitionError) as e:
            return error_response(e)

        return Response(RefundSerializer(refund).data)

    @extend_schema(request=RefundProcessInputSerializer, responses=TRANSITION_RESPONSES)
    @action(detail=True, methods=['put'])
    def process(self, request, pk=None):
        """
        Accountant's processing update.

        PUT /api/refunds/{id}/process/
        Body: {"status": "completed", "refund_date": "2026-10-19", "payment_reference": "..."}
        """
        input_serializer = RefundProcessInputSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        try:
            refund = process_refund(
                refund_id=pk,
                actor=request.user,
                **input_serializer.validated_data
            )
        except (RefundsServiceError, IllegalTransitionError) as e:
            return error_response(e)

        return Response(RefundSerializer(refund).data)

    @extend_schema(request=RefundCancelInputSerializer, responses=TRANSITION_RESPONSES)
    @action(detail=True, methods=['put'])
    def cancel(self, request, pk=None):
        """
        Withdraw a pending or approved refund.

        PUT /api/refunds/{id}/cancel/
        Body: {"reason": "..."}
        """
        input_serializer = RefundCancelInputSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        try:
            refund = cancel_refund(
                refund_id=pk,
                actor=request.user,
                **input_serializer.validated_data
            )
        except (RefundsServiceError, IllegalTransitionError) as e:
            return error_response(e)

        return Response(RefundSerializer(refund).data)
