from rest_framework import mixins, viewsets, status, serializers
from rest_framework.decorators import action
from rest_framework.pagination import PageNumberPagination
from rest_framework.parsers import MultiPartParser, FormParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter, inline_serializer
from apps.finance.exceptions import IllegalTransitionError
from .approval import Stage
from .models import Reimbursement
from .permissions import HasApprovalRole
from .serializers import (
    ReimbursementSerializer,
    ReimbursementListSerializer,
    ReimbursementCreateSerializer,
    ReimbursementFilterSerializer,
    DecisionInputSerializer,
    PaymentInputSerializer,
    PendingApprovalSerializer,
    ReimbursementStatisticsSerializer,
    ReceiptUploadResponseSerializer,
)
from .services import (
    create_reimbursement,
    decide_stage,
    complete_payment as complete_payment_service,
    search_reimbursements,
    get_pending_approvals,
    get_reimbursement_statistics,
    store_receipts,
    ReimbursementsServiceError,
    ReimbursementNotFoundError,
    StageForbiddenError,
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
    if isinstance(exc, ReimbursementNotFoundError):
        http_status = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, StageForbiddenError):
        http_status = status.HTTP_403_FORBIDDEN
    else:
        http_status = status.HTTP_400_BAD_REQUEST
    return Response({'error': str(exc), 'code': exc.code}, status=http_status)


TRANSITION_RESPONSES = {
    200: ReimbursementSerializer,
    400: ErrorResponseSerializer,
    403: ErrorResponseSerializer,
    404: ErrorResponseSerializer,
    409: ErrorResponseSerializer,
}


class ReimbursementPagination(PageNumberPagination):
    """Custom pagination for reimbursements."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class ReimbursementViewSet(mixins.CreateModelMixin,
                           mixins.ListModelMixin,
                           mixins.RetrieveModelMixin,
                           viewsets.GenericViewSet):
    """
    ViewSet for reimbursement requests and their approval chain.

    Records are never edited directly; they move only through the
    per-stage PUT actions.

    list: Get reimbursements (with filters)
    create: Submit a new request
    retrieve: Get a specific request
    approve_director1 / approve_director2 / approve_accountant: Stage decisions
    complete_payment: Mark a fully approved request as paid
    pending_approvals: Requests awaiting the caller's stage
    stats: Dashboard totals
    receipts: Upload receipt files
    """

    queryset = Reimbursement.objects.select_related(
        'requested_by',
        'created_by',
        'director1_approved_by',
        'director2_approved_by',
        'accountant_approved_by',
        'processed_by',
    )
    serializer_class = ReimbursementSerializer
    pagination_class = ReimbursementPagination

    def get_queryset(self):
        """Filter reimbursements using input serializer validation."""
        if self.action != 'list':
            return super().get_queryset()

        filter_serializer = ReimbursementFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        return search_reimbursements(**filter_serializer.validated_data)

    def get_serializer_class(self):
        """Use different serializers for different actions."""
        if self.action == 'list':
            return ReimbursementListSerializer
        elif self.action == 'create':
            return ReimbursementCreateSerializer
        return ReimbursementSerializer

    @extend_schema(parameters=[ReimbursementFilterSerializer])
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    @extend_schema(
        request=ReimbursementCreateSerializer,
        responses={201: ReimbursementSerializer, 400: ErrorResponseSerializer},
    )
    def create(self, request, *args, **kwargs):
        """Submit a reimbursement; tax and net are derived server-side."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            reimbursement = create_reimbursement(
                created_by=request.user,
                **serializer.validated_data
            )
        except ReimbursementsServiceError as e:
            return error_response(e)

        return Response(
            ReimbursementSerializer(reimbursement).data,
            status=status.HTTP_201_CREATED
        )

    # ------------------------------------------------------------------
    # Approval chain
    # ------------------------------------------------------------------

    def _decide(self, request, pk, stage):
        input_serializer = DecisionInputSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        try:
            reimbursement = decide_stage(
                reimbursement_id=pk,
                stage=stage,
                actor=request.user,
                **input_serializer.validated_data
            )
        except (ReimbursementsServiceError, IllegalTransitionError) as e:
            return error_response(e)

        return Response(ReimbursementSerializer(reimbursement).data)

    @extend_schema(request=DecisionInputSerializer, responses=TRANSITION_RESPONSES)
    @action(detail=True, methods=['put'], url_path='approve-director1')
    def approve_director1(self, request, pk=None):
        """
        First director's decision.

        PUT /api/reimbursements/{id}/approve-director1/
        Body: {"approved": true, "comments": "...", "rejection_reason": "..."}
        """
        return self._decide(request, pk, Stage.DIRECTOR1)

    @extend_schema(request=DecisionInputSerializer, responses=TRANSITION_RESPONSES)
    @action(detail=True, methods=['put'], url_path='approve-director2')
    def approve_director2(self, request, pk=None):
        """Second director's decision; requires director1 approval."""
        return self._decide(request, pk, Stage.DIRECTOR2)

    @extend_schema(request=DecisionInputSerializer, responses=TRANSITION_RESPONSES)
    @action(detail=True, methods=['put'], url_path='approve-accountant')
    def approve_accountant(self, request, pk=None):
        """Accountant's decision; requires director2 approval."""
        return self._decide(request, pk, Stage.ACCOUNTANT)

    @extend_schema(request=PaymentInputSerializer, responses=TRANSITION_RESPONSES)
    @action(detail=True, methods=['put'], url_path='complete-payment')
    def complete_payment(self, request, pk=None):
        """
        Record the payout of a fully approved request.

        PUT /api/reimbursements/{id}/complete-payment/
        Body: {"payment_reference": "BACS-123", "comments": "optional"}
        """
        input_serializer = PaymentInputSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        try:
            reimbursement = complete_payment_service(
                reimbursement_id=pk,
                actor=request.user,
                **input_serializer.validated_data
            )
        except (ReimbursementsServiceError, IllegalTransitionError) as e:
            return error_response(e)

        return Response(ReimbursementSerializer(reimbursement).data)

    # ------------------------------------------------------------------
    # Queues, dashboard and attachments
    # ------------------------------------------------------------------

    @extend_schema(
        parameters=[OpenApiParameter('brand_code', str, description='Filter by brand')],
        responses={200: PendingApprovalSerializer(many=True)},
    )
    @action(detail=False, methods=['get'], url_path='pending-approvals',
            permission_classes=[IsAuthenticated, HasApprovalRole])
    def pending_approvals(self, request):
        """Requests waiting on a stage the caller may decide, paginated like the list."""
        pending = get_pending_approvals(
            user=request.user,
            brand_code=request.query_params.get('brand_code'),
        )
        page = self.paginate_queryset(pending)
        return self.get_paginated_response(PendingApprovalSerializer(page, many=True).data)

    @extend_schema(
        parameters=[OpenApiParameter('brand_code', str, description='Filter by brand')],
        responses={200: ReimbursementStatisticsSerializer},
    )
    @action(detail=False, methods=['get'])
    def stats(self, request):
        """Counts by status, category and priority plus stage queues."""
        stats = get_reimbursement_statistics(brand_code=request.query_params.get('brand_code'))
        return Response(ReimbursementStatisticsSerializer(stats).data)

    @extend_schema(
        request=inline_serializer(
            name='ReceiptUploadRequest',
            fields={'files': serializers.ListField(child=serializers.FileField())},
        ),
        responses={201: ReceiptUploadResponseSerializer, 400: ErrorResponseSerializer},
    )
    @action(detail=False, methods=['post'], parser_classes=[MultiPartParser, FormParser])
    def receipts(self, request):
        """Upload receipt files (JPEG, PNG or PDF) and return their URLs."""
        try:
            urls = store_receipts(
                files=request.FILES.getlist('files'),
                uploaded_by=request.user,
            )
        except ReimbursementsServiceError as e:
            return error_response(e)

        return Response({'urls': urls}, status=status.HTTP_201_CREATED)
