from django.urls import path, include
from rest_framework.routers import SimpleRouter
from . import views

app_name = 'refunds'

router = SimpleRouter()
router.register(r'', views.RefundViewSet, basename='refund')

urlpatterns = [
    # GET    /api/refunds/                - List refunds
    # POST   /api/refunds/                - Raise refund
    # GET    /api/refunds/stats/          - Totals by type, method and status
    # GET    /api/refunds/{id}/           - Refund details
    # PUT    /api/refunds/{id}/approve/   - Director approval
    # PUT    /api/refunds/{id}/process/   - Processing, completion or failure
    # PUT    /api/refunds/{id}/cancel/    - Withdraw before processing
    path('', include(router.urls)),
]
