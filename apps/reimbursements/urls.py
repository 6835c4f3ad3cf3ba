from django.urls import path, include
from rest_framework.routers import SimpleRouter
from . import views

app_name = 'reimbursements'

router = SimpleRouter()
router.register(r'', views.ReimbursementViewSet, basename='reimbursement')

urlpatterns = [
    # GET    /api/reimbursements/                          - List requests
    # POST   /api/reimbursements/                          - Submit request
    # GET    /api/reimbursements/pending-approvals/        - Caller's approval queue
    # GET    /api/reimbursements/stats/                    - Dashboard totals
    # POST   /api/reimbursements/receipts/                 - Upload receipts
    # GET    /api/reimbursements/{id}/                     - Request details
    # PUT    /api/reimbursements/{id}/approve-director1/   - Director 1 decision
    # PUT    /api/reimbursements/{id}/approve-director2/   - Director 2 decision
    # PUT    /api/reimbursements/{id}/approve-accountant/  - Accountant decision
    # PUT    /api/reimbursements/{id}/complete-payment/    - Record payout
    path('', include(router.urls)),
]
