from django.urls import path, include
from rest_framework.routers import SimpleRouter
from . import views

app_name = 'invoices'

router = SimpleRouter()
router.register(r'', views.InvoiceViewSet, basename='invoice')

urlpatterns = [
    # GET    /api/invoices/              - List invoices
    # GET    /api/invoices/for-refund/   - Paid invoices for the refund picker
    # GET    /api/invoices/{id}/         - Invoice snapshot
    path('', include(router.urls)),
]
