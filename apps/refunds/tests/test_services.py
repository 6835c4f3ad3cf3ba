import datetime
import uuid

import pytest
from decimal import Decimal
from apps.finance.exceptions import IllegalTransitionError
from apps.invoices.services import InvoiceNotRefundableError
from apps.refunds.models import Refund
from apps.refunds.services import (
    create_refund,
    approve_refund,
    process_refund,
    cancel_refund,
    get_refund_statistics,
    search_refunds,
    AmountMismatchError,
    InvalidRefundError,
    RefundForbiddenError,
    RefundNotFoundError,
)


@pytest.mark.django_db
class TestCreateRefundService:
    """Tests for refund_management.create_refund"""

    def test_derives_amount(self, clerk, paid_invoice):
        refund = create_refund(
            created_by=clerk,
            invoice_id=paid_invoice.id,
            type='refund_of_courier_difference',
            reason='Local courier',
            refund_method='bank_transfer',
            international_shipping_cost=Decimal('180.00'),
            local_shipping_cost=Decimal('40.00'),
            handling_insurance_cost=Decimal('25.00'),
        )

        assert refund.amount == Decimal('165.00')
        assert refund.brand_code == 'MSABER'
        assert refund.hammer_price == Decimal('0.00')

    def test_brand_code_override(self, clerk, paid_invoice):
        refund = create_refund(
            created_by=clerk,
            invoice_id=paid_invoice.id,
            type='refund_of_artwork',
            reason='Withdrawn',
            refund_method='cheque',
            brand_code='METSAB',
        )

        assert refund.brand_code == 'METSAB'
        assert refund.refund_number.startswith('RF-METSAB-')

    def test_matching_amount_accepted(self, clerk, paid_invoice):
        refund = create_refund(
            created_by=clerk,
            invoice_id=paid_invoice.id,
            type='refund_of_artwork',
            reason='Withdrawn',
            refund_method='cheque',
            amount=Decimal('12.5'),
            hammer_price=Decimal('10.00'),
            buyers_premium=Decimal('2.50'),
        )

        assert refund.amount == Decimal('12.50')

    def test_mismatched_amount(self, clerk, paid_invoice):
        with pytest.raises(AmountMismatchError) as exc_info:
            create_refund(
                created_by=clerk,
                invoice_id=paid_invoice.id,
                type='refund_of_artwork',
                reason='Withdrawn',
                refund_method='cheque',
                amount=Decimal('99.00'),
                hammer_price=Decimal('10.00'),
            )

        assert exc_info.value.derived == Decimal('10.00')
        assert Refund.objects.count() == 0

    def test_blank_reason(self, clerk, paid_invoice):
        with pytest.raises(InvalidRefundError):
            create_refund(
                created_by=clerk,
                invoice_id=paid_invoice.id,
                type='refund_of_artwork',
                reason='  ',
                refund_method='cash',
            )

    def test_unknown_cost_field(self, clerk, paid_invoice):
        with pytest.raises(InvalidRefundError):
            create_refund(
                created_by=clerk,
                invoice_id=paid_invoice.id,
                type='refund_of_artwork',
                reason='x',
                refund_method='cash',
                vat=Decimal('1.00'),
            )

    def test_unpaid_invoice(self, clerk, unpaid_invoice):
        with pytest.raises(InvoiceNotRefundableError):
            create_refund(
                created_by=clerk,
                invoice_id=unpaid_invoice.id,
                type='refund_of_artwork',
                reason='x',
                refund_method='cash',
            )


@pytest.mark.django_db
class TestRefundModel:

    def test_save_rederives_amount(self, clerk, paid_invoice):
        refund = create_refund(
            created_by=clerk,
            invoice_id=paid_invoice.id,
            type='refund_of_artwork',
            reason='x',
            refund_method='cash',
            hammer_price=Decimal('100.00'),
        )
        refund.amount = Decimal('5000.00')
        refund.save()

        refund.refresh_from_db()
        assert refund.amount == Decimal('100.00')

    def test_refund_number_is_stable(self, clerk, paid_invoice):
        refund = create_refund(
            created_by=clerk,
            invoice_id=paid_invoice.id,
            type='refund_of_artwork',
            reason='x',
            refund_method='cash',
        )
        number = refund.refund_number
        refund.save()

        assert refund.refund_number == number


@pytest.mark.django_db
class TestRefundLifecycleService:
    """Tests for refund_lifecycle: approve, process and cancel"""

    def test_new_refund_is_pending(self, pending_refund):
        assert pending_refund.status == 'pending'
        assert pending_refund.available_actions == ['approve', 'cancel']

    def test_approve(self, pending_refund, director):
        refund = approve_refund(refund_id=pending_refund.id, actor=director, comments='  Agreed  ')

        refund.refresh_from_db()
        assert refund.status == 'approved'
        assert refund.approved_by == director
        assert refund.approved_at is not None
        assert refund.approval_comments == 'Agreed'

    def test_approve_needs_director(self, pending_refund, clerk, accountant):
        for actor in (clerk, accountant):
            with pytest.raises(RefundForbiddenError):
                approve_refund(refund_id=pending_refund.id, actor=actor)

        pending_refund.refresh_from_db()
        assert pending_refund.status == 'pending'

    def test_approve_twice_is_illegal(self, approved_refund, director):
        with pytest.raises(IllegalTransitionError):
            approve_refund(refund_id=approved_refund.id, actor=director)

    def test_process_in_two_steps(self, approved_refund, accountant):
        process_refund(refund_id=approved_refund.id, actor=accountant, status='processing')
        refund = process_refund(
            refund_id=approved_refund.id,
            actor=accountant,
            status='completed',
            refund_date=datetime.date(2026, 10, 15),
            payment_reference=' BACS-77 ',
        )

        refund.refresh_from_db()
        assert refund.status == 'completed'
        assert refund.processed_by == accountant
        assert refund.refund_date == datetime.date(2026, 10, 15)
        assert refund.payment_reference == 'BACS-77'
        assert refund.available_actions == []

    def test_completion_dated_today_by_default(self, approved_refund, accountant):
        refund = process_refund(refund_id=approved_refund.id, actor=accountant, status='completed')

        assert refund.refund_date is not None

    def test_failed_payout_is_final(self, approved_refund, accountant, director):
        process_refund(refund_id=approved_refund.id, actor=accountant, status='failed')

        with pytest.raises(IllegalTransitionError):
            cancel_refund(refund_id=approved_refund.id, actor=director, reason='Too late')

    def test_process_needs_approval(self, pending_refund, accountant):
        with pytest.raises(IllegalTransitionError):
            process_refund(refund_id=pending_refund.id, actor=accountant, status='completed')

    def test_process_needs_accountant(self, approved_refund, director):
        with pytest.raises(RefundForbiddenError):
            process_refund(refund_id=approved_refund.id, actor=director, status='completed')

    def test_requester_can_cancel(self, pending_refund, clerk):
        refund = cancel_refund(refund_id=pending_refund.id, actor=clerk, reason='Client changed their mind')

        assert refund.status == 'cancelled'
        assert refund.cancelled_by == clerk
        assert refund.cancellation_reason == 'Client changed their mind'

    def test_other_staff_cannot_cancel(self, pending_refund, porter):
        with pytest.raises(RefundForbiddenError):
            cancel_refund(refund_id=pending_refund.id, actor=porter, reason='Not mine')

    def test_cancel_needs_reason(self, pending_refund, clerk):
        with pytest.raises(InvalidRefundError):
            cancel_refund(refund_id=pending_refund.id, actor=clerk, reason='  ')

    def test_cannot_cancel_while_processing(self, approved_refund, accountant, director):
        process_refund(refund_id=approved_refund.id, actor=accountant, status='processing')

        with pytest.raises(IllegalTransitionError):
            cancel_refund(refund_id=approved_refund.id, actor=director, reason='Stop')

    @pytest.mark.parametrize('refund_id', [uuid.uuid4(), 'not-a-uuid'])
    def test_unknown_refund(self, director, refund_id):
        with pytest.raises(RefundNotFoundError):
            approve_refund(refund_id=refund_id, actor=director)

    def test_amount_unchanged_by_lifecycle(self, approved_refund, accountant):
        process_refund(refund_id=approved_refund.id, actor=accountant, status='completed')

        approved_refund.refresh_from_db()
        assert approved_refund.amount == Decimal('1250.00')
        assert approved_refund.reason == 'Condition not as described'


@pytest.mark.django_db
class TestRefundStatusReporting:

    def test_filter_by_status(self, pending_refund, approved_refund):
        assert list(search_refunds(status='approved')) == [approved_refund]
        assert list(search_refunds(status='pending')) == []

    def test_statistics_by_status(self, approved_refund):
        stats = get_refund_statistics()

        assert stats['by_status'] == {
            'pending': 0,
            'approved': 1,
            'processing': 0,
            'completed': 0,
            'cancelled': 0,
            'failed': 0,
        }
