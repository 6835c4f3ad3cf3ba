import pytest
import datetime
from decimal import Decimal
from django.core.files.uploadedfile import SimpleUploadedFile
from django.urls import reverse
from rest_framework import status
from apps.reimbursements.approval import ReimbursementStatus
from apps.reimbursements.models import Reimbursement


def decision_url(name, reimbursement):
    return reverse(f'reimbursements:reimbursement-{name}', kwargs={'pk': reimbursement.id})


@pytest.mark.django_db
class TestCreateReimbursement:
    """Tests for POST /api/reimbursements/"""

    def test_create_derives_tax_and_net(self, claimant_client, reimbursement_data, claimant):
        url = reverse('reimbursements:reimbursement-list')
        response = claimant_client.post(url, reimbursement_data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['tax_amount'] == '50.00'
        assert response.data['net_amount'] == '200.00'
        assert response.data['status'] == 'pending'
        assert response.data['reimbursement_number'].startswith('RB-MSABER-')
        assert response.data['requested_by'] == claimant.id
        assert response.data['available_actions'] == ['approve-director1']

    def test_matching_preview_accepted(self, claimant_client, reimbursement_data):
        reimbursement_data.update({
            'total_amount': '33.33',
            'tax_rate': '0.20',
            'tax_amount': '6.67',
            'net_amount': '26.66',
        })
        response = claimant_client.post(
            reverse('reimbursements:reimbursement-list'), reimbursement_data, format='json'
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert Reimbursement.objects.get().tax_amount == Decimal('6.67')

    def test_mismatched_tax_rejected(self, claimant_client, reimbursement_data):
        reimbursement_data['tax_amount'] = '40.00'
        response = claimant_client.post(
            reverse('reimbursements:reimbursement-list'), reimbursement_data, format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'amount_mismatch'
        assert not Reimbursement.objects.exists()

    def test_custom_tax_rate(self, claimant_client, reimbursement_data):
        reimbursement_data['tax_rate'] = '0'
        response = claimant_client.post(
            reverse('reimbursements:reimbursement-list'), reimbursement_data, format='json'
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['tax_amount'] == '0.00'
        assert response.data['net_amount'] == '250.00'

    def test_tax_rate_above_one_rejected(self, claimant_client, reimbursement_data):
        reimbursement_data['tax_rate'] = '1.5'
        response = claimant_client.post(
            reverse('reimbursements:reimbursement-list'), reimbursement_data, format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'tax_rate' in response.data

    def test_missing_required_fields(self, claimant_client):
        response = claimant_client.post(
            reverse('reimbursements:reimbursement-list'), {'total_amount': '10.00'}, format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        for field in ('title', 'description', 'category', 'purpose', 'payment_method', 'payment_date'):
            assert field in response.data

    def test_zero_total_rejected(self, claimant_client, reimbursement_data):
        reimbursement_data['total_amount'] = '0.00'
        response = claimant_client.post(
            reverse('reimbursements:reimbursement-list'), reimbursement_data, format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_status_cannot_be_set(self, claimant_client, reimbursement_data):
        reimbursement_data['status'] = 'paid'
        reimbursement_data['director1_approval_status'] = 'approved'
        response = claimant_client.post(
            reverse('reimbursements:reimbursement-list'), reimbursement_data, format='json'
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['status'] == 'pending'
        assert response.data['director1_approval_status'] == 'pending'

    def test_requested_by_other_staff(self, director1_client, reimbursement_data, claimant, director1):
        reimbursement_data['requested_by'] = str(claimant.id)
        response = director1_client.post(
            reverse('reimbursements:reimbursement-list'), reimbursement_data, format='json'
        )

        assert response.status_code == status.HTTP_201_CREATED
        reimbursement = Reimbursement.objects.get()
        assert reimbursement.requested_by == claimant
        assert reimbursement.created_by == director1

    def test_requires_authentication(self, api_client, reimbursement_data):
        response = api_client.post(
            reverse('reimbursements:reimbursement-list'), reimbursement_data, format='json'
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestListReimbursements:
    """Tests for GET /api/reimbursements/"""

    def test_filters(self, claimant_client, make_reimbursement, director1):
        travel = make_reimbursement(category='travel', priority='urgent')
        make_reimbursement(category='fuel', brand_code='AURUM')
        approved = make_reimbursement(title='Hotel in Paris', category='accommodation')
        approved.record_decision(stage='director1', approved=True, actor=director1, comments='Fine')

        url = reverse('reimbursements:reimbursement-list')

        response = claimant_client.get(url, {'category': 'travel'})
        assert [r['id'] for r in response.data['results']] == [str(travel.id)]

        response = claimant_client.get(url, {'priority': 'urgent'})
        assert response.data['count'] == 1

        response = claimant_client.get(url, {'brand_code': 'AURUM'})
        assert response.data['count'] == 1

        response = claimant_client.get(url, {'approval_stage': 'director2'})
        assert [r['id'] for r in response.data['results']] == [str(approved.id)]

        response = claimant_client.get(url, {'search': 'paris'})
        assert response.data['count'] == 1

    def test_date_range(self, claimant_client, make_reimbursement):
        make_reimbursement(payment_date=datetime.date(2026, 1, 10))
        make_reimbursement(payment_date=datetime.date(2026, 3, 10))

        response = claimant_client.get(
            reverse('reimbursements:reimbursement-list'),
            {'date_from': '2026-02-01', 'date_to': '2026-04-01'}
        )
        assert response.data['count'] == 1

    def test_invalid_date_range(self, claimant_client):
        response = claimant_client.get(
            reverse('reimbursements:reimbursement-list'),
            {'date_from': '2026-05-01', 'date_to': '2026-04-01'}
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_retrieve(self, claimant_client, reimbursement):
        response = claimant_client.get(
            reverse('reimbursements:reimbursement-detail', kwargs={'pk': reimbursement.id})
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['requested_by_name'] == 'Sami Claimant'
        assert response.data['tax_rate'] == '0.2000'


@pytest.mark.django_db
class TestStageDecisions:
    """Tests for PUT /api/reimbursements/{id}/approve-*/"""

    def test_director1_approves(self, director1_client, reimbursement, director1):
        response = director1_client.put(
            decision_url('approve-director1', reimbursement),
            {'approved': True, 'comments': 'Within budget'},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'director1_approved'
        assert response.data['director1_approved_by'] == director1.id
        assert response.data['director1_approved_by_name'] == 'Dina First'
        assert response.data['director1_comments'] == 'Within budget'
        assert response.data['available_actions'] == ['approve-director2']

    def test_comments_required(self, director1_client, reimbursement):
        response = director1_client.put(
            decision_url('approve-director1', reimbursement),
            {'approved': True},
            format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'comments' in response.data

    def test_rejection_reason_required(self, director1_client, reimbursement):
        response = director1_client.put(
            decision_url('approve-director1', reimbursement),
            {'approved': False, 'comments': 'No'},
            format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'rejection_reason' in response.data

    def test_rejection_is_final(self, director1_client, director2_client, reimbursement, director1):
        response = director1_client.put(
            decision_url('approve-director1', reimbursement),
            {'approved': False, 'comments': 'Declined', 'rejection_reason': 'Personal expense'},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'rejected'
        assert response.data['rejection_reason'] == 'Personal expense'
        assert response.data['rejected_by'] == director1.id
        assert response.data['available_actions'] == []

        response = director2_client.put(
            decision_url('approve-director2', reimbursement),
            {'approved': True, 'comments': 'Looks fine'},
            format='json'
        )
        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['code'] == 'illegal_transition'

    def test_out_of_sequence_is_conflict_for_right_role(self, director2_client, reimbursement):
        response = director2_client.put(
            decision_url('approve-director2', reimbursement),
            {'approved': True, 'comments': 'Jumping ahead'},
            format='json'
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        reimbursement.refresh_from_db()
        assert reimbursement.director2_approval_status == 'pending'

    def test_out_of_sequence_is_conflict_for_wrong_role(self, claimant_client, reimbursement):
        response = claimant_client.put(
            decision_url('approve-accountant', reimbursement),
            {'approved': True, 'comments': 'Me'},
            format='json'
        )

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_wrong_role_forbidden(self, claimant_client, director2_client, reimbursement):
        response = claimant_client.put(
            decision_url('approve-director1', reimbursement),
            {'approved': True, 'comments': 'Approving my own claim'},
            format='json'
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['code'] == 'stage_forbidden'

        response = director2_client.put(
            decision_url('approve-director1', reimbursement),
            {'approved': True, 'comments': 'Covering'},
            format='json'
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_superuser_may_decide_any_stage(self, superuser_client, reimbursement):
        for name in ('approve-director1', 'approve-director2', 'approve-accountant'):
            response = superuser_client.put(
                decision_url(name, reimbursement),
                {'approved': True, 'comments': 'Admin override'},
                format='json'
            )
            assert response.status_code == status.HTTP_200_OK

        assert response.data['status'] == 'fully_approved'

    def test_already_decided_is_conflict(self, director1_client, reimbursement):
        url = decision_url('approve-director1', reimbursement)
        director1_client.put(url, {'approved': True, 'comments': 'Yes'}, format='json')

        response = director1_client.put(url, {'approved': True, 'comments': 'Yes again'}, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_unknown_reimbursement(self, director1_client):
        response = director1_client.put(
            reverse('reimbursements:reimbursement-approve-director1',
                    kwargs={'pk': '00000000-0000-0000-0000-000000000000'}),
            {'approved': True, 'comments': 'Yes'},
            format='json'
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_accountant_records_payment_reference(self, accountant_client, reimbursement,
                                                  director1, director2):
        reimbursement.record_decision(stage='director1', approved=True, actor=director1, comments='OK')
        reimbursement.record_decision(stage='director2', approved=True, actor=director2, comments='OK')

        response = accountant_client.put(
            decision_url('approve-accountant', reimbursement),
            {'approved': True, 'comments': 'Booked', 'payment_reference': 'BACS-0042'},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'fully_approved'
        assert response.data['payment_reference'] == 'BACS-0042'
        assert response.data['payment_completed_at'] is None


@pytest.mark.django_db
class TestCompletePayment:
    """Tests for PUT /api/reimbursements/{id}/complete-payment/"""

    def test_complete_payment(self, accountant_client, fully_approved, accountant):
        response = accountant_client.put(
            decision_url('complete-payment', fully_approved),
            {'payment_reference': 'BACS-0099', 'comments': 'Paid Friday run'},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'paid'
        assert response.data['payment_reference'] == 'BACS-0099'
        assert response.data['processed_by'] == accountant.id
        assert response.data['payment_completed_at'] is not None
        assert 'Paid Friday run' in response.data['accounting_notes']

    def test_before_full_approval_is_conflict(self, accountant_client, reimbursement):
        response = accountant_client.put(
            decision_url('complete-payment', reimbursement),
            {'payment_reference': 'BACS-1'},
            format='json'
        )

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_wrong_role_forbidden(self, director1_client, fully_approved):
        response = director1_client.put(
            decision_url('complete-payment', fully_approved),
            {'payment_reference': 'BACS-1'},
            format='json'
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_reference_required(self, accountant_client, fully_approved):
        response = accountant_client.put(
            decision_url('complete-payment', fully_approved), {}, format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'payment_reference' in response.data

    def test_paid_only_once(self, accountant_client, fully_approved):
        url = decision_url('complete-payment', fully_approved)
        accountant_client.put(url, {'payment_reference': 'BACS-1'}, format='json')

        response = accountant_client.put(url, {'payment_reference': 'BACS-2'}, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT
        fully_approved.refresh_from_db()
        assert fully_approved.payment_reference == 'BACS-1'


@pytest.mark.django_db
class TestPendingApprovals:
    """Tests for GET /api/reimbursements/pending-approvals/"""

    def test_queue_per_stage(self, director1_client, director2_client, make_reimbursement, director1):
        first = make_reimbursement(title='First')
        second = make_reimbursement(title='Second')
        second.record_decision(stage='director1', approved=True, actor=director1, comments='OK')

        url = reverse('reimbursements:reimbursement-pending-approvals')

        response = director1_client.get(url)
        assert response.status_code == status.HTTP_200_OK
        assert [r['reimbursement_id'] for r in response.data['results']] == [str(first.id)]
        assert response.data['results'][0]['approval_stage'] == 'director1'

        response = director2_client.get(url)
        assert [r['reimbursement_id'] for r in response.data['results']] == [str(second.id)]
        assert response.data['results'][0]['approval_stage'] == 'director2'

    def test_superuser_sees_every_stage(self, superuser_client, make_reimbursement, director1):
        make_reimbursement()
        advanced = make_reimbursement()
        advanced.record_decision(stage='director1', approved=True, actor=director1, comments='OK')

        response = superuser_client.get(reverse('reimbursements:reimbursement-pending-approvals'))

        assert response.data['count'] == 2
        assert len(response.data['results']) == 2

    def test_paginated(self, director1_client, make_reimbursement):
        for n in range(3):
            make_reimbursement(title=f'Crate {n}')

        url = reverse('reimbursements:reimbursement-pending-approvals')
        response = director1_client.get(url, {'page_size': 2})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 3
        assert len(response.data['results']) == 2
        assert response.data['next'] is not None

        response = director1_client.get(url, {'page_size': 2, 'page': 2})
        assert [r['title'] for r in response.data['results']] == ['Crate 2']

    def test_staff_forbidden(self, claimant_client):
        response = claimant_client.get(reverse('reimbursements:reimbursement-pending-approvals'))

        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
class TestReimbursementStats:
    """Tests for GET /api/reimbursements/stats/"""

    def test_stats(self, claimant_client, make_reimbursement, fully_approved):
        make_reimbursement(category='fuel', total_amount=Decimal('40.00'))

        response = claimant_client.get(reverse('reimbursements:reimbursement-stats'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total_reimbursements'] == 2
        assert response.data['total_amount'] == '290.00'
        assert response.data['approved_amount'] == '250.00'
        assert response.data['by_status']['fully_approved'] == 1
        assert response.data['by_status']['paid'] == 0
        assert response.data['by_category']['fuel'] == 1
        assert response.data['pending_director1'] == 1
        assert response.data['awaiting_payment'] == 1


@pytest.mark.django_db
class TestReceiptUpload:
    """Tests for POST /api/reimbursements/receipts/"""

    @pytest.fixture(autouse=True)
    def media_root(self, settings, tmp_path):
        settings.MEDIA_ROOT = str(tmp_path)
        return tmp_path

    def test_upload(self, claimant_client, media_root):
        files = [
            SimpleUploadedFile('taxi.pdf', b'%PDF-1.4 receipt', content_type='application/pdf'),
            SimpleUploadedFile('hotel.JPG', b'\xff\xd8\xff receipt', content_type='image/jpeg'),
        ]
        response = claimant_client.post(
            reverse('reimbursements:reimbursement-receipts'), {'files': files}, format='multipart'
        )

        assert response.status_code == status.HTTP_201_CREATED
        urls = response.data['urls']
        assert len(urls) == 2
        assert urls[0].startswith('/media/receipts/') and urls[0].endswith('.pdf')
        assert urls[1].endswith('.jpg')
        assert len(list(media_root.rglob('*.*'))) == 2

    def test_rejects_unsupported_type(self, claimant_client, media_root):
        files = [
            SimpleUploadedFile('ok.png', b'\x89PNG', content_type='image/png'),
            SimpleUploadedFile('notes.txt', b'hello', content_type='text/plain'),
        ]
        response = claimant_client.post(
            reverse('reimbursements:reimbursement-receipts'), {'files': files}, format='multipart'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'invalid_receipt'
        assert list(media_root.rglob('*.*')) == []

    def test_rejects_oversized(self, claimant_client, settings):
        settings.RECEIPT_MAX_UPLOAD_BYTES = 10
        response = claimant_client.post(
            reverse('reimbursements:reimbursement-receipts'),
            {'files': [SimpleUploadedFile('big.pdf', b'x' * 11, content_type='application/pdf')]},
            format='multipart'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'exceeds' in response.data['error']

    def test_no_files(self, claimant_client):
        response = claimant_client.post(
            reverse('reimbursements:reimbursement-receipts'), {}, format='multipart'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
