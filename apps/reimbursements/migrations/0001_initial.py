# Generated manually for the reimbursements app

import uuid
from decimal import Decimal
from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import migrations, models
import django.db.models.deletion

import apps.reimbursements.models


APPROVAL_CHOICES = [('pending', 'Pending'), ('approved', 'Approved'), ('rejected', 'Rejected')]


def approval_status_field():
    return models.CharField(choices=APPROVAL_CHOICES, default='pending', editable=False, max_length=10)


def approver_field(stage):
    return models.ForeignKey(blank=True, editable=False, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name=f'{stage}_reimbursement_decisions', to=settings.AUTH_USER_MODEL)


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Reimbursement',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('reimbursement_number', models.CharField(editable=False, max_length=32, unique=True)),
                ('brand_code', models.CharField(choices=[('MSABER', 'Mohammed Saber'), ('AURUM', 'Aurum'), ('METSAB', 'Metsab')], db_index=True, default='MSABER', max_length=10)),
                ('title', models.CharField(max_length=200)),
                ('description', models.TextField()),
                ('category', models.CharField(choices=[('food', 'Food'), ('fuel', 'Fuel'), ('internal_logistics', 'Internal Logistics'), ('international_logistics', 'International Logistics'), ('stationary', 'Stationary'), ('travel', 'Travel'), ('accommodation', 'Accommodation'), ('other', 'Other')], max_length=30)),
                ('purpose', models.TextField()),
                ('priority', models.CharField(choices=[('low', 'Low'), ('normal', 'Normal'), ('high', 'High'), ('urgent', 'Urgent')], default='normal', max_length=10)),
                ('total_amount', models.DecimalField(decimal_places=2, max_digits=12, validators=[MinValueValidator(Decimal('0.01'))])),
                ('currency', models.CharField(default=apps.reimbursements.models.default_currency, max_length=3)),
                ('tax_rate', models.DecimalField(decimal_places=4, default=apps.reimbursements.models.default_tax_rate, max_digits=5, validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('1'))])),
                ('tax_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), editable=False, max_digits=12)),
                ('net_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), editable=False, max_digits=12)),
                ('payment_method', models.CharField(choices=[('cash', 'Cash'), ('card', 'Card'), ('bank_transfer', 'Bank Transfer'), ('other', 'Other')], max_length=20)),
                ('payment_date', models.DateField()),
                ('vendor_name', models.CharField(blank=True, max_length=200)),
                ('vendor_details', models.TextField(blank=True)),
                ('receipt_urls', models.JSONField(blank=True, default=list)),
                ('receipt_numbers', models.CharField(blank=True, max_length=200)),
                ('has_receipts', models.BooleanField(default=False)),
                ('department', models.CharField(blank=True, max_length=100)),
                ('project_code', models.CharField(blank=True, max_length=50)),
                ('cost_center', models.CharField(blank=True, max_length=50)),
                ('expected_payment_date', models.DateField(blank=True, null=True)),
                ('internal_notes', models.TextField(blank=True)),
                ('accounting_notes', models.TextField(blank=True)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('director1_approved', 'Director 1 Approved'), ('director2_approved', 'Director 2 Approved'), ('fully_approved', 'Fully Approved'), ('paid', 'Paid'), ('rejected', 'Rejected')], db_index=True, default='pending', editable=False, max_length=20)),
                ('director1_approval_status', approval_status_field()),
                ('director1_approved_at', models.DateTimeField(blank=True, editable=False, null=True)),
                ('director1_comments', models.TextField(blank=True, editable=False)),
                ('director2_approval_status', approval_status_field()),
                ('director2_approved_at', models.DateTimeField(blank=True, editable=False, null=True)),
                ('director2_comments', models.TextField(blank=True, editable=False)),
                ('accountant_approval_status', approval_status_field()),
                ('accountant_approved_at', models.DateTimeField(blank=True, editable=False, null=True)),
                ('accountant_comments', models.TextField(blank=True, editable=False)),
                ('rejection_reason', models.TextField(blank=True, editable=False)),
                ('rejected_at', models.DateTimeField(blank=True, editable=False, null=True)),
                ('payment_reference', models.CharField(blank=True, editable=False, max_length=100)),
                ('payment_completed_at', models.DateTimeField(blank=True, editable=False, null=True)),
                ('processed_at', models.DateTimeField(blank=True, editable=False, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('requested_by', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='reimbursements_requested', to=settings.AUTH_USER_MODEL)),
                ('created_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='reimbursements_created', to=settings.AUTH_USER_MODEL)),
                ('director1_approved_by', approver_field('director1')),
                ('director2_approved_by', approver_field('director2')),
                ('accountant_approved_by', approver_field('accountant')),
                ('rejected_by', approver_field('rejected')),
                ('processed_by', approver_field('processed')),
            ],
            options={
                'db_table': 'reimbursements',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['brand_code', 'status'], name='reimb_brand_status_idx'),
                    models.Index(fields=['requested_by', 'status'], name='reimb_requester_status_idx'),
                ],
            },
        ),
    ]
