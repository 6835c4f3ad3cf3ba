# Generated manually for the refunds app

import uuid
from decimal import Decimal
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import migrations, models
import django.db.models.deletion


def cost_field():
    return models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12, validators=[MinValueValidator(Decimal('0.00'))])


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('invoices', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Refund',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('refund_number', models.CharField(editable=False, max_length=32, unique=True)),
                ('brand_code', models.CharField(choices=[('MSABER', 'Mohammed Saber'), ('AURUM', 'Aurum'), ('METSAB', 'Metsab')], db_index=True, default='MSABER', max_length=10)),
                ('type', models.CharField(choices=[('refund_of_artwork', 'Refund of Artwork'), ('refund_of_courier_difference', 'Refund of Courier Difference')], max_length=40)),
                ('reason', models.TextField()),
                ('amount', models.DecimalField(decimal_places=2, editable=False, max_digits=12)),
                ('refund_method', models.CharField(choices=[('bank_transfer', 'Bank Transfer'), ('credit_card', 'Credit Card'), ('cheque', 'Cheque'), ('cash', 'Cash'), ('store_credit', 'Store Credit')], max_length=20)),
                ('hammer_price', cost_field()),
                ('buyers_premium', cost_field()),
                ('international_shipping_cost', cost_field()),
                ('local_shipping_cost', cost_field()),
                ('handling_insurance_cost', cost_field()),
                ('internal_notes', models.TextField(blank=True)),
                ('client_notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('created_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='refunds_created', to=settings.AUTH_USER_MODEL)),
                ('invoice', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='refunds', to='invoices.invoice')),
                ('item_returned_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='refunds_returned', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'refunds',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['brand_code', 'type'], name='refunds_brand_type_idx'),
                    models.Index(fields=['refund_number'], name='refunds_number_idx'),
                ],
            },
        ),
    ]
