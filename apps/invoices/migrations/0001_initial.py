# Generated manually for the invoices app

from decimal import Decimal
from django.core.validators import MinValueValidator
from django.db import migrations, models


def money_field():
    return models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12, validators=[MinValueValidator(Decimal('0.00'))])


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Invoice',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('invoice_number', models.CharField(max_length=50, unique=True)),
                ('brand_code', models.CharField(choices=[('MSABER', 'Mohammed Saber'), ('AURUM', 'Aurum'), ('METSAB', 'Metsab')], db_index=True, default='MSABER', max_length=10)),
                ('client_name', models.CharField(max_length=200)),
                ('client_email', models.EmailField(blank=True, max_length=254)),
                ('auction_name', models.CharField(blank=True, max_length=200)),
                ('lot_number', models.CharField(blank=True, max_length=20)),
                ('item_title', models.CharField(blank=True, max_length=300)),
                ('hammer_price', money_field()),
                ('buyers_premium', money_field()),
                ('international_surcharge', money_field()),
                ('shipping_charge', money_field()),
                ('handling_charge', money_field()),
                ('insurance_charge', money_field()),
                ('currency', models.CharField(default='GBP', max_length=3)),
                ('status', models.CharField(choices=[('unpaid', 'Unpaid'), ('paid', 'Paid'), ('cancelled', 'Cancelled')], default='unpaid', max_length=20)),
                ('paid_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'invoices',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['brand_code', 'status'], name='invoices_brand_status_idx'),
                    models.Index(fields=['auction_name'], name='invoices_auction_idx'),
                ],
            },
        ),
    ]
