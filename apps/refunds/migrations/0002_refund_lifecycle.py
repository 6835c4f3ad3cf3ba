# Generated manually for the refunds app

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


def staff_link(related_name):
    return models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name=related_name, to=settings.AUTH_USER_MODEL)


class Migration(migrations.Migration):

    dependencies = [
        ('refunds', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.AddField(
            model_name='refund',
            name='status',
            field=models.CharField(choices=[('pending', 'Pending'), ('approved', 'Approved'), ('processing', 'Processing'), ('completed', 'Completed'), ('cancelled', 'Cancelled'), ('failed', 'Failed')], db_index=True, default='pending', editable=False, max_length=20),
        ),
        migrations.AddField(
            model_name='refund',
            name='approved_by',
            field=staff_link('refunds_approved'),
        ),
        migrations.AddField(
            model_name='refund',
            name='approved_at',
            field=models.DateTimeField(blank=True, null=True),
        ),
        migrations.AddField(
            model_name='refund',
            name='approval_comments',
            field=models.TextField(blank=True),
        ),
        migrations.AddField(
            model_name='refund',
            name='processed_by',
            field=staff_link('refunds_processed'),
        ),
        migrations.AddField(
            model_name='refund',
            name='processed_at',
            field=models.DateTimeField(blank=True, null=True),
        ),
        migrations.AddField(
            model_name='refund',
            name='refund_date',
            field=models.DateField(blank=True, null=True),
        ),
        migrations.AddField(
            model_name='refund',
            name='payment_reference',
            field=models.CharField(blank=True, max_length=100),
        ),
        migrations.AddField(
            model_name='refund',
            name='cancelled_by',
            field=staff_link('refunds_cancelled'),
        ),
        migrations.AddField(
            model_name='refund',
            name='cancelled_at',
            field=models.DateTimeField(blank=True, null=True),
        ),
        migrations.AddField(
            model_name='refund',
            name='cancellation_reason',
            field=models.TextField(blank=True),
        ),
        migrations.AddIndex(
            model_name='refund',
            index=models.Index(fields=['brand_code', 'status'], name='refunds_brand_status_idx'),
        ),
    ]
