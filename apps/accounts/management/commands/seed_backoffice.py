"""
Management command to seed a development database for the back office.

Usage:
    python manage.py seed_backoffice [--clear]

This creates:
- one account per role (admin, director1, director2, accountant, staff)
- paid and unpaid invoices across the three brands
- a handful of reimbursements at different approval stages
"""

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone
from decimal import Decimal
from datetime import date, timedelta

from apps.accounts.models import User, StaffRole, BrandCode
from apps.invoices.models import Invoice, InvoiceStatus
from apps.refunds.models import Refund
from apps.reimbursements.models import Reimbursement
from apps.reimbursements.approval import Stage

PASSWORD = 'password123'


class Command(BaseCommand):
    help = 'Create sample staff, invoices and reimbursements for local development'

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Delete refunds, reimbursements, invoices and non-superuser staff first',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        if options['clear']:
            self.stdout.write('Clearing existing data...')
            self.clear_data()

        self.stdout.write('Creating sample data...')

        users = self.create_users()
        self.create_invoices()
        self.create_reimbursements(users)

        self.stdout.write(self.style.SUCCESS('Sample data created successfully!'))
        self.stdout.write('')
        self.stdout.write('Test accounts:')
        self.stdout.write('  admin@backoffice.test / admin123 (superuser)')
        for key in ('director1', 'director2', 'accountant', 'staff'):
            self.stdout.write(f'  {users[key].email} / {PASSWORD} ({users[key].get_role_display()})')

    def clear_data(self):
        """Remove seeded records; refunds go first because they protect invoices."""
        Refund.objects.all().delete()
        Reimbursement.objects.all().delete()
        Invoice.objects.all().delete()
        User.objects.filter(is_superuser=False).delete()

    def create_users(self):
        """Create one account per role."""
        self.stdout.write('  Creating staff...')

        admin, _ = User.objects.get_or_create(
            email='admin@backoffice.test',
            defaults={
                'display_name': 'Back Office Admin',
                'role': StaffRole.ADMIN,
                'is_staff': True,
                'is_superuser': True,
            }
        )
        admin.set_password('admin123')
        admin.save()

        staff_data = [
            ('director1', 'director1@backoffice.test', 'Huda Saber', StaffRole.DIRECTOR1, 'Management'),
            ('director2', 'director2@backoffice.test', 'Tariq Saber', StaffRole.DIRECTOR2, 'Management'),
            ('accountant', 'accounts@backoffice.test', 'Rania Khalil', StaffRole.ACCOUNTANT, 'Finance'),
            ('staff', 'logistics@backoffice.test', 'Yusuf Amin', StaffRole.STAFF, 'Logistics'),
        ]

        users = {'admin': admin}
        for key, email, name, role, department in staff_data:
            user, _ = User.objects.get_or_create(
                email=email,
                defaults={
                    'display_name': name,
                    'role': role,
                    'department': department,
                    'brand_code': BrandCode.MSABER,
                }
            )
            user.set_password(PASSWORD)
            user.save()
            users[key] = user

        return users

    def create_invoices(self):
        """Create invoices to refund against."""
        self.stdout.write('  Creating invoices...')

        invoices_data = [
            ('MSABER-24001', BrandCode.MSABER, 'Layla Haddad', 'Spring Modern Art', '12',
             'Desert Light, oil on canvas', '4200.00', '1050.00', '320.00', '45.00', '25.00', '18.00',
             InvoiceStatus.PAID),
            ('MSABER-24002', BrandCode.MSABER, 'James Whitfield', 'Spring Modern Art', '27',
             'Untitled (Blue), acrylic', '950.00', '237.50', '0.00', '35.00', '15.00', '6.00',
             InvoiceStatus.PAID),
            ('AURUM-24003', BrandCode.AURUM, 'Mei Tanaka', 'Islamic Manuscripts', '5',
             'Illuminated Quran leaf', '12500.00', '3125.00', '480.00', '60.00', '40.00', '90.00',
             InvoiceStatus.PAID),
            ('AURUM-24004', BrandCode.AURUM, 'Omar Aziz', 'Islamic Manuscripts', '9',
             'Calligraphy panel', '700.00', '175.00', '150.00', '30.00', '15.00', '5.00',
             InvoiceStatus.UNPAID),
            ('METSAB-24005', BrandCode.METSAB, 'Sofia Greco', 'Coins & Medals', '101',
             'Gold dinar, Umayyad', '2300.00', '575.00', '95.00', '20.00', '10.00', '12.00',
             InvoiceStatus.PAID),
        ]

        for (number, brand, client, auction, lot, item, hammer, premium,
             intl, shipping, handling, insurance, invoice_status) in invoices_data:
            Invoice.objects.get_or_create(
                invoice_number=number,
                defaults={
                    'brand_code': brand,
                    'client_name': client,
                    'auction_name': auction,
                    'lot_number': lot,
                    'item_title': item,
                    'hammer_price': Decimal(hammer),
                    'buyers_premium': Decimal(premium),
                    'international_surcharge': Decimal(intl),
                    'shipping_charge': Decimal(shipping),
                    'handling_charge': Decimal(handling),
                    'insurance_charge': Decimal(insurance),
                    'status': invoice_status,
                    'paid_at': timezone.now() if invoice_status == InvoiceStatus.PAID else None,
                }
            )

    def create_reimbursements(self, users):
        """Create reimbursements spread across the approval chain."""
        self.stdout.write('  Creating reimbursements...')

        if Reimbursement.objects.exists():
            self.stdout.write('    Reimbursements already present, skipping')
            return

        today = date.today()
        reimbursements_data = [
            ('Taxi to client viewing', 'travel', '42.50', 'cash', 0),
            ('Packing crates for lot 12', 'internal_logistics', '180.00', 'card', 1),
            ('Export licence courier', 'international_logistics', '265.00', 'bank_transfer', 2),
            ('Catalogue printing paper', 'stationary', '96.40', 'card', 3),
            ('Hotel for Paris preview', 'accommodation', '420.00', 'card', 3),
        ]
        stages = [Stage.DIRECTOR1, Stage.DIRECTOR2, Stage.ACCOUNTANT]

        for index, (title, category, total, method, approvals) in enumerate(reimbursements_data):
            reimbursement = Reimbursement.objects.create(
                brand_code=BrandCode.MSABER,
                title=title,
                description=f'{title} (seeded)',
                category=category,
                purpose='Auction operations',
                total_amount=Decimal(total),
                payment_method=method,
                payment_date=today - timedelta(days=index * 3),
                requested_by=users['staff'],
                created_by=users['staff'],
            )
            for stage in stages[:approvals]:
                reimbursement.record_decision(
                    stage=stage,
                    approved=True,
                    actor=users[stage.value],
                    comments='Approved (seed data)',
                )

        # The last one is paid out
        reimbursement.complete_payment(
            actor=users['accountant'],
            payment_reference='BACS-SEED-0001',
        )
