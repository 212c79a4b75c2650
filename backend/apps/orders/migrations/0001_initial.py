from decimal import Decimal
import uuid

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Order',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('order_id', models.CharField(editable=False, help_text='Shareable order code, e.g. KQT-204918', max_length=10, unique=True, validators=[django.core.validators.RegexValidator(message='Order ID must look like ABC-123456', regex='^[A-HJ-NP-Z]{3}-[0-9]{6}$')])),
                ('release_token', models.CharField(editable=False, help_text='Secret that authorizes the buyer to release funds', max_length=64)),
                ('role', models.CharField(choices=[('buyer', 'Buyer'), ('seller', 'Seller')], max_length=10)),
                ('source', models.CharField(help_text='Platform the deal came from', max_length=100)),
                ('first_name', models.CharField(max_length=100)),
                ('last_name', models.CharField(max_length=100)),
                ('email', models.EmailField(max_length=254)),
                ('phone', models.CharField(max_length=20)),
                ('item_details', models.TextField(blank=True, max_length=4000)),
                ('delivery_notes', models.TextField(blank=True, max_length=2000)),
                ('total_price', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('payment_plan', models.CharField(choices=[('full', 'Full payment'), ('down', 'Down payment')], default='full', max_length=10)),
                ('deposit_type', models.CharField(choices=[('percent', 'Percent of total'), ('amount', 'Fixed amount')], default='percent', max_length=10)),
                ('deposit_value', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('notes', models.TextField(blank=True, max_length=2000)),
                ('plan_summary', models.CharField(blank=True, max_length=255)),
                ('calculated_deposit', models.DecimalField(blank=True, decimal_places=2, help_text='Deposit due now (null for full payment or missing inputs)', max_digits=12, null=True)),
                ('balance_due', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('status', models.CharField(choices=[('AWAITING_PAYMENT', 'Awaiting Payment'), ('PAYMENT_CONFIRMED', 'Payment Confirmed'), ('FUNDS_RELEASED', 'Funds Released')], db_index=True, default='AWAITING_PAYMENT', max_length=20)),
                ('escrow_balance', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Funds recorded as held in escrow', max_digits=12)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('paid_at', models.DateTimeField(blank=True, null=True)),
                ('released_at', models.DateTimeField(blank=True, null=True)),
            ],
            options={
                'verbose_name': 'Order',
                'verbose_name_plural': 'Orders',
                'ordering': ['-created_at', '-id'],
                'indexes': [
                    models.Index(fields=['status', '-created_at'], name='orders_status_created_idx'),
                    models.Index(fields=['email', '-created_at'], name='orders_email_created_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='OrderStateLog',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('from_status', models.CharField(blank=True, max_length=20)),
                ('to_status', models.CharField(max_length=20)),
                ('actor', models.CharField(choices=[('system', 'System'), ('admin', 'Admin'), ('buyer', 'Buyer (release token)')], default='system', max_length=10)),
                ('reason', models.TextField(blank=True)),
                ('ip_address', models.GenericIPAddressField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('order', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='state_logs', to='orders.order')),
            ],
            options={
                'verbose_name': 'Order State Log',
                'verbose_name_plural': 'Order State Logs',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['order', '-created_at'], name='orders_log_order_created_idx'),
                ],
            },
        ),
    ]
