from decimal import Decimal

import django.core.validators
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('menus', '0001_initial'),
        ('services', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Booking',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('reference', models.CharField(editable=False, max_length=16, unique=True)),
                ('is_custom_order', models.BooleanField(default=False)),
                ('menu_name', models.CharField(max_length=200)),
                ('menu_base_price', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('location_name', models.CharField(blank=True, max_length=200)),
                ('service_name', models.CharField(blank=True, max_length=200)),
                ('customer_name', models.CharField(max_length=100)),
                ('customer_email', models.EmailField(max_length=254)),
                ('customer_phone', models.CharField(max_length=15)),
                ('special_instructions', models.TextField(blank=True)),
                ('dietary_requirements', models.JSONField(blank=True, default=list)),
                ('spice_level', models.CharField(choices=[('mild', 'Mild'), ('medium', 'Medium'), ('hot', 'Hot'), ('extra-hot', 'Extra hot')], default='medium', max_length=10)),
                ('attendee_count', models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ('selection', models.JSONField(blank=True, default=dict)),
                ('selected_items', models.JSONField(blank=True, default=list)),
                ('base_price', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('modifiers_price', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('addons_price', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('venue_charge', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('subtotal', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('discount_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('total', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('price_breakdown', models.JSONField(blank=True, default=dict)),
                ('coupon_code', models.CharField(blank=True, max_length=20)),
                ('delivery_type', models.CharField(choices=[('Pickup', 'Pickup'), ('Delivery', 'Delivery'), ('Event', 'Event')], max_length=10)),
                ('delivery_date', models.DateTimeField()),
                ('address', models.JSONField(blank=True, null=True)),
                ('venue_selection', models.CharField(blank=True, choices=[('both', 'Indoor & outdoor'), ('indoor', 'Indoor'), ('outdoor', 'Outdoor')], max_length=10)),
                ('is_function', models.BooleanField(default=False)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('confirmed', 'Confirmed'), ('preparing', 'Preparing'), ('ready', 'Ready'), ('completed', 'Completed'), ('cancelled', 'Cancelled')], default='pending', max_length=20)),
                ('payment_status', models.CharField(choices=[('pending', 'Pending'), ('deposit_paid', 'Deposit paid'), ('fully_paid', 'Fully paid')], default='pending', max_length=20)),
                ('deposit_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('order_date', models.DateTimeField(default=django.utils.timezone.now)),
                ('admin_notes', models.TextField(blank=True)),
                ('cancellation_reason', models.TextField(blank=True)),
                ('is_deleted', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('custom_order', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='bookings', to='menus.customorderconfiguration')),
                ('location', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='bookings', to='services.location')),
                ('package', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='bookings', to='menus.packagedefinition')),
                ('service', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='bookings', to='services.service')),
            ],
            options={
                'ordering': ['-order_date', '-id'],
                'indexes': [
                    models.Index(fields=['status', 'delivery_date'], name='booking_status_delivery_idx'),
                    models.Index(fields=['customer_email'], name='booking_customer_email_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('attendee_count__gte', 1)), name='booking_attendee_count_positive'),
                    models.CheckConstraint(condition=models.Q(('total__gte', 0)), name='booking_total_non_negative'),
                    models.CheckConstraint(condition=models.Q(('deposit_amount__gte', 0)), name='booking_deposit_non_negative'),
                ],
            },
        ),
    ]
