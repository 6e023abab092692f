import django.core.validators
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('services', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='CatalogItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('price', models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(0)])),
                ('category', models.CharField(choices=[('entree', 'Entree'), ('mains', 'Mains'), ('desserts', 'Desserts'), ('addons', 'Addons')], max_length=20)),
                ('is_vegetarian', models.BooleanField(default=False)),
                ('is_vegan', models.BooleanField(default=False)),
                ('allergens', models.JSONField(blank=True, default=list)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['category', 'name', 'id'],
                'constraints': [models.CheckConstraint(condition=models.Q(('price__gte', 0)), name='catalog_item_price_non_negative')],
            },
        ),
        migrations.CreateModel(
            name='PackageDefinition',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('base_price', models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(0)])),
                ('min_attendees', models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)])),
                ('max_attendees', models.PositiveIntegerField(default=1000, validators=[django.core.validators.MinValueValidator(1)])),
                ('package_type', models.CharField(choices=[('categorized', 'Categorized'), ('simple', 'Simple')], default='categorized', max_length=20)),
                ('categories', models.JSONField(blank=True, default=list)),
                ('simple_items', models.JSONField(blank=True, default=list)),
                ('addons', models.JSONField(blank=True, default=dict)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('location', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='packages', to='services.location')),
                ('service', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='packages', to='services.service')),
            ],
            options={
                'ordering': ['location_id', 'name', 'id'],
                'constraints': [
                    models.UniqueConstraint(fields=('name', 'service'), name='package_unique_name_per_service'),
                    models.CheckConstraint(condition=models.Q(('min_attendees__gte', 1)), name='package_min_attendees_positive'),
                    models.CheckConstraint(condition=models.Q(('min_attendees__lte', models.F('max_attendees'))), name='package_min_lte_max_attendees'),
                ],
            },
        ),
        migrations.CreateModel(
            name='CustomOrderConfiguration',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('min_attendees', models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)])),
                ('max_attendees', models.PositiveIntegerField(default=100, validators=[django.core.validators.MinValueValidator(1)])),
                ('categories', models.JSONField(blank=True, default=list)),
                ('addons', models.JSONField(blank=True, default=dict)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('location', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='custom_orders', to='services.location')),
                ('service', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='custom_orders', to='services.service')),
            ],
            options={
                'ordering': ['location_id', 'name', 'id'],
                'constraints': [
                    models.UniqueConstraint(fields=('name', 'location'), name='custom_order_unique_name_per_location'),
                    models.CheckConstraint(condition=models.Q(('min_attendees__lte', models.F('max_attendees'))), name='custom_order_min_lte_max_attendees'),
                ],
            },
        ),
    ]
