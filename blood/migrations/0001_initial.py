from django.conf import settings
import django.core.validators
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('appointment', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='ActivityLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('description', models.CharField(max_length=255)),
                ('activity_type', models.CharField(choices=[('EMERGENCY_BROADCAST', 'Emergency broadcast'), ('EMERGENCY_FULFILLMENT', 'Emergency fulfillment'), ('APPOINTMENT_BOOKED', 'Appointment booked'), ('DONATION_COMPLETED', 'Donation completed'), ('LAB_RESULT', 'Lab result'), ('STOCK_ADDED', 'Stock added')], max_length=32)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'ordering': ['-created_at', '-id'],
            },
        ),
        migrations.CreateModel(
            name='EmergencyRequest',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('blood_type', models.CharField(max_length=8)),
                ('units_requested', models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ('units_fulfilled', models.PositiveIntegerField(default=0)),
                ('hospital', models.CharField(max_length=160)),
                ('urgency', models.CharField(choices=[('CRITICAL', 'Critical'), ('HIGH', 'High'), ('MODERATE', 'Moderate')], default='CRITICAL', max_length=32)),
                ('status', models.CharField(choices=[('OPEN', 'Open'), ('PARTIAL', 'Partially fulfilled'), ('FULFILLED', 'Fulfilled')], default='OPEN', max_length=24)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'ordering': ['-created_at', '-id'],
                'constraints': [models.CheckConstraint(condition=models.Q(('units_fulfilled__lte', models.F('units_requested'))), name='emergency_units_fulfilled_lte_requested')],
            },
        ),
        migrations.CreateModel(
            name='InventoryBag',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('blood_type', models.CharField(max_length=10)),
                ('quantity', models.PositiveIntegerField(default=1)),
                ('expiry_date', models.DateField(blank=True, null=True)),
                ('status', models.CharField(choices=[('UNTESTED', 'Untested'), ('AVAILABLE', 'Available'), ('USED', 'Used'), ('DISCARDED', 'Discarded')], default='UNTESTED', max_length=16)),
                ('test_status', models.CharField(choices=[('PENDING', 'Pending'), ('TESTED', 'Tested')], default='PENDING', max_length=16)),
                ('safety_flag', models.CharField(blank=True, choices=[('SAFE', 'Safe'), ('BIOHAZARD', 'Biohazard')], max_length=16, null=True)),
                ('donor_name', models.CharField(blank=True, max_length=120)),
                ('collected_at', models.DateTimeField(blank=True, null=True)),
                ('hiv_positive', models.BooleanField(default=False)),
                ('hepatitis_positive', models.BooleanField(default=False)),
                ('malaria_positive', models.BooleanField(default=False)),
                ('lab_notes', models.CharField(blank=True, max_length=255)),
                ('tested_at', models.DateTimeField(blank=True, null=True)),
                ('donor_user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='donated_bags', to=settings.AUTH_USER_MODEL)),
                ('source_appointment', models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='inventory_bag', to='appointment.appointment')),
            ],
            options={
                'verbose_name': 'Inventory Bag',
                'verbose_name_plural': 'Inventory Bags',
                'ordering': ['expiry_date', 'id'],
            },
        ),
    ]
