from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('donor', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='BookingLock',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('center_type', models.CharField(choices=[('HOSPITAL', 'Hospital'), ('CAMP', 'Camp')], max_length=16)),
                ('center_id', models.PositiveBigIntegerField()),
                ('date', models.DateField()),
            ],
            options={
                'constraints': [models.UniqueConstraint(fields=('center_type', 'center_id', 'date'), name='unique_booking_lock_per_center_day')],
            },
        ),
        migrations.CreateModel(
            name='Camp',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=120)),
                ('location', models.CharField(blank=True, max_length=160)),
                ('district', models.CharField(blank=True, max_length=60)),
                ('province', models.CharField(blank=True, max_length=60)),
                ('nearest_hospital', models.CharField(blank=True, max_length=120)),
                ('latitude', models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True)),
                ('longitude', models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True)),
                ('date', models.DateField()),
                ('start_time', models.TimeField()),
                ('end_time', models.TimeField()),
            ],
            options={
                'ordering': ['date', 'start_time', 'id'],
            },
        ),
        migrations.CreateModel(
            name='Appointment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('donor_name', models.CharField(blank=True, max_length=120)),
                ('center_type', models.CharField(choices=[('HOSPITAL', 'Hospital'), ('CAMP', 'Camp')], default='HOSPITAL', max_length=16)),
                ('center_id', models.PositiveBigIntegerField()),
                ('center_name', models.CharField(blank=True, max_length=160)),
                ('date', models.DateField()),
                ('time', models.TimeField()),
                ('status', models.CharField(choices=[('Scheduled', 'Scheduled'), ('Approved', 'Approved'), ('Rescheduled', 'Rescheduled'), ('No Show', 'No Show'), ('Completed', 'Completed'), ('Cancelled', 'Cancelled')], default='Scheduled', max_length=16)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('donor', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='appointments', to='donor.donor')),
                ('donor_user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='donation_appointments', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-date', '-time', '-id'],
                'indexes': [models.Index(fields=['center_type', 'center_id', 'date'], name='appointment_center_day_idx')],
            },
        ),
    ]
