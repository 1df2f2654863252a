import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('job_orders', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Roll',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('roll_identification', models.CharField(blank=True, max_length=40, unique=True)),
                ('roll_number', models.PositiveIntegerField(blank=True)),
                ('extruding_qty', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('printing_qty', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('cutting_qty', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('status', models.CharField(choices=[('For Printing', 'For printing'), ('For Cutting', 'For cutting'), ('For Receiving', 'For receiving'), ('Received', 'Received')], default='For Printing', max_length=20)),
                ('notes', models.CharField(blank=True, max_length=200, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('extruded_at', models.DateTimeField(blank=True, null=True)),
                ('printed_at', models.DateTimeField(blank=True, null=True)),
                ('cut_at', models.DateTimeField(blank=True, null=True)),
                ('received_at', models.DateTimeField(blank=True, null=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='rolls_created', to=settings.AUTH_USER_MODEL)),
                ('cut_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='rolls_cut', to=settings.AUTH_USER_MODEL)),
                ('extruded_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='rolls_extruded', to=settings.AUTH_USER_MODEL)),
                ('job_order', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='rolls', to='job_orders.joborder')),
                ('printed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='rolls_printed', to=settings.AUTH_USER_MODEL)),
                ('received_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='rolls_received', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['job_order_id', 'roll_number'],
                'constraints': [models.UniqueConstraint(fields=('job_order', 'roll_number'), name='roll_unique_number_per_job_order')],
            },
        ),
    ]
