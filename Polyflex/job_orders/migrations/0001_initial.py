from decimal import Decimal

import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='JobOrder',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('customer_name', models.CharField(blank=True, max_length=150)),
                ('item_description', models.CharField(blank=True, max_length=200)),
                ('size_details', models.CharField(blank=True, max_length=100)),
                ('thickness', models.DecimalField(blank=True, decimal_places=3, max_digits=8, null=True)),
                ('is_printed', models.BooleanField(default=False)),
                ('notes', models.TextField(blank=True)),
                ('quantity', models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0'))])),
                ('produced_quantity', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12)),
                ('waste_quantity', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12)),
                ('production_status', models.CharField(choices=[('Not Started', 'Not Started'), ('In Progress', 'In Progress'), ('Completed', 'Completed'), ('Overproduced', 'Overproduced')], default='Not Started', max_length=20)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('in_progress', 'In progress'), ('completed', 'Completed'), ('cancelled', 'Cancelled')], default='pending', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'verbose_name': 'Job Order',
                'verbose_name_plural': 'Job Orders',
                'ordering': ['-created_at', '-id'],
            },
        ),
    ]
