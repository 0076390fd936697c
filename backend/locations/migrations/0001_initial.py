# Generated migration for initial locations app setup

import django.core.validators
import uuid
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Place',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(help_text='The official name of the place', max_length=255)),
                ('address', models.CharField(blank=True, default='', max_length=512)),
                ('city', models.CharField(blank=True, default='', max_length=120)),
                ('latitude', models.FloatField(blank=True, null=True, validators=[django.core.validators.MinValueValidator(-90), django.core.validators.MaxValueValidator(90)])),
                ('longitude', models.FloatField(blank=True, null=True, validators=[django.core.validators.MinValueValidator(-180), django.core.validators.MaxValueValidator(180)])),
                ('category', models.CharField(blank=True, choices=[('RESTAURANT', 'Restaurant'), ('CAFE', 'Cafe'), ('BAR', 'Bar'), ('MUSEUM', 'Museum'), ('GALLERY', 'Gallery'), ('PARK', 'Park'), ('BEACH', 'Beach'), ('VIEWPOINT', 'Viewpoint'), ('NIGHTCLUB', 'Nightclub'), ('MARKET', 'Market'), ('SHOP', 'Shop'), ('MONUMENT', 'Monument'), ('LANDMARK', 'Landmark'), ('TOUR', 'Tour'), ('ACTIVITY', 'Activity'), ('HOTEL', 'Hotel'), ('HOSTEL', 'Hostel'), ('HIDDEN_GEM', 'Hidden Gem'), ('OTHER', 'Other')], help_text='Classification: RESTAURANT, MUSEUM, PARK etc.', max_length=20, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'locations_place',
                'indexes': [models.Index(fields=['category'], name='locations_place_category_idx')],
            },
        ),
    ]
