# Generated migration for recommendations app

from django.db import migrations, models
import django.db.models.deletion
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('moments', '0001_initial'),
        ('user', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='RecommendationScore',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('score', models.FloatField()),
                ('factors', models.JSONField(default=dict, help_text='Per-term breakdown: interest, social, engagement, recency, quality')),
                ('computed_at', models.DateTimeField(auto_now_add=True)),
                ('moment', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='recommendation_scores', to='moments.moment')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='recommendation_scores', to='user.userprofile')),
            ],
            options={
                'db_table': 'recommendations_score',
                'unique_together': {('user', 'moment')},
                'indexes': [models.Index(fields=['user', 'score'], name='reco_user_score_idx')],
            },
        ),
    ]
