import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='FlashCard',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('front', models.TextField(help_text='Question or prompt')),
                ('back', models.TextField(blank=True, help_text='Answer')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['created_at'],
            },
        ),
        migrations.CreateModel(
            name='FlashCardReview',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('quality', models.CharField(choices=[('again', 'Again'), ('hard', 'Hard'), ('good', 'Good'), ('easy', 'Easy')], max_length=10)),
                ('ease_factor', models.FloatField(default=2.5)),
                ('interval', models.IntegerField(default=0)),
                ('repetitions', models.IntegerField(default=0)),
                ('reviewed_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('next_review', models.DateTimeField(default=django.utils.timezone.now)),
                ('flash_card', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='reviews', to='flashcards.flashcard')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='flash_card_reviews', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['next_review'],
                'indexes': [models.Index(fields=['user', 'next_review'], name='review_user_next_idx')],
                'constraints': [models.UniqueConstraint(fields=('user', 'flash_card'), name='unique_review_per_user_card')],
            },
        ),
        migrations.CreateModel(
            name='ReviewLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('quality', models.CharField(choices=[('again', 'Again'), ('hard', 'Hard'), ('good', 'Good'), ('easy', 'Easy')], max_length=10)),
                ('ease_factor_before', models.FloatField(blank=True, null=True)),
                ('ease_factor_after', models.FloatField()),
                ('interval_before', models.IntegerField(blank=True, null=True)),
                ('interval_after', models.IntegerField()),
                ('repetitions_after', models.IntegerField()),
                ('reviewed_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('flash_card', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='review_logs', to='flashcards.flashcard')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='review_logs', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-reviewed_at', '-id'],
            },
        ),
    ]
