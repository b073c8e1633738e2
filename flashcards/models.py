import logging

from django.db import IntegrityError, models, transaction
from django.contrib.auth.models import User
from django.utils import timezone

from . import srs


logger = logging.getLogger(__name__)


class FlashCard(models.Model):
    """A flashcard that learners review."""
    front = models.TextField(help_text="Question or prompt")
    back = models.TextField(help_text="Answer", blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['created_at']

    def __str__(self):
        return f"{self.front[:50]}..."


class FlashCardReview(models.Model):
    """Spaced repetition state for one learner/card pair."""

    class Quality(models.TextChoices):
        AGAIN = srs.Quality.AGAIN.value, 'Again'
        HARD = srs.Quality.HARD.value, 'Hard'
        GOOD = srs.Quality.GOOD.value, 'Good'
        EASY = srs.Quality.EASY.value, 'Easy'

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='flash_card_reviews')
    flash_card = models.ForeignKey(FlashCard, on_delete=models.CASCADE, related_name='reviews')
    quality = models.CharField(max_length=10, choices=Quality.choices)  # Last rating given

    # SM-2 state
    ease_factor = models.FloatField(default=srs.DEFAULT_EASE_FACTOR)
    interval = models.IntegerField(default=0)  # Days until next review
    repetitions = models.IntegerField(default=0)  # Successful reviews in a row
    reviewed_at = models.DateTimeField(default=timezone.now)
    next_review = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['next_review']
        constraints = [
            models.UniqueConstraint(
                fields=['user', 'flash_card'],
                name='unique_review_per_user_card',
            ),
        ]
        indexes = [
            models.Index(fields=['user', 'next_review'], name='review_user_next_idx'),
        ]

    def __str__(self):
        return f"{self.user.username}: card {self.flash_card_id} due {self.next_review:%Y-%m-%d}"

    def is_due(self, now=None):
        """Check if the card is due for review."""
        if now is None:
            now = timezone.now()
        return self.next_review <= now

    def to_state(self):
        return srs.ReviewState(
            ease_factor=self.ease_factor,
            interval=self.interval,
            repetitions=self.repetitions,
            last_reviewed_at=self.reviewed_at,
            next_review_at=self.next_review,
        )

    def apply_state(self, state, quality):
        self.quality = srs.parse_quality(quality).value
        self.ease_factor = state.ease_factor
        self.interval = state.interval
        self.repetitions = state.repetitions
        self.reviewed_at = state.last_reviewed_at
        self.next_review = state.next_review_at

    @classmethod
    def _locked(cls, user, flash_card):
        return cls.objects.select_for_update().filter(
            user=user, flash_card=flash_card
        ).first()

    @classmethod
    def record(cls, user, flash_card, quality, now=None):
        """
        Apply a review for a learner/card pair and persist the result.

        The pair's row is locked for the duration of the transaction, so
        concurrent reviews of the same card by the same user are applied one
        after the other. Returns the ReviewLog entry created.

        Raises srs.InvalidQualityError before touching the database if the
        rating is invalid.
        """
        quality = srs.parse_quality(quality)
        if now is None:
            now = timezone.now()

        with transaction.atomic():
            review = cls._locked(user, flash_card)
            if review is None:
                state = srs.schedule(None, quality, now)
                review = cls(user=user, flash_card=flash_card)
                review.apply_state(state, quality)
                try:
                    with transaction.atomic():
                        review.save()
                except IntegrityError:
                    # Another request created the row first; build on its state.
                    logger.info(
                        f"Concurrent first review for user {user.pk} card {flash_card.pk}, retrying"
                    )
                    review = cls._locked(user, flash_card)
                    if review is None:
                        raise
                else:
                    logger.info(
                        f"First review for user {user.pk} card {flash_card.pk}: "
                        f"{quality.value}, next in {state.interval} days"
                    )
                    return ReviewLog.objects.create(
                        user=user,
                        flash_card=flash_card,
                        quality=quality.value,
                        ease_factor_after=state.ease_factor,
                        interval_after=state.interval,
                        repetitions_after=state.repetitions,
                        reviewed_at=now,
                    )

            ease_before = review.ease_factor
            interval_before = review.interval

            state = srs.schedule(review.to_state(), quality, now)
            review.apply_state(state, quality)
            review.save()

            logger.info(
                f"Review for user {user.pk} card {flash_card.pk}: "
                f"{quality.value}, next in {state.interval} days"
            )
            return ReviewLog.objects.create(
                user=user,
                flash_card=flash_card,
                quality=quality.value,
                ease_factor_before=ease_before,
                ease_factor_after=state.ease_factor,
                interval_before=interval_before,
                interval_after=state.interval,
                repetitions_after=state.repetitions,
                reviewed_at=now,
            )


class ReviewLog(models.Model):
    """Append-only history of reviews."""
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='review_logs')
    flash_card = models.ForeignKey(FlashCard, on_delete=models.CASCADE, related_name='review_logs')
    quality = models.CharField(max_length=10, choices=FlashCardReview.Quality.choices)
    ease_factor_before = models.FloatField(null=True, blank=True)  # None on first review
    ease_factor_after = models.FloatField()
    interval_before = models.IntegerField(null=True, blank=True)
    interval_after = models.IntegerField()
    repetitions_after = models.IntegerField()
    reviewed_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['-reviewed_at', '-id']

    def __str__(self):
        return f"{self.quality} on card {self.flash_card_id} at {self.reviewed_at}"
