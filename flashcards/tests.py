"""
Unit tests for the flashcards application.

Test organization:
- SRS*Tests: Pure function tests for the review scheduler
- *ModelTests: Django model tests for FlashCardReview and ReviewLog
- *ViewTests: JSON API tests
"""

import random
from datetime import datetime, timedelta, timezone as dt_timezone
from django.test import TestCase
from django.contrib.auth.models import User
from django.utils import timezone

from . import srs
from .models import FlashCard, FlashCardReview, ReviewLog


T = datetime(2025, 1, 1, 12, 0, 0, tzinfo=dt_timezone.utc)


def make_state(repetitions, interval, ease_factor, reviewed_at=T):
    return srs.ReviewState(
        ease_factor=ease_factor,
        interval=interval,
        repetitions=repetitions,
        last_reviewed_at=reviewed_at,
        next_review_at=reviewed_at + timedelta(days=interval),
    )


# =============================================================================
# SRS Scheduler Tests
# =============================================================================

class SRSQualityTests(TestCase):
    """Tests for quality parsing and ordering."""

    def test_parse_accepts_string_values(self):
        self.assertIs(srs.parse_quality('again'), srs.Quality.AGAIN)
        self.assertIs(srs.parse_quality('hard'), srs.Quality.HARD)
        self.assertIs(srs.parse_quality('good'), srs.Quality.GOOD)
        self.assertIs(srs.parse_quality('easy'), srs.Quality.EASY)

    def test_parse_accepts_members(self):
        self.assertIs(srs.parse_quality(srs.Quality.GOOD), srs.Quality.GOOD)

    def test_parse_rejects_everything_else(self):
        """Only the four exact string values are valid ratings."""
        for value in ['invalid', 'Good', 'EASY', '', ' good', None, 3, 0, True, 4.0, ['good']]:
            with self.assertRaises(srs.InvalidQualityError, msg=f"{value!r} should be rejected"):
                srs.parse_quality(value)

    def test_invalid_quality_error_is_value_error(self):
        self.assertTrue(issubclass(srs.InvalidQualityError, ValueError))

    def test_qualities_ordered_by_strength(self):
        self.assertLess(srs.Quality.AGAIN, srs.Quality.HARD)
        self.assertLess(srs.Quality.HARD, srs.Quality.GOOD)
        self.assertLess(srs.Quality.GOOD, srs.Quality.EASY)
        self.assertEqual(sorted(srs.Quality, reverse=True)[0], srs.Quality.EASY)

    def test_numeric_scores_keep_gap(self):
        """Hard maps to 1 and good to 3; there is no rating for 2 or 4."""
        self.assertEqual(
            [srs.quality_score(q) for q in srs.Quality],
            [0, 1, 3, 5],
        )

    def test_lapse_threshold(self):
        self.assertTrue(srs.is_lapse('again'))
        self.assertTrue(srs.is_lapse('hard'))
        self.assertFalse(srs.is_lapse('good'))
        self.assertFalse(srs.is_lapse('easy'))

    def test_compares_with_strings_by_strength(self):
        """Plain strings compare as ratings, not alphabetically."""
        self.assertTrue(srs.Quality.HARD < 'good')
        self.assertTrue('good' > srs.Quality.HARD)
        self.assertTrue(srs.Quality.EASY >= 'easy')
        self.assertFalse(srs.Quality.AGAIN > 'hard')

    def test_compare_with_non_rating_string_raises(self):
        with self.assertRaises(srs.InvalidQualityError):
            srs.Quality.GOOD < 'better'

    def test_compare_with_number_raises_type_error(self):
        with self.assertRaises(TypeError):
            srs.Quality.GOOD < 3


class SRSEaseDeltaTests(TestCase):
    """Tests for the ease factor adjustment."""

    def test_delta_values(self):
        # delta = 0.1 - (5-q) * (0.08 + (5-q) * 0.02)
        self.assertAlmostEqual(srs.ease_delta(5), 0.1)
        self.assertAlmostEqual(srs.ease_delta(3), -0.14)
        self.assertAlmostEqual(srs.ease_delta(1), -0.54)
        self.assertAlmostEqual(srs.ease_delta(0), -0.8)

    def test_only_easy_increases_ease(self):
        self.assertGreater(srs.ease_delta(5), 0)
        for score in [0, 1, 3]:
            self.assertLess(srs.ease_delta(score), 0)

    def test_clamp_ease_factor(self):
        self.assertEqual(srs.clamp_ease_factor(0.5), srs.MIN_EASE_FACTOR)
        self.assertEqual(srs.clamp_ease_factor(2.5), 2.5)


class SRSFirstReviewTests(TestCase):
    """Tests for scheduling a card that has never been reviewed."""

    def test_seed_table(self):
        expected = {
            'again': (0, 1, 2.5),
            'hard': (1, 1, 2.0),
            'good': (1, 1, 2.5),
            'easy': (1, 4, 2.6),
        }
        for quality, (repetitions, interval, ease_factor) in expected.items():
            state = srs.schedule(None, quality, T)
            self.assertEqual(state.repetitions, repetitions, quality)
            self.assertEqual(state.interval, interval, quality)
            self.assertEqual(state.ease_factor, ease_factor, quality)

    def test_first_review_good(self):
        state = srs.schedule(None, srs.Quality.GOOD, T)
        self.assertEqual(state.repetitions, 1)
        self.assertEqual(state.interval, 1)
        self.assertEqual(state.ease_factor, 2.5)
        self.assertEqual(state.last_reviewed_at, T)
        self.assertEqual(state.next_review_at, T + timedelta(days=1))

    def test_first_review_easy(self):
        state = srs.schedule(None, srs.Quality.EASY, T)
        self.assertEqual(state.repetitions, 1)
        self.assertEqual(state.interval, 4)
        self.assertEqual(state.ease_factor, 2.6)
        self.assertEqual(state.next_review_at, T + timedelta(days=4))

    def test_seed_independent_of_now(self):
        """Only the timestamps depend on now."""
        later = T + timedelta(days=100, hours=5)
        for quality in srs.Quality:
            a = srs.schedule(None, quality, T)
            b = srs.schedule(None, quality, later)
            self.assertEqual(
                (a.repetitions, a.interval, a.ease_factor),
                (b.repetitions, b.interval, b.ease_factor),
            )
            self.assertEqual(b.next_review_at, later + timedelta(days=b.interval))


class SRSScheduleTests(TestCase):
    """Tests for scheduling a card with prior history."""

    def test_second_step_uses_fixed_interval(self):
        prior = make_state(repetitions=1, interval=1, ease_factor=2.5)
        state = srs.schedule(prior, 'good', T)
        self.assertEqual(state.repetitions, 2)
        self.assertEqual(state.interval, srs.SECOND_INTERVAL)
        self.assertAlmostEqual(state.ease_factor, 2.5 + srs.ease_delta(3))

    def test_mature_review_multiplies_interval(self):
        prior = make_state(repetitions=2, interval=6, ease_factor=2.5)
        state = srs.schedule(prior, 'good', T)
        self.assertEqual(state.repetitions, 3)
        self.assertEqual(state.interval, 14)  # round(6 * 2.36)
        self.assertAlmostEqual(state.ease_factor, 2.36)
        self.assertEqual(state.next_review_at, T + timedelta(days=14))

    def test_lapse_clamps_ease_and_resets_repetitions(self):
        prior = make_state(repetitions=5, interval=40, ease_factor=1.35)
        state = srs.schedule(prior, 'again', T)
        self.assertEqual(state.repetitions, 0)
        self.assertEqual(state.ease_factor, srs.MIN_EASE_FACTOR)
        self.assertEqual(state.interval, 22)  # round(40 * (1.35 - 0.8))

    def test_success_after_lapse_restarts_learning(self):
        prior = make_state(repetitions=5, interval=40, ease_factor=1.35)
        lapsed = srs.schedule(prior, 'again', T)
        state = srs.schedule(lapsed, 'good', T + timedelta(days=lapsed.interval))
        self.assertEqual(state.repetitions, 1)
        self.assertEqual(state.interval, srs.FIRST_INTERVAL)

    def test_hard_resets_repetitions(self):
        prior = make_state(repetitions=4, interval=20, ease_factor=2.5)
        state = srs.schedule(prior, 'hard', T)
        self.assertEqual(state.repetitions, 0)
        self.assertAlmostEqual(state.ease_factor, 2.5 - 0.54)

    def test_lapse_resets_any_repetition_count(self):
        for repetitions in [1, 2, 3, 10, 100]:
            prior = make_state(repetitions=repetitions, interval=10, ease_factor=2.5)
            state = srs.schedule(prior, 'again', T)
            self.assertEqual(state.repetitions, 0, f"from {repetitions}")

    def test_interval_never_below_one_day(self):
        prior = make_state(repetitions=3, interval=0, ease_factor=2.5)
        state = srs.schedule(prior, 'good', T)
        self.assertEqual(state.interval, 1)
        self.assertEqual(state.next_review_at, T + timedelta(days=1))

    def test_prior_is_not_modified(self):
        prior = make_state(repetitions=2, interval=6, ease_factor=2.5)
        srs.schedule(prior, 'easy', T + timedelta(days=6))
        self.assertEqual(prior, make_state(repetitions=2, interval=6, ease_factor=2.5))

    def test_returns_review_state(self):
        state = srs.schedule(make_state(2, 6, 2.5), 'easy', T)
        self.assertIsInstance(state, srs.ReviewState)
        self.assertIsInstance(state.ease_factor, float)
        self.assertIsInstance(state.interval, int)
        self.assertIsInstance(state.repetitions, int)


class SRSInvariantTests(TestCase):
    """Property-style tests over many review sequences."""

    def test_ease_never_below_minimum(self):
        rng = random.Random(1234)
        qualities = list(srs.Quality)
        for _ in range(200):
            state = None
            now = T
            for _ in range(30):
                state = srs.schedule(state, rng.choice(qualities), now)
                self.assertGreaterEqual(state.ease_factor, srs.MIN_EASE_FACTOR)
                self.assertGreaterEqual(state.interval, 1)
                self.assertGreaterEqual(state.repetitions, 0)
                self.assertEqual(state.next_review_at, now + timedelta(days=state.interval))
                now = state.next_review_at

    def test_repeated_again_stays_at_floor(self):
        state = srs.schedule(None, 'again', T)
        for _ in range(10):
            state = srs.schedule(state, 'again', T)
        self.assertEqual(state.ease_factor, srs.MIN_EASE_FACTOR)
        self.assertEqual(state.repetitions, 0)

    def test_repeated_easy_intervals_non_decreasing(self):
        state = None
        now = T
        intervals = []
        for _ in range(12):
            state = srs.schedule(state, 'easy', now)
            if state.repetitions >= 3:
                intervals.append(state.interval)
            now = state.next_review_at
        self.assertEqual(intervals, sorted(intervals))
        self.assertEqual(intervals[0], 17)  # round(6 * 2.8)

    def test_repeated_easy_interval_is_capped(self):
        """Long easy streaks stop at MAX_INTERVAL instead of overflowing dates."""
        state = None
        for _ in range(30):
            state = srs.schedule(state, 'easy', T)
            self.assertLessEqual(state.interval, srs.MAX_INTERVAL)
        self.assertEqual(state.interval, srs.MAX_INTERVAL)
        self.assertEqual(state.next_review_at, T + timedelta(days=srs.MAX_INTERVAL))

    def test_oversized_prior_interval_is_capped(self):
        prior = make_state(repetitions=3, interval=10 ** 6, ease_factor=2.5)
        state = srs.schedule(prior, 'good', T)
        self.assertEqual(state.interval, srs.MAX_INTERVAL)

    def test_invalid_quality_has_no_effect(self):
        prior = make_state(repetitions=2, interval=6, ease_factor=2.5)
        expected = srs.schedule(prior, 'good', T)

        with self.assertRaises(srs.InvalidQualityError):
            srs.schedule(prior, 'invalid', T)
        with self.assertRaises(srs.InvalidQualityError):
            srs.schedule(None, 'invalid', T)

        self.assertEqual(srs.schedule(prior, 'good', T), expected)


class SRSRepairTests(TestCase):
    """Tests for handling corrupt stored state."""

    def test_low_ease_is_clamped_on_read(self):
        prior = make_state(repetitions=3, interval=10, ease_factor=0.9)
        with self.assertLogs('flashcards.srs', level='WARNING') as logs:
            state = srs.schedule(prior, 'easy', T)
        self.assertIn('ease_factor', logs.output[0])
        # Repaired to 1.3, then +0.1
        self.assertAlmostEqual(state.ease_factor, 1.4)
        self.assertEqual(state.interval, 14)  # round(10 * 1.4)

    def test_negative_fields_are_clamped(self):
        prior = make_state(repetitions=-2, interval=-5, ease_factor=2.5)
        with self.assertLogs('flashcards.srs', level='WARNING') as logs:
            state = srs.schedule(prior, 'good', T)
        self.assertIn('interval', logs.output[0])
        self.assertIn('repetitions', logs.output[0])
        self.assertEqual(state.repetitions, 1)
        self.assertEqual(state.interval, 1)

    def test_valid_state_is_not_logged(self):
        prior = make_state(repetitions=1, interval=1, ease_factor=2.5)
        with self.assertNoLogs('flashcards.srs', level='WARNING'):
            srs.schedule(prior, 'good', T)


class SRSGetDueTests(TestCase):
    """Tests for filtering due states."""

    def test_filters_and_sorts(self):
        old = make_state(1, 1, 2.5, reviewed_at=T - timedelta(days=5))
        recent = make_state(1, 1, 2.5, reviewed_at=T - timedelta(days=1))
        future = make_state(1, 6, 2.5, reviewed_at=T)
        due = srs.get_due([recent, future, old], T)
        self.assertEqual(due, [old, recent])

    def test_due_exactly_now(self):
        state = make_state(1, 1, 2.5, reviewed_at=T - timedelta(days=1))
        self.assertEqual(srs.get_due([state], T), [state])


# =============================================================================
# Model Tests
# =============================================================================

from unittest.mock import patch


class FlashCardReviewModelTests(TestCase):
    """Tests for the FlashCardReview store."""

    def setUp(self):
        self.user = User.objects.create_user(
            username='testuser', password='testpass123'
        )
        self.card = FlashCard.objects.create(front='What is 2+2?', back='4')

    def test_first_review_creates_state(self):
        FlashCardReview.record(self.user, self.card, 'good', now=T)

        review = FlashCardReview.objects.get(user=self.user, flash_card=self.card)
        self.assertEqual(review.quality, 'good')
        self.assertEqual(review.repetitions, 1)
        self.assertEqual(review.interval, 1)
        self.assertEqual(review.ease_factor, 2.5)
        self.assertEqual(review.reviewed_at, T)
        self.assertEqual(review.next_review, T + timedelta(days=1))

    def test_subsequent_reviews_update_same_row(self):
        FlashCardReview.record(self.user, self.card, 'good', now=T)
        FlashCardReview.record(self.user, self.card, 'good', now=T + timedelta(days=1))
        FlashCardReview.record(self.user, self.card, 'good', now=T + timedelta(days=7))

        self.assertEqual(FlashCardReview.objects.count(), 1)
        review = FlashCardReview.objects.get()
        self.assertEqual(review.repetitions, 3)
        self.assertGreater(review.interval, 6)

    def test_states_are_per_user(self):
        other = User.objects.create_user(username='other', password='testpass123')
        FlashCardReview.record(self.user, self.card, 'easy', now=T)
        FlashCardReview.record(other, self.card, 'again', now=T)

        self.assertEqual(FlashCardReview.objects.get(user=self.user).interval, 4)
        self.assertEqual(FlashCardReview.objects.get(user=other).repetitions, 0)

    def test_invalid_quality_writes_nothing(self):
        with self.assertRaises(srs.InvalidQualityError):
            FlashCardReview.record(self.user, self.card, 'invalid', now=T)
        self.assertFalse(FlashCardReview.objects.exists())
        self.assertFalse(ReviewLog.objects.exists())

    def test_invalid_quality_leaves_existing_state(self):
        FlashCardReview.record(self.user, self.card, 'good', now=T)
        with self.assertRaises(srs.InvalidQualityError):
            FlashCardReview.record(self.user, self.card, 5, now=T + timedelta(days=1))

        review = FlashCardReview.objects.get()
        self.assertEqual(review.repetitions, 1)
        self.assertEqual(review.reviewed_at, T)

    def test_lapse_resets_repetitions(self):
        FlashCardReview.objects.create(
            user=self.user, flash_card=self.card, quality='good',
            ease_factor=2.5, interval=30, repetitions=5,
            reviewed_at=T - timedelta(days=30), next_review=T,
        )
        FlashCardReview.record(self.user, self.card, 'again', now=T)

        review = FlashCardReview.objects.get()
        self.assertEqual(review.quality, 'again')
        self.assertEqual(review.repetitions, 0)
        self.assertAlmostEqual(review.ease_factor, 1.7)

    def test_concurrent_first_review_builds_on_winner(self):
        """A first review that loses the insert race is applied on top."""
        FlashCardReview.record(self.user, self.card, 'good', now=T)
        winner = FlashCardReview.objects.get()

        with patch.object(FlashCardReview, '_locked', side_effect=[None, winner]):
            FlashCardReview.record(self.user, self.card, 'good', now=T)

        review = FlashCardReview.objects.get()
        self.assertEqual(review.repetitions, 2)
        self.assertEqual(review.interval, 6)
        self.assertEqual(ReviewLog.objects.count(), 2)

    def test_is_due(self):
        FlashCardReview.record(self.user, self.card, 'good', now=T)
        review = FlashCardReview.objects.get()
        self.assertFalse(review.is_due(now=T))
        self.assertTrue(review.is_due(now=T + timedelta(days=1)))
        self.assertTrue(review.is_due())

    def test_to_state_round_trip(self):
        FlashCardReview.record(self.user, self.card, 'easy', now=T)
        state = FlashCardReview.objects.get().to_state()
        self.assertEqual(state, srs.schedule(None, 'easy', T))

    def test_deleting_card_removes_state(self):
        FlashCardReview.record(self.user, self.card, 'good', now=T)
        self.card.delete()
        self.assertFalse(FlashCardReview.objects.exists())
        self.assertFalse(ReviewLog.objects.exists())


class ReviewLogModelTests(TestCase):
    """Tests for the ReviewLog model."""

    def setUp(self):
        self.user = User.objects.create_user(
            username='testuser', password='testpass123'
        )
        self.card = FlashCard.objects.create(front='Test', back='Test')

    def test_first_review_log_has_no_before_values(self):
        log = FlashCardReview.record(self.user, self.card, 'easy', now=T)

        self.assertIsInstance(log, ReviewLog)
        self.assertEqual(log.quality, 'easy')
        self.assertIsNone(log.ease_factor_before)
        self.assertIsNone(log.interval_before)
        self.assertEqual(log.ease_factor_after, 2.6)
        self.assertEqual(log.interval_after, 4)
        self.assertEqual(log.repetitions_after, 1)

    def test_review_log_tracks_changes(self):
        FlashCardReview.record(self.user, self.card, 'good', now=T)
        log = FlashCardReview.record(self.user, self.card, 'easy', now=T + timedelta(days=1))

        self.assertEqual(log.ease_factor_before, 2.5)
        self.assertAlmostEqual(log.ease_factor_after, 2.6)
        self.assertEqual(log.interval_before, 1)
        self.assertEqual(log.interval_after, 6)

    def test_each_review_creates_log(self):
        for day, quality in enumerate(['good', 'again', 'hard', 'easy']):
            FlashCardReview.record(self.user, self.card, quality, now=T + timedelta(days=day))
        self.assertEqual(ReviewLog.objects.filter(flash_card=self.card).count(), 4)
        self.assertEqual(ReviewLog.objects.first().quality, 'easy')


# =============================================================================
# View Tests
# =============================================================================

from django.test import Client
from django.urls import reverse
import json


class ReviewFlashCardViewTests(TestCase):
    """Tests for the review API."""

    def setUp(self):
        self.client = Client()
        self.user = User.objects.create_user(
            username='testuser', password='testpass123'
        )
        self.card = FlashCard.objects.create(front='Test Question', back='Test Answer')
        self.url = reverse('review_flash_card', kwargs={'pk': self.card.pk})
        self.client.login(username='testuser', password='testpass123')

    def post(self, body):
        return self.client.post(self.url, data=body, content_type='application/json')

    def test_review_returns_schedule(self):
        response = self.post(json.dumps({'quality': 'easy'}))
        self.assertEqual(response.status_code, 200)

        data = json.loads(response.content)
        self.assertTrue(data['success'])
        self.assertEqual(data['data']['quality'], 'easy')
        self.assertEqual(data['data']['interval'], 4)
        self.assertEqual(data['data']['repetitions'], 1)
        self.assertEqual(data['data']['ease_factor'], 2.6)
        self.assertIn('next_review', data['data'])

    def test_review_persists_state(self):
        self.post(json.dumps({'quality': 'good'}))
        self.post(json.dumps({'quality': 'good'}))
        review = FlashCardReview.objects.get(user=self.user, flash_card=self.card)
        self.assertEqual(review.repetitions, 2)
        self.assertEqual(review.interval, 6)

    def test_invalid_quality(self):
        for quality in ['invalid', 4, None, 'Good']:
            with self.assertLogs('flashcards.views.review', level='WARNING'):
                response = self.post(json.dumps({'quality': quality}))
            self.assertEqual(response.status_code, 400)
            self.assertEqual(json.loads(response.content)['error'], 'Invalid quality rating')
        self.assertFalse(FlashCardReview.objects.exists())

    def test_missing_quality(self):
        with self.assertLogs('flashcards.views.review', level='WARNING'):
            response = self.post(json.dumps({}))
        self.assertEqual(response.status_code, 400)

    def test_invalid_json(self):
        response = self.post('not json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(json.loads(response.content)['error'], 'Invalid request')

    def test_non_object_body(self):
        response = self.post(json.dumps(['good']))
        self.assertEqual(response.status_code, 400)

    def test_unknown_card(self):
        url = reverse('review_flash_card', kwargs={'pk': self.card.pk + 100})
        response = self.client.post(url, data=json.dumps({'quality': 'good'}),
                                    content_type='application/json')
        self.assertEqual(response.status_code, 404)

    def test_long_easy_streak_stays_successful(self):
        """Thirty easy reviews in a row never produce a server error."""
        for _ in range(30):
            response = self.post(json.dumps({'quality': 'easy'}))
            self.assertEqual(response.status_code, 200)
        data = json.loads(response.content)['data']
        self.assertEqual(data['interval'], srs.MAX_INTERVAL)
        self.assertEqual(data['repetitions'], 30)

    def test_get_not_allowed(self):
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, 405)

    def test_requires_login(self):
        self.client.logout()
        response = self.post(json.dumps({'quality': 'good'}))
        self.assertEqual(response.status_code, 302)
        self.assertFalse(FlashCardReview.objects.exists())


class DueFlashCardsViewTests(TestCase):
    """Tests for the due cards API."""

    def setUp(self):
        self.client = Client()
        self.user = User.objects.create_user(
            username='testuser', password='testpass123'
        )
        self.client.login(username='testuser', password='testpass123')
        now = timezone.now()
        self.due_card = FlashCard.objects.create(front='Due')
        self.future_card = FlashCard.objects.create(front='Future')
        FlashCardReview.record(self.user, self.due_card, 'good', now=now - timedelta(days=2))
        FlashCardReview.record(self.user, self.future_card, 'easy', now=now)

    def test_lists_only_due_cards(self):
        response = self.client.get(reverse('due_flash_cards'))
        self.assertEqual(response.status_code, 200)

        data = json.loads(response.content)['data']
        self.assertEqual(len(data), 1)
        self.assertEqual(data[0]['flash_card'], self.due_card.pk)
        self.assertEqual(data[0]['front'], 'Due')

    def test_other_users_cards_not_listed(self):
        other = User.objects.create_user(username='other', password='testpass123')
        card = FlashCard.objects.create(front='Theirs')
        FlashCardReview.record(other, card, 'good', now=timezone.now() - timedelta(days=5))

        data = json.loads(self.client.get(reverse('due_flash_cards')).content)['data']
        self.assertEqual([item['flash_card'] for item in data], [self.due_card.pk])

    def test_oldest_due_card_first(self):
        older_card = FlashCard.objects.create(front='Older')
        FlashCardReview.record(self.user, older_card, 'good', now=timezone.now() - timedelta(days=10))

        data = json.loads(self.client.get(reverse('due_flash_cards')).content)['data']
        self.assertEqual(
            [item['flash_card'] for item in data],
            [older_card.pk, self.due_card.pk],
        )


# =============================================================================
# Concurrency Tests
# =============================================================================

import threading
import time
from django.db import connection
from django.test import TransactionTestCase


class ConcurrentReviewTests(TransactionTestCase):
    """Reviews of one card by one user submitted at the same time."""

    def setUp(self):
        self.user = User.objects.create_user(
            username='testuser', password='testpass123'
        )
        self.card = FlashCard.objects.create(front='Race', back='Condition')

    def review_at_once(self, count=2):
        """Run count 'good' reviews in parallel threads; return their outcomes."""
        barrier = threading.Barrier(count)
        results = []
        schedule = srs.schedule

        def slow_schedule(*args, **kwargs):
            # Hold the transaction open so the other thread arrives mid-review.
            time.sleep(0.2)
            return schedule(*args, **kwargs)

        def worker():
            try:
                barrier.wait()
                FlashCardReview.record(self.user, self.card, 'good')
                results.append('ok')
            except Exception as exc:
                results.append(f"{type(exc).__name__}: {exc}")
            finally:
                connection.close()

        with patch.object(srs, 'schedule', side_effect=slow_schedule):
            threads = [threading.Thread(target=worker) for _ in range(count)]
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join()
        return results

    def test_simultaneous_first_reviews_are_cumulative(self):
        results = self.review_at_once()

        self.assertEqual(results, ['ok', 'ok'])
        review = FlashCardReview.objects.get(user=self.user, flash_card=self.card)
        self.assertEqual(review.repetitions, 2)
        self.assertEqual(review.interval, 6)
        self.assertEqual(ReviewLog.objects.count(), 2)

    def test_simultaneous_reviews_of_existing_card_are_cumulative(self):
        FlashCardReview.record(self.user, self.card, 'good')

        results = self.review_at_once()

        self.assertEqual(results, ['ok', 'ok'])
        review = FlashCardReview.objects.get(user=self.user, flash_card=self.card)
        self.assertEqual(review.repetitions, 3)
        self.assertEqual(ReviewLog.objects.count(), 3)
