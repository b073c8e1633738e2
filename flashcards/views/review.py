"""Flashcard review API views."""

import json
import logging

from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.views.decorators.http import require_GET, require_POST

from .. import srs
from ..models import FlashCard, FlashCardReview


logger = logging.getLogger(__name__)


@login_required
@require_POST
def review_flash_card(request, pk):
    """Record a review for a flashcard and return the new schedule."""
    flash_card = get_object_or_404(FlashCard, pk=pk)

    try:
        data = json.loads(request.body)
        quality = data.get('quality')
    except (json.JSONDecodeError, AttributeError, UnicodeDecodeError):
        return JsonResponse({'success': False, 'error': 'Invalid request'}, status=400)

    try:
        log = FlashCardReview.record(request.user, flash_card, quality)
    except srs.InvalidQualityError:
        logger.warning(f"Rejected rating {quality!r} from user {request.user.pk} for card {pk}")
        return JsonResponse({'success': False, 'error': 'Invalid quality rating'}, status=400)

    review = FlashCardReview.objects.get(user=request.user, flash_card=flash_card)

    return JsonResponse({
        'success': True,
        'data': {
            'quality': log.quality,
            'ease_factor': round(review.ease_factor, 2),
            'interval': review.interval,
            'repetitions': review.repetitions,
            'reviewed_at': review.reviewed_at.isoformat(),
            'next_review': review.next_review.isoformat(),
        },
    })


@login_required
@require_GET
def due_flash_cards(request):
    """List the user's flashcards that are due for review, oldest first."""
    reviews = srs.get_due(
        FlashCardReview.objects.filter(user=request.user).select_related('flash_card'),
        timezone.now(),
    )

    return JsonResponse({
        'success': True,
        'data': [
            {
                'flash_card': review.flash_card_id,
                'front': review.flash_card.front,
                'next_review': review.next_review.isoformat(),
                'interval': review.interval,
                'repetitions': review.repetitions,
                'ease_factor': round(review.ease_factor, 2),
            }
            for review in reviews
        ],
    })
