"""Views package for the flashcards app."""

from .review import review_flash_card, due_flash_cards

__all__ = [
    # Review
    'review_flash_card',
    'due_flash_cards',
]
