from django.urls import path
from . import views

urlpatterns = [
    # Review
    path('api/flashcards/due/', views.due_flash_cards, name='due_flash_cards'),
    path('api/flashcards/<int:pk>/review/', views.review_flash_card, name='review_flash_card'),
]
