from django.contrib import admin
from .models import FlashCard, FlashCardReview, ReviewLog


class FlashCardReviewInline(admin.TabularInline):
    model = FlashCardReview
    extra = 0
    fields = ['user', 'quality', 'ease_factor', 'interval', 'repetitions', 'next_review']
    readonly_fields = ['ease_factor', 'interval', 'repetitions', 'next_review']


@admin.register(FlashCard)
class FlashCardAdmin(admin.ModelAdmin):
    list_display = ['front_preview', 'review_count', 'created_at']
    search_fields = ['front', 'back']
    inlines = [FlashCardReviewInline]

    def front_preview(self, obj):
        return obj.front[:50] + '...' if len(obj.front) > 50 else obj.front
    front_preview.short_description = 'Front'

    def review_count(self, obj):
        return obj.reviews.count()
    review_count.short_description = 'Learners'


@admin.register(FlashCardReview)
class FlashCardReviewAdmin(admin.ModelAdmin):
    list_display = ['user', 'flash_card', 'quality', 'ease_factor', 'interval', 'repetitions', 'next_review']
    list_filter = ['quality', 'next_review']
    search_fields = ['user__username', 'flash_card__front']
    readonly_fields = ['quality', 'ease_factor', 'interval', 'repetitions', 'reviewed_at', 'next_review']


@admin.register(ReviewLog)
class ReviewLogAdmin(admin.ModelAdmin):
    list_display = ['user', 'flash_card', 'quality', 'interval_before', 'interval_after', 'reviewed_at']
    list_filter = ['quality', 'reviewed_at']
    readonly_fields = ['user', 'flash_card', 'quality', 'ease_factor_before', 'ease_factor_after',
                       'interval_before', 'interval_after', 'repetitions_after', 'reviewed_at']
