from django.contrib import admin

from .models import Survey, SurveyOption, SurveyQuestion


class SurveyOptionInline(admin.TabularInline):
    model = SurveyOption
    extra = 0


@admin.register(SurveyQuestion)
class SurveyQuestionAdmin(admin.ModelAdmin):
    list_display = ("text", "type", "required", "survey", "order")
    list_filter = ("type", "required")
    inlines = [SurveyOptionInline]


class SurveyQuestionInline(admin.TabularInline):
    model = SurveyQuestion
    extra = 0
    fields = ("order", "text", "type", "required")


@admin.register(Survey)
class SurveyAdmin(admin.ModelAdmin):
    list_display = ("title", "owner", "start_date", "end_date", "created_at")
    search_fields = ("title", "description")
    inlines = [SurveyQuestionInline]
