from __future__ import annotations

from django.contrib.auth import get_user_model
from django.db import models

from .draft import QuestionType

User = get_user_model()


class Survey(models.Model):
    owner = models.ForeignKey(User, on_delete=models.CASCADE, related_name="surveys")
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    start_date = models.DateField(null=True, blank=True)
    end_date = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:  # pragma: no cover
        return self.title


class SurveyQuestion(models.Model):
    # Kept as an alias so callers can write SurveyQuestion.Types.RATING
    Types = QuestionType

    survey = models.ForeignKey(
        Survey, on_delete=models.CASCADE, related_name="questions"
    )
    text = models.TextField(blank=True)
    type = models.CharField(
        max_length=32, choices=QuestionType.choices, default=QuestionType.OPEN_ENDED
    )
    required = models.BooleanField(default=False)
    order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["order", "id"]

    def __str__(self) -> str:  # pragma: no cover
        return self.text or f"Question {self.order + 1}"


class SurveyOption(models.Model):
    question = models.ForeignKey(
        SurveyQuestion, on_delete=models.CASCADE, related_name="options"
    )
    text = models.CharField(max_length=255, blank=True)
    value = models.IntegerField()
    order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["order", "id"]
        unique_together = ("question", "value")

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.value}: {self.text}"
