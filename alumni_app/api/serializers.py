from __future__ import annotations

from rest_framework import serializers

from alumni_app.surveys.draft import OPTION_QUESTION_TYPES, QuestionType
from alumni_app.surveys.models import Survey, SurveyOption, SurveyQuestion
from alumni_app.surveys.services import create_survey


class BlankableDateField(serializers.DateField):
    """Date field that reads an empty string as no date, as date inputs send it."""

    def to_internal_value(self, value):
        if value == "":
            return None
        return super().to_internal_value(value)


class SurveyOptionSerializer(serializers.ModelSerializer):
    option_text = serializers.CharField(
        source="text", max_length=255, allow_blank=True, required=False, default=""
    )
    option_value = serializers.IntegerField(source="value")

    class Meta:
        model = SurveyOption
        fields = ["option_text", "option_value"]


class SurveyQuestionSerializer(serializers.ModelSerializer):
    question_text = serializers.CharField(
        source="text", allow_blank=True, required=False, default=""
    )
    question_type = serializers.ChoiceField(source="type", choices=QuestionType.choices)
    options = SurveyOptionSerializer(many=True, required=False, default=list)

    class Meta:
        model = SurveyQuestion
        fields = ["question_text", "question_type", "required", "options"]

    def validate(self, attrs):
        options = attrs.get("options") or []
        if attrs["type"] not in OPTION_QUESTION_TYPES and options:
            raise serializers.ValidationError(
                {"options": "Open-ended questions do not take options."}
            )
        seen = set()
        for option in options:
            if option["value"] in seen:
                raise serializers.ValidationError(
                    {"options": f"Duplicate option value found: {option['value']}"}
                )
            seen.add(option["value"])
        return attrs


class SurveySerializer(serializers.ModelSerializer):
    """Save payload in, saved survey out.

    Writes accept the editor's payload shape and create the survey with its
    questions; reads return the same shape plus ``id`` and ``created_at``.
    """

    start_date = BlankableDateField(required=False, allow_null=True, default=None)
    end_date = BlankableDateField(required=False, allow_null=True, default=None)
    questions = SurveyQuestionSerializer(many=True, required=False, default=list)

    class Meta:
        model = Survey
        fields = [
            "id",
            "title",
            "description",
            "start_date",
            "end_date",
            "created_at",
            "questions",
        ]
        read_only_fields = ["id", "created_at"]
        extra_kwargs = {"description": {"required": False}}

    def validate(self, attrs):
        start, end = attrs.get("start_date"), attrs.get("end_date")
        if start and end and end < start:
            raise serializers.ValidationError(
                {"end_date": "End date cannot be before the start date."}
            )
        return attrs

    def create(self, validated_data):
        return create_survey(**validated_data)


class SurveyListSerializer(serializers.ModelSerializer):
    question_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Survey
        fields = [
            "id",
            "title",
            "description",
            "start_date",
            "end_date",
            "question_count",
            "created_at",
        ]
