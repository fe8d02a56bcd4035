"""Persistence of saved surveys."""

from __future__ import annotations

import logging
from typing import Any, Iterable

from django.db import transaction

from .models import Survey, SurveyOption, SurveyQuestion

logger = logging.getLogger(__name__)


@transaction.atomic
def create_survey(
    owner,
    title: str,
    description: str = "",
    start_date=None,
    end_date=None,
    questions: Iterable[dict[str, Any]] = (),
) -> Survey:
    """Store a survey with its questions and options in one transaction.

    ``questions`` holds validated question data as produced by
    ``SurveySerializer``: ``text``, ``type``, ``required`` and a list of
    ``options`` with ``text`` and ``value``. Order is taken from position.
    """
    survey = Survey.objects.create(
        owner=owner,
        title=title,
        description=description,
        start_date=start_date,
        end_date=end_date,
    )
    for order, item in enumerate(questions):
        question = SurveyQuestion.objects.create(
            survey=survey,
            text=item.get("text", ""),
            type=item["type"],
            required=bool(item.get("required", False)),
            order=order,
        )
        SurveyOption.objects.bulk_create(
            [
                SurveyOption(
                    question=question,
                    text=option.get("text", ""),
                    value=option["value"],
                    order=position,
                )
                for position, option in enumerate(item.get("options", []))
            ]
        )
    logger.info(
        f"Survey {survey.id} saved by user {getattr(owner, 'id', None)} "
        f"with {survey.questions.count()} questions"
    )
    return survey
