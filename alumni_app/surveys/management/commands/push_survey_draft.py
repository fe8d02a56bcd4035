#!/usr/bin/env python3
"""
Django management command to build a survey draft from a JSON file and push
it to a remote save endpoint.

The file describes the survey the way an admin would enter it in the builder::

    {
        "title": "Alumni feedback 2024",
        "description": "...",
        "start_date": "2024-06-01",
        "end_date": "2024-06-30",
        "questions": [
            {"text": "How was the reunion?", "type": "Rating", "required": true},
            {"text": "Favourite session", "type": "Multiple Choice",
             "options": [{"text": "Keynote", "value": 1}, {"text": "Panel", "value": 2}]}
        ]
    }

Questions without ``options`` keep the defaults their type starts with.

Usage:
    python manage.py push_survey_draft survey.json --url https://alumni.example.org --token <jwt>
    python manage.py push_survey_draft survey.json --dry-run
"""

import json
from pathlib import Path

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from alumni_app.surveys.draft import build_payload
from alumni_app.surveys.editor import SurveyDraftEditor
from alumni_app.surveys.exceptions import DraftError
from alumni_app.surveys.transports import SAVE_SURVEY_PATH, HttpSurveyTransport


def build_editor(survey: dict) -> SurveyDraftEditor:
    """Replay a survey description through the editor, one builder action at a time."""
    editor = SurveyDraftEditor()
    for name in ("title", "description", "start_date", "end_date"):
        if name in survey:
            editor.set_field(name, survey[name])

    for item in survey.get("questions", []):
        editor.add_question()
        index = len(editor.draft["questions"]) - 1
        editor.set_question_field(index, "text", item.get("text", ""))
        if "type" in item:
            editor.set_question_field(index, "type", item["type"])
        editor.set_question_field(index, "required", bool(item.get("required", False)))
        if "options" not in item:
            continue
        for option_index in reversed(range(len(editor.draft["questions"][index]["options"]))):
            editor.delete_option(index, option_index)
        for option in item["options"]:
            editor.add_option(index)
            option_index = len(editor.draft["questions"][index]["options"]) - 1
            editor.set_option_field(index, option_index, "text", option.get("text", ""))
            editor.set_option_field(index, option_index, "value", option.get("value", option_index + 1))
    return editor


class Command(BaseCommand):
    help = "Build a survey draft from a JSON file and submit it to a save endpoint"

    def add_arguments(self, parser):
        parser.add_argument("path", help="JSON file describing the survey")
        parser.add_argument(
            "--url",
            default=getattr(settings, "SURVEY_SAVE_URL", ""),
            help="Base URL of the server exposing the save endpoint",
        )
        parser.add_argument("--token", default="", help="Bearer token for the save endpoint")
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Print the payload without submitting it",
        )

    def handle(self, *args, **options):
        path = Path(options["path"])
        try:
            survey = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise CommandError(f"Could not read {path}: {e}") from e
        if not isinstance(survey, dict):
            raise CommandError(f"{path} must contain a JSON object")

        try:
            editor = build_editor(survey)
        except (DraftError, IndexError) as e:
            raise CommandError(f"Invalid survey description: {e}") from e
        if editor.errors:
            raise CommandError("; ".join(editor.errors.values()))

        if options["dry_run"]:
            try:
                payload = build_payload(editor.draft)
            except DraftError as e:
                raise CommandError(str(e)) from e
            self.stdout.write(json.dumps(payload, indent=2))
            return

        if not options["url"]:
            raise CommandError("No save endpoint configured; pass --url or set SURVEY_SAVE_URL")

        transport = HttpSurveyTransport(
            options["url"].rstrip("/") + SAVE_SURVEY_PATH, token=options["token"] or None
        )
        try:
            saved = editor.save(transport)
        except DraftError as e:
            raise CommandError(str(e)) from e
        if not saved:
            raise CommandError(editor.alert["message"])
        self.stdout.write(self.style.SUCCESS(editor.alert["message"]))
