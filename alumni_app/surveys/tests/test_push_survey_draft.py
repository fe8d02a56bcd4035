import json
from io import StringIO
from unittest.mock import MagicMock, patch

from django.core.management import call_command
from django.core.management.base import CommandError
import pytest

from alumni_app.surveys.management.commands.push_survey_draft import build_editor

SURVEY = {
    "title": "Alumni feedback 2024",
    "start_date": "2024-06-01",
    "questions": [
        {"text": "How was the reunion?", "type": "Rating", "required": True},
        {
            "text": "Favourite session",
            "type": "Multiple Choice",
            "options": [{"text": "Keynote", "value": 1}, {"text": "Panel", "value": 2}],
        },
        {"text": "Anything else?"},
    ],
}


def write_survey(tmp_path, data) -> str:
    path = tmp_path / "survey.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def test_build_editor_replays_questions():
    editor = build_editor(SURVEY)
    questions = editor.draft["questions"]
    assert [q["type"] for q in questions] == ["Rating", "Multiple Choice", "Open-ended"]
    assert len(questions[0]["options"]) == 5
    assert [(o["text"], o["value"]) for o in questions[1]["options"]] == [
        ("Keynote", 1),
        ("Panel", 2),
    ]
    assert editor.errors == {}


def test_dry_run_prints_payload(tmp_path):
    out = StringIO()
    call_command("push_survey_draft", write_survey(tmp_path, SURVEY), "--dry-run", stdout=out)
    payload = json.loads(out.getvalue())
    assert payload["title"] == "Alumni feedback 2024"
    assert payload["questions"][1]["options"] == [
        {"option_text": "Keynote", "option_value": 1},
        {"option_text": "Panel", "option_value": 2},
    ]


def test_duplicate_values_fail(tmp_path):
    data = {
        "title": "Dupes",
        "questions": [
            {
                "type": "Multiple Choice",
                "options": [{"text": "a", "value": 1}, {"text": "b", "value": 1}],
            }
        ],
    }
    with pytest.raises(CommandError, match="Duplicate option value found: 1"):
        call_command("push_survey_draft", write_survey(tmp_path, data), "--dry-run")


def test_unreadable_file_fails(tmp_path):
    with pytest.raises(CommandError):
        call_command("push_survey_draft", str(tmp_path / "missing.json"), "--dry-run")


def test_missing_url_fails(tmp_path):
    with pytest.raises(CommandError, match="No save endpoint"):
        call_command("push_survey_draft", write_survey(tmp_path, SURVEY), "--url", "")


def test_pushes_payload_with_token(tmp_path):
    out = StringIO()
    with patch("alumni_app.surveys.transports.requests.post") as mock_post:
        mock_response = MagicMock()
        mock_response.status_code = 201
        mock_post.return_value = mock_response
        call_command(
            "push_survey_draft",
            write_survey(tmp_path, SURVEY),
            "--url",
            "https://alumni.example.org/",
            "--token",
            "abc",
            stdout=out,
        )

    args, kwargs = mock_post.call_args
    assert args[0] == "https://alumni.example.org/api/admin/save-survey"
    assert kwargs["headers"] == {"Authorization": "Bearer abc"}
    assert kwargs["json"]["questions"][0]["question_type"] == "Rating"
    assert "Survey saved successfully!" in out.getvalue()


def test_rejected_push_fails(tmp_path):
    with patch("alumni_app.surveys.transports.requests.post") as mock_post:
        mock_response = MagicMock()
        mock_response.status_code = 400
        mock_response.text = "bad"
        mock_post.return_value = mock_response
        with pytest.raises(CommandError, match="Failed to save survey"):
            call_command(
                "push_survey_draft",
                write_survey(tmp_path, SURVEY),
                "--url",
                "https://alumni.example.org",
            )


def test_options_on_open_ended_question_fail(tmp_path):
    data = {
        "title": "Comments only",
        "questions": [{"text": "Anything else?", "options": [{"text": "a", "value": 1}]}],
    }
    with pytest.raises(CommandError, match="do not take options"):
        call_command("push_survey_draft", write_survey(tmp_path, data), "--dry-run")
