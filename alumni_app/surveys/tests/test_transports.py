from __future__ import annotations

from unittest.mock import MagicMock, patch

from django.contrib.auth import get_user_model
from django.test import RequestFactory
import pytest
import requests

from alumni_app.surveys.exceptions import SurveySaveError
from alumni_app.surveys.models import Survey
from alumni_app.surveys.transports import (
    HttpSurveyTransport,
    LocalSurveyTransport,
    get_transport,
)

User = get_user_model()

PAYLOAD = {
    "title": "Reunion feedback",
    "description": "",
    "start_date": "",
    "end_date": "",
    "questions": [
        {
            "question_text": "How was it?",
            "question_type": "Rating",
            "required": True,
            "options": [
                {"option_text": text, "option_value": value}
                for value, text in enumerate(
                    ["Poorly", "Unsatisfied", "Neutral", "Satisfied", "Very Satisfied"],
                    start=1,
                )
            ],
        }
    ],
}


def test_http_transport_posts_payload_with_bearer_token():
    transport = HttpSurveyTransport(
        "https://alumni.example.org/api/admin/save-survey", token="abc123", timeout=5
    )
    with patch("alumni_app.surveys.transports.requests.post") as mock_post:
        mock_response = MagicMock()
        mock_response.status_code = 201
        mock_post.return_value = mock_response

        assert transport.save(PAYLOAD) == 201

    mock_post.assert_called_once_with(
        "https://alumni.example.org/api/admin/save-survey",
        json=PAYLOAD,
        headers={"Authorization": "Bearer abc123"},
        timeout=5,
    )


def test_http_transport_returns_non_success_status():
    transport = HttpSurveyTransport("https://alumni.example.org/api/admin/save-survey")
    with patch("alumni_app.surveys.transports.requests.post") as mock_post:
        mock_response = MagicMock()
        mock_response.status_code = 500
        mock_response.text = "Internal Server Error"
        mock_post.return_value = mock_response

        assert transport.save(PAYLOAD) == 500
    assert mock_post.call_args.kwargs["headers"] == {}


def test_http_transport_wraps_request_errors():
    transport = HttpSurveyTransport("https://alumni.example.org/api/admin/save-survey")
    with patch("alumni_app.surveys.transports.requests.post") as mock_post:
        mock_post.side_effect = requests.ConnectionError("connection refused")
        with pytest.raises(SurveySaveError):
            transport.save(PAYLOAD)


def test_http_transport_default_timeout_from_settings(settings):
    settings.SURVEY_SAVE_TIMEOUT = 3
    assert HttpSurveyTransport("https://x.example.org").timeout == 3.0


@pytest.mark.django_db
def test_local_transport_creates_survey():
    user = User.objects.create_user(username="admin", password="x", is_staff=True)
    assert LocalSurveyTransport(user).save(PAYLOAD) == 201
    survey = Survey.objects.get()
    assert survey.owner == user
    assert survey.start_date is None
    question = survey.questions.get()
    assert list(question.options.values_list("value", flat=True)) == [1, 2, 3, 4, 5]


@pytest.mark.django_db
def test_local_transport_rejects_invalid_payload():
    user = User.objects.create_user(username="admin", password="x", is_staff=True)
    payload = {**PAYLOAD, "title": ""}
    assert LocalSurveyTransport(user).save(payload) == 400
    assert Survey.objects.count() == 0


def test_get_transport_prefers_remote_endpoint(settings):
    settings.SURVEY_SAVE_URL = "https://alumni.example.org/"
    request = RequestFactory().post("/surveys/create/save", HTTP_AUTHORIZATION="Bearer tok")
    transport = get_transport(request)
    assert isinstance(transport, HttpSurveyTransport)
    assert transport.url == "https://alumni.example.org/api/admin/save-survey"
    assert transport.token == "tok"


def test_get_transport_defaults_to_local(settings):
    settings.SURVEY_SAVE_URL = ""
    request = RequestFactory().post("/surveys/create/save")
    request.user = MagicMock()
    assert isinstance(get_transport(request), LocalSurveyTransport)
