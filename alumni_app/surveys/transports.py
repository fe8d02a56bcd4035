"""
Save transports used by the survey draft editor.

A transport takes the serialized draft payload and returns the HTTP status
code of the save. Two are provided:

- ``HttpSurveyTransport`` posts the payload to a remote save endpoint with a
  bearer token, as the browser front end does.
- ``LocalSurveyTransport`` validates and stores the payload in-process for a
  given user, answering with the status code the save endpoint would give.

``get_transport`` picks one from settings: when ``SURVEY_SAVE_URL`` is set the
builder posts to it, otherwise it saves in-process.
"""

import logging
from typing import Any

from django.conf import settings
import requests

from alumni_app.api.serializers import SurveySerializer

from .exceptions import SurveySaveError

logger = logging.getLogger(__name__)

SAVE_SURVEY_PATH = "/api/admin/save-survey"


def _get_timeout() -> float:
    return float(getattr(settings, "SURVEY_SAVE_TIMEOUT", 10))


class HttpSurveyTransport:
    def __init__(self, url: str, token: str | None = None, timeout: float | None = None):
        self.url = url
        self.token = token
        self.timeout = timeout if timeout is not None else _get_timeout()

    def save(self, payload: dict[str, Any]) -> int:
        """
        POST the payload to the save endpoint.

        Returns:
            The response status code, whatever it is

        Raises:
            SurveySaveError: If the request could not be completed
        """
        headers = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        try:
            logger.info(f"Posting survey {payload.get('title')!r} to {self.url}")
            response = requests.post(
                self.url, json=payload, headers=headers, timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.error(f"Failed to post survey to {self.url}: {e}")
            raise SurveySaveError(f"Failed to save survey: {str(e)}") from e
        if response.status_code != 201:
            logger.warning(
                f"Save endpoint answered {response.status_code}: {response.text[:200]}"
            )
        return response.status_code


class LocalSurveyTransport:
    def __init__(self, user):
        self.user = user

    def save(self, payload: dict[str, Any]) -> int:
        serializer = SurveySerializer(data=payload)
        if not serializer.is_valid():
            logger.warning(f"Survey payload rejected: {serializer.errors}")
            return 400
        serializer.save(owner=self.user)
        return 201


def get_transport(request):
    url = getattr(settings, "SURVEY_SAVE_URL", "")
    if url:
        token = None
        auth = request.META.get("HTTP_AUTHORIZATION", "")
        if auth.startswith("Bearer "):
            token = auth[len("Bearer "):]
        return HttpSurveyTransport(url.rstrip("/") + SAVE_SURVEY_PATH, token=token)
    return LocalSurveyTransport(request.user)
