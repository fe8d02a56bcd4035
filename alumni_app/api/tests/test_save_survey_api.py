import json

from django.contrib.auth import get_user_model
import pytest

from alumni_app.surveys.models import Survey, SurveyQuestion

User = get_user_model()

SAVE_URL = "/api/admin/save-survey"
LIST_URL = "/api/admin/surveys/"


def survey_payload(**overrides) -> dict:
    payload = {
        "title": "Alumni feedback 2024",
        "description": "Annual reunion survey",
        "start_date": "2024-06-01",
        "end_date": "2024-06-30",
        "questions": [
            {
                "question_text": "How was the reunion?",
                "question_type": "Rating",
                "required": True,
                "options": [
                    {"option_text": text, "option_value": i}
                    for i, text in enumerate(
                        ["Poorly", "Unsatisfied", "Neutral", "Satisfied", "Very Satisfied"],
                        start=1,
                    )
                ],
            },
            {
                "question_text": "Favourite session",
                "question_type": "Multiple Choice",
                "required": False,
                "options": [
                    {"option_text": "Panel", "option_value": 2},
                    {"option_text": "Keynote", "option_value": 1},
                ],
            },
            {
                "question_text": "Anything else?",
                "question_type": "Open-ended",
                "required": False,
                "options": [],
            },
        ],
    }
    payload.update(overrides)
    return payload


@pytest.mark.django_db
class TestSaveSurveyAPI:
    def get_auth_header(self, client, username: str, password: str) -> dict:
        resp = client.post(
            "/api/token",
            data=json.dumps({"username": username, "password": password}),
            content_type="application/json",
        )
        assert resp.status_code == 200, resp.content
        access = resp.json()["access"]
        return {"HTTP_AUTHORIZATION": f"Bearer {access}"}

    def staff_header(self, client) -> dict:
        User.objects.create_user(username="staff", password="passw0rd-Staff!", is_staff=True)
        return self.get_auth_header(client, "staff", "passw0rd-Staff!")

    def post_survey(self, client, payload: dict, hdrs: dict):
        return client.post(
            SAVE_URL, data=json.dumps(payload), content_type="application/json", **hdrs
        )

    def test_staff_can_save_survey(self, client):
        hdrs = self.staff_header(client)
        resp = self.post_survey(client, survey_payload(), hdrs)

        assert resp.status_code == 201, resp.content
        survey = Survey.objects.get(id=resp.json()["id"])
        assert resp.json()["title"] == "Alumni feedback 2024"
        assert survey.owner.username == "staff"
        assert str(survey.start_date) == "2024-06-01"

        questions = list(survey.questions.all())
        assert [q.type for q in questions] == [
            SurveyQuestion.Types.RATING,
            SurveyQuestion.Types.MULTIPLE_CHOICE,
            SurveyQuestion.Types.OPEN_ENDED,
        ]
        assert questions[0].required is True
        # options keep the order they were submitted in
        assert [(o.text, o.value) for o in questions[1].options.all()] == [
            ("Panel", 2),
            ("Keynote", 1),
        ]
        assert questions[2].options.count() == 0

    def test_blank_dates_are_accepted(self, client):
        hdrs = self.staff_header(client)
        resp = self.post_survey(client, survey_payload(start_date="", end_date=""), hdrs)
        assert resp.status_code == 201, resp.content
        survey = Survey.objects.get()
        assert survey.start_date is None
        assert survey.end_date is None

    def test_duplicate_option_values_are_rejected(self, client):
        hdrs = self.staff_header(client)
        payload = survey_payload()
        payload["questions"][1]["options"][1]["option_value"] = 2
        resp = self.post_survey(client, payload, hdrs)
        assert resp.status_code == 400
        assert "Duplicate option value found: 2" in json.dumps(resp.json())
        assert Survey.objects.count() == 0

    def test_open_ended_question_with_options_is_rejected(self, client):
        hdrs = self.staff_header(client)
        payload = survey_payload()
        payload["questions"][2]["options"] = [{"option_text": "x", "option_value": 1}]
        resp = self.post_survey(client, payload, hdrs)
        assert resp.status_code == 400
        assert Survey.objects.count() == 0

    def test_unknown_question_type_is_rejected(self, client):
        hdrs = self.staff_header(client)
        payload = survey_payload()
        payload["questions"][2]["question_type"] = "Essay"
        resp = self.post_survey(client, payload, hdrs)
        assert resp.status_code == 400

    def test_end_date_before_start_is_rejected(self, client):
        hdrs = self.staff_header(client)
        resp = self.post_survey(
            client, survey_payload(start_date="2024-06-30", end_date="2024-06-01"), hdrs
        )
        assert resp.status_code == 400
        assert "end_date" in resp.json()

    def test_blank_title_is_rejected(self, client):
        hdrs = self.staff_header(client)
        resp = self.post_survey(client, survey_payload(title=""), hdrs)
        assert resp.status_code == 400
        assert "title" in resp.json()

    def test_non_staff_cannot_save(self, client):
        User.objects.create_user(username="member", password="passw0rd-Member!")
        hdrs = self.get_auth_header(client, "member", "passw0rd-Member!")
        resp = self.post_survey(client, survey_payload(), hdrs)
        assert resp.status_code == 403
        assert Survey.objects.count() == 0

    def test_anonymous_cannot_save(self, client):
        resp = self.post_survey(client, survey_payload(), {})
        assert resp.status_code == 401

    def test_list_is_newest_first_with_question_count(self, client):
        hdrs = self.staff_header(client)
        self.post_survey(client, survey_payload(title="First"), hdrs)
        self.post_survey(client, survey_payload(title="Second", questions=[]), hdrs)

        resp = client.get(LIST_URL, **hdrs)

        assert resp.status_code == 200
        rows = resp.json()
        assert [r["title"] for r in rows] == ["Second", "First"]
        assert [r["question_count"] for r in rows] == [0, 3]

    def test_detail_returns_saved_shape(self, client):
        hdrs = self.staff_header(client)
        payload = survey_payload()
        survey_id = self.post_survey(client, payload, hdrs).json()["id"]

        resp = client.get(f"{LIST_URL}{survey_id}/", **hdrs)

        assert resp.status_code == 200
        body = resp.json()
        assert body["id"] == survey_id
        assert body["questions"] == payload["questions"]

    def test_list_requires_staff(self, client):
        User.objects.create_user(username="member", password="passw0rd-Member!")
        hdrs = self.get_auth_header(client, "member", "passw0rd-Member!")
        resp = client.get(LIST_URL, **hdrs)
        assert resp.status_code == 403
