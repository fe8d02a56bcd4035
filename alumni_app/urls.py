from django.contrib import admin
from django.urls import include, path

from alumni_app.surveys.views import survey_feedback

urlpatterns = [
    # Must precede the admin include, which would otherwise swallow it
    path("admin/survey-feedback", survey_feedback, name="survey_feedback"),
    path("admin/", admin.site.urls),
    path("surveys/", include("alumni_app.surveys.urls")),
    path("api/", include("alumni_app.api.urls")),
]
