import logging

from django.db.models import Count
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from alumni_app.surveys.models import Survey

from .serializers import SurveyListSerializer, SurveySerializer

logger = logging.getLogger(__name__)


class SurveyViewSet(viewsets.ReadOnlyModelViewSet):
    """Saved surveys for the admin survey-feedback pages.

    The list is newest first and carries a question count; the detail view
    returns the survey in the same shape the builder saves it.
    """

    permission_classes = [permissions.IsAdminUser]

    def get_queryset(self):
        qs = Survey.objects.all()
        if self.action == "list":
            return qs.annotate(question_count=Count("questions")).order_by(
                "-created_at", "-id"
            )
        return qs.prefetch_related("questions__options")

    def get_serializer_class(self):
        if self.action == "list":
            return SurveyListSerializer
        return SurveySerializer


@api_view(["POST"])
@permission_classes([permissions.IsAdminUser])
def save_survey(request):
    serializer = SurveySerializer(data=request.data)
    if not serializer.is_valid():
        logger.warning(f"Rejected survey payload from user {request.user.id}: {serializer.errors}")
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    survey = serializer.save(owner=request.user)
    return Response({"id": survey.id, "title": survey.title}, status=status.HTTP_201_CREATED)


@api_view(["GET"])
@permission_classes([permissions.AllowAny])
def healthcheck(request):
    return Response({"status": "ok"})
