from __future__ import annotations

import json
import logging
from typing import Any, Callable

from django.contrib.auth.decorators import login_required
from django.db.models import Count
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.views.decorators.http import require_http_methods

from alumni_app.api.serializers import SurveyListSerializer

from .editor import SurveyDraftEditor
from .exceptions import DraftError, DraftLockedError
from .models import Survey
from .permissions import require_can_build
from .transports import get_transport

logger = logging.getLogger(__name__)

# Session key holding the editor state between builder requests
BUILDER_SESSION_KEY = "survey_builder"

TRUE_VALUES = {"1", "true", "on", "yes"}


def _load_editor(request: HttpRequest) -> SurveyDraftEditor:
    return SurveyDraftEditor.from_state(request.session.get(BUILDER_SESSION_KEY))


def _store_editor(request: HttpRequest, editor: SurveyDraftEditor) -> None:
    request.session[BUILDER_SESSION_KEY] = editor.to_state()


def _discard_editor(request: HttpRequest) -> None:
    request.session.pop(BUILDER_SESSION_KEY, None)


def _request_data(request: HttpRequest) -> dict[str, Any]:
    """Read the action arguments from a JSON body, falling back to form data."""
    if request.content_type == "application/json":
        try:
            data = json.loads(request.body or b"{}")
        except ValueError as exc:
            raise DraftError(f"Invalid JSON body: {exc}") from exc
        if not isinstance(data, dict):
            raise DraftError("Expected a JSON object")
        return data
    return request.POST.dict()


def _parse_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in TRUE_VALUES
    return bool(value)


def _editor_state(editor: SurveyDraftEditor) -> dict[str, Any]:
    return {
        "draft": editor.draft,
        "errors": editor.errors,
        "alert": editor.alert,
        "saving": editor.saving,
        "can_save": editor.can_save,
        "scroll_to": editor.scroll_to,
    }


def _editor_response(
    editor: SurveyDraftEditor, status: int = 200, **extra: Any
) -> JsonResponse:
    data = _editor_state(editor)
    data.update(extra)
    return JsonResponse(data, status=status)


def _run_action(
    request: HttpRequest, action: Callable[[SurveyDraftEditor, dict[str, Any]], None]
) -> HttpResponse:
    """Apply one editor action to the session draft and answer with the new state."""
    require_can_build(request.user)
    editor = _load_editor(request)
    try:
        action(editor, _request_data(request))
    except DraftLockedError as exc:
        return JsonResponse({"errors": {"draft": [str(exc)]}}, status=409)
    except IndexError as exc:
        return JsonResponse({"errors": {"draft": [str(exc)]}}, status=404)
    except (DraftError, KeyError) as exc:
        _store_editor(request, editor)
        return _editor_response(editor, status=400, detail=str(exc))
    _store_editor(request, editor)
    return _editor_response(editor)


@login_required
@require_http_methods(["GET"])
def builder_state(request: HttpRequest) -> HttpResponse:
    require_can_build(request.user)
    editor = _load_editor(request)
    _store_editor(request, editor)
    return _editor_response(editor)


@login_required
@require_http_methods(["POST"])
def builder_field_update(request: HttpRequest) -> HttpResponse:
    return _run_action(
        request, lambda editor, data: editor.set_field(data["name"], data.get("value", ""))
    )


@login_required
@require_http_methods(["POST"])
def builder_question_add(request: HttpRequest) -> HttpResponse:
    return _run_action(request, lambda editor, data: editor.add_question())


@login_required
@require_http_methods(["POST"])
def builder_question_delete(request: HttpRequest, index: int) -> HttpResponse:
    return _run_action(request, lambda editor, data: editor.delete_question(index))


@login_required
@require_http_methods(["POST"])
def builder_question_update(request: HttpRequest, index: int) -> HttpResponse:
    def update(editor: SurveyDraftEditor, data: dict[str, Any]) -> None:
        field = data["field"]
        value = data.get("value")
        if field == "required":
            value = _parse_bool(value)
        editor.set_question_field(index, field, value)

    return _run_action(request, update)


@login_required
@require_http_methods(["POST"])
def builder_option_add(request: HttpRequest, index: int) -> HttpResponse:
    return _run_action(request, lambda editor, data: editor.add_option(index))


@login_required
@require_http_methods(["POST"])
def builder_option_update(request: HttpRequest, index: int, option: int) -> HttpResponse:
    return _run_action(
        request,
        lambda editor, data: editor.set_option_field(
            index, option, data["field"], data.get("value")
        ),
    )


@login_required
@require_http_methods(["POST"])
def builder_option_delete(request: HttpRequest, index: int, option: int) -> HttpResponse:
    return _run_action(request, lambda editor, data: editor.delete_option(index, option))


@login_required
@require_http_methods(["POST"])
def builder_alert_dismiss(request: HttpRequest) -> HttpResponse:
    return _run_action(request, lambda editor, data: editor.dismiss_alert())


@login_required
@require_http_methods(["POST"])
def builder_save(request: HttpRequest) -> HttpResponse:
    require_can_build(request.user)
    editor = _load_editor(request)
    try:
        payload = editor.begin_save()
    except DraftLockedError as exc:
        return JsonResponse({"errors": {"draft": [str(exc)]}}, status=409)
    except DraftError as exc:
        _store_editor(request, editor)
        return _editor_response(editor, status=400, detail=str(exc))

    # Persist the lock so concurrent requests from this session see it
    _store_editor(request, editor)
    request.session.save()
    try:
        saved = editor.finish_save(get_transport(request), payload)
    except Exception:
        # Sessions are not saved on 500 responses; release the lock explicitly
        _store_editor(request, editor)
        request.session.save()
        raise

    if saved:
        _discard_editor(request)
        return _editor_response(editor, status=201, redirect=editor.redirect)
    _store_editor(request, editor)
    return _editor_response(editor, status=400)


@login_required
@require_http_methods(["POST"])
def builder_cancel(request: HttpRequest) -> HttpResponse:
    require_can_build(request.user)
    editor = _load_editor(request)
    try:
        redirect_url = editor.cancel()
    except DraftLockedError as exc:
        return JsonResponse({"errors": {"draft": [str(exc)]}}, status=409)
    _discard_editor(request)
    return JsonResponse({"redirect": redirect_url})


@login_required
@require_http_methods(["GET"])
def survey_feedback(request: HttpRequest) -> HttpResponse:
    """Survey-feedback listing: the page the builder returns to."""
    require_can_build(request.user)
    surveys = Survey.objects.annotate(question_count=Count("questions")).order_by(
        "-created_at", "-id"
    )
    return JsonResponse({"surveys": SurveyListSerializer(surveys, many=True).data})
