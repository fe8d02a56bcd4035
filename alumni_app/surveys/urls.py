from django.urls import path
from . import views

app_name = "surveys"

urlpatterns = [
    # Survey builder (draft held in the session)
    path("create/", views.builder_state, name="builder_state"),
    path("create/field", views.builder_field_update, name="builder_field_update"),
    path("create/questions/add", views.builder_question_add, name="builder_question_add"),
    path("create/questions/<int:index>/delete", views.builder_question_delete, name="builder_question_delete"),
    path("create/questions/<int:index>/field", views.builder_question_update, name="builder_question_update"),
    path("create/questions/<int:index>/options/add", views.builder_option_add, name="builder_option_add"),
    path("create/questions/<int:index>/options/<int:option>/field", views.builder_option_update, name="builder_option_update"),
    path("create/questions/<int:index>/options/<int:option>/delete", views.builder_option_delete, name="builder_option_delete"),
    path("create/alert/dismiss", views.builder_alert_dismiss, name="builder_alert_dismiss"),
    path("create/save", views.builder_save, name="builder_save"),
    path("create/cancel", views.builder_cancel, name="builder_cancel"),
]
