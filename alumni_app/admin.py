from django.contrib.admin import AdminSite
from django.contrib.admin.apps import AdminConfig


class AlumniAdminSite(AdminSite):
    """Admin site for superusers; staff work on surveys through the builder."""

    site_header = "Alumni Association Admin"
    site_title = "Alumni Association Admin"
    index_title = "Saved surveys"

    def has_permission(self, request):
        return request.user.is_active and request.user.is_superuser


class AlumniAdminConfig(AdminConfig):
    default_site = "alumni_app.admin.AlumniAdminSite"
