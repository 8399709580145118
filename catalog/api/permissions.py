from rest_framework import permissions

from catalog.conf import catalog_setting


def has_admin_session(request) -> bool:
    """
    Both upstream admin cookies are present.

    Sessions are issued and verified upstream; presence is the whole check here.
    """
    cookies = request.COOKIES
    return bool(cookies.get(catalog_setting("ADMIN_SESSION_COOKIE"))) and bool(
        cookies.get(catalog_setting("STORE_ACCESS_COOKIE"))
    )


class HasAdminSessionCookies(permissions.BasePermission):
    """
    Gate for catalog writes.

    Evaluated before the request body is parsed, so rejected requests are
    never validated.
    """

    message = "Forbidden"

    def has_permission(self, request, view):
        return has_admin_session(request)
