from functools import wraps
from typing import Optional

from django.contrib.auth.models import Group
from django.http import JsonResponse

from .models import ROLE_TO_STAGE, Stage

ROLE_ALIASES = {
    # Managers and accounting
    "admin": "manager",
    "supervisor": "manager",
    # Line roles
    "extruder": "extruder_operator",
    "extrusion": "extruder_operator",
    "printer": "printing_operator",
    "printing": "printing_operator",
    "cutter": "cutting_operator",
    "cutting": "cutting_operator",
    "warehouse": "warehouse_keeper",
    "receiving": "warehouse_keeper",
}

KNOWN_SLUGS = {
    'manager', 'accountant', 'extruder_operator', 'printing_operator',
    'cutting_operator', 'warehouse_keeper',
}


def canonical_role(value: Optional[str]) -> Optional[str]:
    """Normalize a role slug or a group name to the canonical slug."""
    if not value:
        return None
    s = str(value).strip().lower().replace(' ', '_')
    if s in KNOWN_SLUGS:
        return s
    return ROLE_ALIASES.get(s, None)


def get_user_role(user) -> Optional[str]:
    """
    Resolve user's role:
    1) Superusers act as managers.
    2) Use user.role.
    3) Fall back to Django Groups named after a role.
    """
    if getattr(user, "is_superuser", False):
        return "manager"

    role = canonical_role(getattr(user, "role", None))
    if role is not None:
        return role

    if getattr(user, "pk", None) is None:
        return None
    for g in Group.objects.filter(user=user):
        cand = canonical_role(g.name)
        if cand is not None:
            return cand
    return None


def role_to_stage(role: Optional[str]):
    """Map canonical role to the Stage it performs (None for manager/others)."""
    return ROLE_TO_STAGE.get(role, None)


def can_perform_stage(user, stage: Optional[str]) -> bool:
    """Managers may perform any stage; operators only their own."""
    if not stage:
        return False
    role = get_user_role(user)
    if role == "manager":
        return True
    return role_to_stage(role) == stage


def is_manager_or_accountant(user) -> bool:
    """Allow only managers or accountants."""
    return get_user_role(user) in ("manager", "accountant")


def can_view_production(user) -> bool:
    """Anyone with a known role may read production figures."""
    return get_user_role(user) is not None


def role_required(check):
    """
    Like ``user_passes_test`` for JSON endpoints: answer 403 JSON instead of
    redirecting a logged-in user whose role fails ``check``.
    """
    def decorator(view_func):
        @wraps(view_func)
        def _wrapped(request, *args, **kwargs):
            if not check(request.user):
                return JsonResponse({"ok": False, "error": "permission_denied"}, status=403)
            return view_func(request, *args, **kwargs)
        return _wrapped
    return decorator
