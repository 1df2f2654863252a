from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .forms import CustomUserChangeForm, CustomUserCreationForm
from .models import CustomUser


@admin.register(CustomUser)
class CustomUserAdmin(BaseUserAdmin):
    add_form = CustomUserCreationForm
    form = CustomUserChangeForm
    model = CustomUser

    list_display = ("username", "full_name", "role", "is_active", "is_staff")
    list_filter = ("role", "is_active", "is_staff")
    search_fields = ("username", "full_name")

    def _strip_fields(self, fieldsets, to_remove=("first_name", "last_name")):
        """Remove unwanted fields from every fieldset, dropping sets left empty."""
        new_sets = []
        for name, opts in fieldsets:
            fields = tuple(f for f in opts.get("fields", ()) if f not in to_remove)
            if fields:
                new_sets.append((name, {**opts, "fields": fields}))
        return tuple(new_sets)

    def get_fieldsets(self, request, obj=None):
        if obj is None:
            return self.get_add_fieldsets(request)
        base = self._strip_fields(super().get_fieldsets(request, obj))
        return base + ((None, {"fields": ("full_name", "role")}),)

    def get_add_fieldsets(self, request):
        return (
            (None, {
                "classes": ("wide",),
                "fields": ("username", "password1", "password2", "full_name", "role", "is_active", "is_staff"),
            }),
        )
