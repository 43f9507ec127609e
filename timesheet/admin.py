from django import forms
from django.contrib import admin

from .datastore import ModelRecordStore
from .models import (
    ActiveView, AdminUser, Lifelog, OrganizationPolicy, Project, PublicHoliday,
    TimeEntry, UserSettings,
)
from .validation import validate_project_submission


class ProjectAdminForm(forms.ModelForm):
    class Meta:
        model = Project
        fields = ['code', 'name', 'is_active', 'description']

    def clean(self):
        cleaned_data = super().clean()
        errors = validate_project_submission(
            cleaned_data.get('code'),
            cleaned_data.get('name'),
            cleaned_data.get('description'),
            ModelRecordStore(Project),
            is_new=self.instance._state.adding,
        )
        for field, message in errors.items():
            self.add_error(field, message)
        return cleaned_data


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    form = ProjectAdminForm
    list_display = ['code', 'name', 'is_active']
    list_filter = ['is_active']
    search_fields = ['code', 'name', 'description']


@admin.register(TimeEntry)
class TimeEntryAdmin(admin.ModelAdmin):
    list_display = ['user_and_date', 'updated_at']
    search_fields = ['user_and_date']
    readonly_fields = ['updated_at']


@admin.register(Lifelog)
class LifelogAdmin(admin.ModelAdmin):
    list_display = ['user_and_date', 'updated_at']
    search_fields = ['user_and_date']
    readonly_fields = ['updated_at']


@admin.register(UserSettings)
class UserSettingsAdmin(admin.ModelAdmin):
    list_display = ['user', 'language', 'country_id', 'app_mode', 'offset']
    list_filter = ['language', 'country_id', 'app_mode']
    search_fields = ['user']


@admin.register(PublicHoliday)
class PublicHolidayAdmin(admin.ModelAdmin):
    list_display = ['country_id_and_year']


@admin.register(AdminUser)
class AdminUserAdmin(admin.ModelAdmin):
    list_display = ['user']
    search_fields = ['user']


@admin.register(OrganizationPolicy)
class OrganizationPolicyAdmin(admin.ModelAdmin):
    list_display = ['key', 'value']


@admin.register(ActiveView)
class ActiveViewAdmin(admin.ModelAdmin):
    list_display = ['view_id', 'user_id', 'last_updated_callback_id', 'last_updated_at']
    search_fields = ['user_id']
