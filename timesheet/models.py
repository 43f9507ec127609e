from django.db import models


class TimeEntry(models.Model):
    # user_id + "-" + YYYYMMDD
    user_and_date = models.CharField(max_length=64, primary_key=True)
    # Each item is a serialized entry (JSON object, or the legacy comma format)
    work_entries = models.JSONField(default=list)
    break_time_entries = models.JSONField(default=list, blank=True)
    time_off_entries = models.JSONField(default=list, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.user_and_date

    class Meta:
        verbose_name_plural = "Time Entries"


class Lifelog(models.Model):
    # user_id + "-" + YYYYMMDD
    user_and_date = models.CharField(max_length=64, primary_key=True)
    logs = models.JSONField(default=list)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.user_and_date


class UserSettings(models.Model):
    APP_MODE_CHOICES = [
        ('work', 'Work management'),
        ('work_and_lifelogs', 'Work and lifelogs'),
    ]

    user = models.CharField(max_length=32, primary_key=True)
    language = models.CharField(max_length=8, default='en')
    # reference to a country code such as "jp"
    country_id = models.CharField(max_length=8, null=True, blank=True)
    app_mode = models.CharField(max_length=20, choices=APP_MODE_CHOICES, null=True, blank=True)
    # UTC offset in seconds, refreshed from Slack's users.info
    offset = models.IntegerField(default=0)

    def __str__(self):
        return f"{self.user}'s Settings"

    class Meta:
        verbose_name_plural = "User Settings"


class PublicHoliday(models.Model):
    # country id + "-" + year (e.g., jp-2023)
    country_id_and_year = models.CharField(max_length=16, primary_key=True)
    # YYYYMMDD strings
    holidays = models.JSONField(default=list)

    def __str__(self):
        return self.country_id_and_year


class AdminUser(models.Model):
    user = models.CharField(max_length=32, primary_key=True)

    def __str__(self):
        return self.user


class Project(models.Model):
    code = models.CharField(max_length=20, primary_key=True)
    name = models.CharField(max_length=50)
    is_active = models.BooleanField(default=True)
    description = models.TextField(blank=True, null=True)

    def __str__(self):
        return f"{self.code} - {self.name}"


class OrganizationPolicy(models.Model):
    key = models.CharField(max_length=50, primary_key=True)
    value = models.CharField(max_length=50)

    def __str__(self):
        return f"{self.key}: {self.value}"

    class Meta:
        verbose_name_plural = "Organization Policies"


class ActiveView(models.Model):
    view_id = models.CharField(max_length=32, primary_key=True)
    user_id = models.CharField(max_length=32)
    last_updated_callback_id = models.CharField(max_length=50)
    # epoch seconds
    last_updated_at = models.IntegerField()

    def __str__(self):
        return f"{self.user_id} - {self.view_id}"
