#!/usr/bin/env python3

"""
Run this script periodically (e.g. from cron every few minutes) to refresh
the timesheet views users keep open.
"""

import os
import django

# Set Django settings
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'timesheet_project.settings')

# Setup Django
django.setup()

from timesheet.datastore import model_datastores
from timesheet.refresher import refresh_active_views

if __name__ == '__main__':
    refreshed, abandoned = refresh_active_views(model_datastores())
    print(f"✅ Refreshed {refreshed} views")
    if abandoned:
        print(f"⚠️ Gave up on {abandoned} views (deadline reached)")
