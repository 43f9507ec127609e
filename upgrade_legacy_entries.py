#!/usr/bin/env python3

"""
Run this script to rewrite legacy comma separated entries as JSON.

Reports read both formats, so this is optional; run it once after importing
data saved by older versions.
"""

import os
import django

# Set Django settings
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'timesheet_project.settings')

# Setup Django
django.setup()

from timesheet.datastore import model_datastores, upgrade_legacy_entries

if __name__ == '__main__':
    print("Upgrading legacy time entries and lifelogs...")
    try:
        count = upgrade_legacy_entries(model_datastores())
        print(f"✅ Upgraded {count} records")
    except Exception as e:
        print(f"❌ Upgrade failed: {e}")
        raise
