"""
Periodic refresh of the timesheet views users keep open.

All stale views are updated concurrently by a bounded thread pool that shares
one hard deadline. Updates still running when the deadline passes are
abandoned; the next sweep picks those views up again.

An abandoned update cannot be interrupted: its Slack call runs to completion
(bounded by the client timeout) and the interpreter joins the worker thread
before exiting. Once the deadline has passed it no longer records the view
as refreshed.
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, wait

from django.conf import settings
from slack_sdk.errors import SlackApiError

from .constants import CallbackId
from .datastore import (
    fetch_holidays, fetch_lifelog, fetch_time_entry, fetch_user_settings, is_lifelog_enabled,
    store_operation,
)
from .exceptions import MalformedEntryError, TimesheetOperationError
from .reports import generate_daily_report, to_daily_report_blocks
from .slack_utils import update_view
from .time_utils import today_yyyymmdd

logger = logging.getLogger(__name__)

# Views not touched for longer than this are cleaned up
ACTIVE_VIEW_RETENTION_SECONDS = 24 * 60 * 60


def save_last_active_view(av, view_id, user_id, callback_id, now=None):
    return av.put(view_id, {
        'view_id': view_id,
        'user_id': user_id,
        'last_updated_callback_id': callback_id,
        'last_updated_at': int(now if now is not None else time.time()),
    })


def clean_up_old_active_views(av, now=None):
    """Delete views nobody has touched for a day; returns how many were removed"""
    threshold = int(now if now is not None else time.time()) - ACTIVE_VIEW_RETENTION_SECONDS
    removed = 0
    for view in av.query_by_prefix(''):
        if view['last_updated_at'] < threshold:
            av.delete_by_key(view['view_id'])
            removed += 1
    return removed


def find_stale_views(av, stale_seconds, now):
    """Main views not updated within `stale_seconds`, newest first"""
    views = [
        v for v in av.query_by_prefix('')
        if v.get('last_updated_callback_id') == CallbackId.MAIN_VIEW
        and v['last_updated_at'] < now - stale_seconds
    ]
    views.sort(key=lambda v: (v['user_id'], v['last_updated_at']), reverse=True)
    return views


def build_main_view_blocks(stores, user_id):
    with store_operation('build the main view', user_id):
        user_settings = fetch_user_settings(stores.user_settings, user_id)
        language = user_settings.get('language') or 'en'
        country = user_settings.get('country_id')
        offset = user_settings.get('offset') or 0
        yyyymmdd = today_yyyymmdd(offset)
        lifelog = None
        if is_lifelog_enabled(user_settings):
            lifelog = fetch_lifelog(stores.lifelogs, user_id, yyyymmdd=yyyymmdd)
        entry = fetch_time_entry(stores.time_entries, user_id, yyyymmdd=yyyymmdd)
        holidays = fetch_holidays(stores.public_holidays, country, yyyymmdd[:4])
    report = generate_daily_report(
        entry,
        lifelog,
        offset=offset,
        language=language,
        country=country,
        holidays=holidays,
    )
    return to_daily_report_blocks(report, language)


def refresh_view(stores, active_view, now, expired=None):
    """
    Update one view; a view Slack no longer knows about is forgotten.

    Nothing is written once `expired` is set.
    """
    view_id = active_view['view_id']
    user_id = active_view['user_id']
    try:
        blocks = build_main_view_blocks(stores, user_id)
        if expired is not None and expired.is_set():
            return False
        update_view(view_id, blocks, callback_id=CallbackId.MAIN_VIEW)
        if expired is not None and expired.is_set():
            logger.info(f"Deadline passed while updating {view_id}; not marking it as refreshed")
            return False
        save_last_active_view(stores.active_views, view_id, user_id, CallbackId.MAIN_VIEW, now=now)
        return True
    except SlackApiError as e:
        logger.warning(f"Failed to update an active view {view_id}: {e}")
        if e.response.get('error') == 'not_found':
            # The modal view seems to be already closed
            stores.active_views.delete_by_key(view_id)
        return False
    except (TimesheetOperationError, MalformedEntryError) as e:
        logger.error(f"Failed to build an active view {view_id}: {e}")
        return False


def refresh_active_views(stores, max_workers=None, deadline_seconds=None, stale_minutes=None,
                         now=None):
    """
    Refresh every stale main view within one overall time budget.

    Returns (refreshed, abandoned): the number of views updated successfully
    and the number still pending when the deadline passed.
    """
    max_workers = max_workers or settings.VIEW_REFRESH_MAX_WORKERS
    deadline_seconds = deadline_seconds or settings.VIEW_REFRESH_DEADLINE_SECONDS
    stale_minutes = stale_minutes or settings.VIEW_REFRESH_STALE_MINUTES
    now = int(now if now is not None else time.time())

    views = find_stale_views(stores.active_views, stale_minutes * 60, now)
    logger.info(f"{len(views)} active views to refresh")
    if not views:
        clean_up_old_active_views(stores.active_views, now=now)
        return 0, 0

    expired = threading.Event()
    executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix='view-refresher')
    try:
        futures = [executor.submit(refresh_view, stores, v, now, expired) for v in views]
        done, not_done = wait(futures, timeout=deadline_seconds)
    finally:
        expired.set()
        # Stragglers are left behind rather than waited for
        executor.shutdown(wait=False, cancel_futures=True)

    refreshed = 0
    for future in done:
        exception = future.exception()
        if exception is not None:
            logger.error(f"Unexpected error while refreshing a view: {exception}")
        elif future.result():
            refreshed += 1
    if not_done:
        logger.warning(f"Gave up on {len(not_done)} view updates after {deadline_seconds} seconds")

    clean_up_old_active_views(stores.active_views, now=now)
    return refreshed, len(not_done)
