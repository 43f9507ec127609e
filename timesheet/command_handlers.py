from django.http import JsonResponse
from datetime import datetime
import threading
import logging

from .components import build_request_context
from .constants import Label
from .datastore import fetch_lifelog, fetch_time_entry, store_operation
from .exceptions import MalformedEntryError, TimesheetOperationError
from .i18n import i18n
from .report_service import build_admin_report, build_monthly_report
from .reports import generate_daily_report, to_daily_report_blocks
from .slack_utils import (
    fetch_user_email, send_personal_notification, share_admin_report_json_file,
    share_report_json_file,
)
from .time_entries import finish_break_time, finish_work, start_break_time, start_work

logger = logging.getLogger(__name__)


def start_background(target):
    """Run `target` after the HTTP response so that Slack does not time out"""
    thread = threading.Thread(target=target)
    thread.daemon = True
    thread.start()
    return thread


def parse_date_argument(text):
    """'2023-11-01' -> '20231101'; None when `text` is not a date"""
    try:
        return datetime.strptime(text, '%Y-%m-%d').strftime('%Y%m%d')
    except ValueError:
        return None


def parse_month_argument(text):
    """'2023-11' -> '202311'; None when `text` is not a month"""
    try:
        return datetime.strptime(text, '%Y-%m').strftime('%Y%m')
    except ValueError:
        return None


def daily_summary_response(ctx):
    with store_operation('show the daily summary', ctx.user):
        entry = fetch_time_entry(ctx.stores.time_entries, ctx.user, yyyymmdd=ctx.yyyymmdd)
        lifelog = None
        if ctx.is_lifelog_enabled:
            lifelog = fetch_lifelog(ctx.stores.lifelogs, ctx.user, yyyymmdd=ctx.yyyymmdd)
    report = generate_daily_report(
        entry,
        lifelog,
        offset=ctx.offset,
        language=ctx.language,
        country=ctx.country,
        holidays=ctx.holidays,
    )
    if ctx.is_debug_mode:
        logger.debug(f"Daily report for {ctx.user}: {report}")
    return JsonResponse({
        'response_type': 'ephemeral',
        'blocks': to_daily_report_blocks(report, ctx.language),
    })


def handle_timesheet(request):
    """
    /timesheet [start [project_code] | finish | break | back | YYYY-MM-DD]

    Quick actions always work on today; a date argument only shows that day.
    """
    user_id = request.POST.get('user_id')
    args = request.POST.get('text', '').strip().split()
    action = args[0].lower() if args else ''
    try:
        yyyymmdd = parse_date_argument(action) if action else None
        ctx = build_request_context(user_id, yyyymmdd=yyyymmdd)
        if action == 'start':
            project_code = args[1] if len(args) > 1 else None
            start_work(ctx, project_code=project_code)
        elif action == 'finish':
            finish_work(ctx)
        elif action == 'break':
            start_break_time(ctx)
        elif action == 'back':
            finish_break_time(ctx)
        elif action and yyyymmdd is None:
            return JsonResponse({
                'text': 'Usage: /timesheet [start [project_code]|finish|break|back|YYYY-MM-DD]'
            })
        return daily_summary_response(ctx)
    except (TimesheetOperationError, MalformedEntryError) as e:
        logger.error(f"Error in handle_timesheet: {e}")
        return JsonResponse({'text': i18n(Label.FAILED_TO_GENERATE_REPORT, 'en')})


def handle_timesheet_report(request):
    """/timesheet-report [YYYY-MM]: monthly summary and JSON file by DM"""
    user_id = request.POST.get('user_id')
    text = request.POST.get('text', '').strip()
    try:
        ctx = build_request_context(user_id)
    except TimesheetOperationError as e:
        logger.error(f"Error in handle_timesheet_report: {e}")
        return JsonResponse({'text': i18n(Label.FAILED_TO_GENERATE_REPORT, 'en')})

    yyyymm = parse_month_argument(text) if text else ctx.yyyymm
    if yyyymm is None:
        return JsonResponse({'text': 'Usage: /timesheet-report [YYYY-MM]'})

    def send_report_background():
        try:
            report = build_monthly_report(ctx, yyyymm)
            share_report_json_file(report, ctx.user, ctx.country, ctx.language, f"{yyyymm}01")
        except (TimesheetOperationError, MalformedEntryError) as e:
            logger.error(f"Failed to send the {yyyymm} report to {ctx.user}: {e}")
            send_personal_notification(ctx.user, i18n(Label.FAILED_TO_GENERATE_REPORT, ctx.language))

    start_background(send_report_background)
    return JsonResponse({'text': i18n(Label.REPORT_HAS_BEEN_SENT_IN_DM, ctx.language)})


def handle_timesheet_admin_report(request):
    """/timesheet-admin-report YYYY-MM: every member's report as one JSON file (admins only)"""
    user_id = request.POST.get('user_id')
    text = request.POST.get('text', '').strip()
    try:
        ctx = build_request_context(user_id)
    except TimesheetOperationError as e:
        logger.error(f"Error in handle_timesheet_admin_report: {e}")
        return JsonResponse({'text': i18n(Label.FAILED_TO_GENERATE_REPORT, 'en')})

    if not ctx.is_admin:
        return JsonResponse({'text': i18n(Label.ADMIN_ONLY, ctx.language)})
    yyyymm = parse_month_argument(text)
    if yyyymm is None:
        return JsonResponse({'text': 'Usage: /timesheet-admin-report YYYY-MM'})

    def send_admin_report_background():
        try:
            report = build_admin_report(
                ctx.stores, yyyymm, email_lookup=fetch_user_email, requested_by=ctx.user,
            )
            share_admin_report_json_file(report, ctx.user, ctx.language, f"{yyyymm}01")
        except (TimesheetOperationError, MalformedEntryError) as e:
            logger.error(f"Failed to send the {yyyymm} admin report to {ctx.user}: {e}")
            send_personal_notification(ctx.user, i18n(Label.FAILED_TO_GENERATE_REPORT, ctx.language))

    start_background(send_admin_report_background)
    return JsonResponse({'text': i18n(Label.REPORT_HAS_BEEN_SENT_IN_DM, ctx.language)})
