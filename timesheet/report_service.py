import logging

from .datastore import (
    fetch_all_member_month_lifelogs, fetch_all_member_month_time_entries, fetch_holidays,
    fetch_month_lifelogs, fetch_month_time_entries, fetch_organization_country_id,
    fetch_user_settings, is_lifelog_enabled, store_operation,
)
from .reports import generate_admin_report, generate_monthly_report

logger = logging.getLogger(__name__)


def to_month_label(yyyymm):
    """202311 -> 2023/11"""
    return f"{yyyymm[:4]}/{yyyymm[4:6]}"


def build_monthly_report(ctx, yyyymm, now=None):
    """Monthly report for the requesting user"""
    stores = ctx.stores
    with store_operation(f"build the {yyyymm} report", ctx.user):
        entries = fetch_month_time_entries(stores.time_entries, ctx.user, yyyymm)
        lifelogs = []
        if ctx.is_lifelog_enabled:
            lifelogs = fetch_month_lifelogs(stores.lifelogs, ctx.user, yyyymm)
        holidays = fetch_holidays(stores.public_holidays, ctx.country, yyyymm[:4])
    report = generate_monthly_report(
        ctx.user,
        ctx.email,
        to_month_label(yyyymm),
        entries,
        lifelogs,
        offset=ctx.offset,
        language=ctx.language,
        country=ctx.country,
        holidays=holidays,
        now=now,
    )
    if ctx.is_debug_mode:
        logger.debug(f"Monthly report for {ctx.user}: {report}")
    return report


def build_admin_report(stores, yyyymm, email_lookup=None, now=None, requested_by=None):
    """
    Monthly reports of every member who has entries in the month.

    Each member's own settings decide the language, country and lifelog mode;
    members without saved settings fall back to the organization's country.
    """
    with store_operation(f"build the {yyyymm} admin report", requested_by):
        entries_by_user = fetch_all_member_month_time_entries(stores.time_entries, yyyymm)
        lifelogs_by_user = fetch_all_member_month_lifelogs(stores.lifelogs, yyyymm)
        organization_country = fetch_organization_country_id(stores.organization_policies)

        reports = []
        for user in sorted(set(entries_by_user) | set(lifelogs_by_user)):
            settings = fetch_user_settings(stores.user_settings, user)
            country = settings.get('country_id') or organization_country
            lifelogs = lifelogs_by_user.get(user, []) if is_lifelog_enabled(settings) else []
            reports.append(generate_monthly_report(
                user,
                email_lookup(user) if email_lookup else None,
                to_month_label(yyyymm),
                entries_by_user.get(user, []),
                lifelogs,
                offset=settings.get('offset') or 0,
                language=settings.get('language') or 'en',
                country=country,
                holidays=fetch_holidays(stores.public_holidays, country, yyyymm[:4]),
                now=now,
            ))
            logger.info(f"Built the {yyyymm} report for {user}")
    return generate_admin_report(to_month_label(yyyymm), reports, now=now)
