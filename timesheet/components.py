import logging
from dataclasses import dataclass, field
from typing import Optional

from django.conf import settings as django_settings

from .datastore import (
    fetch_holidays, fetch_user_settings, is_admin_user, is_lifelog_enabled,
    model_datastores, save_user_settings, store_operation,
)
from .slack_utils import fetch_user_details, split_locale
from .time_utils import today_yyyymmdd

logger = logging.getLogger(__name__)


@dataclass
class RequestContext:
    """Everything a single request needs, resolved once up front"""
    user: str
    stores: object
    email: Optional[str] = None
    offset: int = 0
    locale: Optional[str] = None
    language: str = 'en'
    country: Optional[str] = None
    yyyymmdd: str = ''
    settings: dict = field(default_factory=dict)
    holidays: list = field(default_factory=list)
    is_admin: bool = False
    is_lifelog_enabled: bool = False
    is_debug_mode: bool = False

    @property
    def yyyymm(self):
        return self.yyyymmdd[:6]


def build_request_context(user_id, stores=None, yyyymmdd=None, user_details=None):
    """
    Resolve user locale, saved settings, holidays and admin access for one request.

    Saved settings win over the Slack locale. The user's UTC offset is written
    back to the settings when it changed since the last request.
    """
    stores = stores or model_datastores()
    details = user_details or fetch_user_details(user_id)
    offset = details.get('offset') or 0
    locale = details.get('locale')
    language, country = split_locale(locale)
    language = language or 'en'

    target = yyyymmdd or today_yyyymmdd(offset)
    with store_operation('load user settings', user_id):
        saved = fetch_user_settings(stores.user_settings, user_id)
        if saved:
            language = saved.get('language') or language
            country = saved.get('country_id') or country
            if saved.get('offset') != offset:
                saved = save_user_settings(stores.user_settings, user_id, {**saved, 'offset': offset})
                logger.info(f"Updated the UTC offset of {user_id} to {offset}")
        holidays = fetch_holidays(stores.public_holidays, country, target[:4])
        is_admin = is_admin_user(stores.admin_users, user_id)

    ctx = RequestContext(
        user=user_id,
        stores=stores,
        email=details.get('email'),
        offset=offset,
        locale=locale,
        language=language,
        country=country,
        yyyymmdd=target,
        settings=saved,
        holidays=holidays,
        is_admin=is_admin,
        is_lifelog_enabled=is_lifelog_enabled(saved),
        is_debug_mode=getattr(django_settings, 'DEBUG_MODE', False),
    )
    if ctx.is_debug_mode:
        logger.debug(f"Request context: {ctx}")
    return ctx
