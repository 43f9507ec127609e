from slack_sdk.web.client import WebClient
from slack_sdk.errors import SlackApiError
import logging
import os
from dotenv import load_dotenv

from .constants import Label
from .exceptions import TimesheetOperationError
from .i18n import i18n
from .reports import report_to_json, to_report_result_blocks

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

SLACK_BOT_TOKEN = os.getenv('SLACK_BOT_TOKEN')
slack_client = WebClient(
    token=SLACK_BOT_TOKEN,
    timeout=30
)


def split_locale(locale):
    """'ja-JP' -> ('ja', 'jp'); a missing part comes back as None"""
    if not locale:
        return None, None
    parts = locale.split('-')
    language = parts[0] or None
    country = parts[1].lower() if len(parts) > 1 and parts[1] else None
    return language, country


def fetch_user_details(user_id):
    """users.info with the locale included; raises TimesheetOperationError on API errors"""
    try:
        response = slack_client.users_info(user=user_id, include_locale=True)
    except SlackApiError as e:
        logger.error(f"Error fetching user info for {user_id}: {e}")
        raise TimesheetOperationError('fetch user details', user_id, e) from e
    user = response.get('user')
    if not user:
        raise TimesheetOperationError(
            'fetch user details', user_id, 'users.info returned no user data'
        )
    return {
        'user': user_id,
        'offset': user.get('tz_offset') or 0,
        'locale': user.get('locale'),
        'email': (user.get('profile') or {}).get('email'),
    }


def fetch_user_email(user_id):
    """E-mail for report exports; None when Slack cannot tell us"""
    try:
        return fetch_user_details(user_id)['email']
    except TimesheetOperationError as e:
        logger.warning(f"Falling back to no e-mail: {e}")
        return None


def send_personal_notification(user_id, text, blocks=None):
    """Helper function to send notifications to user's DM"""
    try:
        return slack_client.chat_postMessage(
            channel=user_id,
            blocks=blocks,
            text=text
        )
    except SlackApiError as e:
        logger.error(f"Error sending DM to user {user_id}: {e}")
        raise TimesheetOperationError('send a direct message', user_id, e) from e


def update_view(view_id, blocks, callback_id=None):
    """Replace the blocks of an open view (app home or modal)"""
    view = {
        "type": "modal",
        "title": {"type": "plain_text", "text": Label.APP_NAME},
        "blocks": blocks,
    }
    if callback_id:
        view["callback_id"] = callback_id
    return slack_client.views_update(view_id=view_id, view=view)


class SlackReportExportSink:
    """Delivers a report to a user's DM as a JSON file plus an optional summary message"""

    def __init__(self, client=None):
        self.client = client or slack_client

    def _open_dm(self, user_id):
        response = self.client.conversations_open(users=user_id)
        return response['channel']['id']

    def export(self, report, destination, filename, message, blocks=None):
        """
        Upload `report` as JSON to the `destination` user's DM.

        Returns the file permalink. Slack failures are raised as TimesheetOperationError.
        """
        try:
            channel = self._open_dm(destination)
            upload = self.client.files_upload_v2(
                channel=channel,
                filename=filename,
                title=filename,
                content=report_to_json(report),
                snippet_type='json',
            )
            uploaded = upload.get('file') or {}
            permalink = uploaded.get('permalink')
            logger.info(f"Uploaded {filename} for {destination}")
            self.client.chat_postMessage(
                channel=channel,
                text=f"{message} {permalink}" if permalink else message,
                blocks=blocks,
            )
            return permalink
        except SlackApiError as e:
            logger.error(f"Error exporting {filename} to {destination}: {e}")
            raise TimesheetOperationError('export a report', destination, e) from e


def share_report_json_file(report, user, country, language, yyyymmdd, sink=None):
    sink = sink or SlackReportExportSink()
    filename = f"{user}-{yyyymmdd[:6]}.json"
    return sink.export(
        report,
        user,
        filename,
        "Here is the monthly report's JSON file:",
        blocks=to_report_result_blocks(report, country, language),
    )


def share_admin_report_json_file(report, admin_user_id, language, yyyymmdd, sink=None):
    sink = sink or SlackReportExportSink()
    filename = f"all-members-{yyyymmdd[:6]}.json"
    message = i18n(Label.HERE_IS_THE_REPORT_YOU_REQUESTED, language)
    return sink.export(report, admin_user_id, filename, f":wave: {message}")
