from django.http import JsonResponse
import json
import logging

from slack_sdk.errors import SlackApiError

from .components import build_request_context
from .constants import BlockId, CallbackId, EntryType, Label
from .entries import deserialize_entry
from .exceptions import MalformedEntryError, TimesheetOperationError
from .i18n import i18n
from .refresher import build_main_view_blocks, save_last_active_view
from .slack_utils import update_view
from .time_entries import add_entry, add_lifelog, edit_entry, suggest_projects

logger = logging.getLogger(__name__)


def state_value(view, block_id):
    """
    First submitted value of an input block.

    Plain text inputs carry `value`, time pickers `selected_time` and selects
    `selected_option`.
    """
    actions = view.get('state', {}).get('values', {}).get(block_id) or {}
    for action in actions.values():
        if action.get('selected_option'):
            return action['selected_option'].get('value')
        for key in ('selected_time', 'value'):
            if action.get(key):
                return action[key]
    return None


def private_metadata(view):
    try:
        return json.loads(view.get('private_metadata') or '{}')
    except ValueError:
        logger.warning(f"Ignored unparsable private_metadata: {view.get('private_metadata')!r}")
        return {}


def errors_response(errors):
    return JsonResponse({"response_action": "errors", "errors": errors})


def handle_modal_submission(payload):
    """Route modal submissions to appropriate handlers"""
    view = payload['view']
    callback_id = view.get('callback_id')
    user_id = payload['user']['id']
    metadata = private_metadata(view)
    try:
        ctx = build_request_context(user_id, yyyymmdd=metadata.get('yyyymmdd'))
        if callback_id == CallbackId.ADD_ENTRY:
            return handle_add_entry_submission(ctx, view)
        elif callback_id == CallbackId.EDIT_ENTRY:
            return handle_edit_entry_submission(ctx, view, metadata)
        elif callback_id == CallbackId.ADD_LIFELOG:
            return handle_add_lifelog_submission(ctx, view)
    except TimesheetOperationError as e:
        logger.error(f"Error handling {callback_id} submission: {e}")
        return errors_response({BlockId.START: i18n(Label.FAILED_TO_GENERATE_REPORT, 'en')})
    return JsonResponse({})


def _submitted_kind(view):
    return EntryType.parse(state_value(view, BlockId.TYPE)) or EntryType.WORK


def handle_add_entry_submission(ctx, view):
    kind = _submitted_kind(view)
    if kind == EntryType.LIFELOG:
        return handle_add_lifelog_submission(ctx, view)
    errors = add_entry(
        ctx,
        kind,
        state_value(view, BlockId.START),
        state_value(view, BlockId.END) or '',
        project_code=state_value(view, BlockId.PROJECT_CODE),
    )
    if errors:
        return errors_response(errors)
    return JsonResponse({})


def handle_edit_entry_submission(ctx, view, metadata):
    """The entry being edited travels in private_metadata as its stored string"""
    kind = EntryType.parse(metadata.get('type')) or _submitted_kind(view)
    target = deserialize_entry(metadata.get('entry') or '')
    if kind == EntryType.LIFELOG or target is None:
        logger.error(f"Edit target missing from private_metadata: {metadata}")
        return JsonResponse({})
    errors = edit_entry(
        ctx,
        kind,
        target,
        state_value(view, BlockId.START),
        state_value(view, BlockId.END) or '',
        project_code=state_value(view, BlockId.PROJECT_CODE),
    )
    if errors:
        return errors_response(errors)
    return JsonResponse({})


def handle_add_lifelog_submission(ctx, view):
    errors = add_lifelog(
        ctx,
        state_value(view, BlockId.START),
        state_value(view, BlockId.END) or '',
        state_value(view, BlockId.WHAT_TO_DO),
    )
    if errors:
        return errors_response(errors)
    return JsonResponse({})


def handle_project_code_suggestion(payload):
    """External select options for the project code input"""
    user_id = payload['user']['id']
    try:
        ctx = build_request_context(user_id)
        projects = suggest_projects(ctx, payload.get('value'))
    except TimesheetOperationError as e:
        logger.error(f"Error searching projects: {e}")
        return JsonResponse({"options": []})
    return JsonResponse({
        "options": [
            {
                "text": {"type": "plain_text", "text": f"{p['code']}: {p.get('name') or ''}"[:75]},
                "value": p['code'],
            }
            for p in projects
        ]
    })


def handle_main_view_refresh(payload):
    """Any action on the main view refreshes its summary and marks the view as active"""
    view = payload.get('view') or {}
    if view.get('callback_id') != CallbackId.MAIN_VIEW:
        return JsonResponse({})
    user_id = payload['user']['id']
    try:
        ctx = build_request_context(user_id)
        update_view(view['id'], build_main_view_blocks(ctx.stores, user_id), callback_id=CallbackId.MAIN_VIEW)
        save_last_active_view(ctx.stores.active_views, view['id'], user_id, CallbackId.MAIN_VIEW)
    except (TimesheetOperationError, MalformedEntryError, SlackApiError) as e:
        logger.error(f"Failed to refresh the main view (user: {user_id}, error: {e})")
    return JsonResponse({})
