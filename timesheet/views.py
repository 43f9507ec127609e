from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
import json
import logging

from .command_handlers import handle_timesheet, handle_timesheet_admin_report, handle_timesheet_report
from .modal_handlers import handle_main_view_refresh, handle_modal_submission, handle_project_code_suggestion

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

COMMAND_HANDLERS = {
    '/timesheet': handle_timesheet,
    '/timesheet-report': handle_timesheet_report,
    '/timesheet-admin-report': handle_timesheet_admin_report,
}


@csrf_exempt
def slack_events(request):
    logger.info(f"Received request method: {request.method}")

    if request.method != "POST":
        return JsonResponse({'error': 'Invalid request method'}, status=405)

    content_type = request.headers.get('Content-Type', '')
    # Handle form-encoded data (slash commands and interactions)
    if content_type.startswith('application/x-www-form-urlencoded'):
        command = request.POST.get('command')
        if command:
            handler = COMMAND_HANDLERS.get(command)
            if handler is None:
                logger.warning(f"Unknown command: {command}")
                return JsonResponse({'text': f'Unknown command: {command}'})
            return handler(request)

        if request.POST.get('payload'):
            try:
                payload = json.loads(request.POST.get('payload'))
            except ValueError as e:
                logger.error(f"Error parsing interaction payload: {e}")
                return JsonResponse({'error': 'Invalid payload'}, status=400)
            logger.info(f"Interaction payload type: {payload.get('type')}")

            if payload.get('type') == 'view_submission':
                return handle_modal_submission(payload)
            elif payload.get('type') == 'block_suggestion':
                return handle_project_code_suggestion(payload)
            elif payload.get('type') == 'block_actions':
                return handle_main_view_refresh(payload)

    # Handle JSON data (events API)
    elif content_type.startswith('application/json'):
        try:
            body = json.loads(request.body.decode('utf-8'))
        except ValueError as e:
            logger.error(f"Error parsing JSON body: {e}")
            return JsonResponse({'error': 'Invalid JSON'}, status=400)
        if body.get('type') == 'url_verification':
            return JsonResponse({'challenge': body['challenge']})

    return JsonResponse({'status': 'ok'})
