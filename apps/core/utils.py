import json
from datetime import datetime, time

from django.http import JsonResponse
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime


SERVER_ERROR_MESSAGE = '서버 오류가 발생했습니다'
INVALID_JSON_MESSAGE = '잘못된 요청 형식입니다'


class InvalidJSONBody(ValueError):
    pass


def parse_json_body(request):
    """
    Decode a JSON request body

    Returns:
        dict: The decoded object (an empty body decodes to {})

    Raises:
        InvalidJSONBody: body is not JSON or not a JSON object
    """
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise InvalidJSONBody(str(e)) from e
    if not isinstance(data, dict):
        raise InvalidJSONBody('JSON body must be an object')
    return data


def json_error(message, status=400):
    return JsonResponse({'error': message}, status=status)


def first_form_error(form):
    """Return the first validation message of a bound, invalid form"""
    for errors in form.errors.values():
        if errors:
            return str(errors[0])
    return INVALID_JSON_MESSAGE


def parse_int(value, default):
    """Lenient int parsing for query params (parseInt-style fallback)"""
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def parse_datetime_param(value, end_of_day=False):
    """
    Parse an ISO datetime or date query param into an aware datetime

    A bare date ('2025-01-31') maps to the start of that day, or to its last
    instant when end_of_day is set, in the current time zone.

    Returns:
        datetime | None
    """
    if not value:
        return None

    # Dates first: parse_datetime also accepts a bare date and returns midnight
    try:
        day = parse_date(value)
        if day is not None:
            parsed = datetime.combine(day, time.max if end_of_day else time.min)
        else:
            parsed = parse_datetime(value)
            if parsed is None:
                return None
    except ValueError:
        # Well formatted but out of range (e.g. month 13)
        return None

    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed)
    return parsed


def isoformat_or_none(value):
    return value.isoformat() if value else None


def load_body(request):
    """
    Decode the JSON body for a view

    Returns:
        tuple: (data, None) on success, (None, 400 JsonResponse) otherwise
    """
    try:
        return parse_json_body(request), None
    except InvalidJSONBody:
        return None, json_error(INVALID_JSON_MESSAGE, status=400)
