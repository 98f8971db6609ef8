import re


MOBILE_PHONE_PATTERN = re.compile(r'^01[0-9]{8,9}$')
INVALID_PHONE_MESSAGE = '올바른 전화번호 형식이 아닙니다'


def normalize_phone(phone):
    """Strip everything but digits: '010-1234-5678' -> '01012345678'"""
    if phone is None:
        return ''
    return re.sub(r'\D', '', str(phone))


def is_valid_mobile(phone):
    """Korean mobile number (01X + 7-8 digits) after normalization"""
    return bool(MOBILE_PHONE_PATTERN.match(normalize_phone(phone)))


def is_full_length_mobile(phone):
    """Duplicate check only runs on complete 11-digit numbers"""
    digits = normalize_phone(phone)
    return len(digits) == 11 and digits.startswith('01')


def format_phone(phone):
    """Display form: 01012345678 -> 010-1234-5678"""
    digits = normalize_phone(phone)
    if len(digits) == 11:
        return f"{digits[:3]}-{digits[3:7]}-{digits[7:]}"
    if len(digits) == 10:
        return f"{digits[:3]}-{digits[3:6]}-{digits[6:]}"
    return digits
