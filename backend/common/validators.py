"""
Centralized validators for the escrow intake form.
"""
import re
from django.core.exceptions import ValidationError
from django.core.validators import RegexValidator


# ============================
# Order ID Validator
# ============================

# Three letters without the ambiguous I and O, then six digits
ORDER_ID_LETTERS = 'ABCDEFGHJKLMNPQRSTUVWXYZ'
ORDER_ID_PATTERN = r'^[A-HJ-NP-Z]{3}-[0-9]{6}$'

order_id_regex = RegexValidator(
    regex=ORDER_ID_PATTERN,
    message="Order ID must look like ABC-123456"
)


# ============================
# Phone Number Validator
# ============================

def validate_phone_number(value):
    """
    Validates a contact phone number.
    Accepts local or international formats: +1 (555) 010-2000, 555.010.2000.
    Length: 7-15 digits once separators are removed.
    SECURITY: Rejects non-ASCII to prevent unicode bypass attacks.
    """
    value = value.strip()

    # Remove spaces, dashes, dots, and parentheses
    cleaned = re.sub(r'[\s\-().]', '', value)

    # SECURITY: Reject non-ASCII characters to prevent unicode bypass
    if not cleaned.isascii():
        raise ValidationError(
            "Phone number must contain only ASCII characters"
        )

    if not re.match(r'^\+?\d{7,15}$', cleaned):
        raise ValidationError(
            "Phone number must contain 7 to 15 digits (e.g., +15550102000)"
        )

    # SECURITY: Return cleaned value, not the raw input
    return cleaned
