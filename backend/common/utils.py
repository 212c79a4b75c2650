"""
Helper utilities shared by views and services.
"""
import ipaddress


def _valid_ip(value):
    try:
        return str(ipaddress.ip_address(value.strip()))
    except (AttributeError, ValueError):
        return None


def get_client_ip(request):
    """
    Get the client's IP address from the request.
    Handles proxy headers (X-Forwarded-For) correctly.

    A forwarded value that is not a valid address is ignored and the
    socket address is used instead.

    Args:
        request: Django request object

    Returns:
        str: Client IP address, or None if neither source holds one
    """
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        # Get the first IP in the list (client IP)
        ip = _valid_ip(x_forwarded_for.split(',')[0])
        if ip:
            return ip
    return _valid_ip(request.META.get('REMOTE_ADDR'))
