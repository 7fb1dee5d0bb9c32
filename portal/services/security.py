"""
Security utilities for the Emission Test Portal

Provides input validators, rate limiting and security audit logging
"""
import re
from functools import wraps
from flask import request, abort
from datetime import datetime, timedelta, timezone

MIN_PASSWORD_LENGTH = 6


# ============================================================================
# Input Validation
# ============================================================================

def is_valid_email(email):
    """Validate email format"""
    if not email or not isinstance(email, str):
        return False
    pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
    return bool(re.match(pattern, email))


def is_valid_password(password, min_length=MIN_PASSWORD_LENGTH):
    """Password must be a string of at least ``min_length`` characters"""
    if not password or not isinstance(password, str):
        return False
    return len(password) >= min_length


def is_valid_mobile_number(value):
    """10-15 digits, optional leading +"""
    if not value or not isinstance(value, str):
        return False
    return bool(re.match(r'^\+?\d{10,15}$', value))


def sanitize_input(value, max_length=None):
    """
    Sanitize user input
    - Strip whitespace
    - Remove control characters
    - Optionally limit length
    """
    if not isinstance(value, str):
        return value

    value = ''.join(c for c in value if ord(c) >= 32 or c in '\n\t\r')
    value = value.strip()

    if max_length and len(value) > max_length:
        value = value[:max_length]

    return value


# ============================================================================
# Rate Limiting
# ============================================================================

class RateLimiter:
    """Simple in-memory rate limiter"""

    def __init__(self):
        self.attempts = {}  # {identifier: [(timestamp, count)]}
        self.longest_window = 0

    def is_allowed(self, identifier, max_attempts=5, window_seconds=300):
        """
        Check if request is allowed

        Returns:
            (allowed: bool, remaining: int, reset_time: int-seconds)
        """
        now = datetime.now(timezone.utc)
        self.longest_window = max(self.longest_window, window_seconds)
        self._sweep(now - timedelta(seconds=self.longest_window))

        # Remove old attempts outside window
        cutoff = now - timedelta(seconds=window_seconds)
        history = [(ts, count) for ts, count in self.attempts.get(identifier, []) if ts > cutoff]
        self.attempts[identifier] = history

        current_attempts = sum(count for _, count in history)

        if current_attempts >= max_attempts:
            oldest = history[0][0]
            reset_time = int((oldest + timedelta(seconds=window_seconds) - now).total_seconds())
            return False, 0, max(0, reset_time)

        if not history or history[-1][0] < now:
            history.append((now, 1))
        else:
            ts, count = history[-1]
            history[-1] = (ts, count + 1)

        remaining = max_attempts - current_attempts - 1
        return True, remaining, 0

    def _sweep(self, cutoff):
        """Forget identifiers with no attempt newer than ``cutoff``"""
        for identifier in [k for k, history in self.attempts.items()
                           if not history or history[-1][0] <= cutoff]:
            del self.attempts[identifier]


# Global rate limiter
rate_limiter = RateLimiter()


def rate_limit(max_attempts=5, window_seconds=300, key_func=None):
    """
    Decorator for rate limiting POST submissions

    Args:
        max_attempts: Max requests allowed
        window_seconds: Time window
        key_func: Function to extract identifier from request
                  Default: uses client IP
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if request.method == 'POST':
                identifier = key_func() if key_func else request.remote_addr
                allowed, remaining, reset_time = rate_limiter.is_allowed(
                    identifier, max_attempts, window_seconds
                )
                if not allowed:
                    abort(429)  # Too Many Requests

            return f(*args, **kwargs)
        return decorated_function
    return decorator


# ============================================================================
# Audit Logging
# ============================================================================

def log_security_event(event_type, user_id=None, email=None, ip_address=None, details=None):
    """
    Log security events for audit trail

    Args:
        event_type: Type of event (login, logout, export, etc.)
        user_id: User document id if applicable
        email: Account email if applicable
        ip_address: Client IP address
        details: Additional details
    """
    from flask import current_app, has_request_context

    if not ip_address:
        ip_address = request.remote_addr if has_request_context() else 'unknown'

    audit_message = {
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'event_type': event_type,
        'user_id': user_id,
        'email': email,
        'ip_address': ip_address,
        'details': details
    }

    if hasattr(current_app, 'security_logger'):
        current_app.security_logger.info(str(audit_message))
    else:
        current_app.logger.warning(f"Security event: {audit_message}")
