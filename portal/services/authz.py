"""
Role checks for portal pages

``staff`` pages (dashboard statistics, reports) are open to staff and admins;
``admin`` pages (user management) to admins only. Owner accounts (``user``)
only see their own vehicle history.
"""
from functools import wraps

from flask import abort, flash, request
from flask_login import current_user

from portal.extensions import login_manager
from portal.services.security import log_security_event


def roles_required(*roles):
    """
    Restrict a view to accounts holding one of ``roles``

    Anonymous visitors go through Flask-Login's unauthorized flow (login page
    with ``next``); signed-in accounts without the role get a 403 and an
    ``access_denied`` audit entry.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not current_user.is_authenticated:
                return login_manager.unauthorized()

            if not current_user.has_role(*roles):
                log_security_event('access_denied', user_id=current_user.id, email=current_user.email,
                                   details=f"{request.path} requires {', '.join(roles)}")
                flash('You do not have permission to access this page.', 'danger')
                abort(403)

            return f(*args, **kwargs)
        return decorated_function
    return decorator


def admin_required(f):
    return roles_required('admin')(f)


def staff_required(f):
    """Staff pages; admins pass as well"""
    return roles_required('staff')(f)
