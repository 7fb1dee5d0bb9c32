from __future__ import annotations

import logging
from datetime import datetime, timezone

from flask import render_template, request, redirect, url_for, flash
from flask_login import login_required, current_user

from portal.models.user import User
from portal.services.authz import admin_required
from portal.services.pagination import get_page_args, paginate_sequence
from portal.services.records import normalize_date
from portal.services.repository import get_repository
from portal.services.security import (
    is_valid_email, is_valid_mobile_number, is_valid_password, log_security_event, sanitize_input,
    MIN_PASSWORD_LENGTH,
)

from . import users_bp

logger = logging.getLogger(__name__)


def _render_users(form_data=None, show_form=False):
    page, per_page = get_page_args()
    docs = get_repository().list_users()
    docs.sort(key=lambda d: normalize_date(d.get('createdAt')), reverse=True)
    return render_template(
        "users/users.html",
        users=paginate_sequence(docs, page, per_page),
        form_data=form_data or {},
        show_form=show_form
    )


@users_bp.route("/")
@login_required
@admin_required
def users():
    """List all user accounts"""
    return _render_users()


@users_bp.route("/create", methods=["POST"])
@login_required
@admin_required
def create_user():
    """Create an owner account on behalf of a customer"""
    form = {
        'name': sanitize_input(request.form.get("name", ""), max_length=100),
        'email': sanitize_input(request.form.get("email", ""), max_length=254).lower(),
        'vehicle_number': sanitize_input(request.form.get("vehicle_number", ""), max_length=20).upper(),
        'mobile_number': sanitize_input(request.form.get("mobile_number", ""), max_length=16),
    }
    password = request.form.get("password", "")

    if not all(form.values()) or not password:
        flash("All fields are required.", "danger")
        return _render_users(form, show_form=True)

    if not is_valid_email(form['email']):
        flash("Please enter a valid email address.", "danger")
        return _render_users(form, show_form=True)

    if not is_valid_mobile_number(form['mobile_number']):
        flash("Please enter a valid mobile number.", "danger")
        return _render_users(form, show_form=True)

    if not is_valid_password(password):
        flash(f"Password should be at least {MIN_PASSWORD_LENGTH} characters.", "danger")
        return _render_users(form, show_form=True)

    repository = get_repository()
    if repository.find_user_by_email(form['email']):
        flash("An account with this email already exists.", "danger")
        return _render_users(form, show_form=True)

    user = User(
        id=None,
        email=form['email'],
        name=form['name'],
        role='user',
        vehicle_number=form['vehicle_number'],
        mobile_number=form['mobile_number'],
        created_at=datetime.now(timezone.utc).isoformat()
    )
    user.set_password(password)

    try:
        user_id = repository.create_user(user.to_document())
    except Exception:
        logger.exception("Error creating user account")
        flash("Failed to create the account. Please try again.", "danger")
        return _render_users(form, show_form=True)

    log_security_event('user_created', user_id=user_id, email=user.email,
                       details=f"by {current_user.email}")
    flash("User account created successfully!", "success")
    return redirect(url_for("users.users"))


@users_bp.route("/<user_id>/delete", methods=["POST"])
@login_required
@admin_required
def delete_user(user_id: str):
    """Delete a user document"""
    if user_id == current_user.id:
        flash("You cannot delete your own account.", "danger")
        return redirect(url_for("users.users"))

    repository = get_repository()
    doc = repository.get_user(user_id)
    if doc is None:
        flash("User not found.", "warning")
        return redirect(url_for("users.users"))

    try:
        repository.delete_user(user_id)
    except Exception:
        logger.exception(f"Failed to delete user {user_id}")
        flash("Failed to delete record", "danger")
        return redirect(url_for("users.users"))

    log_security_event('user_deleted', user_id=user_id, email=doc.get('email'),
                       details=f"by {current_user.email}")
    flash(f"User '{doc.get('email')}' has been deleted.", "success")
    return redirect(url_for("users.users"))
