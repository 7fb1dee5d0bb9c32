"""
Authentication routes (login/register/logout)
"""
from datetime import datetime, timezone

from flask import render_template, redirect, url_for, flash, request
from flask_login import login_user, logout_user, current_user
from portal.blueprints.auth import auth_bp
from portal.models.user import User
from portal.services.repository import get_repository
from portal.services.security import (
    rate_limit, log_security_event, is_valid_email, is_valid_mobile_number, is_valid_password,
    sanitize_input, MIN_PASSWORD_LENGTH,
)

LOGIN_TITLES = {
    'user': 'User Login',
    'staff': 'Staff Login',
}


def _is_safe_next(target):
    return bool(target) and target.startswith('/') and not target.startswith('//')


@auth_bp.route('/login', methods=['GET', 'POST'])
@rate_limit(max_attempts=5, window_seconds=300)  # 5 attempts per 5 minutes
def login():
    """User and staff login page"""
    if current_user.is_authenticated:
        return redirect(url_for('dashboard.home'))

    view_role = request.args.get('role', 'user')
    title = LOGIN_TITLES.get(view_role, LOGIN_TITLES['user'])

    if request.method == 'POST':
        email = request.form.get('email', '').strip().lower()
        password = request.form.get('password', '')
        remember = bool(request.form.get('remember'))

        if not email or not password:
            flash('Please enter both email and password.', 'danger')
            log_security_event('login_attempt_empty', email=email)
            return render_template('auth/login.html', title=title, email=email)

        doc = get_repository().find_user_by_email(email)
        user = User.from_document(doc) if doc else None

        if user is None or not user.check_password(password):
            flash('Failed to log in. Please check your credentials.', 'danger')
            log_security_event('login_failed', email=email, details='Invalid credentials')
            return render_template('auth/login.html', title=title, email=email)

        if not user.is_active:
            flash('Your account has been deactivated. Please contact an administrator.', 'danger')
            log_security_event('login_attempt_inactive', user_id=user.id, email=email)
            return render_template('auth/login.html', title=title, email=email)

        login_user(user, remember=remember)
        flash(f'Welcome back, {user.display_name}!', 'success')
        log_security_event('login_success', user_id=user.id, email=email)

        next_page = request.args.get('next')
        if _is_safe_next(next_page):
            return redirect(next_page)
        return redirect(url_for('dashboard.home'))

    return render_template('auth/login.html', title=title, email='')


@auth_bp.route('/register', methods=['GET', 'POST'])
def register():
    """Self-service account for vehicle owners"""
    if current_user.is_authenticated:
        return redirect(url_for('dashboard.home'))

    if request.method == 'POST':
        form = {
            'name': sanitize_input(request.form.get('name', ''), max_length=100),
            'email': sanitize_input(request.form.get('email', ''), max_length=254).lower(),
            'vehicle_number': sanitize_input(request.form.get('vehicle_number', ''), max_length=20).upper(),
            'mobile_number': sanitize_input(request.form.get('mobile_number', ''), max_length=16),
        }
        password = request.form.get('password', '')
        confirm_password = request.form.get('confirm_password', '')

        error = None
        if password != confirm_password:
            error = 'Passwords do not match'
        elif not is_valid_password(password):
            error = f'Password should be at least {MIN_PASSWORD_LENGTH} characters'
        elif not form['name'] or not is_valid_email(form['email']):
            error = 'Please enter your name and a valid email address.'
        elif form['mobile_number'] and not is_valid_mobile_number(form['mobile_number']):
            error = 'Please enter a valid mobile number.'

        repository = get_repository()
        if error is None and repository.find_user_by_email(form['email']):
            error = 'Failed to create an account. Email might be in use.'

        if error:
            flash(error, 'danger')
            return render_template('auth/register.html', form_data=form)

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
        user.id = repository.create_user(user.to_document())

        login_user(user)
        log_security_event('register', user_id=user.id, email=user.email)
        flash('Your account has been created.', 'success')
        return redirect(url_for('dashboard.home'))

    return render_template('auth/register.html', form_data={})


@auth_bp.route('/logout')
def logout():
    """User logout"""
    if current_user.is_authenticated:
        log_security_event('logout', user_id=current_user.id, email=current_user.email)
    logout_user()
    flash('You have been logged out.', 'info')
    return redirect(url_for('auth.login'))
