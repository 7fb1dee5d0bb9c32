"""
Public routes (landing pages, certificate verification, health)
"""
import logging

from flask import render_template, request, jsonify, abort

from portal.blueprints.public import public_bp
from portal.services.repository import get_repository
from portal.services.verification import (
    certificate_status, lookup_certificate, normalize_vehicle_number,
)

logger = logging.getLogger(__name__)

BUSINESS_HOURS = [
    ('Mon - Sat', '9:00 AM - 8:00 PM'),
    ('Sun', '10:00 AM - 2:00 PM'),
]


@public_bp.route('/health')
def health():
    """Health check endpoint for monitoring and load balancers"""
    try:
        get_repository().list_users()
        return jsonify({'status': 'healthy', 'message': 'Application is running'}), 200
    except Exception as e:
        logger.exception("Health check failed")
        return jsonify({'status': 'unhealthy', 'message': str(e)}), 503


@public_bp.route('/')
def index():
    return render_template('public/home.html')


@public_bp.route('/about')
def about():
    return render_template('public/about.html')


@public_bp.route('/contact')
def contact():
    return render_template('public/contact.html', business_hours=BUSINESS_HOURS)


@public_bp.route('/verify', methods=['GET', 'POST'])
def verify():
    """Look up the latest certificate of a vehicle"""
    vehicle_number = ''
    result = None
    error = ''

    if request.method == 'POST':
        vehicle_number = normalize_vehicle_number(request.form.get('vehicle_number'))
        if vehicle_number:
            try:
                result = lookup_certificate(get_repository(), vehicle_number)
            except Exception:
                logger.exception(f"Certificate search failed for {vehicle_number}")
                error = 'An error occurred while searching. Please try again.'
            else:
                if result is None:
                    error = 'No records found for this vehicle number.'

    return render_template(
        'public/verify.html',
        vehicle_number=vehicle_number,
        result=result,
        error=error
    )


@public_bp.route('/certificate/<test_id>')
def certificate(test_id):
    """Certificate page of one test"""
    record = get_repository().get_test(test_id)
    if record is None:
        abort(404)
    return render_template('public/certificate.html', status=certificate_status(record))
