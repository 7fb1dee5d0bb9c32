from flask import Blueprint

dashboard_bp = Blueprint("dashboard", __name__)
