"""
HTTP API for on-demand timesheet compliance analysis.

Endpoints:
    GET  /health
    GET  /api/week-info
    POST /api/missing-by-day   (alias: /api/analyze)
    POST /api/analyze-detailed
    POST /api/notify
"""
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from flask import Blueprint, Flask, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from timesheet_monitor.extractors.timesheet_client import TimesheetClient
from timesheet_monitor.loaders.notification_service import NotificationDispatcher
from timesheet_monitor.pipelines import pipeline
from timesheet_monitor.utilities import config, utils
from timesheet_monitor.utilities.config import Settings
from timesheet_monitor.utilities.exceptions import TimesheetMonitorError, ValidationError
from timesheet_monitor.utilities.models import DateRange

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__, url_prefix="/api")

SERVICE_NAME = "Timesheet Monitor API"


def _settings() -> Settings:
    return current_app.extensions["timesheet_monitor"]["settings"]


def _client() -> Optional[TimesheetClient]:
    return current_app.extensions["timesheet_monitor"]["client"]


def _dispatcher() -> NotificationDispatcher:
    services = current_app.extensions["timesheet_monitor"]
    if services["dispatcher"] is None:
        services["dispatcher"] = NotificationDispatcher(services["settings"])
    return services["dispatcher"]


def _is_true(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in config.TRUE_VALUES


def resolve_request_range(body: Dict[str, Any]) -> DateRange:
    """
    Read the analysis window from a request body.

    Accepts ``{"previousWeek": true}`` or ``{"startDate": ..., "endDate": ...}``.
    Form bodies send ``previousWeek`` as text, so only true-like values count.

    Raises:
        ValidationError: If neither form is present, a date is malformed or
            the range is longer than MAX_WINDOW_DAYS
    """
    if _is_true(body.get("previousWeek", False)):
        return utils.previous_week().date_range

    if not body.get("startDate") or not body.get("endDate"):
        raise ValidationError("Either provide startDate and endDate, or set previousWeek to true")

    start = utils.parse_date(body.get("startDate"), "startDate")
    end = utils.parse_date(body.get("endDate"), "endDate")
    span = (end - start).days + 1
    if span > config.MAX_WINDOW_DAYS:
        raise ValidationError(
            f"Date range spans {span} days; at most {config.MAX_WINDOW_DAYS} days can be analyzed"
        )
    return DateRange(start=start, end=end)


def _request_body() -> Dict[str, Any]:
    body = request.get_json(silent=True)
    if body is None:
        body = request.form.to_dict()
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


def _run_analysis():
    window = resolve_request_range(_request_body())
    return pipeline.analyze_window(window, client=_client(), settings=_settings())


@api_bp.route("/week-info", methods=["GET"])
def week_info():
    """Previous week's date range and week number."""
    return jsonify({"success": True, "data": utils.previous_week().to_dict()})


@api_bp.route("/missing-by-day", methods=["POST"])
@api_bp.route("/analyze", methods=["POST"])
def missing_by_day():
    """Per-employee missed days for the requested window."""
    analysis = _run_analysis()
    return jsonify({"success": True, "data": analysis.missing_by_day()})


@api_bp.route("/analyze-detailed", methods=["POST"])
def analyze_detailed():
    """Full analysis including each day's buckets and errors."""
    analysis = _run_analysis()
    return jsonify({"success": True, "data": analysis.to_dict()})


@api_bp.route("/notify", methods=["POST"])
def notify():
    """Analyze the window, then send the report and reminders."""
    analysis = _run_analysis()
    outcomes = _dispatcher().send_all(analysis)
    return jsonify({
        "success": True,
        "data": {
            "weekInfo": analysis.week_info.to_dict(),
            "totalEmployeesWithMisses": len(analysis.no_submission),
            "totalEmployeesWithFlags": len(analysis.flagged),
            "failedDays": [day.date.isoformat() for day in analysis.failed_days],
            "notifications": [outcome.to_dict() for outcome in outcomes],
        },
    })


def register_error_handlers(app: Flask) -> None:
    """Map application errors and unknown routes to JSON replies."""

    @app.errorhandler(TimesheetMonitorError)
    def handle_app_error(error: TimesheetMonitorError):
        if error.status_code >= 500:
            logger.error("%s: %s", error.error_type, error.message)
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(404)
    def handle_not_found(error):
        return jsonify({"success": False, "error": "Endpoint not found"}), 404

    @app.errorhandler(405)
    def handle_method_not_allowed(error):
        return jsonify({"success": False, "error": "Method not allowed"}), 405

    @app.errorhandler(Exception)
    def handle_unexpected(error: Exception):
        if isinstance(error, HTTPException):
            return jsonify({"success": False, "error": error.description}), error.code
        logger.exception("Unhandled error: %s", error)
        return jsonify({"success": False, "error": "Internal server error"}), 500


def create_app(
    settings: Optional[Settings] = None,
    client: Optional[TimesheetClient] = None,
    dispatcher: Optional[NotificationDispatcher] = None,
) -> Flask:
    """
    Application factory.

    Args:
        settings: Runtime settings (read from the environment if not provided)
        client: Timesheet source client shared by requests
        dispatcher: Notification dispatcher shared by requests

    Returns:
        Configured Flask application
    """
    app = Flask(__name__)
    settings = settings or Settings.from_env()
    app.extensions["timesheet_monitor"] = {
        "settings": settings,
        "client": client,
        "dispatcher": dispatcher,
    }

    @app.route("/health", methods=["GET"])
    def health():
        return jsonify({
            "status": "healthy",
            "timestamp": datetime.now().isoformat(),
            "service": SERVICE_NAME,
        })

    app.register_blueprint(api_bp)
    register_error_handlers(app)
    return app
