"""
Form Totals Sync - Web Service
==============================
Main Flask application.

Routes:
- POST /sync       manual sync (staff login, no rate limit)
- POST /sync/auto  scheduler hook (X-Cron-Secret header, rate limited)
- GET  /health     config check for the host

All the sync logic lives in sync/ and clients/
"""

import hmac
import logging
from flask import Flask, request, jsonify
from flask_login import login_required, current_user
from werkzeug.middleware.proxy_fix import ProxyFix
from auth import init_auth
from clients.sheets import GoogleSheetsClient
from config import Config, parse_targets
from log_store import setup_logging
from triggers import get_rate_limiter, manual_sync, scheduled_sync

# =============================================================================
# LOGGING SETUP
# =============================================================================

_log_sheets = None
if Config.GOOGLE_SERVICE_ACCOUNT_FILE and Config.SPREADSHEET_ID:
    _log_sheets = GoogleSheetsClient(Config.GOOGLE_SERVICE_ACCOUNT_FILE, Config.SPREADSHEET_ID)

setup_logging(_log_sheets, Config.LOG_SHEET_NAME)

logger = logging.getLogger(__name__)


def log_user_action(action, details=""):
    """Log an action with the current user's email"""
    user_email = current_user.email if current_user.is_authenticated else "anonymous"
    if details:
        logger.info(f"[{user_email}] {action}: {details}")
    else:
        logger.info(f"[{user_email}] {action}")


def summarize(results) -> dict:
    """JSON body for a finished (or rate-limited) sync"""
    if results is None:
        return {"status": "skipped", "reason": "rate limited", "targets": []}
    return {"status": "completed", "targets": [r.as_dict() for r in results]}


# =============================================================================
# FLASK APP
# =============================================================================

app = Flask(__name__)
app.secret_key = Config.SECRET_KEY

# Trust proxy headers (host terminates SSL)
app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)

init_auth(app)


# =============================================================================
# ROUTES
# =============================================================================

@app.route('/')
@login_required
def home():
    """Show sync status"""
    last_sync = get_rate_limiter().last_sync_time()
    targets = parse_targets(Config.AIRTABLE_TARGETS)
    return jsonify({
        "user": current_user.email,
        "last_auto_sync": last_sync.isoformat() if last_sync else None,
        "rate_limit_hours": Config.RATE_LIMIT_HOURS,
        "targets": [t.label for t in targets if t.is_configured],
    })


@app.route('/sync', methods=['POST'])
@login_required
def sync_now():
    """Manual sync, bypasses the rate limit"""
    data = request.get_json(silent=True) or {}
    dry_run = bool(data.get('dry_run', False))
    log_user_action("Manual sync", "dry run" if dry_run else "")

    try:
        results = manual_sync(dry_run=dry_run)
    except Exception as e:
        logger.error(f"Manual sync error: {str(e)}", exc_info=True)
        return jsonify({"error": str(e)}), 500

    return jsonify(summarize(results))


@app.route('/sync/auto', methods=['POST'])
def sync_auto():
    """Scheduler hook; rate limited"""
    if not Config.CRON_SECRET:
        logger.warning("Auto sync requested but CRON_SECRET is not configured")
        return jsonify({"error": "Auto sync not configured"}), 503

    supplied = request.headers.get('X-Cron-Secret', '')
    if not hmac.compare_digest(supplied, Config.CRON_SECRET):
        logger.warning("Auto sync rejected - bad cron secret")
        return jsonify({"error": "Forbidden"}), 403

    try:
        results = scheduled_sync()
    except Exception as e:
        logger.error(f"Auto sync error: {str(e)}", exc_info=True)
        return jsonify({"error": str(e)}), 500

    return jsonify(summarize(results))


@app.route('/health')
def health():
    """Health check endpoint (no auth required)"""
    missing = Config.validate()
    if missing:
        logger.warning(f"Health check failed - missing: {missing}")
        return jsonify({
            "status": "unhealthy",
            "missing_config": missing
        }), 500

    logger.debug("Health check passed")
    return jsonify({"status": "healthy", "service": "form-totals-sync"})


# =============================================================================
# STARTUP
# =============================================================================

logger.info("=" * 60)
logger.info("Form Totals Sync - Google Sheets -> Airtable")
logger.info("=" * 60)

missing = Config.validate()
if missing:
    logger.warning(f"Missing environment variables: {', '.join(missing)}")
else:
    logger.info("All environment variables configured")

logger.info(f"Sheet: {Config.SHEET_NAME}")
logger.info(f"Rate limit: {Config.RATE_LIMIT_HOURS} hours")
logger.info("=" * 60)


# =============================================================================
# MAIN
# =============================================================================

if __name__ == '__main__':
    logger.info(f"Starting development server on port {Config.PORT}")
    app.run(
        host='0.0.0.0',
        port=Config.PORT,
        debug=Config.DEBUG
    )
