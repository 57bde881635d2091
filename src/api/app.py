"""HTTP surface of Pedido FTP.

Exposes the upload-ftp function plus the caller-side endpoints used by
the order export screen: saved FTP configuration, order export and
upload history.
"""

import logging
from typing import Optional

from flask import Flask, jsonify, request

from src.api.schema import (
    INVALID_REQUEST,
    RequestValidationError,
    parse_ftp_config,
    parse_request,
)
from src.config.credentials import CredentialManager
from src.config.settings import AppSettings, SettingsManager
from src.export.exporter import OrderExporter
from src.export.formats import SUPPORTED_FORMATS
from src.export.order import Order
from src.ftp.uploader import FtpUploadService, UploadResult
from src.history.store import MAX_LIMIT, FTPHistoryStore

logger = logging.getLogger("pedido_ftp.api")


ALLOWED_HEADERS = "authorization, x-client-info, apikey, content-type"
ALLOWED_METHODS = "GET, POST, PUT, DELETE, OPTIONS"


def _invalid(message: str):
    return jsonify({
        "success": False,
        "error": message,
        "errorKind": INVALID_REQUEST,
    }), 400


def _result_response(result: UploadResult):
    return jsonify(result.to_dict()), 200 if result.success else 500


def create_app(
    settings: Optional[AppSettings] = None,
    service: Optional[FtpUploadService] = None,
    history: Optional[FTPHistoryStore] = None,
    credentials: Optional[CredentialManager] = None,
    settings_manager: Optional[SettingsManager] = None,
) -> Flask:
    """
    Build the Flask application.

    Args:
        settings: Effective settings (defaults if omitted)
        service: FTP upload service
        history: Upload history store
        credentials: Keyring access for the saved FTP password
        settings_manager: Persists the saved FTP configuration

    Returns:
        Configured Flask application
    """
    settings = settings or AppSettings()
    service = service or FtpUploadService()
    history = history or FTPHistoryStore(settings.resolved_history_db_path())
    credentials = credentials or CredentialManager()
    settings_manager = settings_manager or SettingsManager()
    exporter = OrderExporter(service, history)

    app = Flask(__name__)
    app.json.ensure_ascii = False

    @app.after_request
    def add_cors_headers(response):
        response.headers["Access-Control-Allow-Origin"] = settings.allowed_origin
        response.headers["Access-Control-Allow-Headers"] = ALLOWED_HEADERS
        response.headers["Access-Control-Allow-Methods"] = ALLOWED_METHODS
        return response

    @app.route("/upload-ftp", methods=["POST", "OPTIONS"])
    def upload_ftp():
        """Test an FTP connection or upload one file."""
        if request.method == "OPTIONS":
            return "", 200

        try:
            parsed = parse_request(request.get_json(silent=True), timeout=settings.timeout)
        except RequestValidationError as e:
            logger.warning(f"Rejected upload-ftp request: {e}")
            return _invalid(str(e))

        result = service.execute(parsed.config, parsed.transfer)
        return _result_response(result)

    @app.route("/ftp-config", methods=["GET", "PUT", "DELETE", "OPTIONS"])
    def ftp_config():
        """Read, replace or forget the saved default FTP configuration."""
        if request.method == "OPTIONS":
            return "", 200

        if request.method == "GET":
            has_password = settings.has_default_ftp and credentials.has_password(
                settings.ftp_host, settings.ftp_user
            )
            return jsonify({
                "host": settings.ftp_host,
                "user": settings.ftp_user,
                "port": settings.ftp_port,
                "folder": settings.ftp_folder,
                "hasPassword": has_password,
            })

        if request.method == "DELETE":
            if settings.has_default_ftp:
                credentials.delete_password(settings.ftp_host, settings.ftp_user)
            settings_manager.clear_default_ftp(settings)
            return jsonify({"success": True, "message": "Configuração FTP removida"})

        try:
            config = parse_ftp_config(request.get_json(silent=True), timeout=settings.timeout)
        except RequestValidationError as e:
            return _invalid(str(e))

        # Only a configuration that passed test mode is saved
        result = service.test_connection(config)
        if result.success:
            settings_manager.save_default_ftp(settings, config)
            if not credentials.save_password(config.host, config.user, config.password):
                logger.warning("FTP password could not be stored in the keyring")

        return _result_response(result)

    @app.route("/export-order", methods=["POST", "OPTIONS"])
    def export_order():
        """Render an order and deliver it over FTP."""
        if request.method == "OPTIONS":
            return "", 200

        body = request.get_json(silent=True)
        if not isinstance(body, dict):
            return _invalid("Corpo da requisição deve ser um objeto JSON")

        fmt = body.get("format", "xml")
        if fmt not in SUPPORTED_FORMATS:
            return _invalid(f"Formato de exportação não suportado: {fmt}")

        try:
            order = Order.from_dict(body.get("order") or {})
        except ValueError as e:
            return _invalid(str(e))

        if body.get("ftpConfig") is not None:
            try:
                config = parse_ftp_config(body["ftpConfig"], timeout=settings.timeout)
            except RequestValidationError as e:
                return _invalid(str(e))
        else:
            password = credentials.password_for(settings)
            config = settings.default_ftp_config(password)
            if config is None:
                return _invalid("Nenhuma configuração FTP salva")

        result = exporter.export_to_ftp(order, fmt, config)
        return _result_response(result)

    @app.route("/ftp-history", methods=["GET"])
    def ftp_history():
        """Most recent FTP uploads, newest first."""
        try:
            limit = int(request.args.get("limit", settings.history_limit))
        except ValueError:
            return _invalid("Parâmetro limit inválido")

        limit = max(1, min(limit, MAX_LIMIT))
        entries = history.recent(limit)
        return jsonify({"entries": [entry.to_dict() for entry in entries]})

    return app
