# notekeeper/common/logging.py
import logging, sys, time, uuid
from pythonjsonlogger import jsonlogger
from flask import g, request


def setup_json_logging(app):
    level = logging.DEBUG if app.debug else logging.INFO
    root = logging.getLogger()
    root.handlers = []
    root.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    fmt = jsonlogger.JsonFormatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s "
        "%(request_id)s %(method)s %(path)s %(status)s %(latency_ms)s"
    )
    handler.setFormatter(fmt)
    root.addHandler(handler)

    # werkzeug double nos logs http_request
    logging.getLogger("werkzeug").setLevel(logging.WARNING)


class RequestIdFilter(logging.Filter):
    """Ajoute le request id courant à chaque record émis pendant une requête."""

    def filter(self, record):
        if not hasattr(record, "request_id"):
            try:
                record.request_id = getattr(g, "request_id", "-")
            except RuntimeError:
                # hors contexte Flask (CLI, tests de service)
                record.request_id = "-"
        return True


def register_request_logging(app):
    for h in logging.getLogger().handlers:
        h.addFilter(RequestIdFilter())

    @app.before_request
    def _assign_request_id_and_start_timer():
        # request id: X-Request-Id entrant ou généré
        g.request_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())
        g._start_time = time.time()

    @app.after_request
    def _log_request(resp):
        latency = int((time.time() - getattr(g, "_start_time", time.time())) * 1000)

        resp.headers.setdefault("X-Request-Id", getattr(g, "request_id", "-"))

        user = getattr(g, "current_user", None)
        logging.getLogger("notekeeper.request").info(
            "http_request",
            extra={
                "request_id": getattr(g, "request_id", "-"),
                "method": request.method,
                "path": request.path,
                "status": resp.status_code,
                "latency_ms": latency,
                "user_id": str(user.id) if user else None,
            },
        )
        return resp
