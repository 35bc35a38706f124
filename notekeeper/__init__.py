import os
from flask import Flask, jsonify, request
from dotenv import load_dotenv
from sqlalchemy import text

# .env (dev) chargé avant la lecture des classes de config
load_dotenv()

from .config import DevConfig, ProdConfig, TestConfig
from .extensions import db, migrate, jwt, cors, limiter
from .common.errors import register_error_handlers
from .common.logging import setup_json_logging, register_request_logging


def _select_config(env):
    if env in ("test", "testing"):
        return TestConfig
    if env == "production":
        return ProdConfig
    return DevConfig


def create_app(env=None):
    app = Flask(__name__)

    env = env or os.getenv("APP_ENV") or os.getenv("FLASK_ENV", "development")
    app.config.from_object(_select_config(env))

    # Init extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)

    setup_json_logging(app)
    register_request_logging(app)

    # --- Helpers ---
    def _csv(value, default_if_empty):
        """Convertit une chaîne CSV en liste, sinon retourne la valeur telle quelle ou un défaut."""
        if value is None:
            return default_if_empty
        if isinstance(value, str) and "," in value:
            items = [x.strip() for x in value.split(",") if x.strip()]
            return items if items else default_if_empty
        return value

    # --- CORS: whitelist + headers ---
    cors.init_app(app, resources={
        r"/api/*": {
            "origins": _csv(app.config.get("CORS_ORIGINS", "*"), "*"),
            "allow_headers": _csv(app.config.get("CORS_ALLOW_HEADERS"), ["Authorization", "Content-Type"]),
            "expose_headers": _csv(app.config.get("CORS_EXPOSE_HEADERS"), ["Content-Type"]),
            "supports_credentials": False,
        }
    })

    limiter.init_app(app)   # Limiter lit RATELIMIT_* depuis app.config

    # Importer les modèles pour que Flask-Migrate/Alembic voie les tables
    from .users import models as users_models  # noqa: F401
    from .notes import models as notes_models  # noqa: F401

    # Handlers d'erreurs JSON uniformes
    register_error_handlers(app)

    @app.after_request
    def set_security_headers(resp):
        # API JSON uniquement: CSP très restrictif
        resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none'; base-uri 'none'"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["Referrer-Policy"] = "no-referrer"

        # HSTS uniquement si HTTPS (prod / reverse-proxy)
        if (env == "production" or app.config.get("ENFORCE_HTTPS")) and (
            request.is_secure or request.headers.get("X-Forwarded-Proto", "") == "https"
        ):
            resp.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains; preload"

        return resp

    # --- Blueprints ---
    from .auth.routes import bp as users_bp
    app.register_blueprint(users_bp, url_prefix="/api/users")

    from .notes.routes import bp as notes_bp
    app.register_blueprint(notes_bp, url_prefix="/api/notes")

    from .docs.routes import bp as docs_bp
    app.register_blueprint(docs_bp)

    limiter.limit(lambda: app.config.get("RATELIMIT_NOTES", "60/minute"))(notes_bp)

    def _db_up() -> bool:
        try:
            with db.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception:
            app.logger.exception("db_ping_failed")
            return False

    # Liveness probe
    @app.get("/healthz")
    def healthz():
        return jsonify({"status": "ok", "env": env, "db": "up" if _db_up() else "down"})

    # Readiness probe (DB + Redis si configuré)
    @app.get("/readyz")
    def readyz():
        status = {"db": "up" if _db_up() else "down", "redis": "n/a"}
        ok = status["db"] == "up"

        uri = app.config.get("RATELIMIT_STORAGE_URI", "memory://")
        if uri.startswith(("redis://", "rediss://")):
            try:
                import redis  # import tardif, extra optionnel
                redis.from_url(uri).ping()
                status["redis"] = "up"
            except Exception:
                app.logger.exception("redis_ping_failed")
                ok = False
                status["redis"] = "down"

        status["status"] = "ok" if ok else "error"
        return jsonify(status), (200 if ok else 503)

    return app
