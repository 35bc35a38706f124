# tests/conftest.py
import os, sys
import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
os.environ.setdefault("APP_ENV", "test")

from notekeeper import create_app
from notekeeper.extensions import db
from notekeeper.common.mailer import get_outbox


@pytest.fixture(scope="session")
def app():
    app = create_app()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture(autouse=True)
def _fresh_db(app):
    # schéma propre + outbox vide pour chaque test
    with app.app_context():
        db.drop_all()
        db.create_all()
    get_outbox(app).clear()
    yield
    with app.app_context():
        db.session.remove()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def ctx(app):
    """Contexte applicatif pour appeler les services directement."""
    with app.app_context():
        yield app


@pytest.fixture()
def outbox(app):
    return get_outbox(app)


def _register(client, username, email, password="SuperSecret123"):
    r = client.post("/api/users/register", json={"username": username, "email": email, "password": password})
    assert r.status_code == 201, r.get_json()
    return r.get_json()


@pytest.fixture()
def alice(client):
    return _register(client, "alice", "alice@x.com", "pw123456")


@pytest.fixture()
def bob(client):
    return _register(client, "bob", "bob@x.com", "pw654321")
