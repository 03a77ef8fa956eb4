import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app import create_app
from database import configure_database, drop_database, init_database
from game import ChangeFeed, GameManager

SHARE_CODE = "GAME42"
ADMIN_PASSWORD = "touchdown"


@pytest.fixture
def db(tmp_path):
    configure_database(f"sqlite:///{tmp_path / 'trivia.db'}", echo=False)
    init_database(share_code=SHARE_CODE, admin_password=ADMIN_PASSWORD)
    yield
    drop_database()


@pytest.fixture
def feed():
    return ChangeFeed()


@pytest.fixture
def game(db, feed):
    return GameManager(feed)


@pytest.fixture
def make_question(game):
    def _make(text="Who won Super Bowl LVIII?", **kwargs):
        return game.question_manager.create_question(text, **kwargs)

    return _make


@pytest.fixture
def make_player(game):
    def _make(name="Avery"):
        return game.player_manager.join_game(name, SHARE_CODE)

    return _make


@pytest.fixture
def app_ctx(tmp_path):
    app, socketio = create_app(
        database_url=f"sqlite:///{tmp_path / 'api.db'}",
        async_mode="threading",
        share_code=SHARE_CODE,
        admin_password=ADMIN_PASSWORD,
        reconcile=False,
        testing=True,
    )
    yield {"app": app, "socketio": socketio}
    drop_database()


@pytest.fixture
def app(app_ctx):
    return app_ctx["app"]


@pytest.fixture
def socketio(app_ctx):
    return app_ctx["socketio"]


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(app):
    admin = app.test_client()
    response = admin.post("/api/admin/login", json={"password": ADMIN_PASSWORD})
    assert response.status_code == 200
    return admin
