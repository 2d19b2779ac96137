import pytest
from fastapi.testclient import TestClient

from config import Settings
from core.database import JSONStorage
from server.app import create_app
from utils.datetime_utils import set_timezone


@pytest.fixture(autouse=True)
def local_timezone():
    set_timezone(None)
    yield
    set_timezone(None)


@pytest.fixture()
def data_file(tmp_path):
    return tmp_path / "data" / "habits.json"


@pytest.fixture()
def storage(data_file):
    return JSONStorage(data_file)


@pytest.fixture()
def settings(data_file):
    return Settings(DATA_FILE=data_file, ALLOWED_ORIGINS=["*"], _env_file=None)


@pytest.fixture()
def client(storage, settings):
    app = create_app(storage, settings)
    with TestClient(app) as test_client:
        yield test_client
