from types import SimpleNamespace

import pytest

FOUND_ROWS = 2


class RecordingCursor:
    def __init__(self, connection):
        self.connection = connection
        self.last_params = None
        self.lastrowid = None

    def execute(self, sql, params=None):
        self.connection.log.append(sql)
        self.last_params = params

    def fetchone(self):
        queue = self.connection.returning
        return queue.pop(0) if queue else None


class RecordingConnection:
    """DB-API connection double that records every statement it sees."""

    def __init__(self, args, options):
        self.args = args
        self.options = options
        self.log = []
        self.direct = []
        self.returning = []
        self.closed = False

    def cursor(self):
        return RecordingCursor(self)

    def execute(self, sql):
        self.direct.append(sql)

    def close(self):
        self.closed = True


class RecordingDriver:
    constants = SimpleNamespace(CLIENT=SimpleNamespace(FOUND_ROWS=FOUND_ROWS))

    class Error(Exception):
        pass

    def __init__(self, fail=False):
        self.fail = fail
        self.connections = []

    def connect(self, *args, **options):
        if self.fail:
            raise self.Error("connection refused")
        connection = RecordingConnection(args, options)
        self.connections.append(connection)
        return connection


@pytest.fixture
def install_driver(monkeypatch):
    def install(module, driver=None):
        driver = driver if driver is not None else RecordingDriver()
        monkeypatch.setattr(f"{module}._load_driver", lambda: driver)
        return driver

    return install


@pytest.fixture
def failing_driver(install_driver):
    def install(module):
        return install_driver(module, RecordingDriver(fail=True))

    return install
