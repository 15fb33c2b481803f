import pytest

from restinfront import configure
from testing.helpers import FakeTransport, HookRecorder

BASE_URL = "https://api.test"


def pytest_addoption(parser):
    parser.addoption(
        "--base-url",
        action="store",
        type=str,
        default=BASE_URL,
        help="Set the base url configured for fetch tests.",
    )


@pytest.fixture(scope="session")
def base_url(request):
    return request.config.getoption("--base-url")


@pytest.fixture(autouse=True)
def _reset_config():
    """Restore the default process-wide configuration around EACH test"""
    configure()
    yield
    configure()


@pytest.fixture(scope="function")
def transport():
    return FakeTransport()


@pytest.fixture(scope="function")
def fetch_error_hook():
    return HookRecorder()


@pytest.fixture(scope="function")
def validation_error_hook():
    return HookRecorder()


@pytest.fixture(scope="function")
def api(base_url, transport, fetch_error_hook, validation_error_hook):
    """Configure the process-wide client against the in-memory transport"""
    return configure(
        base_url=base_url,
        transport=transport,
        on_fetch_error=fetch_error_hook,
        on_validation_error=validation_error_hook,
    )
