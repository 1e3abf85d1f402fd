import pytest
from fastapi.testclient import TestClient

from banquet.main import create_app
from helpers import FakeMailer, make_context, make_settings


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def ctx(settings, mailer):
    context = make_context(settings, mailer)
    yield context
    context.close()


@pytest.fixture
def client(ctx):
    return TestClient(create_app(context=ctx))


@pytest.fixture
def db(ctx):
    session = ctx.session_factory()
    try:
        yield session
    finally:
        session.close()
