import pytest

from swap_classifier.config import ClassifierConfig
from swap_classifier.db import init_db, make_engine, make_session_factory
from swap_classifier.models.transaction import RawTransaction
from swap_classifier.services.classifier.pipeline import SwapClassifier
from swap_classifier.services.swap_repository import SwapRecordRepository


@pytest.fixture
def config():
    return ClassifierConfig()


@pytest.fixture
def classifier(config):
    return SwapClassifier(config)


@pytest.fixture
def as_tx():
    """Validate a payload dict into a RawTransaction."""
    return RawTransaction.from_payload


@pytest.fixture
def session_factory():
    engine = make_engine("sqlite://")
    init_db(engine)
    yield make_session_factory(engine)
    engine.dispose()


@pytest.fixture
def repository(session_factory):
    return SwapRecordRepository(session_factory)
