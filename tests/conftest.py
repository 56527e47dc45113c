"""Shared fixtures for the catalog_infer test suite."""

import pytest

from catalog_infer.inference.cancellation import CancellationToken
from catalog_infer.inference.file_inferrer import FileInferenceRequest


@pytest.fixture
def cancelled_token():
    token = CancellationToken()
    token.cancel()
    return token


@pytest.fixture
def expired_token():
    return CancellationToken.with_timeout(-1)


@pytest.fixture
def people_documents():
    return [
        {"name": "John", "age": 25},
        {"name": "Jane", "age": 30},
    ]


@pytest.fixture
def session_keys():
    return ["user:1", "user:2", "user:3", "session:abc:data", "session:def:data"]


@pytest.fixture
def csv_request():
    """Build an in-memory CSV FileInferenceRequest."""
    def _build(text, csv_options=None):
        return FileInferenceRequest.from_text(text, "csv", csv_options)
    return _build


@pytest.fixture
def sample_csv(tmp_path):
    path = tmp_path / "people.csv"
    path.write_text(
        "id,name,active,score\n"
        "10,alice,true,3.14\n"
        "11,bob,false,2.5\n"
        "12,,yes,7\n",
        encoding="utf-8",
    )
    return path
