"""Shared fixtures: a small template catalog and a recording dispatcher."""

import pytest

from backends.context import AdapterContext
from core.models import Template
from tests.fakes import CountingCatalog, RecordingDispatcher


@pytest.fixture
def templates():
    return [
        Template(id="tpl-mongo", name="MongoDB Server", type="database", fields=["USER", "PASSWORD"]),
        Template(id="tpl-gpt", name="Basic GPT Server", type="ai", sub_type="openai", fields=["OPENAI_API_KEY"]),
    ]


@pytest.fixture
def catalog(templates):
    return CountingCatalog(templates)


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def context(catalog, dispatcher):
    return AdapterContext(catalog=catalog, dispatcher=dispatcher)
