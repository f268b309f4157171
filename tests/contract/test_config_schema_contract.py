from __future__ import annotations

import json
from pathlib import Path

import jsonschema
import pytest
import yaml

from leadscrub.config.loader import SCHEMA_PATH

"""Config schema contract: the shipped example config validates; unknown keys do not."""

PROJECT_ROOT = Path(__file__).resolve().parents[2]


@pytest.fixture(scope="module")
def schema() -> dict:
    return json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))


def test_example_config_is_valid(schema):
    data = yaml.safe_load((PROJECT_ROOT / "config" / "leadscrub.yml").read_text(encoding="utf-8"))
    jsonschema.validate(data, schema)


def test_empty_config_is_valid(schema):
    jsonschema.validate({}, schema)


@pytest.mark.parametrize(
    "data",
    [
        {"storage": {"backend": "sqlite"}},
        {"storage": {"backend": "memory", "password": "x"}},
        {"enrichment": {"api_delay_seconds": -1}},
        {"scraper": {"timeout_seconds": 0}},
        {"scraper": {"max_text_length": 0}},
        {"unknown": True},
    ],
)
def test_invalid_configs_rejected(schema, data):
    with pytest.raises(jsonschema.ValidationError):
        jsonschema.validate(data, schema)
