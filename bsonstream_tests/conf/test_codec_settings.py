#  Copyright 2025 Hathor Labs
#
#  Licensed under the Apache License, Version 2.0 (the "License");
#  you may not use this file except in compliance with the License.
#  You may obtain a copy of the License at
#
#  http://www.apache.org/licenses/LICENSE-2.0
#
#  Unless required by applicable law or agreed to in writing, software
#  distributed under the License is distributed on an "AS IS" BASIS,
#  WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#  See the License for the specific language governing permissions and
#  limitations under the License.
import os
from pathlib import Path
from typing import Iterator

import pytest
from pydantic import ValidationError

from bsonstream.bson import BsonReader, GuidByteOrder
from bsonstream.conf import CONFIG_YAML_ENV_VAR, UNITTESTS_SETTINGS_FILEPATH
from bsonstream.conf.get_settings import _reset_settings_singleton, get_global_settings, get_settings_source
from bsonstream.conf.settings import CodecSettings
from bsonstream.serialization.consts import DEFAULT_BYTES_MAX_LENGTH, INT32_MAX
from bsonstream.utils.yaml import dict_from_yaml

FIXTURES_DIR = Path(__file__).parent / 'fixtures'


@pytest.fixture
def fresh_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[pytest.MonkeyPatch]:
    _reset_settings_singleton()
    yield monkeypatch
    monkeypatch.undo()
    _reset_settings_singleton()
    # leave the settings of the test session loaded, like conftest does
    get_global_settings()


def test_default_codec_settings():
    settings = CodecSettings()
    assert settings.GUID_BYTE_ORDER is GuidByteOrder.LITTLE_ENDIAN
    assert settings.MAX_DOCUMENT_SIZE == INT32_MAX
    assert settings.MAX_BYTES_PER_READ == DEFAULT_BYTES_MAX_LENGTH


def test_valid_codec_settings_from_yaml():
    settings_filepath = str(FIXTURES_DIR / 'valid_codec_settings_fixture.yml')

    expected_settings = CodecSettings(
        GUID_BYTE_ORDER=GuidByteOrder.LITTLE_ENDIAN,
        MAX_DOCUMENT_SIZE=4096,
        MAX_BYTES_PER_READ=None,
    )

    assert expected_settings == CodecSettings.from_yaml(filepath=settings_filepath)


def test_empty_yaml_uses_defaults():
    assert CodecSettings.from_yaml(filepath=FIXTURES_DIR / 'empty_codec_settings_fixture.yml') == CodecSettings()


@pytest.mark.parametrize(
    ['filepath', 'error'],
    [
        ('invalid_document_size_codec_settings_fixture.yml', 'MAX_DOCUMENT_SIZE must be between 5 and 2147483647'),
        ('invalid_byte_order_codec_settings_fixture.yml', "Input should be 'standard' or 'little_endian'"),
        ('unknown_field_codec_settings_fixture.yml', 'Extra inputs are not permitted'),
    ]
)
def test_invalid_codec_settings_from_yaml(filepath, error):
    settings_filepath = str(FIXTURES_DIR / filepath)

    with pytest.raises(ValidationError) as e:
        CodecSettings.from_yaml(filepath=settings_filepath)

    assert error in str(e.value)


def test_negative_max_bytes_per_read():
    with pytest.raises(ValidationError):
        CodecSettings(MAX_BYTES_PER_READ=-1)


def test_codec_settings_are_frozen():
    settings = CodecSettings()
    with pytest.raises(ValidationError):
        settings.MAX_DOCUMENT_SIZE = 10


def test_dict_from_yaml_errors():
    with pytest.raises(ValueError, match='is not a file'):
        dict_from_yaml(filepath=FIXTURES_DIR / 'missing.yml')

    with pytest.raises(ValueError, match='cannot be parsed as a dictionary'):
        dict_from_yaml(filepath=FIXTURES_DIR / 'list_codec_settings_fixture.yml')


def test_unittests_settings_file():
    settings = CodecSettings.from_yaml(filepath=UNITTESTS_SETTINGS_FILEPATH)
    assert settings.MAX_DOCUMENT_SIZE == 1_048_576
    assert settings.MAX_BYTES_PER_READ == 65_536
    assert settings.GUID_BYTE_ORDER is GuidByteOrder.LITTLE_ENDIAN


def test_global_settings_from_env_var(fresh_settings):
    settings_filepath = str(FIXTURES_DIR / 'valid_codec_settings_fixture.yml')
    fresh_settings.setenv(CONFIG_YAML_ENV_VAR, settings_filepath)

    settings = get_global_settings()
    assert settings.GUID_BYTE_ORDER is GuidByteOrder.LITTLE_ENDIAN
    assert get_settings_source() == settings_filepath
    # loaded once
    assert get_global_settings() is settings

    # readers and writers without explicit settings use the global ones
    reader = BsonReader.from_bytes(b'\x05\x00\x00\x00\x00')
    assert reader._settings is settings


def test_global_settings_defaults_without_env_var(fresh_settings):
    fresh_settings.delenv(CONFIG_YAML_ENV_VAR, raising=False)

    assert get_global_settings() == CodecSettings()
    assert get_settings_source() is None


def test_global_settings_cannot_change_source(fresh_settings):
    fresh_settings.setenv(CONFIG_YAML_ENV_VAR, UNITTESTS_SETTINGS_FILEPATH)
    get_global_settings()

    fresh_settings.setenv(CONFIG_YAML_ENV_VAR, str(FIXTURES_DIR / 'valid_codec_settings_fixture.yml'))
    with pytest.raises(Exception, match='loading config twice with a different file'):
        get_global_settings()


def test_settings_are_loaded_before_any_codec_is_built(capsys):
    # already loaded by conftest, so building a reader prints nothing
    assert get_settings_source() == os.environ[CONFIG_YAML_ENV_VAR]

    reader = BsonReader.from_bytes(b'\x05\x00\x00\x00\x00')
    reader.start_document()
    reader.end_document()

    assert capsys.readouterr().out == ''
