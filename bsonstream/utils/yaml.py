# Copyright 2025 Hathor Labs
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#    http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

from pathlib import Path
from typing import Any, TypeVar, Union

import yaml
from pydantic import BaseModel

T = TypeVar('T', bound=BaseModel)


def dict_from_yaml(*, filepath: Union[Path, str]) -> dict[str, Any]:
    """Takes a filepath to a yaml file and returns the mapping it holds, an empty file is an empty mapping."""
    path = Path(filepath)
    if not path.is_file():
        raise ValueError(f"'{filepath}' is not a file")

    with path.open('r', encoding='utf-8') as file:
        contents = yaml.safe_load(file)

    if contents is None:
        return {}
    if not isinstance(contents, dict):
        raise ValueError(f"'{filepath}' cannot be parsed as a dictionary")
    return contents


def model_from_yaml(model: type[T], *, filepath: Union[Path, str]) -> T:
    """Takes a pydantic model and a filepath to a yaml file and returns a validated model instance."""
    return model.model_validate(dict_from_yaml(filepath=filepath))
