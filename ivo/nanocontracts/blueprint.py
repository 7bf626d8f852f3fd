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

from __future__ import annotations

from functools import cache
from typing import TYPE_CHECKING, Any, get_origin, get_type_hints

if TYPE_CHECKING:
    from ivo.nanocontracts.blueprint_env import BlueprintEnvironment

_RESERVED_ATTRIBUTES = frozenset({'syscall'})

_CONTAINER_FACTORIES: dict[Any, type] = {
    dict: dict,
    set: set,
    list: list,
}


@cache
def get_blueprint_fields(blueprint_class: type[Blueprint]) -> dict[str, Any]:
    """Return the persistent fields declared on a blueprint class and its bases."""
    hints = get_type_hints(blueprint_class)
    return {name: hint for name, hint in hints.items() if name not in _RESERVED_ATTRIBUTES}


class Blueprint:
    """Base class for every blueprint.

    Persistent fields are declared as annotated class attributes. Container
    fields (`dict`, `set`, `list`) start empty; the others must be assigned
    by `initialize`. The runner injects `syscall`, the environment used to
    reach the runner (other contracts, events, current block).
    """

    def __init__(self, env: BlueprintEnvironment) -> None:
        self.syscall = env
        for name, field_type in get_blueprint_fields(type(self)).items():
            factory = _CONTAINER_FACTORIES.get(get_origin(field_type) or field_type)
            if factory is not None:
                setattr(self, name, factory())

    def _get_state(self) -> dict[str, Any]:
        return {k: v for k, v in vars(self).items() if k not in _RESERVED_ATTRIBUTES}

    def _set_state(self, state: dict[str, Any]) -> None:
        for name in list(vars(self)):
            if name not in _RESERVED_ATTRIBUTES:
                delattr(self, name)
        for name, value in state.items():
            setattr(self, name, value)
