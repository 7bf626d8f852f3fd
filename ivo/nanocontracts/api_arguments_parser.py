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

import json
import re
from typing import Any, Union, get_args, get_origin, get_type_hints

from ivo.nanocontracts.blueprint import Blueprint
from ivo.nanocontracts.snapshot_ledger import SnapshotLedger
from ivo.nanocontracts.types import ADDRESS_LEN, Address, ContractId, is_view

_CALL_RE = re.compile(r'^([a-zA-Z_][a-zA-Z0-9_]*)\((.*)\)$')


def parse_nc_method_call(blueprint_class: type[Blueprint], call_info: str) -> tuple[str, list[Any]]:
    """Parse `method(arg1, arg2, ...)` into the method name and its arguments.

    Arguments are JSON values. Hex strings are converted to bytes where the
    method expects an address, a contract id or any other bytes value.
    """
    match = _CALL_RE.match(call_info.strip())
    if not match:
        raise ValueError('invalid method call')
    method_name, raw_args = match.groups()

    method = getattr(blueprint_class, method_name, None)
    if method is None or not is_view(method):
        raise ValueError(f'{method_name} is not a view method')

    args = json.loads(f'[{raw_args}]')
    hints = get_type_hints(method)
    hints.pop('return', None)
    arg_types = list(hints.values())
    if len(args) > len(arg_types):
        raise ValueError(f'too many arguments for {method_name}')
    return method_name, [parse_arg(arg_type, value) for arg_type, value in zip(arg_types, args)]


def parse_arg(arg_type: Any, value: Any) -> Any:
    if not isinstance(value, str) or not _accepts_bytes(arg_type):
        return value
    data = bytes.fromhex(value)
    if arg_type is Address:
        return Address(data)
    if arg_type is ContractId:
        return ContractId(data)
    if _is_caller_id(arg_type):
        return Address(data) if len(data) == ADDRESS_LEN else ContractId(data)
    return data


def to_json(value: Any) -> Any:
    """Convert a field or view value to a JSON friendly value."""
    if isinstance(value, bytes):
        return value.hex()
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, tuple) and hasattr(value, '_asdict'):
        return {key: to_json(item) for key, item in value._asdict().items()}
    if isinstance(value, (list, tuple)):
        return [to_json(item) for item in value]
    if isinstance(value, (set, frozenset)):
        return sorted(to_json(item) for item in value)
    if isinstance(value, dict):
        return {_key_to_str(key): to_json(item) for key, item in value.items()}
    if isinstance(value, SnapshotLedger):
        return {
            subject.hex(): [[counter, snapshot_value] for counter, snapshot_value in value.history(subject)]
            for subject in value.subjects()
        }
    raise TypeError(f'cannot serialize {type(value).__name__}')


def _key_to_str(key: Any) -> str:
    if isinstance(key, tuple):
        return ':'.join(_key_to_str(part) for part in key)
    if isinstance(key, bytes):
        return key.hex()
    return str(key)


def _accepts_bytes(arg_type: Any) -> bool:
    if get_origin(arg_type) is Union:
        return any(_accepts_bytes(arg) for arg in get_args(arg_type))
    supertype = getattr(arg_type, '__supertype__', None)
    if supertype is not None:
        return _accepts_bytes(supertype)
    return isinstance(arg_type, type) and issubclass(arg_type, bytes)


def _is_caller_id(arg_type: Any) -> bool:
    return get_origin(arg_type) is Union and set(get_args(arg_type)) == {Address, ContractId}
