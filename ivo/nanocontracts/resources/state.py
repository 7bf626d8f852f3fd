# Copyright 2021 Hathor Labs
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

import logging
from typing import TYPE_CHECKING, Any

from pydantic import Field
from twisted.web.resource import Resource

from ivo.nanocontracts.api_arguments_parser import parse_nc_method_call, to_json
from ivo.nanocontracts.blueprint import get_blueprint_fields
from ivo.nanocontracts.exception import NanoContractDoesNotExist
from ivo.nanocontracts.types import ContractId
from ivo.utils.api import ErrorResponse, QueryParams, Response

if TYPE_CHECKING:
    from twisted.web.http import Request

    from ivo.nanocontracts.runner import Runner

logger = logging.getLogger(__name__)

_MISSING = object()


class NanoContractStateResource(Resource):
    """GET endpoint reporting the state of a contract held by `runner`.

    Query: `id`, plus any number of `fields[]` (`name` or `name.key.key`),
    `balances[]` (token uid hex or `__all__`) and `calls[]` (`view(args)`).
    """
    isLeaf = True

    def __init__(self, runner: 'Runner') -> None:
        super().__init__()
        self.runner = runner

    def render_GET(self, request: 'Request') -> bytes:
        request.setHeader(b'content-type', b'application/json; charset=utf-8')

        params = NCStateParams.from_request(request)
        if isinstance(params, ErrorResponse):
            request.setResponseCode(400)
            return params.json_dumpb()

        try:
            nc_id_bytes = ContractId(bytes.fromhex(params.id))
        except ValueError:
            request.setResponseCode(400)
            error_response = ErrorResponse(success=False, error=f'Invalid id: {params.id}')
            return error_response.json_dumpb()

        try:
            blueprint_id = self.runner.get_blueprint_id(nc_id_bytes)
            contract = self.runner.get_readonly_contract(nc_id_bytes)
        except NanoContractDoesNotExist:
            request.setResponseCode(404)
            error_response = ErrorResponse(success=False, error=f'Nano contract does not exist: {params.id}')
            return error_response.json_dumpb()

        blueprint_class = type(contract)

        # Get balances.
        balances: dict[str, NCValueSuccessResponse | NCValueErrorResponse] = {}
        for token_uid_hex in params.balances:
            if token_uid_hex == '__all__':
                for token_uid, balance in self.runner.get_all_balances(nc_id_bytes).items():
                    balances[token_uid.hex()] = NCValueSuccessResponse(value=str(balance))
                break

            try:
                token_uid = bytes.fromhex(token_uid_hex)
            except ValueError:
                balances[token_uid_hex] = NCValueErrorResponse(errmsg='invalid token id')
                continue

            balance = self.runner.get_balance(nc_id_bytes, token_uid)
            balances[token_uid_hex] = NCValueSuccessResponse(value=str(balance))

        # Get fields.
        blueprint_fields = get_blueprint_fields(blueprint_class)
        fields: dict[str, NCValueSuccessResponse | NCValueErrorResponse] = {}
        for field in params.fields:
            name, *keys = field.split('.')
            if name not in blueprint_fields:
                fields[field] = NCValueErrorResponse(errmsg='not a blueprint field')
                continue

            try:
                parsed_keys = [self.parse_field_key(key) for key in keys]
            except ValueError:
                fields[field] = NCValueErrorResponse(errmsg='invalid format')
                continue

            value = self.get_field_value(contract, name, parsed_keys)
            if value is _MISSING:
                fields[field] = NCValueErrorResponse(errmsg='field not found')
                continue

            try:
                fields[field] = NCValueSuccessResponse(value=to_json(value))
            except TypeError as e:
                fields[field] = NCValueErrorResponse(errmsg=str(e))

        # Call view methods.
        calls: dict[str, NCValueSuccessResponse | NCValueErrorResponse] = {}
        for call_info in params.calls:
            try:
                method_name, method_args = parse_nc_method_call(blueprint_class, call_info)
                value = to_json(self.runner.call_view_method(nc_id_bytes, method_name, *method_args))
            except Exception as e:
                logger.debug('view call %s on %s failed: %r', call_info, params.id, e)
                calls[call_info] = NCValueErrorResponse(errmsg=repr(e))
            else:
                calls[call_info] = NCValueSuccessResponse(value=value)

        response = NCStateResponse(
            success=True,
            nc_id=params.id,
            blueprint_id=blueprint_id.hex(),
            blueprint_name=blueprint_class.__name__,
            fields=fields,
            balances=balances,
            calls=calls,
        )
        return response.json_dumpb()

    def get_field_value(self, contract: Any, name: str, keys: list[Any]) -> Any:
        """Return the field value, following `keys` into dicts, or `_MISSING`."""
        value = getattr(contract, name, _MISSING)
        for key in keys:
            if not isinstance(value, dict) or key not in value:
                return _MISSING
            value = value[key]
        return value

    def parse_field_key(self, key: str) -> Any:
        """Parse a dict key: `b'<hex>'` for bytes, digits for ints, anything else as a string."""
        if key.startswith("b'") and key.endswith("'"):
            # This will raise ValueError in case it's an invalid hexa
            return bytes.fromhex(key[2:-1])
        if key.isdigit():
            return int(key)
        return key


class NCStateParams(QueryParams):
    id: str
    fields: list[str] = Field(alias='fields[]', default_factory=list)
    balances: list[str] = Field(alias='balances[]', default_factory=list)
    calls: list[str] = Field(alias='calls[]', default_factory=list)


class NCValueSuccessResponse(Response):
    value: Any


class NCValueErrorResponse(Response):
    errmsg: str


class NCStateResponse(Response):
    success: bool
    nc_id: str
    blueprint_id: str
    blueprint_name: str
    fields: dict[str, NCValueSuccessResponse | NCValueErrorResponse]
    balances: dict[str, NCValueSuccessResponse | NCValueErrorResponse]
    calls: dict[str, NCValueSuccessResponse | NCValueErrorResponse]
