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

from typing import TYPE_CHECKING, Any, Optional

from ivo.nanocontracts.exception import NCFail
from ivo.nanocontracts.types import Amount, BlueprintId, ContractId, NCAction, TokenUid

if TYPE_CHECKING:
    from ivo.nanocontracts.context import BlockData
    from ivo.nanocontracts.runner import Runner


class BlueprintEnvironment:
    """The `syscall` object of a contract: everything a blueprint may ask the runner."""

    __slots__ = ('_runner', '_contract_id', '_blueprint_id')

    def __init__(self, runner: Runner, contract_id: ContractId, blueprint_id: BlueprintId) -> None:
        self._runner = runner
        self._contract_id = contract_id
        self._blueprint_id = blueprint_id

    def get_contract_id(self) -> ContractId:
        return self._contract_id

    def get_blueprint_id(self) -> BlueprintId:
        return self._blueprint_id

    def get_current_block(self) -> BlockData:
        """Return the block of the call being executed, or the latest one seen."""
        return self._runner.get_current_block()

    def get_current_balance(self, token_uid: TokenUid) -> Amount:
        return self._runner.get_balance(self._contract_id, token_uid)

    def emit_event(self, name: str, data: dict[str, Any]) -> None:
        self._runner.emit_event(self._contract_id, name, data)

    def call_public_method(
        self,
        contract_id: ContractId,
        method_name: str,
        actions: list[NCAction],
        *args: Any,
        **kwargs: Any,
    ) -> Any:
        return self._runner.call_public_method_from_contract(
            self._contract_id, contract_id, method_name, actions, *args, **kwargs
        )

    def call_view_method(self, contract_id: ContractId, method_name: str, *args: Any, **kwargs: Any) -> Any:
        return self._runner.call_view_method(contract_id, method_name, *args, **kwargs)

    def get_contract(self, contract_id: ContractId, blueprint_id: Optional[BlueprintId] = None) -> ContractAccessor:
        """Return a proxy to call another contract's methods."""
        if blueprint_id is not None and self._runner.get_blueprint_id(contract_id) != blueprint_id:
            raise NCFail(f'contract {contract_id.hex()} is not of blueprint {blueprint_id.hex()}')
        return ContractAccessor(self, contract_id)


class ContractAccessor:
    """Proxy returned by `syscall.get_contract()`."""

    __slots__ = ('_env', '_contract_id')

    def __init__(self, env: BlueprintEnvironment, contract_id: ContractId) -> None:
        self._env = env
        self._contract_id = contract_id

    def public(self, *actions: NCAction) -> _PublicMethods:
        return _PublicMethods(self._env, self._contract_id, list(actions))

    def view(self) -> _ViewMethods:
        return _ViewMethods(self._env, self._contract_id)


class _PublicMethods:
    __slots__ = ('_env', '_contract_id', '_actions')

    def __init__(self, env: BlueprintEnvironment, contract_id: ContractId, actions: list[NCAction]) -> None:
        self._env = env
        self._contract_id = contract_id
        self._actions = actions

    def __getattr__(self, method_name: str) -> Any:
        def call(*args: Any, **kwargs: Any) -> Any:
            return self._env.call_public_method(self._contract_id, method_name, self._actions, *args, **kwargs)
        return call


class _ViewMethods:
    __slots__ = ('_env', '_contract_id')

    def __init__(self, env: BlueprintEnvironment, contract_id: ContractId) -> None:
        self._env = env
        self._contract_id = contract_id

    def __getattr__(self, method_name: str) -> Any:
        def call(*args: Any, **kwargs: Any) -> Any:
            return self._env.call_view_method(self._contract_id, method_name, *args, **kwargs)
        return call
