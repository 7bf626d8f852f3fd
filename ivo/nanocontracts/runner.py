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

"""In-process executor for blueprint contracts.

The runner owns every contract instance, the native-token balances of the
contracts and the event log. A public call coming from outside (a user
transaction) is atomic: if anything raises, all contracts, balances and
events go back to what they were before the call.
"""

import copy
import logging
from collections import defaultdict
from typing import Any, Callable, NamedTuple, Optional

from ivo.nanocontracts.blueprint import Blueprint
from ivo.nanocontracts.blueprint_env import BlueprintEnvironment
from ivo.nanocontracts.context import BlockData, Context
from ivo.nanocontracts.exception import (
    BlueprintDoesNotExist,
    NanoContractDoesNotExist,
    NCContractAlreadyExists,
    NCFail,
    NCForbiddenAction,
    NCInsufficientFunds,
    NCInvalidContext,
    NCMethodNotFound,
    NCReentrancyError,
)
from ivo.nanocontracts.types import (
    ALLOW_DEPOSIT_ATTR,
    ALLOW_WITHDRAWAL_ATTR,
    Amount,
    BlueprintId,
    CallerId,
    ContractId,
    NCAction,
    NCDepositAction,
    NCWithdrawalAction,
    Timestamp,
    TokenUid,
    is_public,
    is_view,
)

logger = logging.getLogger(__name__)

INITIALIZE_METHOD = 'initialize'


class NCEvent(NamedTuple):
    """An event emitted by a contract."""

    contract_id: ContractId
    name: str
    data: dict[str, Any]


class _Checkpoint(NamedTuple):
    states: dict[ContractId, dict[str, Any]]
    contracts: dict[ContractId, Blueprint]
    balances: dict[ContractId, dict[TokenUid, int]]
    events_len: int
    block: Optional[BlockData]


class Runner:
    """Creates contracts and executes their public and view methods."""

    def __init__(self, genesis_timestamp: int = 0) -> None:
        self._blueprints: dict[BlueprintId, type[Blueprint]] = {}
        self._contracts: dict[ContractId, Blueprint] = {}
        self._contract_blueprints: dict[ContractId, BlueprintId] = {}
        self._balances: dict[ContractId, dict[TokenUid, int]] = defaultdict(dict)
        self._events: list[NCEvent] = []
        self._call_stack: list[ContractId] = []
        self._block: Optional[BlockData] = None
        self._genesis_timestamp = genesis_timestamp

    # Registry

    def register_blueprint_class(self, blueprint_id: BlueprintId, blueprint_class: type[Blueprint]) -> None:
        if not issubclass(blueprint_class, Blueprint):
            raise TypeError(f'{blueprint_class!r} is not a blueprint')
        self._blueprints[blueprint_id] = blueprint_class

    def get_blueprint_class(self, blueprint_id: BlueprintId) -> type[Blueprint]:
        try:
            return self._blueprints[blueprint_id]
        except KeyError:
            raise BlueprintDoesNotExist(blueprint_id.hex()) from None

    def get_blueprint_id(self, contract_id: ContractId) -> BlueprintId:
        try:
            return self._contract_blueprints[contract_id]
        except KeyError:
            raise NanoContractDoesNotExist(contract_id.hex()) from None

    def has_contract(self, contract_id: ContractId) -> bool:
        return contract_id in self._contracts

    def get_contract(self, contract_id: ContractId) -> Blueprint:
        try:
            return self._contracts[contract_id]
        except KeyError:
            raise NanoContractDoesNotExist(contract_id.hex()) from None

    def get_readonly_contract(self, contract_id: ContractId) -> Blueprint:
        """Return a copy of the contract that cannot affect the stored one."""
        contract = self.get_contract(contract_id)
        clone = copy.copy(contract)
        clone._set_state(copy.deepcopy(contract._get_state()))
        return clone

    # Block and balances

    def get_current_block(self) -> BlockData:
        if self._block is None:
            return BlockData(height=0, timestamp=Timestamp(self._genesis_timestamp))
        return self._block

    @property
    def block_height(self) -> int:
        return self.get_current_block().height

    def get_balance(self, contract_id: ContractId, token_uid: TokenUid) -> Amount:
        return Amount(self._balances[contract_id].get(token_uid, 0))

    def get_all_balances(self, contract_id: ContractId) -> dict[TokenUid, Amount]:
        return {token_uid: Amount(value) for token_uid, value in self._balances[contract_id].items()}

    # Events

    def emit_event(self, contract_id: ContractId, name: str, data: dict[str, Any]) -> None:
        self._events.append(NCEvent(contract_id, name, dict(data)))

    def get_events(self, contract_id: Optional[ContractId] = None, name: Optional[str] = None) -> list[NCEvent]:
        return [
            event for event in self._events
            if (contract_id is None or event.contract_id == contract_id)
            and (name is None or event.name == name)
        ]

    # Execution

    def create_contract(
        self,
        contract_id: ContractId,
        blueprint_id: BlueprintId,
        ctx: Context,
        *args: Any,
        **kwargs: Any,
    ) -> Any:
        """Create a contract and run its `initialize` method atomically."""
        if contract_id in self._contracts:
            raise NCContractAlreadyExists(contract_id.hex())
        blueprint_class = self.get_blueprint_class(blueprint_id)

        def run() -> Any:
            env = BlueprintEnvironment(self, contract_id, blueprint_id)
            contract = blueprint_class(env)
            self._contracts[contract_id] = contract
            self._contract_blueprints[contract_id] = blueprint_id
            return self._execute_public(contract_id, INITIALIZE_METHOD, ctx, args, kwargs)

        logger.debug('creating contract %s of blueprint %s', contract_id.hex(), blueprint_class.__name__)
        return self._run_atomically(ctx, run)

    def call_public_method(self, contract_id: ContractId, method_name: str, ctx: Context, *args: Any,
                           **kwargs: Any) -> Any:
        """Execute a public method as a transaction: all or nothing."""
        if method_name == INITIALIZE_METHOD:
            raise NCMethodNotFound('initialize can only be called when creating a contract')
        return self._run_atomically(
            ctx, lambda: self._execute_public(contract_id, method_name, ctx, args, kwargs)
        )

    def call_public_method_from_contract(
        self,
        caller_id: ContractId,
        contract_id: ContractId,
        method_name: str,
        actions: list[NCAction],
        *args: Any,
        **kwargs: Any,
    ) -> Any:
        """Execute a public method called by another contract within the current call."""
        if method_name == INITIALIZE_METHOD:
            raise NCMethodNotFound('initialize can only be called when creating a contract')
        ctx = Context(caller_id=caller_id, actions=actions, block=self.get_current_block())
        self._move_actions_from_caller(caller_id, actions)
        return self._execute_public(contract_id, method_name, ctx, args, kwargs)

    def call_view_method(self, contract_id: ContractId, method_name: str, *args: Any, **kwargs: Any) -> Any:
        contract = self.get_contract(contract_id)
        method = getattr(contract, method_name, None)
        if method is None or not is_view(method):
            raise NCMethodNotFound(f'{type(contract).__name__}.{method_name} is not a view method')
        return method(*args, **kwargs)

    def _run_atomically(self, ctx: Context, fn: Callable[[], Any]) -> Any:
        self._validate_context(ctx)
        checkpoint = self._checkpoint()
        self._block = ctx.block
        try:
            return fn()
        except Exception as e:
            logger.debug('call from %s rolled back: %r', ctx.caller_id.hex(), e)
            self._restore(checkpoint)
            raise
        finally:
            self._call_stack.clear()

    def _validate_context(self, ctx: Context) -> None:
        if self._call_stack:
            raise NCInvalidContext('a transaction is already executing')
        current = self._block
        if current is None:
            return
        if ctx.block.height < current.height:
            raise NCInvalidContext(f'block height {ctx.block.height} is lower than {current.height}')
        if ctx.block.timestamp < current.timestamp:
            raise NCInvalidContext(f'timestamp {ctx.block.timestamp} is lower than {current.timestamp}')
        if ctx.block.height == current.height and ctx.block.timestamp != current.timestamp:
            raise NCInvalidContext('calls in the same block must share its timestamp')

    def _execute_public(self, contract_id: ContractId, method_name: str, ctx: Context,
                        args: tuple[Any, ...], kwargs: dict[str, Any]) -> Any:
        contract = self.get_contract(contract_id)
        method = getattr(contract, method_name, None)
        if method is None or not is_public(method):
            raise NCMethodNotFound(f'{type(contract).__name__}.{method_name} is not a public method')
        if contract_id in self._call_stack:
            raise NCReentrancyError(f'contract {contract_id.hex()} is already executing')

        self._apply_actions(contract_id, method, ctx)
        self._call_stack.append(contract_id)
        try:
            return method(ctx, *args, **kwargs)
        finally:
            self._call_stack.pop()

    def _apply_actions(self, contract_id: ContractId, method: Any, ctx: Context) -> None:
        balances = self._balances[contract_id]
        for action in ctx.actions_list:
            if action.amount <= 0:
                raise NCFail('action amount must be positive')
            if isinstance(action, NCDepositAction):
                if not getattr(method, ALLOW_DEPOSIT_ATTR, False):
                    raise NCForbiddenAction(f'{method.__name__} does not accept deposits')
                balances[action.token_uid] = balances.get(action.token_uid, 0) + action.amount
            elif isinstance(action, NCWithdrawalAction):
                if not getattr(method, ALLOW_WITHDRAWAL_ATTR, False):
                    raise NCForbiddenAction(f'{method.__name__} does not accept withdrawals')
                available = balances.get(action.token_uid, 0)
                if action.amount > available:
                    raise NCInsufficientFunds(f'withdrawal of {action.amount} exceeds balance {available}')
                balances[action.token_uid] = available - action.amount
            else:
                raise NCFail(f'unknown action {action!r}')

    def _move_actions_from_caller(self, caller_id: CallerId, actions: list[NCAction]) -> None:
        # A deposit made by a contract leaves its own balance; a withdrawal lands in it.
        balances = self._balances[ContractId(caller_id)]
        for action in actions:
            if isinstance(action, NCDepositAction):
                available = balances.get(action.token_uid, 0)
                if action.amount > available:
                    raise NCInsufficientFunds(f'deposit of {action.amount} exceeds balance {available}')
                balances[action.token_uid] = available - action.amount
            elif isinstance(action, NCWithdrawalAction):
                balances[action.token_uid] = balances.get(action.token_uid, 0) + action.amount

    def _checkpoint(self) -> _Checkpoint:
        return _Checkpoint(
            states={cid: copy.deepcopy(contract._get_state()) for cid, contract in self._contracts.items()},
            contracts=dict(self._contracts),
            balances={cid: dict(balances) for cid, balances in self._balances.items()},
            events_len=len(self._events),
            block=self._block,
        )

    def _restore(self, checkpoint: _Checkpoint) -> None:
        created = set(self._contracts) - set(checkpoint.contracts)
        for contract_id in created:
            del self._contracts[contract_id]
            del self._contract_blueprints[contract_id]
        for contract_id, state in checkpoint.states.items():
            self._contracts[contract_id]._set_state(state)
        self._balances.clear()
        self._balances.update(checkpoint.balances)
        del self._events[checkpoint.events_len:]
        self._block = checkpoint.block
