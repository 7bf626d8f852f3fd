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

from collections import defaultdict
from dataclasses import dataclass
from typing import Iterable

from ivo.nanocontracts.exception import NCFail
from ivo.nanocontracts.types import Address, CallerId, NCAction, Timestamp, TokenUid


@dataclass(frozen=True, slots=True)
class BlockData:
    """The block a call is executed in."""
    height: int
    timestamp: Timestamp


class Context:
    """Context passed to every public method.

    It carries the caller, the actions attached to the call and the block
    the call executes in. Contexts are immutable.
    """

    __slots__ = ('_caller_id', '_actions', '_block')

    def __init__(self, caller_id: CallerId, actions: Iterable[NCAction], block: BlockData) -> None:
        grouped: dict[TokenUid, list[NCAction]] = defaultdict(list)
        for action in actions:
            grouped[action.token_uid].append(action)
        self._caller_id = caller_id
        self._actions = {token_uid: tuple(items) for token_uid, items in grouped.items()}
        self._block = block

    @property
    def caller_id(self) -> CallerId:
        return self._caller_id

    @property
    def address(self) -> Address:
        """The caller address. Fails when the caller is a contract."""
        if not isinstance(self._caller_id, Address):
            raise NCFail('caller is not an address')
        return self._caller_id

    @property
    def actions(self) -> dict[TokenUid, tuple[NCAction, ...]]:
        return self._actions

    @property
    def actions_list(self) -> list[NCAction]:
        return [action for items in self._actions.values() for action in items]

    @property
    def block(self) -> BlockData:
        return self._block

    @property
    def timestamp(self) -> Timestamp:
        return self._block.timestamp

    def get_single_action(self, token_uid: TokenUid) -> NCAction:
        """Return the only action of `token_uid`, failing if there is none or more than one."""
        actions = self._actions.get(token_uid, ())
        if len(actions) != 1:
            raise NCFail(f'expected exactly 1 action for token {token_uid.hex()}')
        return actions[0]

    def __repr__(self) -> str:
        return (f'Context(caller_id={self._caller_id!r}, actions={self.actions_list!r}, '
                f'block={self._block!r})')
