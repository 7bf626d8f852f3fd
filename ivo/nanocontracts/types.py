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

from dataclasses import dataclass
from typing import Any, Callable, NewType, TypeVar, Union, overload

Amount = NewType('Amount', int)
Timestamp = NewType('Timestamp', int)
TokenUid = NewType('TokenUid', bytes)
VertexId = NewType('VertexId', bytes)
BlueprintId = NewType('BlueprintId', bytes)

ADDRESS_LEN = 25
CONTRACT_ID_LEN = 32


class Address(bytes):
    """An account address (25 bytes)."""

    def __repr__(self) -> str:
        return f'Address({self.hex()})'


class ContractId(bytes):
    """The id of a contract created by the runner (32 bytes)."""

    def __repr__(self) -> str:
        return f'ContractId({self.hex()})'


CallerId = Union[Address, ContractId]

NULL_ADDRESS = Address(b'\x00' * ADDRESS_LEN)
NULL_CONTRACT_ID = ContractId(b'\x00' * CONTRACT_ID_LEN)


def is_null(caller_id: bytes | None) -> bool:
    """Return True for the zero address, the zero contract id and empty values."""
    return caller_id is None or not any(caller_id)


@dataclass(frozen=True, slots=True)
class NCDepositAction:
    token_uid: TokenUid
    amount: int


@dataclass(frozen=True, slots=True)
class NCWithdrawalAction:
    token_uid: TokenUid
    amount: int


NCAction = Union[NCDepositAction, NCWithdrawalAction]

T = TypeVar('T', bound=Callable[..., Any])

PUBLIC_ATTR = '_nc_public'
VIEW_ATTR = '_nc_view'
ALLOW_DEPOSIT_ATTR = '_nc_allow_deposit'
ALLOW_WITHDRAWAL_ATTR = '_nc_allow_withdrawal'
EXPORT_ATTR = '_nc_export'


@overload
def public(fn: T) -> T: ...


@overload
def public(*, allow_deposit: bool = False, allow_withdrawal: bool = False) -> Callable[[T], T]: ...


def public(fn=None, *, allow_deposit=False, allow_withdrawal=False):
    """Mark a blueprint method as a public (state changing) method.

    Can be used bare (`@public`) or with the allowed actions
    (`@public(allow_deposit=True)`).
    """
    def decorator(method):
        setattr(method, PUBLIC_ATTR, True)
        setattr(method, ALLOW_DEPOSIT_ATTR, allow_deposit)
        setattr(method, ALLOW_WITHDRAWAL_ATTR, allow_withdrawal)
        return method

    if fn is not None:
        return decorator(fn)
    return decorator


def view(fn: T) -> T:
    """Mark a blueprint method as a read-only method."""
    setattr(fn, VIEW_ATTR, True)
    return fn


def export(cls: type) -> type:
    """Mark a blueprint class as deployable."""
    setattr(cls, EXPORT_ATTR, True)
    return cls


def is_public(method: Any) -> bool:
    return getattr(method, PUBLIC_ATTR, False)


def is_view(method: Any) -> bool:
    return getattr(method, VIEW_ATTR, False)
