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

from ivo.nanocontracts.blueprint import Blueprint
from ivo.nanocontracts.context import BlockData, Context
from ivo.nanocontracts.exception import (
    AccessDenied,
    FutureQuery,
    InsufficientBalance,
    InvalidArgument,
    InvariantViolation,
    NCFail,
    StateViolation,
)
from ivo.nanocontracts.types import (
    Address,
    Amount,
    BlueprintId,
    CallerId,
    ContractId,
    NCAction,
    NCDepositAction,
    NCWithdrawalAction,
    Timestamp,
    TokenUid,
    export,
    is_null,
    public,
    view,
)

__all__ = [
    'AccessDenied',
    'Address',
    'Amount',
    'BlockData',
    'Blueprint',
    'BlueprintId',
    'CallerId',
    'Context',
    'ContractId',
    'FutureQuery',
    'InsufficientBalance',
    'InvalidArgument',
    'InvariantViolation',
    'NCAction',
    'NCDepositAction',
    'NCFail',
    'NCWithdrawalAction',
    'StateViolation',
    'Timestamp',
    'TokenUid',
    'export',
    'is_null',
    'public',
    'view',
]
