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


class NCFail(Exception):
    """Raised by a contract to reject the whole call."""


class AccessDenied(NCFail):
    """The caller lacks the required role (owner, manager, minter)."""


class InvalidArgument(NCFail):
    """Zero address, zero amount, mismatched or too long lists, invalid index."""


class StateViolation(NCFail):
    """The contract is not in a state that allows the call."""


class InsufficientBalance(NCFail):
    """The amount exceeds what is available."""


class InvariantViolation(NCFail):
    """An internal invariant would be broken by the call."""


class FutureQuery(InvalidArgument):
    """A historical query asked for a counter that is not final yet."""


class NanoContractDoesNotExist(NCFail):
    pass


class BlueprintDoesNotExist(NCFail):
    pass


class NCMethodNotFound(NCFail):
    pass


class NCForbiddenAction(NCFail):
    """The call carries an action the method does not accept."""


class NCInsufficientFunds(NCFail):
    """A withdrawal exceeds the contract balance."""


class NCInvalidContext(NCFail):
    """The context is not valid for the current runner state."""


class NCContractAlreadyExists(NCFail):
    pass


class NCReentrancyError(NCFail):
    pass
