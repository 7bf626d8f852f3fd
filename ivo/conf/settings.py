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

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing_extensions import Self

DAY_IN_SECONDS = 24 * 60 * 60


class IvoSettings(BaseModel):
    """Constants of an Ivo sale deployment."""

    model_config = ConfigDict(frozen=True)

    NETWORK_NAME: str

    # Uid of the native token used to pay in `buy_tokens`.
    NATIVE_TOKEN_UID: bytes = b'\x00'

    # Token metadata
    TOKEN_NAME: str
    TOKEN_SYMBOL: str
    TOKEN_DECIMALS: int = Field(default=18, ge=0)
    TOTAL_SUPPLY_CAP: int = Field(gt=0)

    # Crowdsale
    HARD_CAP: int = Field(gt=0)
    ROUND_CAPS: tuple[int, ...]  # cumulative cap of each round
    ROUND_DISCOUNTS: tuple[int, ...]  # price percentage of each round
    ROUND_DISCOUNT_BASE: int = Field(gt=0)
    KYC_AML_RATE_DEDUCTED: int = Field(gt=0)
    KYC_AML_FEE_BASE: int = Field(gt=0)
    INITIAL_RATE: int = Field(gt=0)
    INITIAL_FIAT_RATE: int = Field(gt=0)

    # Longest list accepted by batch methods is BATCH_LIMIT - 1.
    BATCH_LIMIT: int = Field(default=300, gt=1)

    # Allocations minted by the token's role setup
    SAFT_VAULT_ALLOCATION: int = Field(ge=0)
    RESERVE_VAULT_ALLOCATION: int = Field(ge=0)
    ADVISORS_VESTING_ALLOCATION: int = Field(ge=0)
    TEAM_VESTING_ALLOCATION: int = Field(ge=0)

    # Times
    STO_START_TIME: int
    SAFT_VAULT_RELEASE_TIME: int
    ADVISORS_VESTING_CLIFF: int = Field(default=180 * DAY_IN_SECONDS, ge=0)
    ADVISORS_VESTING_DURATION: int = Field(default=180 * DAY_IN_SECONDS, gt=0)
    TEAM_VESTING_START_TIME: int
    TEAM_VESTING_CLIFF_TIME: int
    TEAM_VESTING_END_TIME: int

    # Lock applied when the crowdsale closes the round feeding a vault
    PRIVATE_VAULT_LOCK_PERIOD: int = Field(ge=0)
    PRESALE_VAULT_LOCK_PERIOD: int = Field(ge=0)
    RESERVE_VAULT_LOCK_PERIOD: int = Field(ge=0)

    @property
    def ROUNDS(self) -> int:
        return len(self.ROUND_CAPS)

    @property
    def INITIAL_SUPPLY(self) -> int:
        return (self.SAFT_VAULT_ALLOCATION + self.RESERVE_VAULT_ALLOCATION
                + self.ADVISORS_VESTING_ALLOCATION + self.TEAM_VESTING_ALLOCATION)

    @field_validator('ROUND_CAPS')
    @classmethod
    def validate_round_caps(cls, caps: tuple[int, ...]) -> tuple[int, ...]:
        if not caps:
            raise ValueError('at least one round is required')
        if any(b <= a for a, b in zip(caps, caps[1:])) or caps[0] <= 0:
            raise ValueError('round caps must be positive and strictly increasing')
        return caps

    @model_validator(mode='after')
    def validate_consistency(self) -> Self:
        if len(self.ROUND_DISCOUNTS) != len(self.ROUND_CAPS):
            raise ValueError('ROUND_DISCOUNTS and ROUND_CAPS must have the same length')
        if any(discount <= 0 for discount in self.ROUND_DISCOUNTS):
            raise ValueError('round discounts must be positive')
        if self.ROUND_CAPS[-1] != self.HARD_CAP:
            raise ValueError('the last round cap must be the hard cap')
        if self.ROUND_DISCOUNTS[-1] != self.ROUND_DISCOUNT_BASE:
            raise ValueError('the last round is sold without discount')
        if self.KYC_AML_RATE_DEDUCTED > self.KYC_AML_FEE_BASE:
            raise ValueError('KYC_AML_RATE_DEDUCTED cannot exceed KYC_AML_FEE_BASE')
        if self.HARD_CAP + self.INITIAL_SUPPLY > self.TOTAL_SUPPLY_CAP:
            raise ValueError('hard cap plus allocations exceed the total supply cap')
        if not (self.TEAM_VESTING_START_TIME <= self.TEAM_VESTING_CLIFF_TIME < self.TEAM_VESTING_END_TIME):
            raise ValueError('team vesting times must satisfy start <= cliff < end')
        return self
