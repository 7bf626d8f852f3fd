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

from ivo.conf.settings import DAY_IN_SECONDS, IvoSettings

ONE_TOKEN = 10**18
STO_START_TIME = 1569888000  # 2019-10-01 00:00:00 UTC

SETTINGS = IvoSettings(
    NETWORK_NAME="ivo-sale",
    TOKEN_NAME="IVO",
    TOKEN_SYMBOL="IVO",
    TOKEN_DECIMALS=18,
    TOTAL_SUPPLY_CAP=100_000_000 * ONE_TOKEN,
    # Crowdsale: 10M in the private round, 20M in the presale, public round up to the hard cap
    HARD_CAP=52_500_000 * ONE_TOKEN,
    ROUND_CAPS=(
        10_000_000 * ONE_TOKEN,
        30_000_000 * ONE_TOKEN,
        52_500_000 * ONE_TOKEN,
    ),
    ROUND_DISCOUNTS=(70, 85, 100),
    ROUND_DISCOUNT_BASE=100,
    # 3.5% of every ETH payment covers KYC/AML costs
    KYC_AML_RATE_DEDUCTED=965,
    KYC_AML_FEE_BASE=1000,
    # 1 ETH = 125.00 USD = 389 IVO
    INITIAL_RATE=389,
    INITIAL_FIAT_RATE=12500,
    BATCH_LIMIT=300,
    SAFT_VAULT_ALLOCATION=22_500_000 * ONE_TOKEN,
    RESERVE_VAULT_ALLOCATION=10_000_000 * ONE_TOKEN,
    ADVISORS_VESTING_ALLOCATION=1_500_000 * ONE_TOKEN,
    TEAM_VESTING_ALLOCATION=13_500_000 * ONE_TOKEN,
    STO_START_TIME=STO_START_TIME,
    SAFT_VAULT_RELEASE_TIME=STO_START_TIME + 365 * DAY_IN_SECONDS,
    ADVISORS_VESTING_CLIFF=180 * DAY_IN_SECONDS,
    ADVISORS_VESTING_DURATION=180 * DAY_IN_SECONDS,
    # Team tokens vest linearly over 6 * 180 days, releasable from the cliff on
    TEAM_VESTING_START_TIME=STO_START_TIME,
    TEAM_VESTING_CLIFF_TIME=STO_START_TIME + 360 * DAY_IN_SECONDS,
    TEAM_VESTING_END_TIME=STO_START_TIME + 6 * 180 * DAY_IN_SECONDS,
    PRIVATE_VAULT_LOCK_PERIOD=180 * DAY_IN_SECONDS,
    PRESALE_VAULT_LOCK_PERIOD=90 * DAY_IN_SECONDS,
    RESERVE_VAULT_LOCK_PERIOD=365 * DAY_IN_SECONDS,
)
