"""Vaults deployed for the Ivo sale.

SAFT and reserve allocations are minted by the token's role setup; private
and presale vaults are fed by the crowdsale as rounds 0 and 1 sell. Advisors
and team allocations vest linearly.
"""

from ivo import CallerId, Context, ContractId, InvalidArgument, Timestamp, export, is_null, public, view
from ivo.conf.get_settings import get_global_settings
from ivo.nanocontracts.blueprints.vault import CliffVault, FundingClosed, LinearVestingVault

settings = get_global_settings()


class StartTimeMismatch(InvalidArgument):
    pass


def _check_start_time(vault: CliffVault | LinearVestingVault, crowdsale: ContractId, start_time: Timestamp) -> None:
    crowdsale_start = vault.syscall.get_contract(crowdsale, blueprint_id=None).view().starting_time()
    if start_time != crowdsale_start:
        raise StartTimeMismatch("Start time differs from the crowdsale starting time")


@export
class SaftVault(CliffVault):
    """SAFT investors. Funded by the role setup, released on a fixed date."""

    @public
    def initialize(self, ctx: Context, token: ContractId, crowdsale: ContractId, start_time: Timestamp,
                   owner: CallerId) -> None:
        _check_start_time(self, crowdsale, start_time)
        self._setup(ctx, token, crowdsale, owner, Timestamp(settings.SAFT_VAULT_RELEASE_TIME), 0, start_time)


@export
class PrivateVault(CliffVault):
    """Buyers of round 0. Locked once the round ends."""

    @public
    def initialize(self, ctx: Context, token: ContractId, crowdsale: ContractId, owner: CallerId) -> None:
        self._setup(ctx, token, crowdsale, owner, None, settings.PRIVATE_VAULT_LOCK_PERIOD, None)


@export
class PresaleVault(CliffVault):
    """Buyers of round 1. Locked once the round ends."""

    @public
    def initialize(self, ctx: Context, token: ContractId, crowdsale: ContractId, owner: CallerId) -> None:
        self._setup(ctx, token, crowdsale, owner, None, settings.PRESALE_VAULT_LOCK_PERIOD, None)


@export
class ReserveVault(CliffVault):
    """Company reserve, held for the owner.

    The lock starts when the crowdsale reaches the hard cap. Only the
    crowdsale is a manager and no allocation can be added.
    """

    @public
    def initialize(self, ctx: Context, token: ContractId, crowdsale: ContractId, owner: CallerId) -> None:
        self._setup(ctx, token, crowdsale, owner, None, settings.RESERVE_VAULT_LOCK_PERIOD, None)
        self.managers = {crowdsale}
        self._receive_for(owner, settings.RESERVE_VAULT_ALLOCATION)

    def _check_funding_open(self, ctx: Context) -> None:
        raise FundingClosed("Reserve allocation is fixed")


@export
class AdvisorsVesting(LinearVestingVault):
    """Advisors. Vests linearly for ADVISORS_VESTING_DURATION after the cliff."""

    @public
    def initialize(self, ctx: Context, token: ContractId, crowdsale: ContractId, start_time: Timestamp,
                   owner: CallerId) -> None:
        _check_start_time(self, crowdsale, start_time)
        cliff = Timestamp(start_time + settings.ADVISORS_VESTING_CLIFF)
        self._setup_schedule(cliff, cliff, Timestamp(cliff + settings.ADVISORS_VESTING_DURATION))
        self._setup(ctx, token, crowdsale, owner, cliff, 0, start_time)


@export
class TeamVesting(LinearVestingVault):
    """Team allocation, held for a single team wallet.

    The whole allocation belongs to `team_wallet` from the start, so no
    further allocation can be added. The owner is not a manager.
    """

    team_wallet_id: CallerId

    @public
    def initialize(self, ctx: Context, token: ContractId, crowdsale: ContractId, owner: CallerId,
                   team_wallet: CallerId) -> None:
        if is_null(team_wallet):
            raise InvalidArgument("Team wallet cannot be zero")
        self._setup_schedule(
            Timestamp(settings.TEAM_VESTING_START_TIME),
            Timestamp(settings.TEAM_VESTING_CLIFF_TIME),
            Timestamp(settings.TEAM_VESTING_END_TIME),
        )
        self._setup(ctx, token, crowdsale, owner, Timestamp(settings.TEAM_VESTING_CLIFF_TIME), 0,
                    Timestamp(settings.TEAM_VESTING_START_TIME))
        self.managers = {crowdsale}
        self.team_wallet_id = team_wallet
        self._receive_for(team_wallet, settings.TEAM_VESTING_ALLOCATION)

    @view
    def team_wallet(self) -> CallerId:
        return self.team_wallet_id

    def _check_funding_open(self, ctx: Context) -> None:
        raise FundingClosed("Team allocation is fixed")

