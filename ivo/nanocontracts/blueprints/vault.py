import logging
from typing import NamedTuple, Optional

from ivo import (
    AccessDenied,
    Amount,
    Blueprint,
    CallerId,
    Context,
    ContractId,
    InsufficientBalance,
    InvalidArgument,
    StateViolation,
    Timestamp,
    export,
    is_null,
    public,
    view,
)
from ivo.conf.get_settings import get_global_settings

logger = logging.getLogger(__name__)

settings = get_global_settings()


class VaultErrors:
    """Common error messages"""

    NOT_OWNER = "Caller is not the owner"
    NOT_MANAGER = "Caller is not a manager"
    NOT_CROWDSALE = "Caller is not the crowdsale"
    ZERO_ADDRESS = "Address cannot be zero"
    ZERO_AMOUNT = "Amount cannot be zero"
    CROWDSALE_IS_OWNER = "Crowdsale must differ from the owner and the creator"
    LENGTH_MISMATCH = "Lists must have the same length"
    BATCH_TOO_LONG = "Too many entries in a batch"
    FUNDING_CLOSED = "Vault no longer accepts allocations"
    NOT_FUNDED = "Allocation exceeds the vault balance"
    NOT_RELEASABLE = "Release time not reached"
    RELEASE_TIME_KNOWN = "Release time is already set"
    INVALID_SCHEDULE = "Vesting schedule must satisfy start <= cliff < end"


class Unauthorized(AccessDenied):
    pass


class InvalidAllocation(InvalidArgument):
    pass


class FundingClosed(StateViolation):
    pass


class NotReleasable(StateViolation):
    pass


class VaultUnderfunded(InsufficientBalance):
    pass


class VaultInfo(NamedTuple):
    """General vault information."""

    token: str
    crowdsale: str
    owner: str
    total_balance: int
    known_release_time: bool
    release_time: int
    update_time: int
    beneficiaries: int


class AllocationInfo(NamedTuple):
    """Allocation of a beneficiary."""

    initial_balance: int
    balance: int
    released: int
    releasable: int


class BaseVault(Blueprint):
    """Holds token allocations per beneficiary and releases them over time.

    Managers (the owner and the crowdsale) register allocations with
    `receive_for` while funding is open. Anyone may then call `release_for`
    once the release time is reached; how much is due at a given time is
    decided by `_vested_amount` in each flavor.

    A vault may be created without a release time. The crowdsale sets it
    once, when the round feeding the vault ends, to `now + lock_period`.
    """

    token_id: ContractId  # Token held by the vault
    crowdsale_id: ContractId

    owner: CallerId
    managers: set[CallerId]

    initial_balances: dict[CallerId, Amount]
    balances: dict[CallerId, Amount]  # Allocation not yet released
    released: dict[CallerId, Amount]
    total: Amount  # Sum of `balances`

    has_release_time: bool
    release_at: Timestamp
    lock_period: int  # Seconds between update_release_time and the release
    funding_deadline: Optional[Timestamp]  # receive_for fails from this time on

    def _setup(
        self,
        ctx: Context,
        token: ContractId,
        crowdsale: ContractId,
        owner: CallerId,
        release_time: Optional[Timestamp],
        lock_period: int,
        funding_deadline: Optional[Timestamp],
    ) -> None:
        if is_null(token) or is_null(crowdsale) or is_null(owner):
            raise InvalidAllocation(VaultErrors.ZERO_ADDRESS)
        if crowdsale == owner or crowdsale == ctx.caller_id:
            raise InvalidAllocation(VaultErrors.CROWDSALE_IS_OWNER)
        if lock_period < 0:
            raise InvalidArgument("Lock period cannot be negative")

        self.token_id = token
        self.crowdsale_id = crowdsale
        self.owner = owner
        self.managers = {owner, crowdsale}

        self.total = Amount(0)
        self.has_release_time = release_time is not None
        self.release_at = Timestamp(release_time or 0)
        self.lock_period = lock_period
        self.funding_deadline = funding_deadline

    # Allocation

    @public
    def receive_for(self, ctx: Context, beneficiary: CallerId, amount: Amount) -> None:
        """Allocate `amount` of the vault's tokens to `beneficiary`."""
        self._only_manager(ctx)
        self._check_funding_open(ctx)
        self._receive_for(beneficiary, amount)
        self._check_funded()

    @public
    def batch_receive_for(self, ctx: Context, beneficiaries: list[CallerId], amounts: list[Amount]) -> None:
        self._only_manager(ctx)
        self._check_funding_open(ctx)
        if len(beneficiaries) != len(amounts):
            raise InvalidAllocation(VaultErrors.LENGTH_MISMATCH)
        if len(beneficiaries) >= settings.BATCH_LIMIT:
            raise InvalidAllocation(VaultErrors.BATCH_TOO_LONG)
        for beneficiary, amount in zip(beneficiaries, amounts):
            self._receive_for(beneficiary, amount)
        self._check_funded()

    # Release

    @public
    def release(self, ctx: Context) -> Amount:
        """Release what is due to the caller."""
        return self._release(ctx, ctx.caller_id)

    @public
    def release_for(self, ctx: Context, account: CallerId) -> Amount:
        """Release what is due to `account`. Anyone may call it."""
        return self._release(ctx, account)

    @public
    def update_release_time(self, ctx: Context) -> None:
        """Start the lock period. Called once by the crowdsale."""
        if ctx.caller_id != self.crowdsale_id:
            raise Unauthorized(VaultErrors.NOT_CROWDSALE)
        if self.has_release_time:
            raise StateViolation(VaultErrors.RELEASE_TIME_KNOWN)
        self.has_release_time = True
        self.release_at = Timestamp(ctx.timestamp + self.lock_period)
        logger.debug("vault %s releases at %d", self.syscall.get_contract_id().hex(), self.release_at)

    @public
    def reclaim_token(self, ctx: Context, token: ContractId) -> None:
        """Send the owner what the vault holds beyond the open allocations.

        For any other token the whole balance is sent.
        """
        if ctx.caller_id != self.owner:
            raise Unauthorized(VaultErrors.NOT_OWNER)
        contract = self.syscall.get_contract(token, blueprint_id=None)
        balance = contract.view().balance_of(self.syscall.get_contract_id())
        amount = balance - self.total if token == self.token_id else balance
        if amount > 0:
            contract.public().transfer(self.owner, amount)

    # Views

    @view
    def initial_balance_of(self, account: CallerId) -> Amount:
        return Amount(self.initial_balances.get(account, 0))

    @view
    def balance_of(self, account: CallerId) -> Amount:
        return Amount(self.balances.get(account, 0))

    @view
    def released_of(self, account: CallerId) -> Amount:
        return Amount(self.released.get(account, 0))

    @view
    def total_balance(self) -> Amount:
        return self.total

    @view
    def known_release_time(self) -> bool:
        return self.has_release_time

    @view
    def release_time(self) -> Timestamp:
        """Release time, or 0 while it is not known."""
        return self.release_at

    @view
    def update_time(self) -> Timestamp:
        """Time from which allocations can no longer be added, or 0 if unbounded."""
        return Timestamp(self.funding_deadline or 0)

    @view
    def token(self) -> ContractId:
        return self.token_id

    @view
    def crowdsale(self) -> ContractId:
        return self.crowdsale_id

    @view
    def get_owner(self) -> CallerId:
        return self.owner

    @view
    def is_owner(self, account: CallerId) -> bool:
        return account == self.owner

    @view
    def is_manager(self, account: CallerId) -> bool:
        return account in self.managers

    @view
    def releasable_amount(self, account: CallerId, timestamp: Timestamp) -> Amount:
        """Amount `account` could release at `timestamp`."""
        if not self._is_released(timestamp):
            return Amount(0)
        return self._releasable(account, timestamp)

    @view
    def get_allocation_info(self, account: CallerId, timestamp: Timestamp) -> AllocationInfo:
        return AllocationInfo(
            initial_balance=self.initial_balances.get(account, 0),
            balance=self.balances.get(account, 0),
            released=self.released.get(account, 0),
            releasable=self.releasable_amount(account, timestamp),
        )

    @view
    def get_vault_info(self) -> VaultInfo:
        return VaultInfo(
            token=self.token_id.hex(),
            crowdsale=self.crowdsale_id.hex(),
            owner=self.owner.hex(),
            total_balance=self.total,
            known_release_time=self.has_release_time,
            release_time=self.release_at,
            update_time=self.funding_deadline or 0,
            beneficiaries=len(self.initial_balances),
        )

    # Internal methods

    def _vested_amount(self, account: CallerId, timestamp: Timestamp) -> Amount:
        """Part of the initial allocation of `account` unlocked at `timestamp`."""
        raise NotImplementedError

    def _releasable(self, account: CallerId, timestamp: Timestamp) -> Amount:
        vested = self._vested_amount(account, timestamp)
        due = vested - self.released.get(account, 0)
        return Amount(max(0, min(due, self.balances.get(account, 0))))

    def _is_released(self, timestamp: Timestamp) -> bool:
        return self.has_release_time and timestamp >= self.release_at

    def _release(self, ctx: Context, account: CallerId) -> Amount:
        if not self._is_released(ctx.timestamp):
            raise NotReleasable(VaultErrors.NOT_RELEASABLE)
        due = self._releasable(account, ctx.timestamp)
        if due == 0:
            return Amount(0)

        self.balances[account] = Amount(self.balances[account] - due)
        self.released[account] = Amount(self.released.get(account, 0) + due)
        self.total = Amount(self.total - due)
        self.syscall.get_contract(self.token_id, blueprint_id=None).public().transfer(account, due)
        self.syscall.emit_event("Released", {"owner": account, "value": due})
        logger.debug("released %d to %s", due, account.hex())
        return due

    def _receive_for(self, beneficiary: CallerId, amount: Amount) -> None:
        if is_null(beneficiary):
            raise InvalidAllocation(VaultErrors.ZERO_ADDRESS)
        if amount <= 0:
            raise InvalidAllocation(VaultErrors.ZERO_AMOUNT)
        self.initial_balances[beneficiary] = Amount(self.initial_balances.get(beneficiary, 0) + amount)
        self.balances[beneficiary] = Amount(self.balances.get(beneficiary, 0) + amount)
        self.total = Amount(self.total + amount)
        self.syscall.emit_event("Received", {"owner": beneficiary, "value": amount})

    def _check_funded(self) -> None:
        held = self.syscall.get_contract(self.token_id, blueprint_id=None).view().balance_of(
            self.syscall.get_contract_id()
        )
        if self.total > held:
            raise VaultUnderfunded(VaultErrors.NOT_FUNDED)

    def _check_funding_open(self, ctx: Context) -> None:
        if self.funding_deadline is not None and ctx.timestamp >= self.funding_deadline:
            raise FundingClosed(VaultErrors.FUNDING_CLOSED)
        if self._is_released(ctx.timestamp):
            raise FundingClosed(VaultErrors.FUNDING_CLOSED)

    def _only_manager(self, ctx: Context) -> None:
        if ctx.caller_id not in self.managers:
            raise Unauthorized(VaultErrors.NOT_MANAGER)


@export
class CliffVault(BaseVault):
    """Releases the whole allocation at once when the release time is reached."""

    @public
    def initialize(
        self,
        ctx: Context,
        token: ContractId,
        crowdsale: ContractId,
        owner: CallerId,
        release_time: Optional[Timestamp],
        lock_period: int,
    ) -> None:
        """Create the vault. Pass `release_time=None` to let the crowdsale set it."""
        self._setup(ctx, token, crowdsale, owner, release_time, lock_period, None)

    def _vested_amount(self, account: CallerId, timestamp: Timestamp) -> Amount:
        return Amount(self.initial_balances.get(account, 0))


@export
class LinearVestingVault(BaseVault):
    """Unlocks allocations linearly from `vesting_start` to `vesting_end`.

    Nothing can be released before the cliff. From then on the unlocked part
    is `allocation * (t - vesting_start) // (vesting_end - vesting_start)`,
    reaching the whole allocation at `vesting_end`.
    """

    vesting_start: Timestamp
    vesting_cliff: Timestamp
    vesting_end: Timestamp

    @public
    def initialize(
        self,
        ctx: Context,
        token: ContractId,
        crowdsale: ContractId,
        owner: CallerId,
        vesting_start: Timestamp,
        cliff: Timestamp,
        end: Timestamp,
    ) -> None:
        self._setup_schedule(vesting_start, cliff, end)
        self._setup(ctx, token, crowdsale, owner, cliff, 0, None)

    @view
    def vesting_schedule(self) -> tuple[Timestamp, Timestamp, Timestamp]:
        """Return `(start, cliff, end)`."""
        return self.vesting_start, self.vesting_cliff, self.vesting_end

    def _setup_schedule(self, vesting_start: Timestamp, cliff: Timestamp, end: Timestamp) -> None:
        if not (vesting_start <= cliff < end):
            raise InvalidArgument(VaultErrors.INVALID_SCHEDULE)
        self.vesting_start = vesting_start
        self.vesting_cliff = cliff
        self.vesting_end = end

    def _vested_amount(self, account: CallerId, timestamp: Timestamp) -> Amount:
        allocation = self.initial_balances.get(account, 0)
        if timestamp < self.vesting_cliff:
            return Amount(0)
        if timestamp >= self.vesting_end:
            return Amount(allocation)
        elapsed = timestamp - self.vesting_start
        return Amount(min(allocation, allocation * elapsed // (self.vesting_end - self.vesting_start)))
