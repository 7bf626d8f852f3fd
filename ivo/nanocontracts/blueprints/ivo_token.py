from typing import NamedTuple

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
    export,
    is_null,
    public,
    view,
)
from ivo.conf.get_settings import get_global_settings
from ivo.nanocontracts.snapshot_ledger import SnapshotLedger
from ivo.nanocontracts.types import NULL_ADDRESS

settings = get_global_settings()

# Subject of the total supply history in the snapshot ledger. Account ids are
# never empty so it cannot collide with an account.
TOTAL_SUPPLY_SUBJECT = b""


class TokenErrors:
    """Common error messages"""

    ZERO_CAP = "Cap must be larger than zero"
    NOT_OWNER = "Caller is not the owner"
    NOT_MANAGER = "Caller is not a manager"
    NOT_OWNER_OR_MANAGER = "Caller is neither the owner nor a manager"
    NOT_MINTER = "Caller is not a minter"
    ZERO_ADDRESS = "Address cannot be zero"
    CAP_EXCEEDED = "Cap exceeded"
    NEGATIVE_AMOUNT = "Amount cannot be negative"
    PAUSED = "Token is paused"
    NOT_PAUSED = "Token is not paused"
    INSUFFICIENT_BALANCE = "Insufficient balance"
    INSUFFICIENT_ALLOWANCE = "Insufficient allowance"
    ALLOWANCE_BELOW_ZERO = "Decreased allowance below zero"
    ALREADY_MANAGER = "Account is already a manager"
    NOT_A_MANAGER = "Account is not a manager"
    LAST_MANAGER = "The last manager cannot be removed"
    ALREADY_MINTER = "Account is already a minter"
    ROLES_ALREADY_SET = "Roles are already set up"
    RENOUNCE_OWNERSHIP = "Ownership cannot be renounced"


class Unauthorized(AccessDenied):
    """Raised when the caller lacks the owner, manager or minter role."""


class InvalidAddress(InvalidArgument):
    """Raised when a zero address is given."""


class InvalidAmount(InvalidArgument):
    """Raised when a negative amount is given."""


class TokenPaused(StateViolation):
    """Raised when moving tokens or allowances while paused."""


class CapExceeded(StateViolation):
    """Raised when a mint would take the total supply over the cap."""


class InsufficientTokens(InsufficientBalance):
    """Raised when a balance or allowance does not cover the amount."""


def _check_amount(amount: int) -> None:
    if amount < 0:
        raise InvalidAmount(TokenErrors.NEGATIVE_AMOUNT)


class TokenInfo(NamedTuple):
    """General token information."""

    name: str
    symbol: str
    decimals: int
    cap: int
    total_supply: int
    paused: bool
    owner: str
    num_managers: int


@export
class IvoToken(Blueprint):
    """Capped, mintable, burnable and pausable token with balance snapshots.

    Every change of a balance or of the total supply is recorded in a
    snapshot ledger keyed by block height, so `balance_of_at` and
    `total_supply_at` answer for any past block. The token starts paused;
    minting is allowed while paused so the crowdsale can sell before
    transfers are opened.
    """

    # Metadata
    token_name: str
    token_symbol: str
    token_decimals: int
    supply_cap: Amount

    # Ledger
    supply: Amount  # Current total supply
    balances: dict[CallerId, Amount]
    allowances: dict[tuple[CallerId, CallerId], Amount]  # (owner, spender) -> amount
    snapshots: SnapshotLedger  # Balance history per account and for the total supply

    # State
    is_paused: bool
    roles_configured: bool  # Whether role_setup already ran

    # Access control
    owner: CallerId
    managers: set[CallerId]  # May pause and unpause
    minters: set[CallerId]

    @public
    def initialize(self, ctx: Context, name: str, symbol: str, decimals: int, cap: Amount) -> None:
        """Create the token. The creator becomes owner, manager and minter."""
        if cap <= 0:
            raise InvalidArgument(TokenErrors.ZERO_CAP)

        self.token_name = name
        self.token_symbol = symbol
        self.token_decimals = decimals
        self.supply_cap = cap
        self.supply = Amount(0)
        self.snapshots = SnapshotLedger()
        self.is_paused = True
        self.roles_configured = False

        self.owner = ctx.caller_id
        self.managers.add(ctx.caller_id)
        self.minters.add(ctx.caller_id)

    # Supply

    @public
    def mint(self, ctx: Context, to: CallerId, amount: Amount) -> None:
        """Create `amount` tokens for `to`. Allowed while paused."""
        self._only_minter(ctx)
        self._mint(to, amount)

    @public
    def burn(self, ctx: Context, amount: Amount) -> None:
        """Destroy `amount` tokens of the caller."""
        _check_amount(amount)
        account = ctx.caller_id
        balance = self.balances.get(account, 0)
        if amount > balance:
            raise InsufficientTokens(TokenErrors.INSUFFICIENT_BALANCE)

        self.balances[account] = Amount(balance - amount)
        self.supply = Amount(self.supply - amount)
        self._update_account_snapshot(account)
        self._update_total_supply_snapshot()
        self.syscall.emit_event("Transfer", {"from": account, "to": NULL_ADDRESS, "value": amount})

    # Transfers and allowances

    @public
    def transfer(self, ctx: Context, to: CallerId, value: Amount) -> bool:
        self._when_not_paused()
        self._transfer(ctx.caller_id, to, value)
        return True

    @public
    def transfer_from(self, ctx: Context, sender: CallerId, to: CallerId, value: Amount) -> bool:
        """Move `value` tokens from `sender` to `to` using the caller's allowance."""
        self._when_not_paused()
        allowed = self.allowances.get((sender, ctx.caller_id), 0)
        if value > allowed:
            raise InsufficientTokens(TokenErrors.INSUFFICIENT_ALLOWANCE)
        self._transfer(sender, to, value)
        self._approve(sender, ctx.caller_id, Amount(allowed - value))
        return True

    @public
    def approve(self, ctx: Context, spender: CallerId, value: Amount) -> bool:
        self._when_not_paused()
        self._approve(ctx.caller_id, spender, value)
        return True

    @public
    def increase_allowance(self, ctx: Context, spender: CallerId, added_value: Amount) -> bool:
        self._when_not_paused()
        _check_amount(added_value)
        current = self.allowances.get((ctx.caller_id, spender), 0)
        self._approve(ctx.caller_id, spender, Amount(current + added_value))
        return True

    @public
    def decrease_allowance(self, ctx: Context, spender: CallerId, subtracted_value: Amount) -> bool:
        self._when_not_paused()
        _check_amount(subtracted_value)
        current = self.allowances.get((ctx.caller_id, spender), 0)
        if subtracted_value > current:
            raise InsufficientTokens(TokenErrors.ALLOWANCE_BELOW_ZERO)
        self._approve(ctx.caller_id, spender, Amount(current - subtracted_value))
        return True

    # Pause

    @public
    def pause(self, ctx: Context) -> None:
        self._only_manager(ctx)
        if self.is_paused:
            raise TokenPaused(TokenErrors.PAUSED)
        self.is_paused = True
        self.syscall.emit_event("Paused", {"account": ctx.caller_id})

    @public
    def unpause(self, ctx: Context) -> None:
        self._only_manager(ctx)
        if not self.is_paused:
            raise StateViolation(TokenErrors.NOT_PAUSED)
        self.is_paused = False
        self.syscall.emit_event("Unpaused", {"account": ctx.caller_id})

    # Roles

    @public
    def add_manager(self, ctx: Context, account: CallerId) -> None:
        self._only_owner_or_manager(ctx)
        self._add_manager(account)

    @public
    def remove_manager(self, ctx: Context, account: CallerId) -> None:
        self._only_owner(ctx)
        if account not in self.managers:
            raise InvalidArgument(TokenErrors.NOT_A_MANAGER)
        self._remove_manager(account)

    @public
    def renounce_manager(self, ctx: Context) -> None:
        self._only_manager(ctx)
        self._remove_manager(ctx.caller_id)

    @public
    def add_minter(self, ctx: Context, account: CallerId) -> None:
        self._only_minter(ctx)
        self._add_minter(account)

    @public
    def renounce_minter(self, ctx: Context) -> None:
        self._only_minter(ctx)
        self._remove_minter(ctx.caller_id)

    @public
    def transfer_ownership(self, ctx: Context, new_owner: CallerId) -> None:
        self._only_owner(ctx)
        self._transfer_ownership(new_owner)

    @public
    def renounce_ownership(self, ctx: Context) -> None:
        """Ownership is never left empty."""
        raise StateViolation(TokenErrors.RENOUNCE_OWNERSHIP)

    @public
    def role_setup(
        self,
        ctx: Context,
        new_owner: CallerId,
        crowdsale: ContractId,
        saft_vault: ContractId,
        private_vault: ContractId,
        presale_vault: ContractId,
        advisors_vesting: ContractId,
        team_vesting: ContractId,
        reserve_vault: ContractId,
    ) -> None:
        """Mint the fixed allocations and hand the token over to the sale.

        Can only run once. The creator loses its minter and manager roles,
        the crowdsale becomes minter and manager, and `new_owner` becomes
        manager and owner.
        """
        self._only_owner(ctx)
        if self.roles_configured:
            raise StateViolation(TokenErrors.ROLES_ALREADY_SET)
        addresses = (new_owner, crowdsale, saft_vault, private_vault, presale_vault,
                     advisors_vesting, team_vesting, reserve_vault)
        if any(is_null(address) for address in addresses):
            raise InvalidAddress(TokenErrors.ZERO_ADDRESS)
        self.roles_configured = True

        self._mint(saft_vault, Amount(settings.SAFT_VAULT_ALLOCATION))
        self._mint(reserve_vault, Amount(settings.RESERVE_VAULT_ALLOCATION))
        self._mint(advisors_vesting, Amount(settings.ADVISORS_VESTING_ALLOCATION))
        self._mint(team_vesting, Amount(settings.TEAM_VESTING_ALLOCATION))

        self._add_minter(crowdsale)
        self._add_manager(new_owner)
        self._add_manager(crowdsale)

        creator = ctx.caller_id
        if creator in self.minters:
            self._remove_minter(creator)
        if creator in self.managers:
            self._remove_manager(creator)
        self._transfer_ownership(new_owner)

    @public
    def reclaim_token(self, ctx: Context, token: ContractId) -> None:
        """Send the owner every unit of `token` held by this contract.

        `token` may be this token itself.
        """
        self._only_owner(ctx)
        this_id = self.syscall.get_contract_id()
        if token == this_id:
            self._when_not_paused()
            self._transfer(this_id, self.owner, Amount(self.balances.get(this_id, 0)))
            return
        other = self.syscall.get_contract(token, blueprint_id=None)
        amount = other.view().balance_of(this_id)
        other.public().transfer(self.owner, amount)

    # Views

    @view
    def name(self) -> str:
        return self.token_name

    @view
    def symbol(self) -> str:
        return self.token_symbol

    @view
    def decimals(self) -> int:
        return self.token_decimals

    @view
    def cap(self) -> Amount:
        return self.supply_cap

    @view
    def total_supply(self) -> Amount:
        return self.supply

    @view
    def balance_of(self, account: CallerId) -> Amount:
        return Amount(self.balances.get(account, 0))

    @view
    def allowance(self, owner: CallerId, spender: CallerId) -> Amount:
        return Amount(self.allowances.get((owner, spender), 0))

    @view
    def balance_of_at(self, account: CallerId, block_height: int) -> Amount:
        """Balance of `account` at the end of block `block_height`."""
        return Amount(self.snapshots.value_at(account, block_height, self._current_height()))

    @view
    def total_supply_at(self, block_height: int) -> Amount:
        """Total supply at the end of block `block_height`."""
        return Amount(self.snapshots.value_at(TOTAL_SUPPLY_SUBJECT, block_height, self._current_height()))

    @view
    def paused(self) -> bool:
        return self.is_paused

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
    def num_managers(self) -> int:
        return len(self.managers)

    @view
    def is_minter(self, account: CallerId) -> bool:
        return account in self.minters

    @view
    def get_token_info(self) -> TokenInfo:
        return TokenInfo(
            name=self.token_name,
            symbol=self.token_symbol,
            decimals=self.token_decimals,
            cap=self.supply_cap,
            total_supply=self.supply,
            paused=self.is_paused,
            owner=self.owner.hex(),
            num_managers=len(self.managers),
        )

    # Internal methods

    def _current_height(self) -> int:
        return self.syscall.get_current_block().height

    def _mint(self, to: CallerId, amount: Amount) -> None:
        _check_amount(amount)
        if is_null(to):
            raise InvalidAddress(TokenErrors.ZERO_ADDRESS)
        if self.supply + amount > self.supply_cap:
            raise CapExceeded(TokenErrors.CAP_EXCEEDED)

        self.supply = Amount(self.supply + amount)
        self.balances[to] = Amount(self.balances.get(to, 0) + amount)
        self._update_total_supply_snapshot()
        self._update_account_snapshot(to)
        self.syscall.emit_event("Transfer", {"from": NULL_ADDRESS, "to": to, "value": amount})

    def _transfer(self, sender: CallerId, to: CallerId, value: Amount) -> None:
        _check_amount(value)
        if is_null(to):
            raise InvalidAddress(TokenErrors.ZERO_ADDRESS)
        balance = self.balances.get(sender, 0)
        if value > balance:
            raise InsufficientTokens(TokenErrors.INSUFFICIENT_BALANCE)

        self.balances[sender] = Amount(balance - value)
        self.balances[to] = Amount(self.balances.get(to, 0) + value)
        # The sender is always written, even for a self transfer.
        self._update_account_snapshot(sender)
        self._update_account_snapshot(to)
        self.syscall.emit_event("Transfer", {"from": sender, "to": to, "value": value})

    def _approve(self, owner: CallerId, spender: CallerId, value: Amount) -> None:
        _check_amount(value)
        if is_null(spender):
            raise InvalidAddress(TokenErrors.ZERO_ADDRESS)
        self.allowances[(owner, spender)] = value
        self.syscall.emit_event("Approval", {"owner": owner, "spender": spender, "value": value})

    def _update_account_snapshot(self, account: CallerId) -> None:
        height = self._current_height()
        value = self.balances.get(account, 0)
        self.snapshots.write_snapshot(account, height, value)
        self.syscall.emit_event(
            "AccountSnapshotCreated", {"account": account, "block_number": height, "value": value}
        )

    def _update_total_supply_snapshot(self) -> None:
        height = self._current_height()
        self.snapshots.write_snapshot(TOTAL_SUPPLY_SUBJECT, height, self.supply)
        self.syscall.emit_event("TotalSupplySnapshotCreated", {"block_number": height, "value": self.supply})

    def _add_manager(self, account: CallerId) -> None:
        if is_null(account):
            raise InvalidAddress(TokenErrors.ZERO_ADDRESS)
        if account in self.managers:
            raise InvalidArgument(TokenErrors.ALREADY_MANAGER)
        self.managers.add(account)
        self.syscall.emit_event("ManagerAdded", {"account": account})

    def _remove_manager(self, account: CallerId) -> None:
        if len(self.managers) <= 1:
            raise StateViolation(TokenErrors.LAST_MANAGER)
        self.managers.discard(account)
        self.syscall.emit_event("ManagerRemoved", {"account": account})

    def _add_minter(self, account: CallerId) -> None:
        if is_null(account):
            raise InvalidAddress(TokenErrors.ZERO_ADDRESS)
        if account in self.minters:
            raise InvalidArgument(TokenErrors.ALREADY_MINTER)
        self.minters.add(account)
        self.syscall.emit_event("MinterAdded", {"account": account})

    def _remove_minter(self, account: CallerId) -> None:
        self.minters.discard(account)
        self.syscall.emit_event("MinterRemoved", {"account": account})

    def _transfer_ownership(self, new_owner: CallerId) -> None:
        if is_null(new_owner):
            raise InvalidAddress(TokenErrors.ZERO_ADDRESS)
        previous = self.owner
        self.owner = new_owner
        self.syscall.emit_event("OwnershipTransferred", {"previous_owner": previous, "new_owner": new_owner})

    def _when_not_paused(self) -> None:
        if self.is_paused:
            raise TokenPaused(TokenErrors.PAUSED)

    def _only_owner(self, ctx: Context) -> None:
        if ctx.caller_id != self.owner:
            raise Unauthorized(TokenErrors.NOT_OWNER)

    def _only_manager(self, ctx: Context) -> None:
        if ctx.caller_id not in self.managers:
            raise Unauthorized(TokenErrors.NOT_MANAGER)

    def _only_owner_or_manager(self, ctx: Context) -> None:
        if ctx.caller_id != self.owner and ctx.caller_id not in self.managers:
            raise Unauthorized(TokenErrors.NOT_OWNER_OR_MANAGER)

    def _only_minter(self, ctx: Context) -> None:
        if ctx.caller_id not in self.minters:
            raise Unauthorized(TokenErrors.NOT_MINTER)

