import logging
from typing import NamedTuple, Optional

from ivo import (
    AccessDenied,
    Amount,
    Blueprint,
    CallerId,
    Context,
    ContractId,
    InvalidArgument,
    NCDepositAction,
    NCWithdrawalAction,
    StateViolation,
    Timestamp,
    TokenUid,
    export,
    is_null,
    public,
    view,
)
from ivo.conf.get_settings import get_global_settings

logger = logging.getLogger(__name__)

settings = get_global_settings()

NATIVE_TOKEN_UID = TokenUid(settings.NATIVE_TOKEN_UID)
ROUNDS = settings.ROUNDS
HARD_CAP = settings.HARD_CAP
ROUND_DISCOUNT_BASE = settings.ROUND_DISCOUNT_BASE


class CrowdsaleSaleInfo(NamedTuple):
    """General sale information."""

    token: str
    wallet: str
    rate: int
    fiat_rate: int
    starting_time: int
    current_round: int
    current_round_cap: int
    minted_by_crowdsale: int
    wei_raised: int
    wei_withdrawn: int
    hard_cap: int
    paused: bool
    finalized: bool
    managers: int


class CrowdsaleErrors:
    """Common error messages"""

    NOT_OWNER = "Caller is not the owner"
    NOT_MANAGER = "Caller is not a manager"
    NOT_OWNER_OR_MANAGER = "Caller is neither the owner nor a manager"
    NOT_WALLET = "Caller is not the wallet"
    ZERO_ADDRESS = "Address cannot be zero"
    ZERO_RATE = "Rate must be larger than zero"
    ZERO_AMOUNT = "Amount must be larger than zero"
    START_IN_PAST = "Starting time must be in the future"
    NOT_STARTED = "Crowdsale has not started"
    PAUSED = "Crowdsale is paused"
    NOT_PAUSED = "Crowdsale is not paused"
    NOT_MINTER = "Crowdsale is not a minter of the token"
    NOT_WHITELISTED = "Beneficiary is not whitelisted"
    ALREADY_WHITELISTED = "Account is already whitelisted"
    HARD_CAP_REACHED = "Hard cap reached"
    HARD_CAP_EXCEEDED = "Purchase exceeds the hard cap"
    HARD_CAP_NOT_REACHED = "Hard cap not reached"
    LAST_ROUND = "Current round is the last one"
    ALREADY_FINALIZED = "Crowdsale already finalized"
    ROLES_NOT_SET = "Roles are not set up"
    ROLES_ALREADY_SET = "Roles are already set up"
    ALREADY_MANAGER = "Account is already a manager"
    NOT_A_MANAGER = "Account is not a manager"
    LAST_MANAGER = "The last manager cannot be removed"
    LENGTH_MISMATCH = "Lists must have the same length"
    BATCH_TOO_LONG = "Too many entries in a batch"
    INVALID_ROUND = "Invalid round"
    PAYMENT_TOO_SMALL = "Payment buys no token"
    RENOUNCE_OWNERSHIP = "Ownership cannot be renounced"
    EXPECTED_DEPOSIT = "Expected deposit action"
    EXPECTED_WITHDRAWAL = "Expected withdrawal action"


class Unauthorized(AccessDenied):
    pass


class InvalidInput(InvalidArgument):
    pass


class SaleNotActive(StateViolation):
    pass


class HardCapExceeded(StateViolation):
    pass


@export
class IvoCrowdsale(Blueprint):
    """Multi-round token sale with discounted early rounds.

    Rounds have a cumulative cap and a price percentage. Tokens sold in the
    first rounds are minted into the private and presale vaults and credited
    to the buyer there; tokens sold in the last round are minted to the buyer.
    A purchase that crosses a round cap is split, each portion at the price of
    its own round. When a round ends the vault it fed starts its lock period.

    Purchases are made by managers on behalf of whitelisted beneficiaries,
    either paying native tokens (`buy_tokens`) or attesting an off-chain
    payment (`non_eth_purchase`).
    """

    # Sale configuration
    token_id: ContractId  # Token being sold
    wallet_address: CallerId  # Receives the raised native tokens
    start_time: Timestamp
    sale_rate: int  # Tokens per native token unit, before discounts
    sale_fiat_rate: int  # Fiat cents per native token
    initial_rate: int  # Fixes the conversion between fiat rate and rate
    initial_fiat_rate: int

    # Round table
    round_caps: list[Amount]  # Cumulative cap per round
    round_discounts: list[int]  # Price percentage per round, over ROUND_DISCOUNT_BASE
    round_index: int  # ROUNDS once the hard cap is reached

    # Sale state
    minted: Amount  # Tokens sold
    raised: Amount  # Native tokens received
    withdrawn: Amount  # Native tokens sent to the wallet
    is_paused: bool
    is_finalized: bool

    # Vaults, set by role_setup
    private_vault: Optional[ContractId]
    presale_vault: Optional[ContractId]
    reserve_vault: Optional[ContractId]
    roles_configured: bool

    # Access control
    owner: CallerId
    managers: set[CallerId]
    whitelist: set[CallerId]

    @public
    def initialize(
        self,
        ctx: Context,
        starting_time: Timestamp,
        rate: int,
        fiat_rate: int,
        wallet: CallerId,
        token: ContractId,
    ) -> None:
        """Initialize the sale. The creator becomes owner and manager."""
        if rate <= 0 or fiat_rate <= 0:
            raise InvalidInput(CrowdsaleErrors.ZERO_RATE)
        if starting_time <= ctx.timestamp:
            raise InvalidInput(CrowdsaleErrors.START_IN_PAST)
        if is_null(wallet) or is_null(token):
            raise InvalidInput(CrowdsaleErrors.ZERO_ADDRESS)

        self.token_id = token
        self.wallet_address = wallet
        self.start_time = starting_time
        self.sale_rate = rate
        self.sale_fiat_rate = fiat_rate
        self.initial_rate = rate
        self.initial_fiat_rate = fiat_rate

        self.round_caps = [Amount(cap) for cap in settings.ROUND_CAPS]
        self.round_discounts = list(settings.ROUND_DISCOUNTS)
        self.round_index = 0

        self.minted = Amount(0)
        self.raised = Amount(0)
        self.withdrawn = Amount(0)
        self.is_paused = False
        self.is_finalized = False

        self.private_vault = None
        self.presale_vault = None
        self.reserve_vault = None
        self.roles_configured = False

        self.owner = ctx.caller_id
        self.managers.add(ctx.caller_id)

    @public
    def role_setup(
        self,
        ctx: Context,
        new_owner: CallerId,
        private_vault: ContractId,
        presale_vault: ContractId,
        reserve_vault: ContractId,
    ) -> None:
        """Set the vaults and hand the sale over to `new_owner`. Runs once."""
        self._only_owner(ctx)
        if self.roles_configured:
            raise StateViolation(CrowdsaleErrors.ROLES_ALREADY_SET)
        if any(is_null(address) for address in (new_owner, private_vault, presale_vault, reserve_vault)):
            raise InvalidInput(CrowdsaleErrors.ZERO_ADDRESS)

        self.private_vault = private_vault
        self.presale_vault = presale_vault
        self.reserve_vault = reserve_vault
        self.roles_configured = True

        if new_owner not in self.managers:
            self._add_manager(new_owner)
        creator = ctx.caller_id
        if creator != new_owner and creator in self.managers:
            self._remove_manager(creator)
        self._transfer_ownership(new_owner)

    # Purchases

    @public(allow_deposit=True)
    def buy_tokens(self, ctx: Context, beneficiary: CallerId) -> Amount:
        """Buy tokens for `beneficiary` with the deposited native tokens.

        A share of the payment covers KYC/AML costs; the rest is converted at
        the current rate and round prices.
        """
        self._only_manager(ctx)
        self._pre_validate_purchase(ctx, beneficiary)
        action = ctx.get_single_action(NATIVE_TOKEN_UID)
        if not isinstance(action, NCDepositAction):
            raise InvalidInput(CrowdsaleErrors.EXPECTED_DEPOSIT)

        value = action.amount
        available = value * settings.KYC_AML_RATE_DEDUCTED // settings.KYC_AML_FEE_BASE
        amount = self._buy_with_wei(beneficiary, available)
        self.raised = Amount(self.raised + value)

        self.syscall.emit_event(
            "TokensPurchased",
            {"purchaser": ctx.caller_id, "beneficiary": beneficiary, "value": value, "amount": amount},
        )
        return amount

    @public
    def non_eth_purchase(self, ctx: Context, beneficiary: CallerId, token_amount: Amount) -> None:
        """Credit `token_amount` tokens paid off-chain to `beneficiary`."""
        self._only_manager(ctx)
        self._non_eth_purchase(ctx, beneficiary, token_amount)

    @public
    def non_eth_purchases(self, ctx: Context, beneficiaries: list[CallerId], amounts: list[Amount]) -> None:
        self._only_manager(ctx)
        if len(beneficiaries) != len(amounts):
            raise InvalidInput(CrowdsaleErrors.LENGTH_MISMATCH)
        self._check_batch(beneficiaries)
        for beneficiary, amount in zip(beneficiaries, amounts):
            self._non_eth_purchase(ctx, beneficiary, amount)

    # Sale management

    @public
    def close_current_round(self, ctx: Context) -> None:
        """End the current round early at what was sold so far."""
        self._only_manager(ctx)
        if not self._is_started(ctx.timestamp):
            raise SaleNotActive(CrowdsaleErrors.NOT_STARTED)
        if self._hard_cap_reached():
            raise SaleNotActive(CrowdsaleErrors.HARD_CAP_REACHED)
        if self.round_index >= ROUNDS - 1:
            raise StateViolation(CrowdsaleErrors.LAST_ROUND)

        self.round_caps[self.round_index] = self.minted
        self._advance_round()

    @public
    def update_rate(self, ctx: Context, fiat_rate: int) -> None:
        """Set a new fiat rate and derive the rate from it."""
        self._only_manager(ctx)
        if fiat_rate <= 0:
            raise InvalidInput(CrowdsaleErrors.ZERO_RATE)
        rate = fiat_rate * self.initial_rate // self.initial_fiat_rate
        if rate <= 0:
            raise InvalidInput(CrowdsaleErrors.ZERO_RATE)
        self.sale_fiat_rate = fiat_rate
        self.sale_rate = rate
        self.syscall.emit_event("UpdatedFiatRate", {"value": fiat_rate})
        logger.debug("fiat rate set to %d, rate is now %d", fiat_rate, rate)

    @public
    def finalize(self, ctx: Context) -> None:
        """Close the sale once the hard cap is reached. The token is not touched."""
        self._only_manager(ctx)
        if self.is_finalized:
            raise StateViolation(CrowdsaleErrors.ALREADY_FINALIZED)
        if not self._hard_cap_reached():
            raise StateViolation(CrowdsaleErrors.HARD_CAP_NOT_REACHED)
        self.is_finalized = True
        self.syscall.emit_event("Finalized", {"account": ctx.caller_id})

    @public(allow_withdrawal=True)
    def withdraw_funds(self, ctx: Context) -> None:
        """Send raised native tokens to the wallet."""
        if ctx.caller_id != self.wallet_address:
            raise Unauthorized(CrowdsaleErrors.NOT_WALLET)
        action = ctx.get_single_action(NATIVE_TOKEN_UID)
        if not isinstance(action, NCWithdrawalAction):
            raise InvalidInput(CrowdsaleErrors.EXPECTED_WITHDRAWAL)
        self.withdrawn = Amount(self.withdrawn + action.amount)
        self.syscall.emit_event("FundsWithdrawn", {"wallet": ctx.caller_id, "value": action.amount})

    @public
    def pause(self, ctx: Context) -> None:
        self._only_manager(ctx)
        if self.is_paused:
            raise SaleNotActive(CrowdsaleErrors.PAUSED)
        self.is_paused = True
        self.syscall.emit_event("BePaused", {"manager": ctx.caller_id})

    @public
    def unpause(self, ctx: Context) -> None:
        """Resume the sale. The crowdsale must be able to mint."""
        self._only_manager(ctx)
        if not self.is_paused:
            raise StateViolation(CrowdsaleErrors.NOT_PAUSED)
        if not self._token().view().is_minter(self.syscall.get_contract_id()):
            raise StateViolation(CrowdsaleErrors.NOT_MINTER)
        self.is_paused = False
        self.syscall.emit_event("BeUnpaused", {"manager": ctx.caller_id})

    # Whitelist

    @public
    def add_whitelisted(self, ctx: Context, account: CallerId) -> None:
        self._only_manager(ctx)
        self._add_whitelisted(account)

    @public
    def add_whitelisteds(self, ctx: Context, accounts: list[CallerId]) -> None:
        self._only_manager(ctx)
        self._check_batch(accounts)
        for account in accounts:
            self._add_whitelisted(account)

    @public
    def remove_whitelisted(self, ctx: Context, account: CallerId) -> None:
        self._only_manager(ctx)
        self._remove_whitelisted(account)

    @public
    def remove_whitelisteds(self, ctx: Context, accounts: list[CallerId]) -> None:
        self._only_manager(ctx)
        self._check_batch(accounts)
        for account in accounts:
            self._remove_whitelisted(account)

    # Roles

    @public
    def add_manager(self, ctx: Context, account: CallerId) -> None:
        self._only_owner_or_manager(ctx)
        self._add_manager(account)

    @public
    def add_managers(self, ctx: Context, accounts: list[CallerId]) -> None:
        self._only_owner_or_manager(ctx)
        self._check_batch(accounts)
        for account in accounts:
            self._add_manager(account)

    @public
    def remove_manager(self, ctx: Context, account: CallerId) -> None:
        self._only_owner(ctx)
        if is_null(account):
            raise InvalidInput(CrowdsaleErrors.ZERO_ADDRESS)
        if account not in self.managers:
            raise InvalidInput(CrowdsaleErrors.NOT_A_MANAGER)
        self._remove_manager(account)

    @public
    def renounce_manager(self, ctx: Context) -> None:
        self._only_manager(ctx)
        self._remove_manager(ctx.caller_id)

    @public
    def transfer_ownership(self, ctx: Context, new_owner: CallerId) -> None:
        self._only_owner(ctx)
        self._transfer_ownership(new_owner)

    @public
    def renounce_ownership(self, ctx: Context) -> None:
        raise StateViolation(CrowdsaleErrors.RENOUNCE_OWNERSHIP)

    # Views

    @view
    def rounds(self) -> int:
        return ROUNDS

    @view
    def rate(self) -> int:
        return self.sale_rate

    @view
    def fiat_rate(self) -> int:
        return self.sale_fiat_rate

    @view
    def token(self) -> ContractId:
        return self.token_id

    @view
    def wallet(self) -> CallerId:
        return self.wallet_address

    @view
    def minted_by_crowdsale(self) -> Amount:
        return self.minted

    @view
    def wei_raised(self) -> Amount:
        return self.raised

    @view
    def current_round(self) -> int:
        return self.round_index

    @view
    def cap_of_round(self, round_number: int) -> Amount:
        self._validate_round(round_number)
        return self.round_caps[round_number]

    @view
    def price_percentage_per_round(self, round_number: int) -> int:
        self._validate_round(round_number)
        return self.round_discounts[round_number]

    @view
    def current_round_cap(self) -> Amount:
        """Cap of the current round; the hard cap once every round is over."""
        return self.round_caps[min(self.round_index, ROUNDS - 1)]

    @view
    def starting_time(self) -> Timestamp:
        return self.start_time

    @view
    def hard_cap(self) -> Amount:
        return Amount(HARD_CAP)

    @view
    def hard_cap_reached(self) -> bool:
        return self._hard_cap_reached()

    @view
    def current_round_cap_reached(self) -> bool:
        return self.minted >= self.current_round_cap()

    @view
    def paused(self) -> bool:
        return self.is_paused

    @view
    def is_started(self, timestamp: Timestamp) -> bool:
        return self._is_started(timestamp)

    @view
    def finalized(self) -> bool:
        return self.is_finalized

    @view
    def is_whitelisted(self, account: CallerId) -> bool:
        return account in self.whitelist

    @view
    def is_manager(self, account: CallerId) -> bool:
        return account in self.managers

    @view
    def num_managers(self) -> int:
        return len(self.managers)

    @view
    def get_owner(self) -> CallerId:
        return self.owner

    @view
    def is_owner(self, account: CallerId) -> bool:
        return account == self.owner

    @view
    def get_sale_info(self) -> CrowdsaleSaleInfo:
        return CrowdsaleSaleInfo(
            token=self.token_id.hex(),
            wallet=self.wallet_address.hex(),
            rate=self.sale_rate,
            fiat_rate=self.sale_fiat_rate,
            starting_time=self.start_time,
            current_round=self.round_index,
            current_round_cap=self.current_round_cap(),
            minted_by_crowdsale=self.minted,
            wei_raised=self.raised,
            wei_withdrawn=self.withdrawn,
            hard_cap=HARD_CAP,
            paused=self.is_paused,
            finalized=self.is_finalized,
            managers=len(self.managers),
        )

    # Internal methods

    def _token(self):
        return self.syscall.get_contract(self.token_id, blueprint_id=None)

    def _is_started(self, timestamp: Timestamp) -> bool:
        return timestamp >= self.start_time

    def _hard_cap_reached(self) -> bool:
        return self.minted >= HARD_CAP

    def _pre_validate_purchase(self, ctx: Context, beneficiary: CallerId) -> None:
        if not self.roles_configured:
            raise SaleNotActive(CrowdsaleErrors.ROLES_NOT_SET)
        if not self._is_started(ctx.timestamp):
            raise SaleNotActive(CrowdsaleErrors.NOT_STARTED)
        if self.is_paused:
            raise SaleNotActive(CrowdsaleErrors.PAUSED)
        if self.is_finalized:
            raise SaleNotActive(CrowdsaleErrors.ALREADY_FINALIZED)
        if beneficiary not in self.whitelist:
            raise Unauthorized(CrowdsaleErrors.NOT_WHITELISTED)
        if self._hard_cap_reached():
            raise SaleNotActive(CrowdsaleErrors.HARD_CAP_REACHED)

    def _non_eth_purchase(self, ctx: Context, beneficiary: CallerId, token_amount: Amount) -> None:
        self._pre_validate_purchase(ctx, beneficiary)
        if token_amount <= 0:
            raise InvalidInput(CrowdsaleErrors.ZERO_AMOUNT)
        if self.minted + token_amount > HARD_CAP:
            raise HardCapExceeded(CrowdsaleErrors.HARD_CAP_EXCEEDED)

        remaining = token_amount
        while remaining > 0:
            room = self.round_caps[self.round_index] - self.minted
            portion = min(room, remaining)
            self._deliver(beneficiary, Amount(portion))
            remaining -= portion

        self.syscall.emit_event("NonEthTokenPurchased", {"beneficiary": beneficiary, "token_amount": token_amount})

    def _buy_with_wei(self, beneficiary: CallerId, available_wei: int) -> Amount:
        """Convert `available_wei` into tokens round by round.

        When the tokens bought at the current price reach the room left in the
        round, only that room is taken, it is paid the rounded up share of the
        payment and the rest is spent at the next round's price.
        """
        remaining_wei = available_wei
        total = 0
        while remaining_wei > 0:
            if self.round_index >= ROUNDS:
                raise HardCapExceeded(CrowdsaleErrors.HARD_CAP_EXCEEDED)
            discount = self.round_discounts[self.round_index]
            price_factor = self.sale_rate * ROUND_DISCOUNT_BASE
            tokens = remaining_wei * price_factor // discount
            room = self.round_caps[self.round_index] - self.minted
            if tokens < room:
                if tokens > 0:
                    self._deliver(beneficiary, Amount(tokens))
                    total += tokens
                break
            if self.round_index == ROUNDS - 1 and tokens > room:
                raise HardCapExceeded(CrowdsaleErrors.HARD_CAP_EXCEEDED)
            wei_for_portion = -(-room * discount // price_factor)
            if room > 0:
                self._deliver(beneficiary, Amount(room))
                total += room
            remaining_wei -= wei_for_portion

        if total == 0:
            raise InvalidInput(CrowdsaleErrors.PAYMENT_TOO_SMALL)
        return Amount(total)

    def _deliver(self, beneficiary: CallerId, amount: Amount) -> None:
        """Mint `amount` for `beneficiary` in the current round."""
        vault = self._vault_of_round(self.round_index)
        token = self._token()
        if vault is None:
            token.public().mint(beneficiary, amount)
        else:
            token.public().mint(vault, amount)
            self.syscall.get_contract(vault, blueprint_id=None).public().receive_for(beneficiary, amount)

        self.minted = Amount(self.minted + amount)
        if self.minted >= self.round_caps[self.round_index]:
            self._advance_round()

    def _advance_round(self) -> None:
        finished = self.round_index
        vault = self._vault_of_round(finished)
        if vault is not None:
            self.syscall.get_contract(vault, blueprint_id=None).public().update_release_time()

        self.round_index = finished + 1
        logger.debug("round %d closed at %d tokens", finished, self.minted)
        if self.round_index < ROUNDS:
            self.syscall.emit_event("RoundStarted", {"round_number": self.round_index})
        if self._hard_cap_reached() and self.reserve_vault is not None:
            self.syscall.get_contract(self.reserve_vault, blueprint_id=None).public().update_release_time()

    def _vault_of_round(self, round_number: int) -> Optional[ContractId]:
        if round_number == 0:
            return self.private_vault
        if round_number == 1:
            return self.presale_vault
        return None

    def _validate_round(self, round_number: int) -> None:
        if not 0 <= round_number < ROUNDS:
            raise InvalidInput(CrowdsaleErrors.INVALID_ROUND)

    def _check_batch(self, items: list) -> None:
        if len(items) >= settings.BATCH_LIMIT:
            raise InvalidInput(CrowdsaleErrors.BATCH_TOO_LONG)

    def _add_whitelisted(self, account: CallerId) -> None:
        if is_null(account):
            raise InvalidInput(CrowdsaleErrors.ZERO_ADDRESS)
        if account in self.whitelist:
            raise InvalidInput(CrowdsaleErrors.ALREADY_WHITELISTED)
        self.whitelist.add(account)
        self.syscall.emit_event("AddedWhitelisted", {"account": account})

    def _remove_whitelisted(self, account: CallerId) -> None:
        if is_null(account):
            raise InvalidInput(CrowdsaleErrors.ZERO_ADDRESS)
        if account not in self.whitelist:
            raise InvalidInput(CrowdsaleErrors.NOT_WHITELISTED)
        self.whitelist.remove(account)
        self.syscall.emit_event("RemovedWhitelisted", {"account": account})

    def _add_manager(self, account: CallerId) -> None:
        if is_null(account):
            raise InvalidInput(CrowdsaleErrors.ZERO_ADDRESS)
        if account in self.managers:
            raise InvalidInput(CrowdsaleErrors.ALREADY_MANAGER)
        self.managers.add(account)
        self.syscall.emit_event("ManagerAdded", {"account": account})

    def _remove_manager(self, account: CallerId) -> None:
        if len(self.managers) <= 1:
            raise StateViolation(CrowdsaleErrors.LAST_MANAGER)
        self.managers.discard(account)
        self.syscall.emit_event("ManagerRemoved", {"account": account})

    def _transfer_ownership(self, new_owner: CallerId) -> None:
        if is_null(new_owner):
            raise InvalidInput(CrowdsaleErrors.ZERO_ADDRESS)
        previous = self.owner
        self.owner = new_owner
        self.syscall.emit_event("OwnershipTransferred", {"previous_owner": previous, "new_owner": new_owner})

    def _only_owner(self, ctx: Context) -> None:
        if ctx.caller_id != self.owner:
            raise Unauthorized(CrowdsaleErrors.NOT_OWNER)

    def _only_manager(self, ctx: Context) -> None:
        if ctx.caller_id not in self.managers:
            raise Unauthorized(CrowdsaleErrors.NOT_MANAGER)

    def _only_owner_or_manager(self, ctx: Context) -> None:
        if ctx.caller_id != self.owner and ctx.caller_id not in self.managers:
            raise Unauthorized(CrowdsaleErrors.NOT_OWNER_OR_MANAGER)
