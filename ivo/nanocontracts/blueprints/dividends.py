from typing import NamedTuple

from ivo import (
    AccessDenied,
    Amount,
    Blueprint,
    CallerId,
    Context,
    ContractId,
    InvalidArgument,
    StateViolation,
    Timestamp,
    export,
    is_null,
    public,
    view,
)


class DividendInfo(NamedTuple):
    """Information about a dividend."""

    payout_token: ContractId
    record_date: int  # Block height of the balances used for claims
    claim_period_end: int
    amount: int
    claimed_amount: int
    total_supply: int
    recycled: bool


class DividendErrors:
    NOT_OWNER = "Caller is not the owner"
    ZERO_ADDRESS = "Address cannot be zero"
    ZERO_AMOUNT = "Amount must be larger than zero"
    INVALID_INDEX = "Invalid dividend index"
    CLAIM_PERIOD_OVER = "Claim period is over"
    CLAIM_PERIOD_OPEN = "Claim period is still open"
    RECYCLED = "Dividend was recycled"
    ALREADY_CLAIMED = "Dividend already claimed"
    RECORD_NOT_FINAL = "Claims open after the record block"
    RENOUNCE_OWNERSHIP = "Ownership cannot be renounced"


class Unauthorized(AccessDenied):
    pass


class InvalidDividend(InvalidArgument):
    pass


class ClaimRejected(StateViolation):
    pass


@export
class IvoDividends(Blueprint):
    """Distributes payouts to token holders pro rata to their balance at a block.

    Each deposit records the current block height. A holder's share of a
    deposit is `amount * balance_of_at(holder, record) // total_supply_at(record)`,
    so transfers made after the deposit block do not change entitlements.
    Transfers made in the deposit block itself are part of the record, so
    claims only open in a later block.
    """

    token_id: ContractId  # Token whose holders are paid
    owner: CallerId

    dividends_created: int

    # Dividend data, keyed by index
    dividend_payout_tokens: dict[int, ContractId]
    dividend_record_dates: dict[int, int]
    dividend_claim_period_ends: dict[int, Timestamp]
    dividend_amounts: dict[int, Amount]
    dividend_claimed_amounts: dict[int, Amount]
    dividend_total_supplies: dict[int, Amount]
    dividend_recycled: dict[int, bool]

    claimed: dict[tuple[int, CallerId], bool]

    @public
    def initialize(self, ctx: Context, token: ContractId, owner: CallerId) -> None:
        if is_null(token) or is_null(owner):
            raise InvalidDividend(DividendErrors.ZERO_ADDRESS)
        self.token_id = token
        self.owner = owner
        self.dividends_created = 0

    @public
    def deposit_dividend(self, ctx: Context, payout_token: ContractId, claim_period: int, amount: Amount) -> int:
        """Pull `amount` of `payout_token` from the owner and open a dividend.

        The owner must have approved this contract beforehand. `claim_period`
        is in seconds.
        """
        self._only_owner(ctx)
        if is_null(payout_token):
            raise InvalidDividend(DividendErrors.ZERO_ADDRESS)
        if amount <= 0:
            raise InvalidDividend(DividendErrors.ZERO_AMOUNT)
        if claim_period < 0:
            raise InvalidDividend("Claim period cannot be negative")

        self_id = self.syscall.get_contract_id()
        self._contract(payout_token).public().transfer_from(ctx.caller_id, self_id, amount)

        record_date = self.syscall.get_current_block().height
        total_supply = self._token().view().total_supply_at(record_date)

        index = self.dividends_created
        self.dividend_payout_tokens[index] = payout_token
        self.dividend_record_dates[index] = record_date
        self.dividend_claim_period_ends[index] = Timestamp(ctx.timestamp + claim_period)
        self.dividend_amounts[index] = amount
        self.dividend_claimed_amounts[index] = Amount(0)
        self.dividend_total_supplies[index] = total_supply
        self.dividend_recycled[index] = False
        self.dividends_created = index + 1

        self.syscall.emit_event(
            "DividendDeposited",
            {
                "dividend_index": index,
                "payout_token": payout_token,
                "payout_amount": amount,
                "claim_period": claim_period,
                "record_date": record_date,
            },
        )
        return index

    @public
    def claim_dividend(self, ctx: Context, dividend_index: int) -> Amount:
        """Claim the caller's share of a dividend.

        Claims open in the block after the deposit, once the record balances
        can no longer change. An account without balance at the record date
        claims zero; that succeeds every time and does not count as a claim.
        """
        self._validate_index(dividend_index)
        if self.dividend_recycled[dividend_index]:
            raise ClaimRejected(DividendErrors.RECYCLED)
        if not self._record_is_final(dividend_index):
            raise ClaimRejected(DividendErrors.RECORD_NOT_FINAL)
        if ctx.timestamp >= self.dividend_claim_period_ends[dividend_index]:
            raise ClaimRejected(DividendErrors.CLAIM_PERIOD_OVER)
        if self.claimed.get((dividend_index, ctx.caller_id), False):
            raise ClaimRejected(DividendErrors.ALREADY_CLAIMED)
        return self._claim(dividend_index, ctx.caller_id)

    @public
    def claim_all_dividends(self, ctx: Context, start_index: int) -> Amount:
        """Claim every open dividend from `start_index` not yet claimed by the caller.

        Dividends deposited in the current block are skipped.
        """
        self._validate_index(start_index)
        total = 0
        for index in range(start_index, self.dividends_created):
            if self.dividend_recycled[index]:
                continue
            if not self._record_is_final(index):
                continue
            if ctx.timestamp >= self.dividend_claim_period_ends[index]:
                continue
            if self.claimed.get((index, ctx.caller_id), False):
                continue
            total += self._claim(index, ctx.caller_id)
        return Amount(total)

    @public
    def recycle_dividend(self, ctx: Context, dividend_index: int) -> Amount:
        """Send the unclaimed remainder of an expired dividend back to the owner."""
        self._only_owner(ctx)
        self._validate_index(dividend_index)
        if ctx.timestamp < self.dividend_claim_period_ends[dividend_index]:
            raise ClaimRejected(DividendErrors.CLAIM_PERIOD_OPEN)
        if self.dividend_recycled[dividend_index]:
            raise ClaimRejected(DividendErrors.RECYCLED)

        remainder = self._unclaimed(dividend_index)
        self.dividend_recycled[dividend_index] = True
        self.dividend_claimed_amounts[dividend_index] = self.dividend_amounts[dividend_index]
        if remainder > 0:
            payout_token = self.dividend_payout_tokens[dividend_index]
            self._contract(payout_token).public().transfer(self.owner, remainder)

        self.syscall.emit_event(
            "DividendRecycled", {"dividend_index": dividend_index, "recycled_amount": remainder}
        )
        return remainder

    @public
    def reclaim_token(self, ctx: Context, token: ContractId) -> Amount:
        """Send the owner what is held in `token` beyond what open dividends owe."""
        self._only_owner(ctx)
        contract = self._contract(token)
        balance = contract.view().balance_of(self.syscall.get_contract_id())
        owed = sum(
            self._unclaimed(index)
            for index in range(self.dividends_created)
            if self.dividend_payout_tokens[index] == token and not self.dividend_recycled[index]
        )
        amount = balance - owed
        if amount > 0:
            contract.public().transfer(self.owner, amount)
            return Amount(amount)
        return Amount(0)

    @public
    def transfer_ownership(self, ctx: Context, new_owner: CallerId) -> None:
        self._only_owner(ctx)
        if is_null(new_owner):
            raise InvalidDividend(DividendErrors.ZERO_ADDRESS)
        previous = self.owner
        self.owner = new_owner
        self.syscall.emit_event("OwnershipTransferred", {"previous_owner": previous, "new_owner": new_owner})

    @public
    def renounce_ownership(self, ctx: Context) -> None:
        raise StateViolation(DividendErrors.RENOUNCE_OWNERSHIP)

    @view
    def token(self) -> ContractId:
        return self.token_id

    @view
    def get_owner(self) -> CallerId:
        return self.owner

    @view
    def dividend_count(self) -> int:
        return self.dividends_created

    @view
    def get_dividend(self, dividend_index: int) -> DividendInfo:
        self._validate_index(dividend_index)
        return DividendInfo(
            payout_token=self.dividend_payout_tokens[dividend_index],
            record_date=self.dividend_record_dates[dividend_index],
            claim_period_end=self.dividend_claim_period_ends[dividend_index],
            amount=self.dividend_amounts[dividend_index],
            claimed_amount=self.dividend_claimed_amounts[dividend_index],
            total_supply=self.dividend_total_supplies[dividend_index],
            recycled=self.dividend_recycled[dividend_index],
        )

    @view
    def has_claimed(self, dividend_index: int, account: CallerId) -> bool:
        return self.claimed.get((dividend_index, account), False)

    @view
    def claimable_amount(self, dividend_index: int, account: CallerId) -> Amount:
        """Share of `account` in the dividend, or 0 if it was claimed or recycled."""
        self._validate_index(dividend_index)
        if self.dividend_recycled[dividend_index] or self.claimed.get((dividend_index, account), False):
            return Amount(0)
        return self._entitlement(dividend_index, account)

    # Internal methods

    def _claim(self, dividend_index: int, account: CallerId) -> Amount:
        amount = self._entitlement(dividend_index, account)
        if amount > 0:
            self.claimed[(dividend_index, account)] = True
            self.dividend_claimed_amounts[dividend_index] = Amount(
                self.dividend_claimed_amounts[dividend_index] + amount
            )
            payout_token = self.dividend_payout_tokens[dividend_index]
            self._contract(payout_token).public().transfer(account, amount)
        self.syscall.emit_event(
            "DividendClaimed", {"dividend_index": dividend_index, "claimer": account, "claimed_amount": amount}
        )
        return amount

    def _entitlement(self, dividend_index: int, account: CallerId) -> Amount:
        record_date = self.dividend_record_dates[dividend_index]
        token = self._token().view()
        total_supply = token.total_supply_at(record_date)
        if total_supply == 0:
            return Amount(0)
        balance = token.balance_of_at(account, record_date)
        return Amount(self.dividend_amounts[dividend_index] * balance // total_supply)

    def _record_is_final(self, dividend_index: int) -> bool:
        return self.syscall.get_current_block().height > self.dividend_record_dates[dividend_index]

    def _unclaimed(self, dividend_index: int) -> Amount:
        return Amount(self.dividend_amounts[dividend_index] - self.dividend_claimed_amounts[dividend_index])

    def _validate_index(self, dividend_index: int) -> None:
        if not 0 <= dividend_index < self.dividends_created:
            raise InvalidDividend(DividendErrors.INVALID_INDEX)

    def _token(self):
        return self.syscall.get_contract(self.token_id, blueprint_id=None)

    def _contract(self, contract_id: ContractId):
        return self.syscall.get_contract(contract_id, blueprint_id=None)

    def _only_owner(self, ctx: Context) -> None:
        if ctx.caller_id != self.owner:
            raise Unauthorized(DividendErrors.NOT_OWNER)
