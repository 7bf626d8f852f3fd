from typing import NamedTuple, Optional

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

# Constants
DAYS_TO_SECONDS = 24 * 60 * 60
MAX_QUORUM_PERCENTAGE = 100


class ProposalInfo(NamedTuple):
    """Information about a specific proposal."""

    description: str
    quorum_percent: int
    record_date: int
    end_time: int
    result_revealed: bool
    result: bool
    vote_count: int
    yes_weight: int
    no_weight: int


class VoteInfo(NamedTuple):
    """Information about a specific vote."""

    support: bool
    weight: int


class VotingErrors:
    NOT_OWNER = "Caller is not the owner"
    ZERO_ADDRESS = "Address cannot be zero"
    INVALID_QUORUM = "Quorum must be between 1 and 100"
    INVALID_DURATION = "Voting period must be positive"
    INVALID_INDEX = "Invalid proposal index"
    VOTING_CLOSED = "Voting period ended"
    VOTING_OPEN = "Voting period has not ended"
    NO_WEIGHT = "No balance at the record date"
    RECORD_NOT_FINAL = "Voting opens after the record block"
    ALREADY_REVEALED = "Result already calculated"
    RENOUNCE_OWNERSHIP = "Ownership cannot be renounced"


class Unauthorized(AccessDenied):
    pass


class InvalidProposal(InvalidArgument):
    pass


class VotingClosed(StateViolation):
    pass


@export
class IvoVoting(Blueprint):
    """Token holder voting weighted by balances at the proposal's block."""

    token_id: ContractId
    owner: CallerId

    proposals_created: int

    # Proposal data, keyed by index
    proposal_descriptions: dict[int, str]
    proposal_quorums: dict[int, int]
    proposal_record_dates: dict[int, int]
    proposal_end_times: dict[int, Timestamp]
    proposal_revealed: dict[int, bool]
    proposal_results: dict[int, bool]
    proposal_vote_counts: dict[int, int]
    proposal_yes_weights: dict[int, Amount]
    proposal_no_weights: dict[int, Amount]

    # Vote data
    vote_support: dict[tuple[int, CallerId], bool]
    vote_weight: dict[tuple[int, CallerId], Amount]

    @public
    def initialize(self, ctx: Context, token: ContractId, owner: CallerId) -> None:
        if is_null(token) or is_null(owner):
            raise InvalidProposal(VotingErrors.ZERO_ADDRESS)
        self.token_id = token
        self.owner = owner
        self.proposals_created = 0

    @public
    def create_proposal(self, ctx: Context, description: str, quorum_percent: int, voting_days: int) -> int:
        """Open a vote on the balances of the current block."""
        self._only_owner(ctx)
        if quorum_percent <= 0 or quorum_percent > MAX_QUORUM_PERCENTAGE:
            raise InvalidProposal(VotingErrors.INVALID_QUORUM)
        if voting_days <= 0:
            raise InvalidProposal(VotingErrors.INVALID_DURATION)

        index = self.proposals_created
        self.proposal_descriptions[index] = description
        self.proposal_quorums[index] = quorum_percent
        self.proposal_record_dates[index] = self.syscall.get_current_block().height
        self.proposal_end_times[index] = Timestamp(ctx.timestamp + voting_days * DAYS_TO_SECONDS)
        self.proposal_revealed[index] = False
        self.proposal_results[index] = False
        self.proposal_vote_counts[index] = 0
        self.proposal_yes_weights[index] = Amount(0)
        self.proposal_no_weights[index] = Amount(0)
        self.proposals_created = index + 1

        self.syscall.emit_event(
            "ProposalCreated", {"proposal_index": index, "creator": ctx.caller_id, "timestamp": ctx.timestamp}
        )
        return index

    @public
    def cast_vote(self, ctx: Context, proposal_index: int, support: bool) -> None:
        """Vote with the caller's balance at the record date. Voting again changes the vote.

        Votes are accepted from the block after the proposal was created.
        """
        self._validate_index(proposal_index)
        if ctx.timestamp >= self.proposal_end_times[proposal_index]:
            raise VotingClosed(VotingErrors.VOTING_CLOSED)
        if self.syscall.get_current_block().height <= self.proposal_record_dates[proposal_index]:
            raise VotingClosed(VotingErrors.RECORD_NOT_FINAL)

        weight = self.syscall.get_contract(self.token_id, blueprint_id=None).view().balance_of_at(
            ctx.caller_id, self.proposal_record_dates[proposal_index]
        )
        if weight <= 0:
            raise VotingClosed(VotingErrors.NO_WEIGHT)

        vote_key = (proposal_index, ctx.caller_id)
        if vote_key in self.vote_support:
            self._count(proposal_index, self.vote_support[vote_key], -self.vote_weight[vote_key])
        else:
            self.proposal_vote_counts[proposal_index] += 1

        self.vote_support[vote_key] = support
        self.vote_weight[vote_key] = weight
        self._count(proposal_index, support, weight)

        self.syscall.emit_event(
            "ProposalVoted",
            {"proposal_index": proposal_index, "account": ctx.caller_id, "support": support, "weight": weight},
        )

    @public
    def calculate_results(self, ctx: Context, proposal_index: int) -> bool:
        """Reveal the result once voting ended.

        The proposal passes when the votes reach the quorum of the supply at
        the record date and yes outweighs no.
        """
        self._only_owner(ctx)
        self._validate_index(proposal_index)
        if ctx.timestamp < self.proposal_end_times[proposal_index]:
            raise VotingClosed(VotingErrors.VOTING_OPEN)
        if self.proposal_revealed[proposal_index]:
            raise VotingClosed(VotingErrors.ALREADY_REVEALED)

        yes = self.proposal_yes_weights[proposal_index]
        no = self.proposal_no_weights[proposal_index]
        supply = self.syscall.get_contract(self.token_id, blueprint_id=None).view().total_supply_at(
            self.proposal_record_dates[proposal_index]
        )
        result = (yes + no) * 100 >= self.proposal_quorums[proposal_index] * supply and yes > no

        self.proposal_revealed[proposal_index] = True
        self.proposal_results[proposal_index] = result
        self.syscall.emit_event("ProposalResult", {"proposal_index": proposal_index, "result": result})
        return result

    @public
    def transfer_ownership(self, ctx: Context, new_owner: CallerId) -> None:
        self._only_owner(ctx)
        if is_null(new_owner):
            raise InvalidProposal(VotingErrors.ZERO_ADDRESS)
        previous = self.owner
        self.owner = new_owner
        self.syscall.emit_event("OwnershipTransferred", {"previous_owner": previous, "new_owner": new_owner})

    @public
    def renounce_ownership(self, ctx: Context) -> None:
        raise StateViolation(VotingErrors.RENOUNCE_OWNERSHIP)

    def _count(self, proposal_index: int, support: bool, weight: int) -> None:
        if support:
            self.proposal_yes_weights[proposal_index] = Amount(self.proposal_yes_weights[proposal_index] + weight)
        else:
            self.proposal_no_weights[proposal_index] = Amount(self.proposal_no_weights[proposal_index] + weight)

    def _validate_index(self, proposal_index: int) -> None:
        if not 0 <= proposal_index < self.proposals_created:
            raise InvalidProposal(VotingErrors.INVALID_INDEX)

    def _only_owner(self, ctx: Context) -> None:
        if ctx.caller_id != self.owner:
            raise Unauthorized(VotingErrors.NOT_OWNER)

    @view
    def token(self) -> ContractId:
        return self.token_id

    @view
    def get_owner(self) -> CallerId:
        return self.owner

    @view
    def proposal_count(self) -> int:
        return self.proposals_created

    @view
    def get_proposal(self, proposal_index: int) -> ProposalInfo:
        """Get proposal details."""
        self._validate_index(proposal_index)
        return ProposalInfo(
            description=self.proposal_descriptions[proposal_index],
            quorum_percent=self.proposal_quorums[proposal_index],
            record_date=self.proposal_record_dates[proposal_index],
            end_time=self.proposal_end_times[proposal_index],
            result_revealed=self.proposal_revealed[proposal_index],
            result=self.proposal_results[proposal_index],
            vote_count=self.proposal_vote_counts[proposal_index],
            yes_weight=self.proposal_yes_weights[proposal_index],
            no_weight=self.proposal_no_weights[proposal_index],
        )

    @view
    def get_vote(self, proposal_index: int, account: CallerId) -> Optional[VoteInfo]:
        """Get vote details."""
        vote_key = (proposal_index, account)
        if vote_key not in self.vote_support:
            return None
        return VoteInfo(support=self.vote_support[vote_key], weight=self.vote_weight[vote_key])
