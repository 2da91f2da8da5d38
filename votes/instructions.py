"""Vote Program Instructions."""

from enum import IntEnum
from typing import NamedTuple

from construct import Int8ul, Struct  # type: ignore

from solders.pubkey import Pubkey
from solders.instruction import AccountMeta, Instruction


class VoteType(IntEnum):
    """Vote Instruction Types."""

    YES = 0
    ABSTAINED = 1
    NO = 2


class VoteParams(NamedTuple):
    """Vote transaction params."""

    program_id: Pubkey
    """Vote program id."""
    vote_account: Pubkey
    """`[w]` Vote account owned by the program."""

    # Params
    vote_type: VoteType
    """Which tally to increment."""


INSTRUCTIONS_LAYOUT = Struct(
    "instruction_type" / Int8ul,
)


def vote(params: VoteParams) -> Instruction:
    """Creates an instruction to record a vote in the vote account."""
    return Instruction(
        program_id=params.program_id,
        accounts=[
            AccountMeta(pubkey=params.vote_account, is_signer=False, is_writable=True),
        ],
        data=INSTRUCTIONS_LAYOUT.build(
            dict(instruction_type=VoteType(params.vote_type))
        ),
    )
