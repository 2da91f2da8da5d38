"""Vote Account State."""

from typing import Dict, NamedTuple, Optional

from construct import ConstructError, Int32ul, Struct  # type: ignore

from votes.errors import EncodingError

U32_MAX: int = 2**32 - 1


class VoteAccount(NamedTuple):
    """Tally held by a vote account managed by the vote program."""
    yes: Optional[int] = 0
    abstained: Optional[int] = 0
    no: Optional[int] = 0

    @classmethod
    def decode(cls, data: bytes):
        if len(data) != VOTE_ACCOUNT_LAYOUT.sizeof():
            raise EncodingError(
                f"Vote account data must be {VOTE_ACCOUNT_LAYOUT.sizeof()} bytes, got {len(data)}")
        parsed = VOTE_ACCOUNT_LAYOUT.parse(data)
        return VoteAccount(
            yes=parsed['yes'],
            abstained=parsed['abstained'],
            no=parsed['no'],
        )

    def as_dict(self) -> Dict:
        self_dict = {}
        for name, value in self._asdict().items():
            value = 0 if value is None else value
            if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= U32_MAX:
                raise EncodingError(f"Vote account field '{name}' must be a u32, got {value!r}")
            self_dict[name] = value
        return self_dict

    def encode(self) -> bytes:
        try:
            return VOTE_ACCOUNT_LAYOUT.build(self.as_dict())
        except ConstructError as e:
            raise EncodingError(str(e)) from e

    @staticmethod
    def size_of() -> int:
        return len(VoteAccount().encode())


VOTE_ACCOUNT_LAYOUT = Struct(
    "yes" / Int32ul,
    "abstained" / Int32ul,
    "no" / Int32ul,
)

VOTE_ACCOUNT_LEN: int = VoteAccount.size_of()
"""Size of vote account."""
