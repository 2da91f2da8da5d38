"""Vote Program Constants."""

from pathlib import Path
from typing import Union

from solders.pubkey import Pubkey

from votes.errors import InvalidIdentityError

PROGRAM_PATH = Path(__file__).resolve().parent.parent / "target" / "deploy"
"""Directory the program build writes its artifacts to."""

PROGRAM_KEYPAIR_PATH = PROGRAM_PATH / "votes-keypair.json"
"""Keypair produced when the vote program is deployed, its pubkey is the program id."""

CLI_CONFIG_PATH = Path.home() / ".config" / "solana" / "cli" / "config.yml"
"""Config file written by the Solana CLI."""

DEFAULT_RPC_URL: str = "http://localhost:8899"
"""Endpoint used when the CLI config does not provide one."""

VOTE_SEED: str = "vote"
"""Seed used to derive the vote account from the payer."""

MAX_SEED_LEN: int = 32
"""Maximum length in bytes of a seed accepted by the system program."""

PUBKEY_LEN: int = 32
"""Length in bytes of a public key."""


def _as_pubkey(identity: Union[Pubkey, bytes], name: str) -> Pubkey:
    if isinstance(identity, Pubkey):
        return identity
    if not isinstance(identity, (bytes, bytearray)) or len(identity) != PUBKEY_LEN:
        raise InvalidIdentityError(f"{name} must be a pubkey or {PUBKEY_LEN} raw bytes, got {identity!r}")
    return Pubkey.from_bytes(bytes(identity))


def find_vote_account_address(
    base: Union[Pubkey, bytes],
    seed: str,
    program_id: Union[Pubkey, bytes],
) -> Pubkey:
    """Generates the address of the account created with `seed` from `base`, owned by `program_id`"""
    if len(seed.encode()) > MAX_SEED_LEN:
        raise InvalidIdentityError(f"Seed {seed!r} is longer than {MAX_SEED_LEN} bytes")
    return Pubkey.create_with_seed(
        _as_pubkey(base, "base"),
        seed,
        _as_pubkey(program_id, "program_id"),
    )
