from enum import IntEnum
from pathlib import Path
from typing import Callable, NamedTuple, Optional, Union

from solders.keypair import Keypair
from solders.message import Message
from solders.pubkey import Pubkey
from solders.transaction import Transaction
import solders.system_program as sys
from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Confirmed
from solana.rpc.models import TxOpts

from votes.config import ConfigResult, keypair_from_file, payer_from, rpc_url_from
from votes.constants import VOTE_SEED, find_vote_account_address
from votes.errors import KeypairDecodeError, MissingPayerError, ProgramNotDeployedError
from votes.state import VOTE_ACCOUNT_LEN, VoteAccount
import votes.instructions as vt


OPTS = TxOpts(skip_confirmation=False, preflight_commitment=Confirmed)


class ProvisioningOutcome(IntEnum):
    """Result of a provisioning run."""
    ALREADY_EXISTS = 0
    CREATED = 1


class ProvisioningContext(NamedTuple):
    """Values resolved so far, each step returns an updated copy."""
    program_id: Optional[Pubkey] = None
    rpc_url: Optional[str] = None
    client: Optional[AsyncClient] = None
    payer: Optional[Keypair] = None
    vote_pubkey: Optional[Pubkey] = None


def connect(rpc_url: str) -> AsyncClient:
    return AsyncClient(rpc_url, commitment=Confirmed)


def resolve_program_id(ctx: ProvisioningContext, program_keypair_path: Union[str, Path]) -> ProvisioningContext:
    try:
        program_id = keypair_from_file(program_keypair_path).pubkey()
    except (OSError, KeypairDecodeError) as e:
        raise ProgramNotDeployedError(
            f"Failed to read program keypair at '{program_keypair_path}' due to error: {e}. "
            "Program may need to be deployed"
        ) from e
    print(f"programId: {program_id}")
    return ctx._replace(program_id=program_id)


async def establish_connection(
    ctx: ProvisioningContext, config: ConfigResult,
    client_factory: Callable[[str], AsyncClient] = connect,
) -> ProvisioningContext:
    rpc_url = rpc_url_from(config)
    client = client_factory(rpc_url)
    try:
        resp = await client.get_version()
    except Exception:
        await client.close()
        raise
    print(f"Connection to cluster established: {rpc_url} {resp.value.solana_core}")
    return ctx._replace(rpc_url=rpc_url, client=client)


def resolve_payer(ctx: ProvisioningContext, config: ConfigResult) -> ProvisioningContext:
    payer = payer_from(config)
    print(f"payer: {payer.pubkey()}")
    return ctx._replace(payer=payer)


def derive_vote_address(ctx: ProvisioningContext) -> ProvisioningContext:
    if ctx.payer is None:
        raise MissingPayerError("A payer keypair is required to derive the vote account")
    vote_pubkey = find_vote_account_address(ctx.payer.pubkey(), VOTE_SEED, ctx.program_id)
    return ctx._replace(vote_pubkey=vote_pubkey)


async def create_vote_account(ctx: ProvisioningContext) -> ProvisioningOutcome:
    """Creates the vote account at the derived address unless it already exists."""
    client, payer = ctx.client, ctx.payer
    resp = await client.get_account_info(ctx.vote_pubkey, commitment=Confirmed)
    if resp.value is not None:
        print(f"Vote account {ctx.vote_pubkey} already exists")
        return ProvisioningOutcome.ALREADY_EXISTS

    print(f"Creating vote account {ctx.vote_pubkey}")
    resp = await client.get_minimum_balance_for_rent_exemption(VOTE_ACCOUNT_LEN)
    ix = sys.create_account_with_seed(
        sys.CreateAccountWithSeedParams(
            from_pubkey=payer.pubkey(),
            to_pubkey=ctx.vote_pubkey,
            base=payer.pubkey(),
            seed=VOTE_SEED,
            lamports=resp.value,
            space=VOTE_ACCOUNT_LEN,
            owner=ctx.program_id,
        )
    )
    recent_blockhash = (await client.get_latest_blockhash()).value.blockhash
    txn = Transaction([payer], Message([ix], payer.pubkey()), recent_blockhash)
    await client.send_transaction(txn, opts=OPTS)
    return ProvisioningOutcome.CREATED


async def provision(
    config: ConfigResult, program_keypair_path: Union[str, Path],
    client_factory: Callable[[str], AsyncClient] = connect,
) -> ProvisioningOutcome:
    ctx = resolve_program_id(ProvisioningContext(), program_keypair_path)
    ctx = await establish_connection(ctx, config, client_factory)
    try:
        ctx = resolve_payer(ctx, config)
        ctx = derive_vote_address(ctx)
        return await create_vote_account(ctx)
    finally:
        await ctx.client.close()


async def cast_vote(
    client: AsyncClient, payer: Keypair, program_id: Pubkey, vote_pubkey: Pubkey, vote_type: vt.VoteType
):
    print(f"Voting {vote_type.name.lower()} on {vote_pubkey}")
    ix = vt.vote(
        vt.VoteParams(
            program_id=program_id,
            vote_account=vote_pubkey,
            vote_type=vote_type,
        )
    )
    recent_blockhash = (await client.get_latest_blockhash()).value.blockhash
    txn = Transaction([payer], Message([ix], payer.pubkey()), recent_blockhash)
    await client.send_transaction(txn, opts=OPTS)


async def get_vote_account(client: AsyncClient, vote_pubkey: Pubkey) -> Optional[VoteAccount]:
    resp = await client.get_account_info(vote_pubkey, commitment=Confirmed)
    if resp.value is None:
        return None
    return VoteAccount.decode(resp.value.data)
