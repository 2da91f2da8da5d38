import json
import os
import shutil
import tempfile
from pathlib import Path
from subprocess import Popen
from types import SimpleNamespace
from typing import Dict, List, Optional

import pytest
import yaml
from solders.hash import Hash
from solders.instruction import AccountMeta, Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.transaction import Transaction
import solders.system_program as sys

from votes.constants import PROGRAM_PATH

ACCOUNT_STORAGE_OVERHEAD: int = 128
LAMPORTS_PER_BYTE_YEAR: int = 3480
EXEMPTION_THRESHOLD_YEARS: int = 2


def rent_exempt_minimum(size: int) -> int:
    return (ACCOUNT_STORAGE_OVERHEAD + size) * LAMPORTS_PER_BYTE_YEAR * EXEMPTION_THRESHOLD_YEARS


def write_keypair(path: Path, keypair: Keypair) -> Path:
    path.write_text(json.dumps(list(bytes(keypair))))
    return path


def write_cli_config(path: Path, json_rpc_url: Optional[str], keypair_path: Optional[Path]) -> Path:
    config = {'commitment': 'confirmed'}
    if json_rpc_url is not None:
        config['json_rpc_url'] = json_rpc_url
    if keypair_path is not None:
        config['keypair_path'] = str(keypair_path)
    path.write_text(yaml.safe_dump(config))
    return path


def decompile(txn: Transaction) -> List[Instruction]:
    message = txn.message
    keys = message.account_keys
    header = message.header
    num_signers = header.num_required_signatures

    def is_writable(i: int) -> bool:
        if i < num_signers:
            return i < num_signers - header.num_readonly_signed_accounts
        return i < len(keys) - header.num_readonly_unsigned_accounts

    return [
        Instruction(
            program_id=keys[compiled.program_id_index],
            data=bytes(compiled.data),
            accounts=[
                AccountMeta(pubkey=keys[i], is_signer=i < num_signers, is_writable=is_writable(i))
                for i in bytes(compiled.accounts)
            ],
        )
        for compiled in message.instructions
    ]


class FakeLedger:
    """In-memory stand-in for the parts of AsyncClient the vote client uses."""

    def __init__(self):
        self.accounts: Dict[Pubkey, SimpleNamespace] = {}
        self.sent: List[Transaction] = []
        self.calls: List[str] = []
        self.reject_with: Optional[Exception] = None
        self.closed = False

    async def get_version(self):
        self.calls.append('get_version')
        return SimpleNamespace(value=SimpleNamespace(solana_core='1.18.26'))

    async def get_account_info(self, pubkey: Pubkey, commitment=None):
        self.calls.append('get_account_info')
        return SimpleNamespace(value=self.accounts.get(pubkey))

    async def get_minimum_balance_for_rent_exemption(self, usize: int, commitment=None):
        self.calls.append('get_minimum_balance_for_rent_exemption')
        return SimpleNamespace(value=rent_exempt_minimum(usize))

    async def get_latest_blockhash(self, commitment=None):
        self.calls.append('get_latest_blockhash')
        return SimpleNamespace(value=SimpleNamespace(blockhash=Hash.default(), last_valid_block_height=0))

    async def send_transaction(self, txn: Transaction, opts=None):
        self.calls.append('send_transaction')
        if self.reject_with is not None:
            raise self.reject_with
        txn.verify()
        for ix in decompile(txn):
            if ix.program_id == sys.ID:
                params = sys.decode_create_account_with_seed(ix)
                if params['to_pubkey'] in self.accounts:
                    raise RuntimeError(f"Account {params['to_pubkey']} already in use")
                self.accounts[params['to_pubkey']] = SimpleNamespace(
                    data=bytes(params['space']),
                    lamports=params['lamports'],
                    owner=params['owner'],
                )
        self.sent.append(txn)
        return SimpleNamespace(value=txn.signatures[0])

    async def close(self):
        self.closed = True


@pytest.fixture
def ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture
def payer() -> Keypair:
    return Keypair()


@pytest.fixture
def program() -> Keypair:
    return Keypair()


@pytest.fixture
def program_keypair_path(tmp_path, program) -> Path:
    return write_keypair(tmp_path / 'votes-keypair.json', program)


@pytest.fixture
def payer_keypair_path(tmp_path, payer) -> Path:
    return write_keypair(tmp_path / 'id.json', payer)


@pytest.fixture
def cli_config_path(tmp_path, payer_keypair_path) -> Path:
    return write_cli_config(tmp_path / 'config.yml', 'http://127.0.0.1:8899', payer_keypair_path)


@pytest.fixture(scope="session")
def solana_test_validator():
    program_so = PROGRAM_PATH / "votes.so"
    program_keypair = PROGRAM_PATH / "votes-keypair.json"
    if shutil.which("solana-test-validator") is None or not program_so.exists() or not program_keypair.exists():
        pytest.skip("solana-test-validator and a built vote program are required")
    with open(program_keypair, 'r') as keyfile:
        program_id = Keypair.from_bytes(bytes(json.load(keyfile))).pubkey()
    old_cwd = os.getcwd()
    newpath = tempfile.mkdtemp()
    os.chdir(newpath)
    validator = Popen([
        "solana-test-validator",
        "--reset", "--quiet",
        "--bpf-program", str(program_id), str(program_so),
    ],)
    yield program_id
    validator.kill()
    os.chdir(old_cwd)
    shutil.rmtree(newpath)
