import argparse
import asyncio
import sys

from votes.actions import ProvisioningOutcome, provision
from votes.config import read_cli_config
from votes.constants import CLI_CONFIG_PATH, PROGRAM_KEYPAIR_PATH


def main() -> int:
    argparse.ArgumentParser(
        description='Create the vote account for the deployed vote program, if it does not exist yet.'
    ).parse_args()
    try:
        outcome = asyncio.run(provision(read_cli_config(CLI_CONFIG_PATH), PROGRAM_KEYPAIR_PATH))
    except Exception as e:
        print(f'Error: {e}', file=sys.stderr)
        return 1
    if outcome == ProvisioningOutcome.CREATED:
        print('Vote account created')
    return 0


if __name__ == "__main__":
    sys.exit(main())
