"""Errors raised while provisioning the vote account."""


class VotesError(Exception):
    """Base class for vote client errors."""


class ConfigUnavailable(VotesError):
    """The Solana CLI config could not be used, defaults apply."""


class KeypairDecodeError(VotesError, ValueError):
    """A keypair file does not hold a JSON array of secret key bytes."""


class ProgramNotDeployedError(VotesError):
    """The program keypair is missing, so the program id is unknown."""


class MissingPayerError(VotesError):
    """No keypair is available to pay for and sign the transaction."""


class InvalidIdentityError(VotesError, ValueError):
    """An identity passed to address derivation is malformed."""


class EncodingError(VotesError, ValueError):
    """A vote account field does not fit its layout."""
