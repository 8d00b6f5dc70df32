"""
Exception hierarchy for the rotator.

Only CredentialError is fatal; everything else is caught at the slot or
round boundary by the scheduler.
"""


class RotatorError(Exception):
    """Base class for rotator errors."""


class CredentialError(RotatorError):
    """No usable credentials could be loaded."""


class WrongSecretError(CredentialError):
    """The password did not decrypt the keystore."""


class ModuleExclusionError(RotatorError, ValueError):
    """The requested exclusion set would leave no module enabled."""


class GasPriceError(RotatorError):
    """The admission gate could not read the current gas price."""


class ActivityCheckError(RotatorError):
    """An activity lookup for one account failed."""
