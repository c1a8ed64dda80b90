"""Exception classes shared across SpendWise."""


class SpendWiseError(Exception):
    """Base exception for SpendWise."""
    pass


class InvalidAmountError(SpendWiseError, ValueError):
    """An amount or target that a derivation cannot work with."""
    pass


class StoreError(SpendWiseError):
    """The backing store failed or is unreachable."""
    pass


class AIServiceError(SpendWiseError):
    """The language-model API call failed."""
    pass
