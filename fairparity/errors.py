class FairParityError(Exception):
    """Base class for input errors raised by fairparity."""


class DimensionMismatchError(FairParityError, ValueError):
    """Outcome, prediction and group columns differ in length."""


class MissingArgumentError(FairParityError, ValueError):
    """Neither predicted labels nor predicted probabilities were supplied."""


class InvalidBaseGroupError(FairParityError, ValueError):
    """Requested base group is not an observed level of the group column."""
