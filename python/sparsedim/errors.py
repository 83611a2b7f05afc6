__all__ = [
    "InvalidCoordinatesError",
    "InvalidDimensionsError",
    "InvalidStateError",
    "SparseDimError",
]


class SparseDimError(ValueError):
    """
    Base error which all sparsedim errors are sub-classed from.
    """

    _msg: str = "{}"

    def __init__(self, *args: object) -> None:
        """
        A single argument is a pre-formatted message. Multiple arguments are
        formatted into the class template message.
        """
        if len(args) == 1:
            super().__init__(args[0])
        else:
            super().__init__(self._msg.format(*args))


class InvalidDimensionsError(SparseDimError):
    """
    Raised for a non-positive shape component, an empty iteration box, or
    operands whose shapes disagree.
    """

    _msg = "Invalid dimensions {!r}: {}"


class InvalidCoordinatesError(SparseDimError, IndexError):
    """
    Raised when a coordinate component falls outside ``[0, dim)``.
    """

    _msg = "Coordinate {!r} out of bounds for shape {!r}"


class InvalidStateError(SparseDimError):
    """
    Raised when the slice arena of an array no longer matches its shape.
    """

    _msg = "Corrupted storage: {}"
