"""Error kinds raised by the deduction engine."""


class DeductionError(Exception):
    """Base class for requirement-level failures."""

    kind = "DeductionError"

    def __init__(self, message: str, ingredient_id: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.ingredient_id = ingredient_id

    def to_dict(self) -> dict[str, object]:
        return {
            "kind": self.kind,
            "ingredient_id": self.ingredient_id,
            "message": self.message,
        }


class InsufficientStock(DeductionError):
    """Not enough stock to cover the requirement."""

    kind = "InsufficientStock"

    def __init__(
        self,
        required: float,
        available: float,
        unit: str,
        ingredient_id: str | None = None,
    ) -> None:
        self.required = required
        self.available = available
        self.unit = unit
        super().__init__(
            f"Insufficient stock: required {required:g} {unit}, "
            f"available {available:g} {unit}",
            ingredient_id,
        )

    @property
    def shortfall(self) -> float:
        return max(0.0, self.required - self.available)

    def to_dict(self) -> dict[str, object]:
        payload = super().to_dict()
        payload.update(
            {
                "required": self.required,
                "available": self.available,
                "shortfall": self.shortfall,
                "unit": self.unit,
            }
        )
        return payload


class UnknownPackSize(DeductionError):
    """The size of one countable unit cannot be determined."""

    kind = "UnknownPackSize"

    def __init__(self, descriptor: str, ingredient_id: str | None = None) -> None:
        self.descriptor = descriptor
        super().__init__(
            f"Cannot determine pack size from '{descriptor}'", ingredient_id
        )

    def to_dict(self) -> dict[str, object]:
        payload = super().to_dict()
        payload["descriptor"] = self.descriptor
        return payload


class MissingReferenceWeight(DeductionError):
    """A bunch ingredient has no stored weight per bunch."""

    kind = "MissingReferenceWeight"

    def __init__(self, ingredient_name: str, ingredient_id: str | None = None) -> None:
        self.ingredient_name = ingredient_name
        super().__init__(
            f"Reference weight per bunch is missing for {ingredient_name}",
            ingredient_id,
        )

    def to_dict(self) -> dict[str, object]:
        payload = super().to_dict()
        payload["ingredient_name"] = self.ingredient_name
        return payload


class BatchNotReady(DeductionError):
    """A referenced batch cannot be consumed yet."""

    kind = "BatchNotReady"

    def __init__(self, batch_id: str, status: str | None) -> None:
        self.batch_id = batch_id
        self.status = status
        state = status or "missing"
        super().__init__(f"Batch {batch_id} is not ready (status: {state})", batch_id)

    def to_dict(self) -> dict[str, object]:
        payload = super().to_dict()
        payload["status"] = self.status
        return payload


class InvalidSplit(DeductionError):
    """A caller-supplied source split violates its bounds."""

    kind = "InvalidSplit"

    def __init__(self, reason: str, ingredient_id: str | None = None) -> None:
        self.reason = reason
        super().__init__(f"Invalid split: {reason}", ingredient_id)


class IncompatibleUnits(DeductionError):
    """Two quantities cannot be expressed in a common unit."""

    kind = "IncompatibleUnits"

    def __init__(
        self, from_unit: str, to_unit: str, ingredient_id: str | None = None
    ) -> None:
        self.from_unit = from_unit
        self.to_unit = to_unit
        super().__init__(f"Cannot convert {from_unit} to {to_unit}", ingredient_id)


class BatchNotFound(LookupError):
    """The batch being operated on does not exist."""

    def __init__(self, batch_id: str) -> None:
        super().__init__(f"Batch {batch_id} not found")
        self.batch_id = batch_id


class InvalidBatchTransition(Exception):
    """The batch state machine does not allow the transition."""

    def __init__(self, batch_id: str, current: str, target: str) -> None:
        super().__init__(f"Batch {batch_id} cannot move from {current} to {target}")
        self.batch_id = batch_id
        self.current = current
        self.target = target


class CommitFailed(Exception):
    """A write failed while applying deduction instructions."""

    def __init__(
        self,
        target: str,
        applied: int,
        compensated: bool,
    ) -> None:
        state = "rolled back" if compensated else "left in place"
        super().__init__(
            f"Failed to persist {target}; {applied} earlier write(s) {state}"
        )
        self.target = target
        self.applied = applied
        self.compensated = compensated


class PoolNotFound(LookupError):
    """The frozen portion pool does not exist."""

    def __init__(self, pool_id: str) -> None:
        super().__init__(f"Freezer pool {pool_id} not found")
        self.pool_id = pool_id
