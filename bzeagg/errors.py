"""Errors shared across the aggregator."""


class InvalidDependenciesError(ValueError):
    """Raised when a component is built with missing collaborators."""

    def __init__(self, name: str) -> None:
        super().__init__(f"invalid dependencies for: {name}")
        self.name = name