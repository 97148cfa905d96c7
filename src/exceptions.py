"""Custom exceptions for the floating buoy estimator."""


class PreconditionError(Exception):
    """
    Raised when a parameter is outside its stated domain.

    This exception is raised for bad group counts, tracer counts, ranges,
    cast sizes or sampler bounds. It is fatal for the current run.
    """

    def __init__(self, message: str, parameter: str = None, value=None):
        """
        Initialize PreconditionError.

        Args:
            message: Detailed error message
            parameter: Optional name of the offending parameter
            value: Optional value that was rejected
        """
        self.message = message
        self.parameter = parameter
        self.value = value
        super().__init__(self.message)

    def __str__(self):
        parts = [self.message]
        if self.parameter:
            parts.append(f"(parameter: {self.parameter})")
        if self.value is not None:
            parts.append(f"(value: {self.value})")
        return " ".join(parts)


class InternalInvariantError(Exception):
    """
    Raised when an estimator invariant is broken.

    A tracer escaping its range, a group left out of order by a prune or a
    linker index outside the anchors all indicate a bug, never bad input.
    """

    def __init__(self, message: str, component: str = None):
        self.message = message
        self.component = component
        super().__init__(self.message)

    def __str__(self):
        if self.component:
            return f"{self.message} (component: {self.component})"
        return self.message
