class SimulatorError(Exception):
    """Base class for every error raised by the simulator."""


class InvalidConfiguration(SimulatorError, ValueError):
    """Raised when a tape cannot be built from the given arguments."""


class PreconditionFailed(SimulatorError, RuntimeError):
    """A step was requested on a machine that cannot step right now.

    The machine does not raise this; it hands it back inside a StepResult so a
    long supervised run can inspect it and stop cleanly.
    """


class TapeCorruption(SimulatorError, RuntimeError):
    """An expected neighbour tile is missing from the tape arena."""
