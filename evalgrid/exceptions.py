"""
Exception hierarchy for evalgrid.

All exceptions inherit from EvalGridError for easy catching.
A scenario exiting non-zero is never an exception; it is recorded
as a ScenarioResult.
"""


class EvalGridError(Exception):
    """Base exception for evalgrid.

    All other exceptions in this module inherit from this,
    allowing callers to catch any evalgrid error with a single except.
    """
    pass


class ConfigurationError(EvalGridError):
    """Error in configuration.

    Raised when:
    - Config file not found or invalid YAML
    - A value fails validation (e.g., negative concurrency)
    - The dataset mode cannot be detected
    """
    pass


class MatrixError(EvalGridError):
    """The run matrix is malformed.

    Raised when:
    - The agent or search provider list is empty
    - Results do not line up with the matrix they came from
    """
    pass


class LaunchError(EvalGridError):
    """An external command could not be started.

    Converted into a failed ScenarioResult at the ProcessRunner
    boundary; it never escapes a run.
    """

    def __init__(self, command, cause: Exception):
        self.command = list(command)
        self.cause = cause
        super().__init__(f"Failed to launch {self.command[0] if self.command else '<empty>'}: {cause}")
