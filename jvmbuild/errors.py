"""Error taxonomy for detection and build failures."""

from typing import List, Optional


class BuildSystemError(Exception):
    """Base error carrying the failed operation, its target and the cause.

    Args:
        operation: What was being attempted (e.g. 'unable to open')
        target: The path or identifier the operation failed on
        cause: The underlying exception, if any
    """

    def __init__(self, operation: str, target: Optional[str] = None, cause: Optional[BaseException] = None):
        self.operation = operation
        self.target = target
        self.cause = cause
        super().__init__(str(self))

    def __str__(self) -> str:
        message = self.operation
        if self.target:
            message = f"{message} {self.target}"
        if self.cause is not None:
            message = f"{message}: {self.cause}"
        return message


class DetectionError(BuildSystemError):
    """Probing the application for a marker file failed."""


class ResolutionError(BuildSystemError):
    """A plan entry or dependency could not be resolved."""


class ArgumentParseError(BuildSystemError):
    """The build arguments override is not valid shell syntax."""


class ExecutionError(BuildSystemError):
    """The build tool could not be launched or exited non-zero."""

    def __init__(self, operation: str, target: Optional[str] = None,
                 cause: Optional[BaseException] = None, exit_code: Optional[int] = None):
        self.exit_code = exit_code
        super().__init__(operation, target, cause)


class FilesystemError(BuildSystemError):
    """Opening, copying, removing, listing or reading files failed."""


class ArtifactNotFoundError(BuildSystemError):
    """No single deployable artifact could be identified."""

    def __init__(self, pattern: str, candidates: List[str]):
        self.pattern = pattern
        self.candidates = sorted(candidates)
        super().__init__(
            "unable to find built artifact (executable JAR or WAR) in",
            f"{pattern}, candidates: {self.candidates}",
        )


class ConflictingBuildSystemsError(BuildSystemError):
    """More than one build system participates in the same build."""

    def __init__(self, names: List[str]):
        self.names = names
        super().__init__("only one build system may participate, found", ", ".join(names))
