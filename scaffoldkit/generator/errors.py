from typing import Any


class ScaffoldError(Exception):
    """Base class for every failure raised while scaffolding."""

    kind = "ScaffoldError"

    def __init__(self, message: str, payload: Any = None) -> None:
        super().__init__(message)
        self.payload = payload


class TemplateError(ScaffoldError):
    kind = "TemplateError"


class InvalidMarkerError(TemplateError):
    kind = "InvalidMarker"

    def __init__(self, marker: str) -> None:
        super().__init__(f"Invalid template marker: {marker}", marker)
        self.marker = marker


class UnresolvedKeyError(TemplateError):
    kind = "UnresolvedKey"

    def __init__(self, key: str) -> None:
        super().__init__(f"Unsatisfied template key: {key}", key)
        self.key = key


class BoilerplateError(ScaffoldError):
    kind = "BoilerplateError"


class InvalidNameError(BoilerplateError):
    kind = "InvalidName"

    def __init__(self, name) -> None:
        super().__init__(
            f"Invalid directory name {name!r}. It must consist of letters and numbers, "
            "perhaps separated by single instances of '-', '_', or '.'",
            name,
        )
        self.name = name


class NotDirectoryError(BoilerplateError):
    kind = "NotADirectory"

    def __init__(self, path) -> None:
        super().__init__(f"The current asset '{path}' is not a directory", str(path))
        self.path = path


class DirectoryNotFoundError(BoilerplateError):
    kind = "DirectoryNotFound"

    def __init__(self, path) -> None:
        super().__init__(f"The directory '{path}' does not exist", str(path))
        self.path = path


class UnbalancedScopeExitError(BoilerplateError):
    kind = "UnbalancedScopeExit"

    def __init__(self) -> None:
        super().__init__("leave() called with no directory to leave")
