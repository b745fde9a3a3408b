class DescriptorError(Exception):
    pass


class UnparsableVersionError(DescriptorError):
    pass


class UnsupportedVersionError(DescriptorError):
    pass


class UnsupportedHostError(DescriptorError):
    pass


class ConfigurationError(Exception):
    pass


class VerificationError(Exception):
    pass


class ToolInvocationError(VerificationError):
    pass


class ArtifactNotFoundError(VerificationError):
    pass


class MismatchError(VerificationError):
    """An artifact was inspected successfully but does not match expectations."""

    category = "mismatch"

    def __init__(self, artifact: str, expected: object, actual: object) -> None:
        self.artifact = artifact
        self.expected = expected
        self.actual = actual
        super().__init__(self._describe())

    def _describe(self) -> str:
        return (
            f"{self.category} in {self.artifact}: "
            f"expected {_fmt(self.expected)}, found {_fmt(self.actual)}"
        )


class FormatMismatchError(MismatchError):
    category = "unexpected file format"


class MissingEntryPointError(MismatchError):
    category = "missing entry point"

    def _describe(self) -> str:
        exports = _fmt(self.actual) if self.actual else "none"
        return (
            f"{self.category} in {self.artifact}: "
            f"export function {self.expected} not in dll (exports: {exports})"
        )


class LibraryMismatchError(MismatchError):
    category = "unexpected library imports"


class SymbolVersionMismatchError(MismatchError):
    category = "unexpected symbol version requirements"


def _fmt(value: object) -> str:
    if isinstance(value, (set, frozenset)):
        return "{" + ", ".join(sorted(repr(v) for v in value)) + "}"
    if isinstance(value, dict):
        items = ", ".join(f"{k!r}: {v!r}" for k, v in sorted(value.items()))
        return "{" + items + "}"
    return repr(value)
