"""Checks compiled artifacts against the expectations of their target platform."""

from collections.abc import Callable, Iterable
from pathlib import Path

from pyvider.telemetry import logger

from .catalog import CrossCompileCatalog
from .exceptions import (
    ArtifactNotFoundError,
    FormatMismatchError,
    LibraryMismatchError,
    MissingEntryPointError,
    SymbolVersionMismatchError,
    VerificationError,
)
from .inspection.objdump import DEFAULT_TOOL_TIMEOUT, ObjdumpInspector
from .models import ArtifactDump, ExpectationSet, VerificationOutcome, VerificationReport
from .platforms import OsFamily, PlatformDescriptor

InspectorFactory = Callable[[PlatformDescriptor, float], ObjdumpInspector]


class Verifier:
    def __init__(
        self,
        timeout: float = DEFAULT_TOOL_TIMEOUT,
        inspector_factory: InspectorFactory = ObjdumpInspector,
    ) -> None:
        self.timeout = timeout
        self.inspector_factory = inspector_factory

    def verify(
        self, descriptor: PlatformDescriptor, artifact_path: Path | str
    ) -> VerificationReport:
        """
        Inspects one artifact and raises the first mismatch found.

        Windows artifacts are checked for container format, the exported
        entry point and their exact set of imported DLLs. Linux artifacts are
        checked for their exact set of NEEDED libraries and their exact
        symbol-version floors.
        """
        artifact = Path(artifact_path)
        if not artifact.is_file():
            raise ArtifactNotFoundError(f"Artifact not found at: {artifact}")

        expectations = descriptor.expectations()
        inspector = self.inspector_factory(descriptor, self.timeout)
        dump = inspector.inspect(artifact)

        match descriptor.os_family:
            case OsFamily.WINDOWS:
                self._check_windows(artifact, dump, expectations)
            case OsFamily.LINUX:
                self._check_linux(artifact, dump, expectations)

        report = VerificationReport(descriptor=descriptor, artifact=artifact, dump=dump)
        logger.info(report.summary())
        return report

    def _check_windows(
        self, artifact: Path, dump: ArtifactDump, expectations: ExpectationSet
    ) -> None:
        if dump.declared_format != expectations.expected_format:
            raise FormatMismatchError(
                str(artifact), expectations.expected_format, dump.declared_format
            )
        if not dump.exports(expectations.entry_point):
            raise MissingEntryPointError(
                str(artifact), expectations.entry_point, dump.exported_symbols
            )
        self._check_libraries(artifact, dump, expectations)

    def _check_linux(
        self, artifact: Path, dump: ArtifactDump, expectations: ExpectationSet
    ) -> None:
        self._check_libraries(artifact, dump, expectations)
        floors = dump.symbol_version_floors()
        if floors != expectations.expected_min_versions:
            raise SymbolVersionMismatchError(
                str(artifact), expectations.expected_min_versions, floors
            )

    def _check_libraries(
        self, artifact: Path, dump: ArtifactDump, expectations: ExpectationSet
    ) -> None:
        if dump.library_set != expectations.expected_libraries:
            raise LibraryMismatchError(
                str(artifact), expectations.expected_libraries, dump.library_set
            )

    def verify_many(
        self, targets: Iterable[tuple[PlatformDescriptor, Path | str]]
    ) -> list[VerificationOutcome]:
        """Verifies every artifact; one artifact failing does not stop the rest."""
        outcomes = []
        for descriptor, artifact_path in targets:
            artifact = Path(artifact_path)
            try:
                report = self.verify(descriptor, artifact)
            except VerificationError as e:
                logger.error(
                    "Artifact verification failed",
                    artifact=str(artifact),
                    platform=str(descriptor.platform),
                    error=str(e),
                )
                outcomes.append(
                    VerificationOutcome(descriptor=descriptor, artifact=artifact, error=e)
                )
            else:
                outcomes.append(
                    VerificationOutcome(
                        descriptor=descriptor, artifact=artifact, report=report
                    )
                )
        return outcomes

    def verify_catalog(
        self,
        catalog: CrossCompileCatalog,
        stage_dir: Path | str,
        extension_name: str = "nokogiri",
    ) -> list[VerificationOutcome]:
        return self.verify_many(
            (descriptor, descriptor.staged_artifact_path(stage_dir, extension_name))
            for descriptor in catalog
        )
