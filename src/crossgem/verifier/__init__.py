# crossgem-verifier/src/crossgem/verifier/__init__.py
"""
This package checks cross-compiled native extension artifacts against the
import, export and symbol-version expectations of their target platform.
"""

from .catalog import CrossCompileCatalog, load_catalog, parse_catalog
from .models import ENTRY_POINT, ArtifactDump, ExpectationSet, VerificationReport
from .platforms import OsFamily, PlatformDescriptor, PlatformTag
from .verifier import Verifier

__all__ = [
    "ENTRY_POINT",
    "ArtifactDump",
    "CrossCompileCatalog",
    "ExpectationSet",
    "OsFamily",
    "PlatformDescriptor",
    "PlatformTag",
    "VerificationReport",
    "Verifier",
    "load_catalog",
    "parse_catalog",
]
