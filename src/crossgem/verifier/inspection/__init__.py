"""
The `inspection` sub-package turns compiled artifacts into structured facts.

This includes:
- Running the platform's cross binutils `objdump` against an artifact.
- Parsing the textual dump into an `ArtifactDump`, so nothing else in the
  verifier depends on the tool's output format.
"""

from .objdump import ObjdumpInspector, parse_dump, run_objdump

__all__ = ["ObjdumpInspector", "parse_dump", "run_objdump"]
