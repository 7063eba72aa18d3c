"""Base formatter interface for archaeo artifacts."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Iterable, List

from ..file_ops import atomic_write_text, prepare_output_dir
from ..logging_config import get_logger
from ..models import AggregateReport

logger = get_logger(__name__)


class BaseFormatter(ABC):
    """Abstract base class for output formatters.

    Attributes:
        extended: Report was produced in extended mode (affects artifact names)
        split_per_file: Emit one metrics artifact per analyzed file
    """

    suffix = ""

    def __init__(self, extended: bool = False, split_per_file: bool = False):
        self.extended = extended
        self.split_per_file = split_per_file

    @abstractmethod
    def format(self, report: AggregateReport) -> Dict[str, str]:
        """Return artifact name -> rendered text for a report."""

    def write(self, report: AggregateReport, destination: Path) -> List[Path]:
        """Render ``report`` and write every artifact into ``destination``.

        Raises:
            SerializationError: If the destination is not a writable directory
                or an artifact cannot be written
        """
        destination = prepare_output_dir(Path(destination))
        written = []
        for name, content in self.format(report).items():
            target = destination / name
            atomic_write_text(target, content)
            logger.info("Wrote %s", target)
            written.append(target)
        return written

    def artifact_name(self, stem: str) -> str:
        """Name of a metrics artifact, e.g. ``metrics-extended.csv``."""
        if self.extended:
            stem = f"{stem}-extended"
        return f"{stem}{self.suffix}"

    def file_artifact_names(
        self, rel_paths: Iterable[str], reserved: Iterable[str] = ()
    ) -> Dict[str, str]:
        """Per-file artifact names in split mode: ``src/a.c`` -> ``src__a.c.csv``.

        ``a/b.c`` and ``a__b.c`` map to the same name; later paths take a
        numeric suffix (``a__b.c-2.csv``) instead of overwriting earlier
        artifacts. Names in ``reserved`` are never handed out.
        """
        taken = set(reserved)
        names: Dict[str, str] = {}
        for rel_path in rel_paths:
            stem = rel_path.replace("/", "__")
            name = self.artifact_name(stem)
            counter = 2
            while name in taken:
                name = self.artifact_name(f"{stem}-{counter}")
                counter += 1
            if name != self.artifact_name(stem):
                logger.warning("Artifact for %s renamed to %s to avoid a collision", rel_path, name)
            taken.add(name)
            names[rel_path] = name
        return names
