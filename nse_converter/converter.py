"""
Conversion driver.

Orchestrates one conversion run:
Validating → Enumerating → Converting, terminal on completion or on the
first failure.

Files are converted one at a time in sorted name order. Each file's bars are
written as one unit, and the first parse or write failure aborts the run
without rolling back files already written.
"""

from pathlib import Path
from typing import Optional, Union

from .config.defaults import ConverterConfig, get_default_config
from .data.collector import collect_file
from .data.models import ConversionJob, FileBatch, InstrumentId, JobState, Resolution
from .data.symbols import SymbolResolver
from .data.validators import BarValidator
from .errors import ConfigurationError, DataQualityError, SystemFailureError
from .logging.config import get_conversion_logger, log_file_converted
from .storage.base import CanonicalWriter, WriteResult
from .storage.lean_writer import LeanDataWriter

logger = get_conversion_logger(__name__)

PathLike = Union[str, Path]


def strip_final_slash(directory: str) -> str:
    """Remove trailing path separators, keeping a bare root intact."""
    return directory.rstrip("/\\") or directory


def validate_directories(source_dir: Optional[PathLike], destination_dir: Optional[PathLike]) -> None:
    """
    Validate the run's directories before anything is read or written.

    Raises:
        ConfigurationError: If either path is blank or not an existing directory
    """
    source = "" if source_dir is None else str(source_dir)
    destination = "" if destination_dir is None else str(destination_dir)

    if not source.strip():
        raise ConfigurationError("Please enter a valid source directory.",
                                 parameter="source_dir", value=source)
    if not destination.strip():
        raise ConfigurationError("Please enter a valid destination directory.",
                                 parameter="destination_dir", value=destination)
    if not Path(source).is_dir():
        raise ConfigurationError("Source directory does not exist.",
                                 parameter="source_dir", value=source)
    if not Path(destination).is_dir():
        raise ConfigurationError("Destination directory does not exist.",
                                 parameter="destination_dir", value=destination)


def enumerate_files(source_dir: Path) -> list[Path]:
    """List the regular files directly under source_dir in name order."""
    return sorted((p for p in source_dir.iterdir() if p.is_file()), key=lambda p: p.name)


class ConversionDriver:
    """
    Coordinates symbol resolution, parsing, batching and writing.

    Pipeline per file:
    Filename → InstrumentId → Lines → FileBatch → CanonicalWriter
    """

    def __init__(self, writer: Optional[CanonicalWriter] = None,
                 config: Optional[ConverterConfig] = None) -> None:
        self.config = config or get_default_config()
        self.writer = writer or LeanDataWriter(price_scale=self.config.storage.price_scale)

        conversion = self.config.conversion
        self.resolution = Resolution(conversion.resolution)
        self.resolver = SymbolResolver.from_config(self.config.symbols, extension=conversion.file_extension)

        quality = self.config.data_quality
        self.validator = BarValidator(enforce_ohlc_consistency=True) if quality.enforce_ohlc_consistency else None

    def run(self, source_dir: Optional[PathLike], destination_dir: Optional[PathLike]) -> ConversionJob:
        """
        Run a full conversion.

        Args:
            source_dir: Directory of vendor text files
            destination_dir: Root of the canonical data folder

        Returns:
            The completed ConversionJob with its counters

        Raises:
            ConfigurationError: If the directories fail validation
            DataQualityError: If a source file contains a malformed line
            SystemFailureError: If reading or writing fails
        """
        job = ConversionJob(
            source_dir=Path(strip_final_slash(str(source_dir or ""))),
            destination_dir=Path(strip_final_slash(str(destination_dir or ""))),
            resolution=self.resolution,
        )

        try:
            validate_directories(source_dir, destination_dir)
        except ConfigurationError as e:
            job.fail(str(e))
            logger.error("Invalid run parameters", parameter=e.parameter, value=e.value, error=str(e))
            raise

        job.state = JobState.ENUMERATING
        logger.info("Counting files", source_dir=str(job.source_dir))
        files = enumerate_files(job.source_dir)
        for _ in files:
            job.total_count += 1
        logger.info("Processing files", total=job.total_count, resolution=job.resolution.value)

        job.state = JobState.CONVERTING
        for path in files:
            try:
                self.convert_file(job, path)
            except (DataQualityError, SystemFailureError) as e:
                job.fail(str(e))
                logger.error(
                    "Conversion failed",
                    source_path=str(path),
                    error_type=type(e).__name__,
                    line_number=getattr(e, "line_number", None),
                    raw_data=getattr(e, "raw_data", None),
                    error=str(e),
                    processed=job.processed_count,
                    total=job.total_count,
                )
                raise

        job.state = JobState.COMPLETED
        logger.info(
            "Conversion completed",
            processed=job.processed_count,
            total=job.total_count,
            bars_written=job.bars_written,
            destination_dir=str(job.destination_dir),
        )
        return job

    def resolve_instrument(self, path: Path) -> InstrumentId:
        return self.resolver.resolve(str(path))

    def collect(self, path: Path, instrument: InstrumentId) -> FileBatch:
        """Parse one vendor file into its ordered batch."""
        conversion = self.config.conversion
        return collect_file(
            path,
            instrument,
            delimiter=conversion.delimiter,
            encoding=conversion.encoding,
            validator=self.validator,
            fail_on_out_of_order=self.config.data_quality.fail_on_out_of_order,
        )

    def convert_file(self, job: ConversionJob, path: Path) -> Optional[WriteResult]:
        """Resolve, parse and write one file, then count it on the job."""
        instrument = self.resolve_instrument(path)
        batch = self.collect(path, instrument)

        result = self.writer.write(job.resolution, instrument, job.destination_dir, batch.bars)
        job.record_file(len(batch))

        log_file_converted(
            logger,
            symbol=instrument.symbol,
            source_path=str(path),
            bar_count=len(batch),
            processed=job.processed_count,
            total=job.total_count,
            context={
                "skipped_lines": batch.skipped_lines,
                "ordering_violations": batch.ordering_violations,
            } if batch.ordering_violations else None,
        )
        return result


def convert_directory(
    source_dir: Optional[PathLike],
    destination_dir: Optional[PathLike],
    writer: Optional[CanonicalWriter] = None,
    config: Optional[ConverterConfig] = None,
) -> ConversionJob:
    """Convert every vendor file in source_dir into destination_dir."""
    return ConversionDriver(writer=writer, config=config).run(source_dir, destination_dir)
