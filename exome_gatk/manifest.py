"""
Select the sample file for one array-job instance
"""

import os
import pathlib
from typing import List, Mapping, NamedTuple, Optional, Union

from .exceptions import ManifestError
from .logging import get_logger

logger = get_logger(__name__)

LIST_SUFFIX = ".list"
BAM_SUFFIX = ".bam"
ARRAY_INDEX_VAR = "SGE_TASK_ID"


class SampleFile(NamedTuple):
    """An input alignment file and the name used for its outputs"""

    path: pathlib.Path
    name: str


def sample_name(path: Union[str, pathlib.Path]) -> str:
    """The basename of `path` without the '.bam' suffix"""
    name = pathlib.Path(path).name
    if name.endswith(BAM_SUFFIX):
        name = name[: -len(BAM_SUFFIX)]
    return name


def is_list_file(path: Union[str, pathlib.Path]) -> bool:
    return str(path).endswith(LIST_SUFFIX)


def array_index(
    explicit: Optional[int] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Optional[int]:
    """The job index, from the command line or the scheduler environment"""
    if explicit is not None:
        return explicit

    environ = os.environ if environ is None else environ
    value = environ.get(ARRAY_INDEX_VAR)
    # SGE exports 'undefined' for jobs that are not array jobs
    if value is None or value == "" or value == "undefined":
        return None
    try:
        return int(value)
    except ValueError:
        raise ManifestError(
            f"{ARRAY_INDEX_VAR} is not an integer: '{value}'"
        ) from None


def read_manifest(path: Union[str, pathlib.Path]) -> List[str]:
    """Return the lines of a manifest file"""
    try:
        with open(path, encoding="utf-8") as fh:
            return [line.rstrip("\r\n") for line in fh]
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestError(
            f"Cannot read the manifest '{path}': {e}"
        ) from e


def resolve_sample(
    manifest: Union[str, pathlib.Path],
    index: Optional[int] = None,
) -> SampleFile:
    """Resolve the sample file for this job.

    A manifest ending in '.list' holds one path per line and `index`
    (1-based) selects the line. Any other manifest is the sample itself and
    `index` is ignored.
    """
    manifest_path = pathlib.Path(manifest).resolve()
    if not is_list_file(manifest_path):
        return SampleFile(manifest_path, sample_name(manifest_path))

    if index is None:
        raise ManifestError(
            f"'{manifest_path}' is a list file, but no array index was "
            f"given with -a and {ARRAY_INDEX_VAR} is not set"
        )
    lines = read_manifest(manifest_path)
    if index < 1 or index > len(lines):
        raise ManifestError(
            f"Array index {index} is out of range for '{manifest_path}' "
            f"with {len(lines)} lines"
        )
    entry = lines[index - 1].strip()
    if not entry:
        raise ManifestError(
            f"Line {index} of '{manifest_path}' is empty"
        )

    path = pathlib.Path(entry).resolve()
    logger.debug("Resolved line %s of '%s' to '%s'", index, manifest, path)
    return SampleFile(path, sample_name(path))
