"""
Load the reference configuration file.

The reference configuration is a shell file of variable assignments, e.g.

    REF=/resources/hg38/Homo_sapiens_assembly38.fasta
    GATKJAR=/tools/gatk-4.0.4.0/gatk-package-4.0.4.0-local.jar
    DBSNP=$RESOURCES/dbsnp_146.hg38.vcf.gz
    AGILENT_V5=/resources/targets/S04380110_Regions.bed

The file is parsed rather than sourced; assignments can reference names
defined earlier in the file or in the environment.
"""

import os
import pathlib
import re
import shlex
import types
from typing import Dict, Mapping, NamedTuple, Optional, Union

from .exceptions import ReferenceConfigError
from .logging import get_logger

logger = get_logger(__name__)

ASSIGNMENT_PAT = re.compile(
    r"^(?:export\s+)?(?P<name>[A-Za-z_][A-Za-z0-9_]*)=(?P<value>.*)$"
)
VARIABLE_PAT = re.compile(
    r"\$(?:\{(?P<braced>[A-Za-z_][A-Za-z0-9_]*)\}"
    r"|(?P<bare>[A-Za-z_][A-Za-z0-9_]*))"
)

# ReferenceConfig field -> variable names, first defined wins
FIELD_VARIABLES = {
    "ref": ("REF",),
    "gatk_jar": ("GATKJAR", "GATK"),
    "etkey": ("ETKEY",),
    "dbsnp": ("DBSNP",),
    "mutect_ref": ("MUTECTREF",),
    "pipeline_dir": ("EXOMPPLN",),
}


class ReferenceConfig(NamedTuple):
    """Named resource paths from a reference configuration file"""

    path: pathlib.Path
    ref: Optional[pathlib.Path] = None
    gatk_jar: Optional[pathlib.Path] = None
    etkey: Optional[pathlib.Path] = None
    dbsnp: Optional[pathlib.Path] = None
    mutect_ref: Optional[pathlib.Path] = None
    pipeline_dir: Optional[pathlib.Path] = None
    variables: Mapping[str, str] = types.MappingProxyType({})

    def require(self, *fields: str) -> None:
        """Raise if any of the fields is not set in the file"""
        missing = [
            "/".join(FIELD_VARIABLES[field])
            for field in fields
            if getattr(self, field) is None
        ]
        if missing:
            raise ReferenceConfigError(
                f"The reference file '{self.path}' does not define: "
                + ", ".join(missing)
            )

    def resolve_target(
        self, target: Union[str, pathlib.Path, None]
    ) -> Optional[pathlib.Path]:
        """Find a target interval file from a path or a variable name"""
        if not target:
            return None

        candidate = pathlib.Path(target).expanduser()
        if candidate.exists():
            return candidate.resolve()

        value = self.variables.get(str(target))
        if value:
            candidate = pathlib.Path(value).expanduser()
            if candidate.exists():
                logger.debug("Target code '%s' is '%s'", target, candidate)
                return candidate.resolve()
        return None


def expand_variables(
    value: str,
    defined: Mapping[str, str],
    environ: Mapping[str, str],
) -> str:
    """Expand $NAME and ${NAME} in `value`"""

    def _lookup(m: "re.Match[str]") -> str:
        name = m.group("braced") or m.group("bare")
        if name in defined:
            return defined[name]
        return environ.get(name, "")

    return VARIABLE_PAT.sub(_lookup, value)


def parse_assignments(
    text: str,
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """Parse shell variable assignments into a dict"""
    environ = os.environ if environ is None else environ
    variables: Dict[str, str] = {}
    for lineno, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        m = ASSIGNMENT_PAT.match(line)
        if not m:
            logger.debug("Skipping line %s of the reference file", lineno)
            continue

        raw_value = m.group("value")
        try:
            value = " ".join(shlex.split(raw_value, comments=True))
        except ValueError as e:
            raise ReferenceConfigError(
                f"Cannot parse line {lineno} of the reference file: {e}"
            ) from e
        if not raw_value.startswith("'"):
            value = expand_variables(value, variables, environ)
        variables[m.group("name")] = value
    return variables


def load_reference(
    path: Union[str, pathlib.Path],
    environ: Optional[Mapping[str, str]] = None,
) -> ReferenceConfig:
    """Load a reference configuration file"""
    ref_path = pathlib.Path(path).resolve()
    try:
        text = ref_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ReferenceConfigError(
            f"Cannot read the reference file '{ref_path}': {e}"
        ) from e

    variables = parse_assignments(text, environ)
    fields: Dict[str, pathlib.Path] = {}
    for field, names in FIELD_VARIABLES.items():
        for name in names:
            if variables.get(name):
                fields[field] = pathlib.Path(variables[name]).expanduser()
                break

    logger.debug("Loaded %s variables from '%s'", len(variables), ref_path)
    return ReferenceConfig(
        path=ref_path,
        variables=types.MappingProxyType(variables),
        **fields,
    )
