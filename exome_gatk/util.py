"""
Utility functions
"""

import argparse
import pathlib
import re
import shutil
import subprocess as sp
from typing import Callable, List, Optional

import packaging.version

from .logging import get_logger

__version__ = "1.0.0"

logger = get_logger(__name__)

# `java -version` reports on stderr, e.g. 'openjdk version "17.0.8" 2023-07-18'
VERSION_ARGS = {
    "java": ["-version"],
}
JAVA_VERSION_PAT = re.compile(r'version "(?P<version>[0-9._]+)')


def parse_version(cmd: str, output: str) -> packaging.version.Version:
    """Extract the version from the version output of a tool"""
    if cmd == "java":
        m = JAVA_VERSION_PAT.search(output)
        if not m:
            raise ValueError(f"Cannot find the java version in: {output}")
        # java 1.8.0_392 style versions
        return packaging.version.Version(m.group("version").replace("_", "."))

    # bgzip/tabix: "tabix (htslib) 1.17"
    first_line = output.strip().split("\n")[0]
    version_str = first_line.split()[-1].split("-")[0]
    return packaging.version.Version(version_str)


def check_version(
    cmd: str,
    version: Optional[packaging.version.Version],
) -> bool:
    """Check the version of an executable"""
    cmd_list: List[str] = cmd.split()
    exec_file = shutil.which(cmd_list[0])
    if not exec_file:
        logger.error("Error: no '%s' found in the PATH", cmd)
        return False

    if version is None:
        return True

    cmd_list.extend(VERSION_ARGS.get(cmd_list[0], ["--version"]))
    res = sp.run(cmd_list, capture_output=True, text=True)
    cmd_version = parse_version(cmd_list[0], res.stdout or res.stderr)
    if cmd_version < version:
        logger.error(
            "Error: the pipeline requires %s version '%s' or later "
            "but %s '%s' was found in the PATH",
            cmd,
            version,
            cmd,
            cmd_version,
        )
        return False
    return True


def path_arg(
    exists: Optional[bool] = None,
    is_dir: Optional[bool] = None,
    is_file: Optional[bool] = None,
) -> Callable[[str], pathlib.Path]:
    """pathlib checked types for argparse"""

    def _path_arg(arg: str) -> pathlib.Path:
        p = pathlib.Path(arg)

        attrs = [exists, is_dir, is_file]
        attr_names = ["exists", "is_dir", "is_file"]

        for attr_val, attr_name in zip(attrs, attr_names):
            if attr_val is None:  # Skip attributes that are not defined
                continue

            m = getattr(p, attr_name)
            if m() != attr_val:
                raise argparse.ArgumentTypeError(
                    "Missing/Incorrect required argument. The supplied path "
                    f"'{arg}' needs the attribute {attr_name}={attr_val}, "
                    f"but {attr_name}={m()}"
                )
        return p

    return _path_arg
