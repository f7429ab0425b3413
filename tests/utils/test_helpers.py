"""
Test helper utilities for exome-gatk testing
"""

import argparse
import os
import pathlib
import stat
import sys
from typing import Dict, List, Optional

# Add the parent directory to the path
sys.path.insert(
    0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
)


def create_mock_args(loglevel="WARNING"):
    """Create a mock argparse.Namespace for pipeline testing"""
    args = argparse.Namespace()
    args.loglevel = loglevel
    return args


class MockFileSystem:
    """Helper class for creating the input files of a job"""

    def __init__(self, root: pathlib.Path):
        self.root = pathlib.Path(root)

    def create_file(self, path: str, content: str = "") -> pathlib.Path:
        file_path = self.root / path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content)
        return file_path

    def create_bams(self, *names: str) -> List[pathlib.Path]:
        return [self.create_file(name, "BAM") for name in names]

    def create_list(self, path: str, entries: List) -> pathlib.Path:
        return self.create_file(
            path, "".join(f"{entry}\n" for entry in entries)
        )

    def create_reference(
        self,
        path: str = "reference.sh",
        extra: Optional[Dict[str, str]] = None,
    ) -> pathlib.Path:
        """A reference file defining every resource"""
        variables = {
            "REF": str(self.create_file("ref/genome.fa", ">chr1\nACGT\n")),
            "GATKJAR": str(self.create_file("tools/gatk.jar")),
            "ETKEY": str(self.create_file("tools/gatk.key")),
            "DBSNP": str(self.create_file("ref/dbsnp.vcf.gz")),
            "MUTECTREF": str(self.create_file("ref/af-only-gnomad.vcf.gz")),
        }
        variables.update(extra or {})
        lines = ["#!/bin/bash", "# reference files"]
        lines.extend(f"{k}={v}" for k, v in variables.items())
        return self.create_file(path, "\n".join(lines) + "\n")

    def create_executable(self, path: str, script: str) -> pathlib.Path:
        file_path = self.create_file(path, script)
        file_path.chmod(file_path.stat().st_mode | stat.S_IEXEC)
        return file_path
