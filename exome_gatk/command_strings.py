"""
This module contains the functions that accept arguments and return the
commands.
"""

import pathlib
from typing import Iterable

from .gatk import GatkCommand
from .shell_pipeline import Command


def cmd_gatk(command: GatkCommand) -> Command:
    """Run a GATK tool"""
    return Command(*command.build_cmd())


def cmd_bgzip(vcf: pathlib.Path) -> Command:
    """Block-gzip a VCF in place, replacing an older .gz"""
    return Command("bgzip", "-f", str(vcf))


def cmd_tabix(vcf_gz: pathlib.Path) -> Command:
    """Build a .tbi index for a bgzipped VCF"""
    return Command("tabix", "-f", "-p", "vcf", str(vcf_gz))


def cmd_rm(paths: Iterable[pathlib.Path]) -> Command:
    """Remove files, ignoring failures"""
    return Command("rm", "-f", *[str(x) for x in paths], fail_ok=True)
