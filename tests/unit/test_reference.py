"""
Unit tests for loading the reference configuration
"""

import os
import pathlib
import sys

import pytest

sys.path.insert(
    0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
)

from exome_gatk.exceptions import ReferenceConfigError  # noqa: E402
from exome_gatk.reference import (  # noqa: E402
    load_reference,
    parse_assignments,
)
from tests.utils.test_helpers import MockFileSystem  # noqa: E402


def test_parse_assignments():
    text = "\n".join(
        [
            "#!/bin/bash",
            "# resources",
            "",
            "RESOURCES=/data/resources",
            'export REF="$RESOURCES/hg38.fa"',
            "DBSNP=${RESOURCES}/dbsnp.vcf.gz  # dbSNP 146",
            "LITERAL='$RESOURCES'",
            "echo loaded",
        ]
    )
    variables = parse_assignments(text, environ={})
    assert variables == {
        "RESOURCES": "/data/resources",
        "REF": "/data/resources/hg38.fa",
        "DBSNP": "/data/resources/dbsnp.vcf.gz",
        "LITERAL": "$RESOURCES",
    }


def test_parse_assignments_uses_environment():
    variables = parse_assignments(
        "GATKJAR=$TOOLS/gatk.jar\n", environ={"TOOLS": "/opt"}
    )
    assert variables["GATKJAR"] == "/opt/gatk.jar"


def test_parse_assignments_unbalanced_quotes():
    with pytest.raises(ReferenceConfigError):
        parse_assignments('REF="/data/hg38.fa\n', environ={})


def test_load_reference(tmp_path):
    fs = MockFileSystem(tmp_path)
    ref_file = fs.create_reference(extra={"EXOMPPLN": str(tmp_path)})

    config = load_reference(ref_file)

    assert config.path == ref_file.resolve()
    assert config.ref == tmp_path / "ref" / "genome.fa"
    assert config.gatk_jar == tmp_path / "tools" / "gatk.jar"
    assert config.etkey == tmp_path / "tools" / "gatk.key"
    assert config.dbsnp == tmp_path / "ref" / "dbsnp.vcf.gz"
    assert config.mutect_ref == tmp_path / "ref" / "af-only-gnomad.vcf.gz"
    assert config.pipeline_dir == tmp_path
    assert config.variables["REF"] == str(config.ref)


def test_load_reference_gatk_fallback(tmp_path):
    fs = MockFileSystem(tmp_path)
    ref_file = fs.create_file("ref.sh", "REF=/r.fa\nGATK=/opt/gatk.jar\n")
    config = load_reference(ref_file)
    assert config.gatk_jar == pathlib.Path("/opt/gatk.jar")


def test_load_reference_is_immutable(tmp_path):
    fs = MockFileSystem(tmp_path)
    config = load_reference(fs.create_reference())
    with pytest.raises(AttributeError):
        config.ref = pathlib.Path("/other.fa")  # type: ignore
    with pytest.raises(TypeError):
        config.variables["REF"] = "/other.fa"  # type: ignore


def test_load_missing_reference(tmp_path):
    with pytest.raises(ReferenceConfigError):
        load_reference(tmp_path / "missing.sh")


def test_load_reference_invalid_encoding(tmp_path):
    ref = tmp_path / "reference.sh"
    ref.write_bytes(b"REF=\xff\n")
    with pytest.raises(ReferenceConfigError, match="Cannot read"):
        load_reference(ref)


def test_require(tmp_path):
    fs = MockFileSystem(tmp_path)
    config = load_reference(fs.create_file("ref.sh", "REF=/r.fa\n"))
    config.require("ref")
    with pytest.raises(ReferenceConfigError, match="GATKJAR/GATK, DBSNP"):
        config.require("ref", "gatk_jar", "dbsnp")


def test_resolve_target(tmp_path):
    fs = MockFileSystem(tmp_path)
    bed = fs.create_file("targets/agilent_v5.bed", "chr1\t0\t100\n")
    config = load_reference(
        fs.create_reference(extra={"AGILENT_V5": str(bed)})
    )

    assert config.resolve_target(str(bed)) == bed.resolve()
    assert config.resolve_target("AGILENT_V5") == bed.resolve()
    assert config.resolve_target(tmp_path / "missing.bed") is None
    assert config.resolve_target("UNKNOWN_KIT") is None
    assert config.resolve_target(None) is None
    assert config.resolve_target("") is None
