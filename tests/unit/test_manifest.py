"""
Unit tests for sample resolution from manifests and array indices
"""

import os
import pathlib
import sys

import pytest

sys.path.insert(
    0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
)

from exome_gatk.exceptions import ManifestError  # noqa: E402
from exome_gatk.manifest import (  # noqa: E402
    SampleFile,
    array_index,
    is_list_file,
    read_manifest,
    resolve_sample,
    sample_name,
)
from tests.utils.test_helpers import MockFileSystem  # noqa: E402


@pytest.fixture
def fs(tmp_path):
    return MockFileSystem(tmp_path)


def test_sample_name_strips_bam_suffix():
    assert sample_name("a.bam") == "a"
    assert sample_name("/data/run1/lane2/sample_01.bam") == "sample_01"
    assert sample_name(pathlib.Path("deep/er/x.sorted.bam")) == "x.sorted"
    assert sample_name("reads.cram") == "reads.cram"


def test_is_list_file():
    assert is_list_file("samples.list")
    assert is_list_file(pathlib.Path("/a/b/tumors.list"))
    assert not is_list_file("sample.bam")
    assert not is_list_file("samples.list.bak")


def test_array_index_prefers_explicit():
    assert array_index(3, {"SGE_TASK_ID": "7"}) == 3


def test_array_index_from_environment():
    assert array_index(None, {"SGE_TASK_ID": "7"}) == 7


@pytest.mark.parametrize(
    "env", [{}, {"SGE_TASK_ID": "undefined"}, {"SGE_TASK_ID": ""}]
)
def test_array_index_unset(env):
    assert array_index(None, env) is None


def test_array_index_not_an_integer():
    with pytest.raises(ManifestError):
        array_index(None, {"SGE_TASK_ID": "seven"})


def test_resolve_from_list(fs, monkeypatch):
    """samples.list with a.bam and b.bam, index 2 is b.bam"""
    monkeypatch.chdir(fs.root)
    fs.create_bams("a.bam", "b.bam")
    manifest = fs.create_list("samples.list", ["a.bam", "b.bam"])

    sample = resolve_sample(manifest, 2)

    assert isinstance(sample, SampleFile)
    assert sample.path == (fs.root / "b.bam").resolve()
    assert sample.path.is_absolute()
    assert sample.name == "b"


def test_resolve_every_line(fs):
    bams = fs.create_bams("s1.bam", "nested/s2.bam", "more/nested/s3.bam")
    manifest = fs.create_list("samples.list", bams)

    for i, bam in enumerate(bams, start=1):
        sample = resolve_sample(manifest, i)
        assert sample.path == bam.resolve()
        assert sample.name == f"s{i}"


@pytest.mark.parametrize("index", [0, -1, 3, 100])
def test_resolve_out_of_range(fs, index):
    manifest = fs.create_list("samples.list", ["a.bam", "b.bam"])
    with pytest.raises(ManifestError):
        resolve_sample(manifest, index)


def test_resolve_list_without_index(fs):
    manifest = fs.create_list("samples.list", ["a.bam"])
    with pytest.raises(ManifestError):
        resolve_sample(manifest, None)


def test_resolve_blank_line(fs):
    manifest = fs.create_list("samples.list", ["a.bam", "", "c.bam"])
    with pytest.raises(ManifestError):
        resolve_sample(manifest, 2)


def test_resolve_direct_bam_ignores_index(fs, monkeypatch):
    monkeypatch.chdir(fs.root)
    (bam,) = fs.create_bams("dir/sample.bam")

    sample = resolve_sample("dir/sample.bam", 5)

    assert sample == SampleFile(bam.resolve(), "sample")


def test_read_manifest_strips_newlines(fs):
    manifest = fs.create_file("windows.list", "a.bam\r\nb.bam\r\n")
    assert read_manifest(manifest) == ["a.bam", "b.bam"]


def test_read_manifest_invalid_encoding(fs):
    manifest = fs.root / "binary.list"
    manifest.write_bytes(b"\xff\xfe.bam\n")
    with pytest.raises(ManifestError, match="Cannot read the manifest"):
        read_manifest(manifest)


def test_read_manifest_directory(fs):
    manifest = fs.root / "dir.list"
    manifest.mkdir()
    with pytest.raises(ManifestError):
        resolve_sample(manifest, 1)
