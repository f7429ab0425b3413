"""
Classes for building GATK command lines
"""

import pathlib
from enum import Enum
from typing import List, NamedTuple, Optional, Sequence

from .logging import get_logger
from .manifest import SampleFile
from .reference import ReferenceConfig

logger = get_logger(__name__)

INTERVAL_PADDING = 100
BAD_ET_ARGS = ("-et", "NO_ET", "-K")
FIX_MISENCODED_ARG = "--fix_misencoded_quality_scores"


class Operation(Enum):
    """GATK tools run by the pipelines"""

    PRINT_READS = "PrintReads"
    HAPLOTYPE_CALLER = "HaplotypeCaller"
    MUTECT2 = "Mutect2"


class JobParameters(NamedTuple):
    """Everything a job instance needs besides the reference files"""

    sample: SampleFile
    normal: Optional[SampleFile] = None
    target: Optional[pathlib.Path] = None
    bad_et: bool = False
    fix_misencoded: bool = False


def target_args(
    target: Optional[pathlib.Path], padding: Optional[int] = INTERVAL_PADDING
) -> List[str]:
    """Restrict a tool to the target intervals"""
    if target is None:
        return []
    args = ["-L", str(target)]
    if padding is not None:
        args.extend(["--interval-padding", str(padding)])
    return args


def annotation_args(annotations: Sequence[str]) -> List[str]:
    args: List[str] = []
    for annotation in annotations:
        args.extend(["-A", annotation])
    return args


class BaseTool:
    """A base class for GATK tools"""

    operation: Operation

    def build_args(self) -> List[str]:
        """Build the tool arguments"""
        raise NotImplementedError


class PrintReads(BaseTool):
    """PrintReads"""

    operation = Operation.PRINT_READS

    def __init__(
        self,
        reference: pathlib.Path,
        input: pathlib.Path,
        output: pathlib.Path,
    ):
        self.reference = reference
        self.input = input
        self.output = output

    def build_args(self) -> List[str]:
        return [
            "-R",
            str(self.reference),
            "-I",
            str(self.input),
            "-O",
            str(self.output),
        ]


class HaplotypeCaller(BaseTool):
    """HaplotypeCaller in gVCF mode"""

    operation = Operation.HAPLOTYPE_CALLER
    annotations = [
        "BaseQualityRankSumTest",
        "Coverage",
        "MappingQualityRankSumTest",
        "MappingQualityZero",
        "QualByDepth",
        "RMSMappingQuality",
        "FisherStrand",
        "InbreedingCoeff",
        "ClippingRankSumTest",
        "DepthPerSampleHC",
    ]

    def __init__(
        self,
        reference: pathlib.Path,
        input: pathlib.Path,
        output: pathlib.Path,
        dbsnp: pathlib.Path,
        target: Optional[pathlib.Path] = None,
        stand_call_conf: int = 30,
    ):
        self.reference = reference
        self.input = input
        self.output = output
        self.dbsnp = dbsnp
        self.target = target
        self.stand_call_conf = stand_call_conf

    def build_args(self) -> List[str]:
        # --interval-padding is always passed once, after the annotations
        args = ["--reference", str(self.reference)]
        args.extend(target_args(self.target, padding=None))
        args.extend(
            [
                "-I",
                str(self.input),
                "--genotyping-mode",
                "DISCOVERY",
                "-stand-call-conf",
                str(self.stand_call_conf),
                "--emit-ref-confidence",
                "GVCF",
                "-O",
                str(self.output),
                "-D",
                str(self.dbsnp),
                "--read-filter",
                "GoodCigarReadFilter",
            ]
        )
        args.extend(annotation_args(self.annotations))
        args.extend(
            [
                "--interval-padding",
                str(INTERVAL_PADDING),
                "--dont-use-soft-clipped-bases",
            ]
        )
        return args


class Mutect2(BaseTool):
    """Mutect2 with a matched normal"""

    operation = Operation.MUTECT2
    annotations = [
        "Coverage",
        "DepthPerAlleleBySample",
        "MappingQuality",
        "BaseQuality",
        "StrandArtifact",
    ]

    def __init__(
        self,
        reference: pathlib.Path,
        tumor: SampleFile,
        normal: SampleFile,
        output: pathlib.Path,
        germline_resource: pathlib.Path,
        target: Optional[pathlib.Path] = None,
        af_of_alleles_not_in_resource: str = "0.0000025",
    ):
        self.reference = reference
        self.tumor = tumor
        self.normal = normal
        self.output = output
        self.germline_resource = germline_resource
        self.target = target
        self.af_of_alleles_not_in_resource = af_of_alleles_not_in_resource

    def build_args(self) -> List[str]:
        args = ["-R", str(self.reference)]
        args.extend(target_args(self.target))
        args.extend(
            [
                "-I",
                str(self.tumor.path),
                "-tumor",
                self.tumor.name,
                "-I",
                str(self.normal.path),
                "-normal",
                self.normal.name,
                "-O",
                str(self.output),
                "--germline-resource",
                str(self.germline_resource),
                "--af-of-alleles-not-in-resource",
                self.af_of_alleles_not_in_resource,
            ]
        )
        args.extend(annotation_args(self.annotations))
        return args


class GatkCommand:
    """A java invocation of the GATK jar"""

    def __init__(
        self,
        jar: pathlib.Path,
        tool: BaseTool,
        tmp_dir: Optional[pathlib.Path] = None,
        xmx: str = "16G",
        gc_threads: int = 1,
        etkey: Optional[pathlib.Path] = None,
        fix_misencoded: bool = False,
    ):
        self.jar = jar
        self.tool = tool
        self.tmp_dir = tmp_dir
        self.xmx = xmx
        self.gc_threads = gc_threads
        self.etkey = etkey
        self.fix_misencoded = fix_misencoded

    @property
    def operation(self) -> Operation:
        return self.tool.operation

    def build_cmd(self) -> List[str]:
        """Build the argument vector"""
        cmd: List[str] = [
            "java",
            f"-Xmx{self.xmx}",
            f"-XX:ParallelGCThreads={self.gc_threads}",
        ]
        if self.tmp_dir is not None:
            cmd.append(f"-Djava.io.tmpdir={self.tmp_dir}")
        cmd.extend(["-jar", str(self.jar), self.operation.value])
        cmd.extend(self.tool.build_args())

        if self.etkey is not None:
            cmd.extend(BAD_ET_ARGS)
            cmd.append(str(self.etkey))
        if self.fix_misencoded:
            cmd.append(FIX_MISENCODED_ARG)
        return cmd


def build_command(
    operation: Operation,
    params: JobParameters,
    reference: ReferenceConfig,
    output: pathlib.Path,
    tmp_dir: Optional[pathlib.Path] = None,
    xmx: str = "16G",
) -> GatkCommand:
    """Select the tool template for `operation` and fill it in"""
    reference.require("ref", "gatk_jar")
    assert reference.ref and reference.gatk_jar

    tool: BaseTool
    if operation is Operation.PRINT_READS:
        tool = PrintReads(reference.ref, params.sample.path, output)
    elif operation is Operation.HAPLOTYPE_CALLER:
        reference.require("dbsnp")
        assert reference.dbsnp
        tool = HaplotypeCaller(
            reference.ref,
            params.sample.path,
            output,
            reference.dbsnp,
            target=params.target,
        )
    elif operation is Operation.MUTECT2:
        reference.require("mutect_ref")
        assert reference.mutect_ref
        if params.normal is None:
            raise ValueError("Mutect2 needs a normal sample")
        tool = Mutect2(
            reference.ref,
            params.sample,
            params.normal,
            output,
            reference.mutect_ref,
            target=params.target,
        )
    else:
        raise ValueError(f"Unknown operation: {operation}")

    etkey = None
    if params.bad_et:
        reference.require("etkey")
        etkey = reference.etkey

    return GatkCommand(
        reference.gatk_jar,
        tool,
        tmp_dir=tmp_dir,
        xmx=xmx,
        etkey=etkey,
        fix_misencoded=params.fix_misencoded,
    )
