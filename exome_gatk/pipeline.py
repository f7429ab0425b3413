"""
A pipeline class
"""

from abc import ABC, abstractmethod
import argparse
import copy
import pathlib
import shutil
import sys
from typing import Any, Dict, List, NamedTuple, Optional

import packaging.version

from . import command_strings as cmds
from .dag import DAG
from .exceptions import ExecutionError, ManifestError, ReferenceConfigError
from .executor import BaseExecutor, DryRunExecutor, LocalExecutor
from .gatk import GatkCommand, JobParameters, Operation, build_command
from .job import Job
from .logging import add_run_log, get_logger, remove_run_log, set_level
from .manifest import SampleFile, array_index, resolve_sample
from .reference import load_reference
from .scheduler import ThreadScheduler
from .util import __version__, check_version, path_arg

PACKAGE = __name__.split(".")[0]

JAVA_MIN_VERSION = {
    "java": packaging.version.Version("1.8"),
}

HTSLIB_MIN_VERSIONS = {
    "bgzip": None,
    "tabix": None,
}

# GATK progress lines are dropped when the GATK log is copied to the run log
GATK_LOG_SKIP = ("ProgressMeter",)


class OutputFiles(NamedTuple):
    """Files written by one job instance"""

    output: pathlib.Path
    log: pathlib.Path
    gatk_log: pathlib.Path
    tmp_log: pathlib.Path
    tmp_dir: pathlib.Path


def output_files(
    name: str,
    output_dir: pathlib.Path,
    suffix: str,
    output_suffix: str,
    log_suffix: Optional[str] = None,
    log: Optional[pathlib.Path] = None,
) -> OutputFiles:
    """Derive output names from the sample name and the step suffixes"""
    log_suffix = log_suffix or suffix
    return OutputFiles(
        output=output_dir / f"{name}{output_suffix}",
        log=log if log else output_dir / f"{name}.{log_suffix}.log",
        gatk_log=output_dir / f"{name}.{suffix}.gatklog",
        tmp_log=output_dir / f"{name}.{suffix}.temp.log",
        tmp_dir=output_dir / f"{name}.{suffix}.tempdir",
    )


def trim_gatk_log(path: pathlib.Path) -> List[str]:
    """The GATK log without progress meter and blank lines"""
    if not path.is_file():
        return []
    with open(path, errors="replace") as fh:
        return [
            line.rstrip()
            for line in fh
            if line.strip() and not any(x in line for x in GATK_LOG_SKIP)
        ]


class BaseGatkPipeline(ABC):
    """A pipeline running one GATK tool on one sample of an array job"""

    operation: Operation
    # used in the names of the GATK log, temp log and temp directory
    suffix = ""
    # appended to the sample name for the primary output
    output_suffix = ""
    log_suffix: Optional[str] = None
    process_name = ""
    step_name = ""
    # bgzip and tabix the output
    compress_output = False
    compress_step_name = ""
    # ReferenceConfig fields used by the tool
    reference_fields = ("ref", "gatk_jar")

    params: Dict[str, Dict[str, Any]] = {
        # Required arguments
        "input": {
            "flags": ["-i", "--input"],
            "required": True,
            "help": (
                "Path to a BAM file, or a '.list' file with one BAM path "
                "per line for array jobs."
            ),
            "type": path_arg(exists=True, is_file=True),
        },
        "reference": {
            "flags": ["-r", "--reference"],
            "required": True,
            "help": (
                "Shell file with the locations of the reference genome, "
                "the GATK jar and resource files."
            ),
            "type": path_arg(exists=True, is_file=True),
        },
        # Additional arguments
        "array_index": {
            "flags": ["-a", "--array_index"],
            "help": (
                "Line of the '.list' file to process. Defaults to "
                "$SGE_TASK_ID."
            ),
            "type": int,
        },
        "log": {
            "flags": ["-l", "--log"],
            "help": "Log file. Defaults to a name derived from the sample.",
            "type": path_arg(),
        },
        "output_dir": {
            "flags": ["-o", "--output_dir"],
            "help": "Directory for the outputs. Defaults to the current "
            "directory.",
            "type": path_arg(exists=True, is_dir=True),
        },
        "bad_et": {
            "flags": ["-B", "--bad_et"],
            "help": "Prevent GATK from phoning home.",
            "action": "store_true",
        },
        "fix_misencoded": {
            "flags": ["-F", "--fix_misencoded"],
            "help": "Fix mis-encoded base quality scores.",
            "action": "store_true",
        },
        "xmx": {
            "help": "Maximum java heap size.",
            "default": "16G",
        },
        "dry_run": {
            "help": "Print the commands without running them.",
            "action": "store_true",
        },
        # Hidden arguments
        "retain_tmpdir": {
            "help": argparse.SUPPRESS,
            "action": "store_true",
        },
        "skip_version_check": {
            "help": argparse.SUPPRESS,
            "action": "store_true",
        },
    }

    @classmethod
    def add_arguments(cls, parser: argparse.ArgumentParser):
        for k, kwargs in cls.params.items():
            kwargs = copy.copy(kwargs)
            flags = kwargs.pop("flags", ["--" + k])
            if "default" in kwargs and "type" not in kwargs:
                kwargs["type"] = type(kwargs["default"])
            parser.add_argument(*flags, dest=k, **kwargs)

    def handle_arguments(self, args: argparse.Namespace):
        """Update self using the argparse object"""
        for k in self.params.keys():
            assert k in self.__dict__
            if k in args.__dict__:
                val = getattr(args, k)
                if val is not None:
                    setattr(self, k, val)

    def setup_logging(self, args: argparse.Namespace) -> None:
        self.logger = get_logger(__name__)
        set_level(PACKAGE, args.loglevel)
        self.logger.debug("Starting exome-gatk version: %s", __version__)

    def __init__(self) -> None:
        self.input: Optional[pathlib.Path] = None
        self.reference: Optional[pathlib.Path] = None
        self.array_index: Optional[int] = None
        self.log: Optional[pathlib.Path] = None
        self.output_dir = pathlib.Path(".")
        self.bad_et = False
        self.fix_misencoded = False
        self.xmx = "16G"
        self.dry_run = False
        self.retain_tmpdir = False
        self.skip_version_check = False

    def main(self, args: argparse.Namespace) -> None:
        """Run the pipeline for one sample"""
        self.handle_arguments(args)
        self.setup_logging(args)
        self.validate()
        self.configure()

        dag = self.build_dag()
        try:
            run_log = add_run_log(PACKAGE, self.outputs.log)
        except OSError as e:
            self.logger.error("Cannot open the log file: %s", e)
            sys.exit(2)
        try:
            self.write_start_log()
            if not self.dry_run:
                self.remove_step_logs()
                self.outputs.tmp_dir.mkdir(parents=True, exist_ok=True)
            executor = self.run(dag)
            self.copy_gatk_log()

            if not self.retain_tmpdir and self.outputs.tmp_dir.is_dir():
                shutil.rmtree(self.outputs.tmp_dir)

            self.check_execution(dag, executor)
            self.write_end_log()
        finally:
            remove_run_log(PACKAGE, run_log)

    def check_execution(
        self,
        dag: DAG,
        executor: BaseExecutor,
    ):
        """Check the DAG and executor after a run"""
        if executor.jobs_with_errors:
            names = ", ".join(job.name for job in executor.jobs_with_errors)
            self.logger.error("Failed: %s", self.process_name)
            self.logger.error("Execution failed: %s", names)
            raise ExecutionError(f"Execution failed: {names}")

        if dag.unexecuted_jobs():
            msg = (
                "The DAG has some unexecuted jobs\n"
                f"Waiting jobs: {dag.waiting_jobs}\n"
                f"Ready jobs: {dag.ready_jobs}"
            )
            self.logger.error("Failed: %s", self.process_name)
            self.logger.error("%s", msg)
            raise ExecutionError(msg)

    def validate(self) -> None:
        """Check the inputs and the tools before doing any work"""
        assert self.reference
        try:
            self.reference_config = load_reference(self.reference)
            self.reference_config.require(*self.reference_fields)
            if self.bad_et:
                self.reference_config.require("etkey")
        except ReferenceConfigError as e:
            self.logger.error("%s", e)
            sys.exit(2)

        if self.dry_run or self.skip_version_check:
            return
        min_versions: Dict[str, Optional[packaging.version.Version]] = {}
        min_versions.update(JAVA_MIN_VERSION)
        if self.compress_output:
            min_versions.update(HTSLIB_MIN_VERSIONS)
        for cmd, min_version in min_versions.items():
            if not check_version(cmd, min_version):
                sys.exit(2)

    def resolve_sample(
        self, manifest: Optional[pathlib.Path], index: Optional[int]
    ) -> SampleFile:
        assert manifest
        try:
            return resolve_sample(manifest, index)
        except ManifestError as e:
            self.logger.error("%s", e)
            sys.exit(2)

    def configure(self) -> None:
        """Resolve the sample and derive the output files"""
        try:
            self.index = array_index(self.array_index)
        except ManifestError as e:
            self.logger.error("%s", e)
            sys.exit(2)

        self.job_params = self.job_parameters()
        output_dir = self.output_dir.resolve()
        self.outputs = output_files(
            self.job_params.sample.name,
            output_dir,
            self.suffix,
            self.output_suffix,
            self.log_suffix,
            self.log,
        )

    @abstractmethod
    def job_parameters(self) -> JobParameters:
        pass

    def gatk_command(self) -> GatkCommand:
        return build_command(
            self.operation,
            self.job_params,
            self.reference_config,
            self.outputs.output,
            tmp_dir=self.outputs.tmp_dir,
            xmx=self.xmx,
        )

    def build_dag(self) -> DAG:
        """Build the DAG for the pipeline"""
        self.logger.debug("Building the DAG")
        dag = DAG()

        gatk_job = Job(
            cmds.cmd_gatk(self.gatk_command()),
            self.step_name,
            log=self.outputs.gatk_log,
        )
        dag.add_job(gatk_job)

        if self.compress_output:
            vcf = self.outputs.output
            vcf_gz = pathlib.Path(str(vcf) + ".gz")
            dag.add_chain(
                Job(
                    cmds.cmd_bgzip(vcf),
                    self.compress_step_name,
                    log=self.outputs.tmp_log,
                ),
                Job(
                    cmds.cmd_tabix(vcf_gz),
                    "index the compressed VCF",
                    log=self.outputs.tmp_log,
                ),
                # the tabix index replaces the GATK index
                Job(
                    cmds.cmd_rm([pathlib.Path(str(vcf) + ".idx")]),
                    "remove the GATK index",
                ),
                after=gatk_job,
            )
        return dag

    def run(self, dag: DAG) -> BaseExecutor:
        """Execute the DAG"""
        self.logger.debug("Creating the scheduler")
        scheduler = ThreadScheduler(dag, 1)

        self.logger.debug("Creating the executor")
        Executor = DryRunExecutor if self.dry_run else LocalExecutor
        executor = Executor(scheduler)

        self.logger.info("Starting execution")
        executor.execute()
        return executor

    def write_start_log(self) -> None:
        self.logger.info("----------------------------------------------")
        self.logger.info("Start: %s", self.process_name)
        self.logger.info("exome-gatk version: %s", __version__)
        assert self.input
        self.logger.info("Input: %s", self.input.resolve())
        if self.index is not None:
            self.logger.info("Array index: %s", self.index)
        self.logger.info("Sample: %s", self.job_params.sample.path)
        if self.job_params.normal:
            self.logger.info("Normal sample: %s", self.job_params.normal.path)
        if self.job_params.target:
            self.logger.info("Target intervals: %s", self.job_params.target)
        self.logger.info("Reference file: %s", self.reference_config.path)
        self.logger.info(
            "Reference Genome File is %s", self.reference_config.ref
        )
        self.logger.info("Output: %s", self.outputs.output)
        self.logger.info("----------------------------------------------")

    def remove_step_logs(self) -> None:
        """Remove the step logs of an earlier run of this sample"""
        for path in (self.outputs.gatk_log, self.outputs.tmp_log):
            if path.is_file():
                path.unlink()

    def copy_gatk_log(self) -> None:
        for path in (self.outputs.gatk_log, self.outputs.tmp_log):
            lines = trim_gatk_log(path)
            if lines:
                self.logger.info("Log of %s:", path.name)
            for line in lines:
                self.logger.info("    %s", line)

    def write_end_log(self) -> None:
        self.logger.info("Finished: %s", self.process_name)
        self.logger.info("----------------------------------------------")
