"""
Somatic variant calling of tumor/normal pairs with GATK Mutect2
"""

import copy
import pathlib
from typing import Optional

from .gatk import JobParameters, Operation
from .pipeline import BaseGatkPipeline
from .util import path_arg


class Mutect2Pipeline(BaseGatkPipeline):
    """Call somatic variants in a tumor against its matched normal.

    The tumor and normal inputs are resolved with the same array index, so
    two '.list' files must list the pairs in the same order.
    """

    operation = Operation.MUTECT2
    suffix = "Mutect2"
    output_suffix = ".Mutect2.g.vcf"
    log_suffix = "M2VCF"
    process_name = "Somatic VCF generation with GATK 4.0 Mutect2"
    step_name = "VCF generation with GATK 4.0 Mutect2"
    compress_output = True
    compress_step_name = "gzip and index the VCF"
    reference_fields = ("ref", "gatk_jar", "mutect_ref")

    params = copy.deepcopy(BaseGatkPipeline.params)
    params["input"]["help"] = (
        "Path to the tumor BAM file, or a '.list' file with one tumor BAM "
        "path per line for array jobs."
    )
    params.update(
        {
            "normal": {
                "flags": ["-n", "--normal"],
                "required": True,
                "help": (
                    "Path to the normal BAM file, or a '.list' file of "
                    "normal BAMs in the same order as the tumor list."
                ),
                "type": path_arg(exists=True, is_file=True),
            },
            "target": {
                "flags": ["-t", "--target"],
                "help": (
                    "Exome capture kit targets or other genomic intervals "
                    "BED file, or the name of a variable in the reference "
                    "file holding its path."
                ),
            },
        }
    )

    def __init__(self) -> None:
        super().__init__()
        self.normal: Optional[pathlib.Path] = None
        self.target: Optional[str] = None

    def job_parameters(self) -> JobParameters:
        target = self.reference_config.resolve_target(self.target)
        if self.target and target is None:
            self.logger.warning(
                "The target file '%s' does not exist, calling variants "
                "without target intervals",
                self.target,
            )

        return JobParameters(
            sample=self.resolve_sample(self.input, self.index),
            normal=self.resolve_sample(self.normal, self.index),
            target=target,
            bad_et=self.bad_et,
            fix_misencoded=self.fix_misencoded,
        )
