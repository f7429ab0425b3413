"""
Per-sample gVCFs with GATK HaplotypeCaller
"""

import copy
import sys
from typing import Optional

from .gatk import JobParameters, Operation
from .pipeline import BaseGatkPipeline


class HaplotypeCallerPipeline(BaseGatkPipeline):
    """Call germline variants in gVCF mode"""

    operation = Operation.HAPLOTYPE_CALLER
    suffix = "HCgVCF"
    output_suffix = ".g.vcf"
    process_name = "Genomic VCF generation with GATK HaplotypeCaller"
    step_name = "gVCF generation with GATK HaplotypeCaller"
    compress_output = True
    compress_step_name = "gzip and index the gVCF"
    reference_fields = ("ref", "gatk_jar", "dbsnp")

    params = copy.deepcopy(BaseGatkPipeline.params)
    params.update(
        {
            "target": {
                "flags": ["-t", "--target"],
                "required": True,
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
        self.target: Optional[str] = None

    def job_parameters(self) -> JobParameters:
        target = self.reference_config.resolve_target(self.target)
        if target is None:
            self.logger.error(
                "The target file '%s' does not exist and is not defined in "
                "the reference file",
                self.target,
            )
            sys.exit(2)

        return JobParameters(
            sample=self.resolve_sample(self.input, self.index),
            target=target,
            bad_et=self.bad_et,
            fix_misencoded=self.fix_misencoded,
        )
