"""
CRAM files from BAM files with GATK PrintReads
"""

from .gatk import JobParameters, Operation
from .pipeline import BaseGatkPipeline


class CramPipeline(BaseGatkPipeline):
    """Write a CRAM copy of each BAM"""

    operation = Operation.PRINT_READS
    suffix = "cram"
    output_suffix = ".cram"
    process_name = "CRAM from BAM generation with GATK"
    step_name = "CRAM generation with GATK"

    def job_parameters(self) -> JobParameters:
        return JobParameters(
            sample=self.resolve_sample(self.input, self.index),
            bad_et=self.bad_et,
            fix_misencoded=self.fix_misencoded,
        )
