"""
Exceptions raised by exome-gatk
"""


class ExomeGatkError(Exception):
    """Base class for exome-gatk errors"""


class ManifestError(ExomeGatkError):
    """The sample manifest or array index cannot select a sample"""


class ReferenceConfigError(ExomeGatkError):
    """The reference configuration is unreadable or incomplete"""


class DagExecutionError(ExomeGatkError):
    """Jobs were finished out of order"""


class ExecutionError(ExomeGatkError):
    """A step failed or was never run"""
