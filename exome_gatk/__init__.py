import sys

from . import argh_parser
from .cram import CramPipeline
from .exceptions import ExecutionError
from .haplotypecaller import HaplotypeCallerPipeline
from .mutect2 import Mutect2Pipeline


def main(argv=None):
    """main entry point for this project"""
    parser = argh_parser.CustomArghParser(prog="exome-gatk")
    parser.add_argument(
        "-v",
        "--verbose",
        help="Verbose logging",
        action="store_const",
        dest="loglevel",
        const="INFO",
        default="WARNING",
    )
    parser.add_argument(
        "-d",
        "--debug",
        help="Print debugging info",
        action="store_const",
        dest="loglevel",
        const="DEBUG",
    )
    subparsers = parser.add_subparsers(required=True)

    # PrintReads parser
    pipeline = CramPipeline()
    cram_subparser = subparsers.add_parser(
        "cram", help="Create a CRAM file from a BAM file"
    )
    pipeline.add_arguments(cram_subparser)
    cram_subparser.set_defaults(pipeline=pipeline.main)

    # HaplotypeCaller parser
    pipeline = HaplotypeCallerPipeline()
    hc_subparser = subparsers.add_parser(
        "haplotypecaller", help="Call germline variants into a gVCF"
    )
    pipeline.add_arguments(hc_subparser)
    hc_subparser.set_defaults(pipeline=pipeline.main)

    # Mutect2 parser
    pipeline = Mutect2Pipeline()
    mutect2_subparser = subparsers.add_parser(
        "mutect2", help="Call somatic variants in a tumor/normal pair"
    )
    pipeline.add_arguments(mutect2_subparser)
    mutect2_subparser.set_defaults(pipeline=pipeline.main)

    args = parser.parse_args(argv)
    try:
        args.pipeline(args)
    except ExecutionError:
        sys.exit(1)


if __name__ == "__main__":
    main()
