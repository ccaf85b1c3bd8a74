"""Argument parsing functionality for unitresolve."""

import argparse
from constants import Constants

def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="unitresolve",
        description=(
            "unitresolve - Resolve installable units and their requirements "
            "into bundles and features"
        ),
        add_help=True,
    )

    parser.add_argument("-r", "--repository",
                        dest="REPOSITORIES",
                        help="Repository folder, manifest file or http(s) URL. "
                             "Repeat to add fallback repositories, searched in the given order.",
                        action="append",
                        type=str,
                        default=[])
    parser.add_argument("-u", "--unit",
                        dest="UNITS",
                        help="Unit to resolve, as ID or ID:VERSION (highest version when omitted).",
                        action="append",
                        type=str,
                        required=True)
    parser.add_argument("-m", "--mode",
                        dest="MODE",
                        help="Resolution mode: full (fail on missing requirements) or "
                             "slice (skip what can't be found). Default: full",
                        action="store",
                        type=str.lower,
                        choices=Constants.MODES)

    parser.add_argument("-o", "--output",
                        dest="OUTPUT",
                        help="Path to output file (JSON or CSV)",
                        action="store",
                        type=str)
    parser.add_argument("-f", "--format",
                        dest="OUTPUT_FORMAT",
                        help="Output format (json or csv). If not specified, inferred from --output extension; defaults to json.",
                        action="store",
                        type=str.lower,
                        choices=Constants.OUTPUT_FORMATS)

    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'])
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    parser.add_argument("-q", "--quiet",
                        dest="QUIET",
                        help="Only log errors to the console.",
                        action="store_true")

    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML, YML, or JSON)",
                        action="store",
                        type=str)

    return parser.parse_args(argv)
