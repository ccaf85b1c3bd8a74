"""unitresolve - resolve installable units into bundles and features.

    Returns:
        int: Exit code
"""
import logging
import sys

from args import parse_args
from cli_config import ConfigError, build_run_config
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from constants import ExitCodes
from exports import export_csv, export_json
from repository import open_repository
from units import (
    ArtifactNotFound,
    IncludeMode,
    MalformedSpec,
    RepositoryUnavailable,
    UnresolvedRequirement,
    resolve,
)

logger = logging.getLogger(__name__)


def tokenize_rightmost_colon(s):
    """Return (identifier, version or None) using the rightmost-colon rule."""
    s = s.strip()
    if ':' not in s:
        return s, None
    identifier, _, version = s.rpartition(':')
    return identifier.strip(), (version.strip() or None)


def find_requested_unit(repositories, token):
    """Look up ``token`` (ID or ID:VERSION) in the repositories, in order.

    Raises:
        ArtifactNotFound: no repository knows the unit.
    """
    unit_id, version = tokenize_rightmost_colon(token)
    errors = []
    for repository in repositories:
        try:
            return repository.find_unit(unit_id, version)
        except ArtifactNotFound as e:
            errors.append(e)
    message = f"can't find requested unit {token}: " + (
        "; ".join(str(e) for e in errors) or "no repositories configured"
    )
    if errors and all(isinstance(e, RepositoryUnavailable) for e in errors):
        raise RepositoryUnavailable(message)
    raise ArtifactNotFound(message)


def _setup_logging(args, level=None):
    """Configure logging based on CLI arguments."""
    configure_logging(level)
    if getattr(args, "QUIET", False):
        for handler in logging.getLogger().handlers:
            handler.setLevel(logging.ERROR)

    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
        logging.getLogger().addHandler(file_handler)
        logger.info("Logging to file: %s", log_file)


def _output_format(args):
    if getattr(args, "OUTPUT_FORMAT", None):
        return args.OUTPUT_FORMAT.lower()
    if args.OUTPUT.lower().endswith(".csv"):
        return "csv"
    return "json"


def run(args):
    """Resolve the units named by ``args``; returns an ExitCodes member."""
    try:
        config = build_run_config(args)
    except ConfigError as e:
        _setup_logging(args, getattr(args, "LOG_LEVEL", None))
        logger.error("%s", e)
        return ExitCodes.FILE_ERROR
    _setup_logging(args, config.log_level)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action="main",
                                mode=config.mode, repositories=len(config.repositories))
        )

    if not config.repositories:
        logger.error("No repositories given, use --repository or the 'repositories' config key.")
        return ExitCodes.FILE_ERROR

    repositories = [open_repository(location) for location in config.repositories]
    try:
        requested = [find_requested_unit(repositories, token) for token in config.units]
        result = resolve(repositories, IncludeMode.parse(config.mode), requested)
    except MalformedSpec as e:
        logger.error("Malformed repository content: %s", e)
        return ExitCodes.MALFORMED
    except UnresolvedRequirement as e:
        logger.error("%s", e)
        return ExitCodes.UNRESOLVED
    except RepositoryUnavailable as e:
        logger.error("%s", e)
        return ExitCodes.CONNECTION_ERROR
    except ArtifactNotFound as e:
        logger.error("%s", e)
        return ExitCodes.UNRESOLVED

    logger.info(
        "Resolved %d units into %d bundles and %d features (%s mode).",
        len(result.units), len(result.bundles), len(result.features), result.mode.value,
    )
    for requirement in result.failed_requirements:
        logger.warning("Requirement %s was not resolved.", requirement)

    if getattr(args, "OUTPUT", None):
        try:
            if _output_format(args) == "csv":
                export_csv(result, args.OUTPUT)
            else:
                export_json(result, args.OUTPUT)
        except (OSError, ValueError) as e:
            logger.error("Result couldn't be written to %s: %s", args.OUTPUT, e)
            return ExitCodes.FILE_ERROR

    return ExitCodes.SUCCESS


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    sys.exit(run(args).value)


if __name__ == "__main__":
    main()
