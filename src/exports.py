"""JSON and CSV exports of a resolution result."""

import csv
import json
import logging

logger = logging.getLogger(__name__)


def _unit_source(unit):
    return unit.source.describe() if unit.source is not None else None


def result_to_dict(result):
    """Plain-data view of a ResolutionResult."""
    return {
        "mode": result.mode.value,
        "units": [
            {"id": u.id, "version": str(u.version), "repository": _unit_source(u)}
            for u in result.units
        ],
        "bundles": [
            {
                "id": b.id,
                "version": str(b.version),
                "location": b.location,
                "fragment": b.fragment,
                "singleton": b.singleton,
            }
            for b in result.bundles
        ],
        "features": [
            {"id": f.id, "version": str(f.version), "location": f.location}
            for f in result.features
        ],
        "failedRequirements": [
            {
                "namespace": r.namespace,
                "name": r.name,
                "range": str(r.range),
                "optional": r.optional,
            }
            for r in result.failed_requirements
        ],
    }


def export_json(result, path):
    """Exports the resolution result to a JSON file.

    Args:
        result (ResolutionResult): Result of a resolution run.
        path (str): File path to export the JSON.

    Raises:
        OSError: The file couldn't be written.
    """
    with open(path, 'w', encoding='utf-8') as file:
        json.dump(result_to_dict(result), file, ensure_ascii=False, indent=4)
    logger.info("JSON file has been successfully exported at: %s", path)


def export_csv(result, path):
    """Exports the resolution result to a CSV file, one row per entry.

    Args:
        result (ResolutionResult): Result of a resolution run.
        path (str): File path to export the CSV.

    Raises:
        OSError: The file couldn't be written.
    """
    rows = [["Kind", "ID", "Version", "Location", "Repository"]]
    for u in result.units:
        rows.append(["unit", u.id, str(u.version), "", _unit_source(u) or ""])
    for b in result.bundles:
        rows.append(["bundle", b.id, str(b.version), b.location, ""])
    for f in result.features:
        rows.append(["feature", f.id, str(f.version), f.location, ""])
    for r in result.failed_requirements:
        rows.append(["failed-requirement", r.name, str(r.range), "", r.namespace])
    with open(path, 'w', newline='', encoding='utf-8') as file:
        csv.writer(file).writerows(rows)
    logger.info("CSV file has been successfully exported at: %s", path)
