"""pmfcore CLI - deterministic command-line access to the decision core.

Usage:
    python -m pmfcore metrics [--input PATH]
    python -m pmfcore gates [--input PATH]
    python -m pmfcore uncertainties [--input PATH]
    python -m pmfcore score [--input PATH] [--context-from-flows] [--summary]

Every command reads one JSON document from --input or stdin and prints
JSON with sorted keys to stdout. Logs go to stderr at the level named by
PMFCORE_LOG_LEVEL (default WARNING).

Exit codes:
    0: Success
    1: Internal error
    2: Invalid input (unreadable, not JSON, or failing validation)
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import ValidationError

from pmfcore.gates import (
    ExperimentResults,
    evaluate_criteria,
    evaluate_gates,
    interpret_experiment,
    rule_recommendation,
)
from pmfcore.models import ExperimentRecord, FlowRecord, SignalRecord
from pmfcore.numeric import to_flag
from pmfcore.scoring import ScoringContext, ScoringInput, compute_pmf_score, fallback_summary
from pmfcore.signals import classify_by_rules, compute_metrics
from pmfcore.uncertainty import rank_uncertainties

logger = logging.getLogger(__name__)

LOG_LEVEL_ENV = "PMFCORE_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"


class InputError(ValueError):
    """Input document has the wrong shape for the command."""


def _configure_logging() -> None:
    level_name = os.environ.get(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL).upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _output_json(data: Any) -> None:
    """Output JSON to stdout with deterministic ordering."""
    print(json.dumps(data, sort_keys=True, indent=2))


def _make_error_result(code: str, message: str, path: str = "$") -> dict[str, Any]:
    return {"errors": [{"code": code, "message": message, "path": path}]}


def _validation_errors(exc: ValidationError) -> dict[str, Any]:
    errors = []
    for err in exc.errors():
        loc = "".join(f"[{p}]" if isinstance(p, int) else f".{p}" for p in err["loc"])
        errors.append({"code": "INVALID_INPUT", "message": err["msg"], "path": f"${loc}"})
    return {"errors": errors}


def _load_json_input(input_path: str | None) -> tuple[Any, str | None]:
    """Load JSON from file or stdin.

    Returns:
        Tuple of (parsed_data, error_message). If error_message is not None,
        parsed_data should be ignored.
    """
    try:
        if input_path:
            with open(input_path, encoding="utf-8") as f:
                content = f.read()
        else:
            content = sys.stdin.read()

        if not content.strip():
            return None, "Empty input"

        return json.loads(content), None
    except FileNotFoundError:
        return None, f"File not found: {input_path}"
    except json.JSONDecodeError as e:
        return None, f"Invalid JSON: {e}"
    except OSError as e:
        return None, f"Cannot read input: {e}"


def _require_mapping(data: Any) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise InputError("Expected a JSON object")
    return data


def _list_of(data: Mapping[str, Any], key: str) -> list[Any]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise InputError(f"'{key}' must be a list")
    return value


def run_metrics(data: Any, args: argparse.Namespace) -> dict[str, Any]:
    """Derive metrics from raw counters and apply the classification rules."""
    doc = _require_mapping(data)
    counters = _require_mapping(doc.get("counters", doc))
    computed = compute_metrics(counters)
    items = classify_by_rules(counters, computed)
    return {
        "metrics": computed.to_dict(),
        "classifications": [item.model_dump(mode="json") for item in items],
    }


def run_gates(data: Any, args: argparse.Namespace) -> dict[str, Any]:
    """Evaluate gates, criteria and the rule recommendation for one experiment.

    Results are taken from ``results`` when present, otherwise rebuilt from
    the latest checkpoint in ``signals``.
    """
    doc = _require_mapping(data)
    kill_triggered = to_flag(doc.get("kill_triggered"))
    experiment_doc = _require_mapping(doc.get("experiment") or {})

    if "results" in doc:
        results = ExperimentResults.model_validate(_require_mapping(doc["results"]))
        gates = evaluate_gates(results)
        # criteria live under "results" on a stored experiment row
        criteria_doc = experiment_doc.get("results")
        if not isinstance(criteria_doc, Mapping):
            criteria_doc = experiment_doc
        criteria = evaluate_criteria(criteria_doc, results)
        recommendation = rule_recommendation(gates, criteria, kill_triggered)
        return {
            "criteria": criteria.value,
            "gates": gates.model_dump(mode="json"),
            "recommendation": recommendation.model_dump(mode="json"),
            "results": results.model_dump(mode="json"),
        }

    experiment = ExperimentRecord.model_validate(experiment_doc)
    signals = [SignalRecord.model_validate(s) for s in _list_of(doc, "signals")]
    interpretation = interpret_experiment(experiment, signals, kill_triggered=kill_triggered)
    return interpretation.model_dump(mode="json")


def run_uncertainties(data: Any, args: argparse.Namespace) -> list[dict[str, Any]]:
    """Rank open uncertainties from a list of flow records."""
    rows = data if isinstance(data, list) else _list_of(_require_mapping(data), "flows")
    records = [FlowRecord.model_validate(row) for row in rows]
    return [u.model_dump(mode="json") for u in rank_uncertainties(records)]


def run_score(data: Any, args: argparse.Namespace) -> dict[str, Any]:
    """Compute the PMF score for one product."""
    scoring_input = ScoringInput.model_validate(_require_mapping(data))
    if args.context_from_flows:
        context = ScoringContext.from_flows(scoring_input.flows)
        scoring_input = scoring_input.model_copy(
            update={
                "committed_price_usd": context.committed_price_usd,
                "signal_quality_score": context.signal_quality_score,
                "accelerating_signals": context.accelerating_signals,
            }
        )
    result = compute_pmf_score(scoring_input)
    output = result.to_dict()
    if args.summary:
        output["summary"] = fallback_summary(result).model_dump(mode="json")
    return output


COMMAND_DISPATCH: dict[str, Callable[[Any, argparse.Namespace], Any]] = {
    "metrics": run_metrics,
    "gates": run_gates,
    "uncertainties": run_uncertainties,
    "score": run_score,
}


def cmd_run(args: argparse.Namespace) -> int:
    """Load input, dispatch to the command and print its JSON output.

    Exit codes:
        0: Success
        2: Invalid input
    """
    data, error_msg = _load_json_input(args.input)
    if error_msg is not None:
        _output_json(_make_error_result("INVALID_JSON", error_msg))
        return 2

    try:
        output = COMMAND_DISPATCH[args.command](data, args)
    except ValidationError as e:
        logger.warning(
            "Input failed validation for '%s': %d error(s)", args.command, e.error_count()
        )
        _output_json(_validation_errors(e))
        return 2
    except InputError as e:
        _output_json(_make_error_result("INVALID_INPUT", str(e)))
        return 2

    _output_json(output)
    return 0


def _add_input_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--input",
        required=False,
        default=None,
        metavar="PATH",
        help="Path to JSON file (reads from stdin if omitted)",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="pmfcore",
        description="pmfcore - deterministic PMF decision and scoring core",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    metrics_parser = subparsers.add_parser(
        "metrics",
        help="Derive metrics from raw counters and classify them by rule",
    )
    _add_input_argument(metrics_parser)

    gates_parser = subparsers.add_parser(
        "gates",
        help="Evaluate gates, criteria and recommendation for an experiment",
    )
    _add_input_argument(gates_parser)

    uncertainties_parser = subparsers.add_parser(
        "uncertainties",
        help="Rank open uncertainties from locked flow records",
    )
    _add_input_argument(uncertainties_parser)

    score_parser = subparsers.add_parser(
        "score",
        help="Compute the PMF score and verdict",
    )
    _add_input_argument(score_parser)
    score_parser.add_argument(
        "--context-from-flows",
        action="store_true",
        default=False,
        help="Read committed price and signal quality from the stage 4 and 6 records",
    )
    score_parser.add_argument(
        "--summary",
        action="store_true",
        default=False,
        help="Include the deterministic verdict summary",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Exit codes:
        0: Success
        1: Internal error (unexpected)
        2: Invalid input
    """
    try:
        _configure_logging()
        parser = create_parser()
        args = parser.parse_args(argv)

        if args.command is None:
            parser.print_help()
            return 0

        return cmd_run(args)

    except Exception as e:
        # unexpected errors return exit code 1
        logger.exception("Command failed")
        _output_json(_make_error_result("INTERNAL_ERROR", str(e)))
        return 1


if __name__ == "__main__":
    sys.exit(main())
