from __future__ import annotations
import argparse, json, logging, sys, time
from typing import Any, Dict, List

import yaml

from .config import DEFAULT_ENV_PREFIX, load_document, resolve_settings
from .reports.score_report import build_score_report
from .simulators.diffusion import fdm_steps
from .simulators.penetration import TRIALS_PER_CALL, ComputationError, score_query
from .validators import InputValidationError

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INVALID_INPUT = 2
EXIT_COMPUTATION = 3


def _parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="python -m armor_sim.cli",
        description="Armor penetration estimator CLI"
    )
    sub = p.add_subparsers(dest="cmd")

    # score
    sc = sub.add_parser("score", help="Estimate the effectiveness score of one attack")
    sc.add_argument("query", type=str, help="YAML/JSON file with attack, weapon_material, armor_material, weapon")
    _add_common_args(sc)
    sc.add_argument("--report", type=str, default=None, help="Path to save report (.json or .md)")
    sc.add_argument("--print-md", action="store_true", help="Print Markdown report to stdout")

    # diffuse
    df = sub.add_parser("diffuse", help="Apply diffusion steps to a flattened grid")
    df.add_argument("grid", type=str, help='YAML/JSON file: {"width": int, "cells": [...]}')
    df.add_argument("--steps", type=int, default=1)
    df.add_argument("--log-level", type=str, default=None)

    # bench
    bn = sub.add_parser("bench", help="Time repeated estimator calls")
    bn.add_argument("query", type=str)
    _add_common_args(bn)
    bn.add_argument("--out", type=str, default=None, help="Save benchmark JSON")

    args = p.parse_args(argv)
    if getattr(args, "cmd", None) is None:
        p.print_help()
        sys.exit(2)
    return args


def _add_common_args(ap: argparse.ArgumentParser) -> None:
    ap.add_argument("--runs", type=int, default=None, help="Number of estimator calls")
    ap.add_argument("--seed", type=int, default=None, help="Seed for a reproducible run")
    ap.add_argument("--config", type=str, action="append", default=[], help="YAML/JSON config files (merged)")
    ap.add_argument("--env-prefix", type=str, default=DEFAULT_ENV_PREFIX, help="Env prefix for overrides")
    ap.add_argument("--log-level", type=str, default=None)


def _settings(args: argparse.Namespace) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    if getattr(args, "runs", None) is not None:
        overrides.setdefault("estimator", {})["runs"] = args.runs
    if getattr(args, "seed", None) is not None:
        overrides.setdefault("estimator", {})["seed"] = args.seed
    if getattr(args, "log_level", None):
        overrides["log"] = {"level": args.log_level}
    return resolve_settings(
        getattr(args, "config", []),
        getattr(args, "env_prefix", DEFAULT_ENV_PREFIX),
        overrides,
    )


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _read_document(path: str, record: str) -> Dict[str, Any]:
    try:
        return load_document(path)
    except (OSError, yaml.YAMLError, ValueError) as e:
        raise InputValidationError(
            record, [{"field": "", "message": str(e), "type": type(e).__name__}]
        ) from e


def _build_query(args: argparse.Namespace, settings: Dict[str, Any]) -> Dict[str, Any]:
    query = _read_document(args.query, "query")
    est = settings.get("estimator", {}) or {}
    # Explicit CLI flags beat the query file; the query file beats config.
    if args.runs is not None or "runs" not in query:
        query["runs"] = est.get("runs", 1)
    if args.seed is not None or "seed" not in query:
        query["seed"] = est.get("seed")
    return query


def _score(args: argparse.Namespace, settings: Dict[str, Any]) -> int:
    if args.report and not args.report.endswith((".json", ".md")):
        print("error: report path must end with .json or .md", file=sys.stderr)
        return EXIT_INVALID_INPUT
    query = _build_query(args, settings)
    res = score_query(query)
    logger.info("scored %d run(s): mean=%.2f", res["runs"], res["mean"])
    report = build_score_report(query, res["scores"], seed=query.get("seed"))
    if args.report:
        if args.report.endswith(".json"):
            with open(args.report, "w", encoding="utf-8") as f:
                f.write(report.to_json())
        else:
            with open(args.report, "w", encoding="utf-8") as f:
                f.write(report.to_markdown())
    if args.print_md:
        print(report.to_markdown())
    elif res["runs"] == 1:
        print(f"{res['score']:.1f}")
    else:
        print(json.dumps({k: v for k, v in res.items() if k != "scores"}))
    return EXIT_OK


def _diffuse(args: argparse.Namespace) -> int:
    grid = _read_document(args.grid, "grid")
    try:
        cells = fdm_steps(grid.get("cells", []), grid.get("width"), args.steps)
    except (TypeError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_INVALID_INPUT
    print(json.dumps(cells))
    return EXIT_OK


def _bench(args: argparse.Namespace, settings: Dict[str, Any]) -> Dict[str, Any]:
    query = _build_query(args, settings)
    t0 = time.perf_counter()
    res = score_query(query)
    t1 = time.perf_counter()
    elapsed = max(1e-9, t1 - t0)
    return {
        "runs": res["runs"],
        "mean": res["mean"],
        "stdev": res["stdev"],
        "seconds": elapsed,
        "calls_per_sec": res["runs"] / elapsed,
        "trials_per_sec": res["runs"] * TRIALS_PER_CALL / elapsed,
    }


def main(argv: List[str] | None = None) -> int:
    args = _parse_args(argv)
    settings = _settings(args)
    _configure_logging(settings["log"]["level"])

    try:
        if args.cmd == "score":
            return _score(args, settings)
        if args.cmd == "diffuse":
            return _diffuse(args)
        if args.cmd == "bench":
            out = _bench(args, settings)
            if args.out:
                with open(args.out, "w", encoding="utf-8") as f:
                    json.dump(out, f, indent=2)
            print(json.dumps(out))
            return EXIT_OK
    except InputValidationError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_INVALID_INPUT
    except ComputationError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_COMPUTATION

    return 1


if __name__ == "__main__":
    raise SystemExit(main())
