"""
Command-line entrypoint (console script `nilo-trust`).

  nilo-trust score captured.json            score captured payloads offline
  nilo-trust score captured.json --kind repository --target owner/name
  nilo-trust rules --kind token              list evaluators, weights and enabled state
  nilo-trust serve --port 8000              run the HTTP API with uvicorn

The score input file is JSON:
  {"kind": "token", "target": "<mint>", "signals": {"token_metadata": {...}, "holders": [...]}}
Signal names are bundle names; a missing bundle is reported as unavailable.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from pathlib import Path
from typing import Any

from nilo_trust.config import get_settings
from nilo_trust.config.env import load_nilo_env
from nilo_trust.core.exceptions import ValidationError
from nilo_trust.nilo_logging import get_logger

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_INPUT_ERROR = 1
EXIT_VALIDATION_ERROR = 2


def _load_input(path: Path) -> dict[str, Any]:
    with path.open(encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError("input must be a JSON object")
    return data


def _score(args: argparse.Namespace) -> int:
    from nilo_trust.analysis_engine.engine import TrustEngine
    from nilo_trust.analysis_engine.targets import AnalysisTarget

    try:
        data = _load_input(Path(args.file))
    except (OSError, ValueError) as e:
        logger.error("cli_input_error", file=str(args.file), error=str(e))
        print(f"[nilo-trust] ERROR: cannot read {args.file}: {e}", file=sys.stderr)
        return EXIT_INPUT_ERROR

    kind = args.kind or data.get("kind")
    value = args.target or data.get("target")
    signals = data.get("signals") or {}
    if not isinstance(signals, dict):
        print("[nilo-trust] ERROR: 'signals' must be an object keyed by bundle name", file=sys.stderr)
        return EXIT_INPUT_ERROR

    try:
        target = AnalysisTarget.parse(kind or "", value)
        engine = TrustEngine(providers={})
        composite = asyncio.run(engine.score_signals(target, signals))
    except ValidationError as e:
        print(f"[nilo-trust] invalid target: {e.message}", file=sys.stderr)
        return EXIT_VALIDATION_ERROR

    out = composite.to_dict()
    if not args.full:
        out.pop("per_signal", None)
    print(json.dumps(out, indent=2 if args.pretty else None, sort_keys=False))
    return EXIT_OK


def _rules(args: argparse.Namespace) -> int:
    from nilo_trust.analysis_engine.models import TargetKind
    from nilo_trust.analysis_engine.profiles import default_profiles

    profiles = default_profiles(get_settings())
    kinds = [TargetKind(args.kind)] if args.kind else list(TargetKind)
    out = {kind.value: profiles[kind].to_dict() for kind in kinds}
    print(json.dumps(out, indent=2 if args.pretty else None))
    return EXIT_OK


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    from nilo_trust.api_server.app import app

    settings = get_settings()
    host = args.host or settings.api_host
    port = args.port or settings.api_port
    logger.info("cli_server_starting", host=host, port=port)
    uvicorn.run(app, host=host, port=port, log_level=os.getenv("LOG_LEVEL", "info").lower())
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="nilo-trust",
        description="Composite trust scores for Solana tokens, wallets and code repositories.",
    )
    sub = ap.add_subparsers(dest="command", required=True)

    score = sub.add_parser("score", help="Score captured signal payloads from a JSON file")
    score.add_argument("file", help="JSON file with kind, target and signals")
    score.add_argument("--kind", choices=["token", "wallet", "repository"], default=None)
    score.add_argument("--target", default=None, help="Address or owner/name (overrides the file)")
    score.add_argument("--full", action="store_true", help="Include per-signal results")
    score.add_argument("--pretty", action="store_true", help="Indent JSON output")
    score.set_defaults(func=_score)

    rules = sub.add_parser("rules", help="List the evaluators each profile runs")
    rules.add_argument("--kind", choices=["token", "wallet", "repository"], default=None)
    rules.add_argument("--pretty", action="store_true", help="Indent JSON output")
    rules.set_defaults(func=_rules)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)
    serve.set_defaults(func=_serve)
    return ap


def main(argv: list[str] | None = None) -> int:
    load_nilo_env()
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
