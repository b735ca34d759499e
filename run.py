"""CLI entrypoint."""
from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv as _load_dotenv

from place_validator import config
from place_validator.errors import ScanError
from place_validator.pipeline import CacheDecision, ScanOrchestrator, ScanPlan, ScanResult
from place_validator.reporting import (
    ensure_dir,
    render_cache_listing,
    render_results,
    write_results_csv,
    write_results_json,
)
from place_validator.storage import SqliteStore, get_api_key, set_api_key


def _repo_root() -> Path:
    return Path(__file__).resolve().parent


def load_env(path: str = ".env", root_dir: Optional[Path] = None) -> None:
    """Optionally load a repo-root .env file without overriding real env vars."""
    root = Path(root_dir) if root_dir else _repo_root()
    env_path = (root / path).resolve()
    if not env_path.exists():
        return
    _load_dotenv(dotenv_path=env_path, override=False)


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Scan Google Maps nearby places for missing website, phone, hours or emoji names"
    )
    parser.add_argument("--db", type=str, default=None, help="Path to the local store")
    parser.add_argument("--config", type=str, default=None, help="Path to validator_config.json")
    parser.add_argument("--set-key", type=str, default=None, help="Store the Places API key")
    parser.add_argument("--scan-url", type=str, default=None, help="Google Maps URL containing @lat,lng,zoomz")
    parser.add_argument("--lat", type=float, default=None)
    parser.add_argument("--lng", type=float, default=None)
    parser.add_argument("--zoom", type=float, default=None)
    cache_group = parser.add_mutually_exclusive_group()
    cache_group.add_argument("--use-cache", action="store_true", help="Reuse fresh cached results without asking")
    cache_group.add_argument("--fresh", action="store_true", help="Always call the API, ignoring fresh cache")
    parser.add_argument("--whitelist", action="append", default=[], help="Place id to suppress permanently")
    parser.add_argument("--blacklist", action="append", default=[], help="Place type to exclude from future scans")
    parser.add_argument("--unblacklist", action="append", default=[], help="Place type to allow again")
    parser.add_argument("--show-blacklist", action="store_true")
    parser.add_argument("--list-cache", action="store_true")
    parser.add_argument("--load-cache", type=int, default=None, help="Show cached entry by index")
    parser.add_argument("--clear-cache", action="store_true")
    parser.add_argument("--out", type=str, default=None, help="Directory to export results.json and results.csv")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def prompt_cache_decision(plan: ScanPlan) -> CacheDecision:
    answer = input(
        f"Found cached results from {plan.cache_age_minutes} minutes ago. "
        "Use cached results instead of making a new API request? [Y/n] "
    )
    if answer.strip().lower() in {"", "y", "yes"}:
        return CacheDecision.USE_CACHE
    return CacheDecision.FETCH_FRESH


def always_use_cache(plan: ScanPlan) -> CacheDecision:
    return CacheDecision.USE_CACHE


def _emit(result: ScanResult, orchestrator: ScanOrchestrator, out_dir: Optional[str]) -> None:
    for line in render_results(result, orchestrator.suppression):
        print(line)
    if out_dir:
        ensure_dir(out_dir)
        visible = result.visible(orchestrator.suppression)
        write_results_json(os.path.join(out_dir, "results.json"), visible)
        write_results_csv(os.path.join(out_dir, "results.csv"), visible)
        print(f"Results written to {out_dir}/results.json and {out_dir}/results.csv")


def main(argv: Optional[list] = None) -> int:
    load_env()
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    config.load_validator_config(args.config)

    store = SqliteStore(args.db or config.STORE_DB_PATH)
    try:
        if args.set_key is not None:
            try:
                set_api_key(store, args.set_key)
            except ValueError as exc:
                print(str(exc), file=sys.stderr)
                return 1
            print("API key stored.")
        elif get_api_key(store) is None and os.environ.get("GOOGLE_MAPS_API_KEY", "").strip():
            set_api_key(store, os.environ["GOOGLE_MAPS_API_KEY"])

        orchestrator = ScanOrchestrator(store)
        suppression = orchestrator.suppression

        for place_id in args.whitelist:
            suppression.add_to_whitelist(place_id)
        for type_tag in args.blacklist:
            suppression.add_to_blacklist(type_tag)
        for type_tag in args.unblacklist:
            suppression.remove_from_blacklist(type_tag)

        if args.show_blacklist:
            types = suppression.blacklist_for_request()
            print("Blacklisted types: " + (", ".join(types) if types else "None"))

        if args.clear_cache:
            orchestrator.cache.clear()
            print("Cache cleared.")

        if args.list_cache:
            for line in render_cache_listing(orchestrator.cache.entries()):
                print(line)

        if args.load_cache is not None:
            cached = orchestrator.load_cached(args.load_cache)
            if cached is None:
                print(f"No cached entry at index {args.load_cache}", file=sys.stderr)
                return 1
            _emit(cached, orchestrator, args.out)

        if args.use_cache:
            decide = always_use_cache
        elif args.fresh:
            decide = None
        else:
            decide = prompt_cache_decision

        try:
            if args.scan_url is not None:
                result = orchestrator.scan_url(args.scan_url, decide=decide)
            elif args.lat is not None or args.lng is not None:
                if args.lat is None or args.lng is None:
                    print("Scanning by coordinates requires both --lat and --lng", file=sys.stderr)
                    return 1
                result = orchestrator.scan(args.lat, args.lng, args.zoom, decide=decide)
            else:
                return 0
        except ScanError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1

        _emit(result, orchestrator, args.out)
        return 0
    finally:
        store.close()


if __name__ == "__main__":
    raise SystemExit(main())
