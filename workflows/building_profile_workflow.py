from __future__ import annotations

import argparse
import json
from pathlib import Path

from dotenv import load_dotenv

from owner_resolution import PropertyKey, Settings, fetch_building_profile


def run(boro: str, block: str, lot: str, out_path: str = "data/output/building_profile.json", enrich: bool = True) -> str:
    key = PropertyKey.parse(boro, block, lot)
    profile = fetch_building_profile(key, settings=Settings.from_env(), enrich=enrich)

    out_file = Path(out_path)
    out_file.parent.mkdir(parents=True, exist_ok=True)
    with out_file.open("w", encoding="utf-8") as f:
        json.dump(profile.as_dict(), f, indent=2, default=str)
    return str(out_file)


def cli() -> None:
    load_dotenv()
    parser = argparse.ArgumentParser(description="Building owner resolution")
    parser.add_argument("--boro", required=True, help="Borough code, 1-5")
    parser.add_argument("--block", required=True, help="Tax block")
    parser.add_argument("--lot", required=True, help="Tax lot")
    parser.add_argument(
        "--out",
        type=str,
        default="data/output/building_profile.json",
        help="Path to output JSON",
    )
    parser.add_argument("--no-enrich", action="store_true", help="Skip Apollo/PDL lookups")
    args = parser.parse_args()
    try:
        path = run(args.boro, args.block, args.lot, args.out, enrich=not args.no_enrich)
    except ValueError as e:
        parser.error(str(e))
    print(f"Wrote: {path}")  # pragma: no cover


if __name__ == "__main__":
    cli()
