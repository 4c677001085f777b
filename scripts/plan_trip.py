from __future__ import annotations

# Allow running scripts without requiring an editable install (`pip install -e .`).
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
sys.path.insert(0, str(SRC_PATH))

import argparse
import asyncio
from dataclasses import asdict
import json
from typing import Any, Optional

from bcyclerouter.api.service import RouterService
from bcyclerouter.config.loader import load_config
from bcyclerouter.errors import PlaceNotFoundError, PlanningError, RouterError
from bcyclerouter.planning.validation import ORIGIN_NOT_FOUND_MESSAGE
from bcyclerouter.utils.geo import format_distance
from bcyclerouter.utils.logging import configure_logging


async def _run(service: RouterService, origin_text: str, destination_text: Optional[str]) -> dict[str, Any]:
    try:
        origin = await service.resolve_place(origin_text)
    except PlaceNotFoundError as exc:
        raise PlanningError(ORIGIN_NOT_FOUND_MESSAGE) from exc
    if not destination_text:
        result = await service.nearest(origin.point)
        return {"origin": asdict(origin), "nearest": asdict(result)}

    destination = await service.resolve_place(destination_text)
    plan = await service.plan(origin.point, destination)
    return {"origin": asdict(origin), "destination": asdict(destination), "plan": asdict(plan)}


def _print_summary(payload: dict[str, Any]) -> None:
    if "nearest" in payload:
        nearest = payload["nearest"]
        station = nearest["station"]
        suffix = " (no bikes anywhere nearby; closest station shown)" if nearest["is_fallback"] else ""
        print(f"nearest {station['name']} bikes={station['bikes_available']}{suffix}")
        print(f"walk {format_distance(nearest['distance_mi'])}")
        print(nearest["navigation_link"])
        return

    plan = payload["plan"]
    print(f"pickup  {plan['pickup']['name']} bikes={plan['pickup']['bikes_available']}")
    print(f"dropoff {plan['dropoff']['name']} docks={plan['dropoff']['docks_available']}")
    print(
        f"walk {format_distance(plan['walk_to_pickup_mi'])} / "
        f"bike {format_distance(plan['bike_leg_mi'])} / "
        f"walk {format_distance(plan['walk_from_dropoff_mi'])}"
    )
    print(plan["navigation_link"])


def main() -> int:
    p = argparse.ArgumentParser(description="Plan a bike-share trip (or find the nearest bike) from the command line.")
    p.add_argument("--config", default=None, help="Config JSON path.")
    p.add_argument("--origin", required=True, help='Address or "lat,lon".')
    p.add_argument("--destination", default=None, help='Address or "lat,lon"; omit to find the nearest bike.')
    p.add_argument("--showcase", action="store_true", help="Pretend every station is open and stocked.")
    p.add_argument("--json", action="store_true", help="Emit JSON only.")
    args = p.parse_args()

    config = load_config(args.config)
    configure_logging(config.logging)

    service = RouterService(config)
    if args.showcase:
        service.set_showcase_mode(True)
    try:
        payload = asyncio.run(_run(service, args.origin, args.destination))
    except RouterError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    finally:
        service.close()

    if args.json:
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        _print_summary(payload)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
