"""
analyze_matchup.py — Run the matchup analysis over a JSON payload.

The payload uses the same shape as POST /api/analysis (see
``backend.schemas.AnalysisRequest``).

Usage
-----
  python scripts/analyze_matchup.py --input payload.json
  python scripts/analyze_matchup.py --input payload.json --pretty
  python scripts/analyze_matchup.py --demo --pretty     # bundled sample matchup

Demo output is flagged ``"demo": true``; it is sample data, not a real game.

Exit codes: 0 success, 1 unreadable or invalid payload, 2 roster unavailable.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Ensure the project root (one level up from scripts/) is on sys.path so that
# `from backend.xxx import ...` resolves correctly when the script is run
# directly (e.g.  python scripts/analyze_matchup.py).
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from dotenv import load_dotenv  # noqa: E402
from pydantic import ValidationError  # noqa: E402

from backend.core.engine_config import EngineConfig  # noqa: E402
from backend.core.records import RosterUnavailable  # noqa: E402
from backend.schemas import AnalysisRequest, AnalysisResponse  # noqa: E402

logger = logging.getLogger("analyze_matchup")


DEMO_PAYLOAD = {
    "home_team_id": "DEN",
    "away_team_id": "PHX",
    "home_alias": "DEN",
    "away_alias": "PHX",
    "home_roster": [
        {"player_id": "d1", "name": "Nikola Jokić", "position": "C"},
        {"player_id": "d2", "name": "Jamal Murray", "position": "G"},
        {"player_id": "d3", "name": "Michael Porter Jr.", "position": "F"},
        {"player_id": "d4", "name": "Aaron Gordon", "position": "F"},
        {"player_id": "d5", "name": "Christian Braun", "position": "G"},
    ],
    "away_roster": [
        {"player_id": "p1", "name": "Kevin Durant", "position": "F"},
        {"player_id": "p2", "name": "Devin Booker", "position": "G"},
        {"player_id": "p3", "name": "Bradley Beal", "position": "G"},
        {"player_id": "p4", "name": "Jusuf Nurkic", "position": "C"},
        {"player_id": "p5", "name": "Grayson Allen", "position": "G"},
    ],
    "home_season_stats": [
        {"player_id": "d1", "name": "Nikola Jokic", "points": 26.4, "assists": 9.0,
         "rebounds": 12.4, "threes": 1.1, "usage": 0.30},
        {"player_id": "d2", "name": "Jamal Murray", "points": 21.2, "assists": 6.5,
         "rebounds": 4.1, "threes": 2.5, "usage": 0.27},
        {"player_id": "d3", "name": "Michael Porter Jr", "points": 16.7, "assists": 1.5,
         "rebounds": 7.0, "threes": 2.6, "usage": 0.20},
        {"player_id": "d4", "name": "Aaron Gordon", "points": 13.9, "assists": 3.5,
         "rebounds": 6.5, "threes": 0.5, "usage": 0.17},
        {"player_id": "d5", "name": "Christian Braun", "points": 7.3, "assists": 1.4,
         "rebounds": 3.8, "threes": 0.8, "usage": 0.14},
    ],
    "away_season_stats": [
        {"player_id": "p1", "name": "Kevin Durant", "points": 27.1, "assists": 5.0,
         "rebounds": 6.6, "threes": 2.2, "usage": 0.29},
        {"player_id": "p2", "name": "Devin Booker", "points": 27.1, "assists": 6.9,
         "rebounds": 4.5, "threes": 2.2, "usage": 0.30},
        {"player_id": "p3", "name": "Bradley Beal", "points": 18.2, "assists": 5.0,
         "rebounds": 4.4, "threes": 1.9, "usage": 0.24},
        {"player_id": "p4", "name": "Jusuf Nurkic", "points": 10.9, "assists": 4.0,
         "rebounds": 11.0, "threes": 0.3, "usage": 0.18},
        {"player_id": "p5", "name": "Grayson Allen", "points": 13.5, "assists": 3.0,
         "rebounds": 3.9, "threes": 3.0, "usage": 0.16},
    ],
    "injuries": [
        {"player_id": "p2", "status": "Out", "description": "Ankle"},
        {"player_id": "d2", "status": "Day-To-Day", "description": "Hamstring"},
    ],
    "synergy": [
        {"player_id": "d3", "play_types": [
            {"play_type": "Spotup", "frequency": 0.32},
            {"play_type": "Transition", "frequency": 0.18},
        ]},
        {"player_id": "p1", "play_types": [
            {"play_type": "Isolation", "frequency": 0.25},
            {"play_type": "Postup", "frequency": 0.10},
        ]},
    ],
    "home_defense": {"alias": "DEN", "ranks": {"Isolation": 4, "Spotup": 12}},
    "away_defense": {"alias": "PHX", "ranks": {"Spotup": 27, "Transition": 26}},
    "is_away_b2b": True,
    "market_lines": [
        {"player_id": "d3", "stat": "points", "line": 15.5},
        {"player_id": "p1", "stat": "points", "line": 28.5},
        {"player_id": "p3", "stat": "points", "line": 18.5},
    ],
}


def _load_payload(path: str) -> dict:
    with open(path, encoding="utf-8") as fh:
        return json.load(fh)


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Analyse one NBA matchup from a JSON payload."
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--input", help="Path to a JSON payload file.")
    source.add_argument(
        "--demo",
        action="store_true",
        help="Run the bundled sample matchup (output is flagged demo).",
    )
    parser.add_argument("--pretty", action="store_true", help="Indent the JSON output.")
    args = parser.parse_args()

    load_dotenv()
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr,
    )

    try:
        raw = DEMO_PAYLOAD if args.demo else _load_payload(args.input)
        request = AnalysisRequest.model_validate(raw)
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Cannot read payload %s: %s", args.input, exc)
        return 1
    except ValidationError as exc:
        logger.error("Invalid payload:\n%s", exc)
        return 1

    result = request.run(EngineConfig.from_env())

    indent = 2 if args.pretty else None
    if isinstance(result, RosterUnavailable):
        print(json.dumps(
            {"error": "RosterUnavailable", "team_id": result.team_id, "reason": result.reason},
            indent=indent,
        ))
        return 2

    response = AnalysisResponse.from_record(result, demo=args.demo)
    print(response.model_dump_json(indent=indent))
    return 0


if __name__ == "__main__":
    sys.exit(main())
