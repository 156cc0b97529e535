"""Validate a team file against a format and log every problem found."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

sys.path.append(str(Path(__file__).resolve().parents[1]))

from core.dex import DexCollection  # noqa: E402  - local path injection happens above
from core.logging_config import setup_logging  # noqa: E402
from core.sets import Team, load_team_from_export, load_team_from_json_file  # noqa: E402
from rules.engine import RuleTableResolver  # noqa: E402
from rules.loader import load_default_formats  # noqa: E402
from validator.teams import TeamValidator  # noqa: E402


def _load_team(path: Path, format: Optional[str]) -> Team:
    if path.suffix == ".json":
        team = load_team_from_json_file(str(path))
        return team if format is None else team.model_copy(update={"format": format})
    return load_team_from_export(path.read_text(encoding="utf-8"), format=format)


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("dex", type=Path, help="Pokédex JSON with species, moves, items and abilities")
    parser.add_argument("team", type=Path, help="Team as JSON or in the plain-text export format")
    parser.add_argument("--format", default=None, help="Format name, optionally with @@@ custom rules")
    parser.add_argument("--verbose", action="store_true", help="Log rule resolution details")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    logger = setup_logging(package_level=logging.DEBUG if args.verbose else None)

    dexes = DexCollection.load_from_json(args.dex)
    resolver = RuleTableResolver(load_default_formats(dexes))
    validator = TeamValidator.from_resolver(resolver)

    team = _load_team(args.team, args.format)
    if not team.format:
        logger.error("No format given; pass --format or set it in the team file")
        return 2

    problems = validator.validate(team)
    if not problems:
        logger.info("Team of %d is valid for %s", len(team), team.format)
        return 0
    for problem in problems:
        logger.warning("%s", problem)
    logger.info("%d problem(s) found", len(problems))
    return 1


if __name__ == "__main__":
    sys.exit(main())
