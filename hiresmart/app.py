import argparse
import json
from pathlib import Path
from typing import List, Optional, Tuple

from . import __version__
from .analysis import build_export, build_share_text, compare_candidates
from .config import STORAGE_BACKENDS, Settings
from .env import load_env
from .logger import get_logger
from .repository import CandidateRepository, FilterCriteria
from .retry import RetryError
from .scoring import infer_primary_role, summarize_roles, summarize_skills
from .selection import SelectionManager, SelectionResult
from .storage import JsonFileStorage, SqliteStorage


def build_storage(settings: Settings):
    if settings.storage_backend == "sqlite":
        return SqliteStorage(settings.db_path)
    return JsonFileStorage(settings.store_path)


def load_repository(settings: Settings) -> CandidateRepository:
    try:
        return CandidateRepository.from_source(settings.submissions)
    except FileNotFoundError:
        raise SystemExit(f"Submissions file not found: {settings.submissions}")
    except (ValueError, RetryError) as e:
        raise SystemExit(f"Could not load submissions from {settings.submissions}: {e}")


def open_session(args: argparse.Namespace) -> Tuple[CandidateRepository, SelectionManager]:
    settings = args.settings
    repository = load_repository(settings)
    manager = SelectionManager(build_storage(settings), repository=repository)
    return repository, manager


def report(result: SelectionResult) -> None:
    print(result.message)
    if not result.success:
        raise SystemExit(2)


def _split(value: Optional[str]) -> List[str]:
    return [v.strip() for v in value.split(",") if v.strip()] if value else []


def cmd_candidates(args: argparse.Namespace) -> None:
    repository, manager = open_session(args)
    experience_range = None
    if args.min_exp is not None or args.max_exp is not None:
        low, high = repository.experience_range()
        experience_range = (
            args.min_exp if args.min_exp is not None else low,
            args.max_exp if args.max_exp is not None else high,
        )
    criteria = FilterCriteria(
        skills=_split(args.skills),
        genders=_split(args.genders),
        location=args.location or "",
        experience_range=experience_range,
        search_query=args.search or "",
    )
    matches = repository.filter(criteria)
    print(f"Showing {len(matches)} of {len(repository)} candidates\n")
    for c in matches:
        score = manager.score_against_selection(c)
        if manager.is_selected(c.id):
            marker = "*"
        elif manager.is_disabled(c.id):
            marker = "-"
        else:
            marker = " "
        print(f"{marker} [{c.id}] {c.name} - {c.role}")
        print(f"    Score: {score.total} (skills {score.skills}, experience {score.experience}, "
              f"diversity {score.diversity}, bonus {score.bonus})")
        print(f"    {c.experience} yrs | {c.gender} | {c.location} | {infer_primary_role(c.skills)}")
        if c.skills:
            print(f"    Skills: {', '.join(c.skills)}")


def cmd_facets(args: argparse.Namespace) -> None:
    repository = load_repository(args.settings)
    low, high = repository.experience_range()
    print(f"Candidates: {len(repository)}")
    print(f"Experience: {low}-{high} years")
    print(f"Locations: {', '.join(repository.all_locations())}")
    print(f"Skills: {', '.join(repository.all_skills())}")


def cmd_add(args: argparse.Namespace) -> None:
    repository, manager = open_session(args)
    candidate = repository.get(args.id)
    if candidate is None:
        raise SystemExit(f"Unknown candidate id: {args.id}")
    report(manager.add(candidate))


def cmd_remove(args: argparse.Namespace) -> None:
    _, manager = open_session(args)
    report(manager.remove(args.id))


def cmd_clear(args: argparse.Namespace) -> None:
    _, manager = open_session(args)
    report(manager.clear())


def cmd_stats(args: argparse.Namespace) -> None:
    _, manager = open_session(args)
    stats = manager.get_selection_stats()
    if stats["total_selected"] == 0:
        print("Select candidates to see team diversity stats")
        return
    print(f"Selected: {stats['total_selected']}/{stats['max_size']}")
    for c in manager.selected:
        print(f"  [{c.id}] {c.name} - {c.role}")
    print("Gender: " + ", ".join(f"{g}: {n}" for g, n in stats["gender_counts"].items()))
    top_skills = sorted(stats["skill_counts"].items(), key=lambda item: item[1], reverse=True)[:5]
    print("Top skills: " + ", ".join(f"{s} ({n})" for s, n in top_skills))
    print("Locations: " + ", ".join(f"{loc} ({n})" for loc, n in stats["location_counts"].items()))
    exp = stats["experience_range"]
    print(f"Experience: {exp['min']}-{exp['max']} years (avg {exp['avg']})")


def cmd_roles(args: argparse.Namespace) -> None:
    _, manager = open_session(args)
    team = manager.selected
    roles = summarize_roles(team)
    print("Role coverage:")
    for role, count in roles["coverage"].items():
        print(f"  {role}: {count}")
    print(f"Missing roles: {', '.join(roles['missing']) or 'none'}")
    print(f"Team skills: {', '.join(summarize_skills(team)) or 'none'}")


def cmd_compare(args: argparse.Namespace) -> None:
    repository = load_repository(args.settings)
    candidates = []
    for candidate_id in _split(args.ids):
        candidate = repository.get(candidate_id)
        if candidate is None:
            raise SystemExit(f"Unknown candidate id: {candidate_id}")
        candidates.append(candidate)
    try:
        rows = compare_candidates(candidates)
    except ValueError as e:
        raise SystemExit(str(e))
    for row in rows:
        print(f"[{row['id']}] {row['name']} - {row['role']} | Score {row['score']} | {row['primaryRole']}")
        print(f"    {row['experience']} yrs | {row['gender']} | {row['location']}")
        print(f"    Skills: {', '.join(row['skills'])}")


def cmd_finalize(args: argparse.Namespace) -> None:
    _, manager = open_session(args)
    result = manager.finalize()
    report(result)
    analysis = result.data["analysis"]
    print()
    print(analysis["summary"])
    validations = analysis["details"]["validations"]
    if validations["allSameGender"]:
        print("Warning: all selected candidates share the same gender.")
    if validations["skillsOverlapTooMuch"]:
        top = validations["topSkill"]
        print(f"Warning: {top['count']} candidates list {top['name']}; consider more skill variety.")


def cmd_export(args: argparse.Namespace) -> None:
    _, manager = open_session(args)
    if not manager.can_finalize():
        report(manager.finalize())
    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    with output.open("w", encoding="utf-8") as f:
        json.dump(build_export(manager.selected), f, indent=2, ensure_ascii=False)
    print(f"Team exported to {output}")


def cmd_share(args: argparse.Namespace) -> None:
    _, manager = open_session(args)
    if not manager.can_finalize():
        report(manager.finalize())
    print(build_share_text(manager.selected))


def main(argv: Optional[List[str]] = None):
    # Load .env if present (HIRESMART_SUBMISSIONS, HIRESMART_STORE, etc.)
    load_env()
    parser = argparse.ArgumentParser(prog="hiresmart", description="HireSmart - build a balanced team of five")
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument("--submissions", help="Submissions JSON path or URL (or set HIRESMART_SUBMISSIONS)")
    parser.add_argument("--storage", choices=STORAGE_BACKENDS, help="Selection storage backend (or set HIRESMART_STORAGE)")
    parser.add_argument("--store", help="JSON store path for the json backend (or set HIRESMART_STORE)")
    parser.add_argument("--db", help="SQLite path for the sqlite backend (or set HIRESMART_DB)")
    parser.add_argument("--log-level", help="Log level (or set HIRESMART_LOG_LEVEL)")

    subparsers = parser.add_subparsers(dest="command")
    cand = subparsers.add_parser("candidates", help="List candidates with live scores against the current team")
    cand.add_argument("--skills", help="Comma-separated skills (any match)")
    cand.add_argument("--genders", help="Comma-separated genders (Male,Female,Other)")
    cand.add_argument("--location", help="Exact location")
    cand.add_argument("--min-exp", type=int, help="Minimum years of experience")
    cand.add_argument("--max-exp", type=int, help="Maximum years of experience")
    cand.add_argument("--search", help="Case-insensitive name search")
    cand.set_defaults(func=cmd_candidates)

    fac = subparsers.add_parser("facets", help="Show distinct skills, locations and experience bounds")
    fac.set_defaults(func=cmd_facets)

    add = subparsers.add_parser("add", help="Add a candidate to the team")
    add.add_argument("id", help="Candidate id")
    add.set_defaults(func=cmd_add)

    rem = subparsers.add_parser("remove", help="Remove a candidate from the team")
    rem.add_argument("id", help="Candidate id")
    rem.set_defaults(func=cmd_remove)

    clr = subparsers.add_parser("clear", help="Clear the team selection")
    clr.set_defaults(func=cmd_clear)

    sts = subparsers.add_parser("stats", help="Show team diversity stats")
    sts.set_defaults(func=cmd_stats)

    rol = subparsers.add_parser("roles", help="Show role coverage of the team")
    rol.set_defaults(func=cmd_roles)

    cmp_ = subparsers.add_parser("compare", help="Compare up to 3 candidates")
    cmp_.add_argument("ids", help="Comma-separated candidate ids")
    cmp_.set_defaults(func=cmd_compare)

    fin = subparsers.add_parser("finalize", help="Finalize a full team and print its analysis")
    fin.set_defaults(func=cmd_finalize)

    exp = subparsers.add_parser("export", help="Export the finalized team as JSON")
    exp.add_argument("--output", default="hiresmart-team-selection.json", help="Output path")
    exp.set_defaults(func=cmd_export)

    shr = subparsers.add_parser("share", help="Print the team as shareable text")
    shr.set_defaults(func=cmd_share)

    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    try:
        settings = Settings.from_env()
    except ValueError as e:
        raise SystemExit(str(e))
    args.settings = settings.with_overrides(
        submissions=args.submissions,
        storage_backend=args.storage,
        store_path=args.store,
        db_path=args.db,
        log_level=args.log_level.upper() if args.log_level else None,
    )
    get_logger(level=args.settings.log_level, log_dir=args.settings.log_dir)

    if hasattr(args, "func"):
        args.func(args)
        return

    parser.print_help()


if __name__ == "__main__":
    main()
