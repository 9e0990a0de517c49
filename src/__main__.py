"""Main entry point for the hybrid tailoring application."""

import argparse
import asyncio
import json
import sys
from datetime import UTC, datetime
from pathlib import Path

import yaml

from src import __version__
from src.config.settings import Settings
from src.utils.logging import add_run_log, configure_logging


def _timestamp_run_id(prefix: str) -> str:
    timestamp = datetime.now(UTC).strftime("%Y%m%d_%H%M%S")
    return f"{prefix}_{timestamp}"


def _resolve_run_dir(
    settings: Settings, *, prefix: str, out_run_dir: Path | None
) -> Path:
    if out_run_dir is not None:
        run_dir = out_run_dir
    else:
        run_dir = settings.output_dir / "runs" / _timestamp_run_id(prefix)
    run_dir.mkdir(parents=True, exist_ok=True)
    if settings.run_log:
        add_run_log(run_dir)
    return run_dir


def _load_document(path: Path) -> dict:
    """Read a JSON or YAML input file (chosen by suffix)."""
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in {".yaml", ".yml"}:
        return yaml.safe_load(text) or {}
    return json.loads(text)


def _write_json(path: Path, payload: object, indent: int = 2) -> None:
    def _default(value: object):
        to_dict = getattr(value, "to_dict", None)
        if callable(to_dict):
            return to_dict()
        model_dump = getattr(value, "model_dump", None)
        if callable(model_dump):
            return model_dump(mode="json")
        return str(value)

    path.write_text(
        json.dumps(payload, indent=indent, default=_default),
        encoding="utf-8",
    )


def _add_out_run_dir(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--out-run-dir",
        type=Path,
        default=None,
        help="Directory for output artifacts (default: <output_dir>/runs/<mode>_<timestamp>)",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="hybrid-tailor",
        description="Hybrid résumé tailoring: rule engine, instruction compiler and readiness scoring",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m src rules list
  python -m src compile --analysis analysis.json --resume resume.json --job job.json
  python -m src score --analysis analysis.json
  python -m src tailor --resume resume.yaml --job job.yaml --resume-id r-1
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Set the log level (overrides settings)",
    )

    subparsers = parser.add_subparsers(
        dest="mode",
        title="modes",
        description="Available operating modes",
    )

    # Rule set inspection
    rules_parser = subparsers.add_parser(
        "rules",
        help="Inspect and validate the transformation rule set",
    )
    rules_parser.add_argument(
        "action",
        choices=["list", "validate", "stats"],
        help="list rules, validate rule files, or print rule statistics",
    )
    rules_parser.add_argument(
        "--rules-dir",
        type=Path,
        default=None,
        help="Directory of *.yaml rule files (default: built-in rules)",
    )

    # Compile mode
    compile_parser = subparsers.add_parser(
        "compile",
        help="Evaluate rules and compile transformation instructions",
    )
    compile_parser.add_argument(
        "--analysis", type=Path, required=True, help="Pre-analysis bundle (JSON/YAML)"
    )
    compile_parser.add_argument(
        "--resume", type=Path, required=True, help="Résumé content (JSON/YAML)"
    )
    compile_parser.add_argument(
        "--job", type=Path, required=True, help="Target job (JSON/YAML)"
    )
    compile_parser.add_argument(
        "--rules-dir", type=Path, default=None, help="Directory of *.yaml rule files"
    )
    _add_out_run_dir(compile_parser)

    # Score mode
    score_parser = subparsers.add_parser(
        "score",
        help="Compute the recruiter-readiness score of a pre-analysis bundle",
    )
    score_parser.add_argument(
        "--analysis", type=Path, required=True, help="Pre-analysis bundle (JSON/YAML)"
    )
    _add_out_run_dir(score_parser)

    # Tailor mode
    tailor_parser = subparsers.add_parser(
        "tailor",
        help="Run the full tailoring pipeline (uses the configured LLM)",
    )
    tailor_parser.add_argument(
        "--resume", type=Path, required=True, help="Résumé content (JSON/YAML)"
    )
    tailor_parser.add_argument(
        "--job", type=Path, required=True, help="Target job (JSON/YAML)"
    )
    tailor_parser.add_argument(
        "--resume-id", default=None, help="Identifier recorded on the analysis bundle"
    )
    tailor_parser.add_argument(
        "--soft-skills",
        type=Path,
        default=None,
        help="Soft-skill assessments from interview simulations (JSON/YAML list)",
    )
    tailor_parser.add_argument(
        "--no-post-analysis",
        action="store_true",
        help="Skip re-analysis of the tailored résumé",
    )
    _add_out_run_dir(tailor_parser)

    return parser


def _run_rules(parsed: argparse.Namespace) -> int:
    from src.tailoring.rules import RuleSetError, load_rules, rule_stats

    errors: list[str] = []
    try:
        rules = load_rules(parsed.rules_dir, errors=errors)
    except RuleSetError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if parsed.action == "list":
        for rule in sorted(rules, key=lambda r: r.priority):
            state = "" if rule.enabled else " (disabled)"
            print(
                f"{rule.priority:>3}  issue {rule.recruiter_issue}  "
                f"{rule.id}: {rule.name}{state}"
            )
        return 0

    if parsed.action == "stats":
        print(json.dumps(rule_stats(rules), indent=2))
        return 0

    # validate
    for message in errors:
        print(f"- {message}")
    if errors:
        print(f"{len(errors)} invalid rule(s); {len(rules)} valid", file=sys.stderr)
        return 1
    print(f"All {len(rules)} rules are valid")
    return 0


def _run_compile(parsed: argparse.Namespace, settings: Settings) -> int:
    from src.analysis.models import PreAnalysisResult
    from src.resume.models import JobData, ResumeContent
    from src.tailoring.compiler import InstructionCompiler
    from src.tailoring.rules import RuleEngine, RuleSetError, get_rule_set, load_rules

    analysis = PreAnalysisResult.from_dict(_load_document(parsed.analysis))
    resume = ResumeContent.from_dict(_load_document(parsed.resume))
    job = JobData.from_dict(_load_document(parsed.job))

    try:
        rules = load_rules(parsed.rules_dir) if parsed.rules_dir else get_rule_set()
    except RuleSetError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    run_dir = _resolve_run_dir(
        settings, prefix="compile", out_run_dir=parsed.out_run_dir
    )
    matched = RuleEngine(rules).evaluate(analysis, resume, job)
    instructions = InstructionCompiler().compile(matched, analysis, resume, job)

    _write_json(run_dir / "matched_rules.json", matched, settings.json_indent)
    _write_json(run_dir / "instructions.json", instructions, settings.json_indent)

    print(f"Matched rules: {len(matched)}")
    for result in matched:
        print(f"- [{result.priority}] {result.rule_id}: {result.rule_name}")
    print(f"Bullet instructions: {len(instructions.bullets)}")
    print(f"Overall tone: {instructions.overall_tone}")
    print(f"Wrote: {run_dir / 'instructions.json'}")
    return 0


def _run_score(parsed: argparse.Namespace, settings: Settings) -> int:
    from src.analysis.models import PreAnalysisResult
    from src.scoring.readiness import RecruiterReadinessScorer, score_summary

    analysis = PreAnalysisResult.from_dict(_load_document(parsed.analysis))

    run_dir = _resolve_run_dir(settings, prefix="score", out_run_dir=parsed.out_run_dir)
    score = RecruiterReadinessScorer().score(analysis)

    print(score_summary(score))
    _write_json(run_dir / "readiness.json", score, settings.json_indent)
    print(f"Wrote: {run_dir / 'readiness.json'}")
    return 0


def _run_tailor(parsed: argparse.Namespace, settings: Settings) -> int:
    from src.analysis.models import SoftSkillAssessment
    from src.resume.models import JobData, ResumeContent
    from src.scoring.readiness import compare_scores
    from src.tailoring.service import HybridTailoringService

    resume = ResumeContent.from_dict(_load_document(parsed.resume))
    job = JobData.from_dict(_load_document(parsed.job))

    soft_skills = None
    if parsed.soft_skills is not None:
        raw = _load_document(parsed.soft_skills)
        if isinstance(raw, dict):
            raw = raw.get("assessments") or []
        soft_skills = [SoftSkillAssessment.model_validate(item) for item in raw]

    run_dir = _resolve_run_dir(settings, prefix="tailor", out_run_dir=parsed.out_run_dir)
    service = HybridTailoringService()
    run = asyncio.run(
        service.tailor(
            resume,
            job,
            resume_id=parsed.resume_id or parsed.resume.stem,
            soft_skills=soft_skills,
            post_analysis=not parsed.no_post_analysis,
        )
    )

    indent = settings.json_indent
    if run.instructions is not None:
        _write_json(run_dir / "instructions.json", run.instructions, indent)

    if not run.success or run.result is None:
        print(f"Tailoring failed: {run.error}", file=sys.stderr)
        return 1

    result = run.result
    _write_json(run_dir / "tailored_resume.json", result.tailored_resume, indent)
    _write_json(run_dir / "result.json", result, indent)

    if result.baseline_score is not None:
        comparison = compare_scores(result.baseline_score, result.quality_score)
        print(
            f"Readiness: {result.baseline_score.composite} -> "
            f"{result.quality_score.composite} ({comparison.composite_delta:+d})"
        )
    print(f"Bullets modified: {result.changes.experience_bullets_modified}")
    print(f"Tokens used: {result.token_usage.total}")
    print(f"Wrote: {run_dir / 'result.json'}")
    return 0


def main(args: list[str] | None = None) -> int:
    """Main entry point for the application.

    Args:
        args: Command line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    # Load settings
    try:
        settings = Settings()
    except Exception as e:
        print(f"Error loading settings: {e}", file=sys.stderr)
        return 1

    # Configure logging
    log_level = parsed.log_level or settings.log_level
    logger = configure_logging(level=log_level)

    # If no mode specified, show help
    if parsed.mode is None:
        parser.print_help()
        return 0

    logger.info(f"hybrid-tailor v{__version__} starting in {parsed.mode} mode")

    if parsed.mode == "rules":
        return _run_rules(parsed)

    try:
        if parsed.mode == "compile":
            return _run_compile(parsed, settings)
        if parsed.mode == "score":
            return _run_score(parsed, settings)
        if parsed.mode == "tailor":
            return _run_tailor(parsed, settings)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
