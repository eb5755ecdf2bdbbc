"""
ICSR Causality Bridge: Command-Line Front End
================================================
Collects case input, calls the LLM gateway, renders results or errors.

Flow per case:
  CaseData -> cleaned() -> [submittable?] -> assess_causality ┐
                                          -> check_interactions ┘ (concurrent, separate slots)
           -> results JSON + Markdown report (+ optional .docx)

Usage:
  python main.py --cases cases.json                    # Assess every case in the file
  python main.py --cases cases.csv --interactions      # Also run the interaction check
  python main.py --cases cases.json --case-id C-102    # Single case from a file
  python main.py --check-interactions Warfarin Aspirin # Interaction check only
"""

import argparse
import asyncio
import json
import logging
import os
import sys
import time
from datetime import datetime

from config import CONFIGURATION_ERROR_MESSAGE, LOGS_PATH, RESULTS_PATH, load_config
from data_loader import LoadedCase, load_cases
from errors import GatewayError
from llm_client import LLMGateway
from models import CaseData, IndividualAssessment, InteractionPair
from report_renderer import (
    render_docx,
    render_error_markdown,
    render_interactions_markdown,
    render_report,
    report_stem,
)

NOT_SUBMITTABLE_MESSAGE = (
    "Case skipped: provide a narrative, or at least one suspect drug and one adverse event."
)
INVALID_CASE_MESSAGE = "Case skipped: invalid case data"
TOO_FEW_DRUGS_MESSAGE = "Please provide at least two drugs to check for interactions."

logger = logging.getLogger("icsr_bridge")


def _setup_run_logger(tag: str, quiet: bool = False) -> logging.Logger:
    """Configure file + console logger for a run. File handler always uses UTF-8."""
    os.makedirs(LOGS_PATH, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_path = os.path.join(LOGS_PATH, f"run_{tag}_{timestamp}.log")

    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()

    fh = logging.FileHandler(log_path, encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(
        "%(asctime)s | %(levelname)-5s | %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
    ))
    logger.addHandler(fh)

    ch = logging.StreamHandler(sys.stdout)
    ch.setLevel(logging.WARNING if quiet else logging.INFO)
    ch.setFormatter(logging.Formatter("  [LOG] %(message)s"))
    logger.addHandler(ch)

    logger.info(f"Run log: {log_path}")
    return logger


async def _capture(coro) -> tuple:
    """Await a gateway call; return (value, None) or (None, error message)."""
    try:
        return await coro, None
    except GatewayError as e:
        return None, e.message


# ------------------------------------------------------------------
#  Single case
# ------------------------------------------------------------------
def _empty_result(case_id: str) -> dict:
    return {
        "case_id": case_id,
        "skipped": None,
        "assessment": None,
        "assessment_error": None,
        "interactions": None,
        "interaction_error": None,
        "processing_time": None,
    }


async def run_single_case(
    gateway: LLMGateway,
    case_id: str,
    case: CaseData,
    with_interactions: bool = False,
) -> dict:
    """
    Run one case. Assessment and interaction check go out concurrently and
    land in their own result slots; a failure in one never touches the other.
    """
    result = _empty_result(case_id)
    t0 = time.monotonic()

    cleaned = case.cleaned()
    if not cleaned.is_submittable():
        logger.warning(f"[{case_id}] {NOT_SUBMITTABLE_MESSAGE}")
        result["skipped"] = NOT_SUBMITTABLE_MESSAGE
        return result

    calls = {"assessment": gateway.assess_causality(cleaned)}
    if with_interactions:
        drugs = case.interaction_drugs()
        if len(drugs) < 2:
            result["interaction_error"] = TOO_FEW_DRUGS_MESSAGE
        else:
            calls["interactions"] = gateway.check_interactions(drugs)

    outcomes = await asyncio.gather(*(_capture(c) for c in calls.values()))
    for slot, (value, error) in zip(calls.keys(), outcomes):
        error_key = "assessment_error" if slot == "assessment" else "interaction_error"
        if error is not None:
            result[error_key] = error
        else:
            result[slot] = [item.model_dump() for item in value]

    result["processing_time"] = round(time.monotonic() - t0, 2)
    logger.info(
        f"[{case_id}] done in {result['processing_time']}s | "
        f"assessment_error={result['assessment_error'] is not None} "
        f"interaction_error={result['interaction_error'] is not None}"
    )
    return result


async def run_batch(
    gateway: LLMGateway,
    cases: list[tuple[str, CaseData]],
    with_interactions: bool = False,
    concurrency: int = 1,
) -> list[dict]:
    """Run all cases, at most `concurrency` in flight. Output order = input order."""
    semaphore = asyncio.Semaphore(max(1, concurrency))

    async def _bounded(case_id, case):
        async with semaphore:
            return await run_single_case(gateway, case_id, case, with_interactions)

    return await asyncio.gather(*(_bounded(cid, c) for cid, c in cases))


async def run_loaded(
    gateway: LLMGateway,
    loaded: list[LoadedCase],
    with_interactions: bool = False,
    concurrency: int = 1,
) -> list[dict]:
    """
    Run the valid records from load_cases(); invalid ones become skipped
    results carrying their validation error. Output order = file order.
    """
    runnable = [(cid, case) for cid, case, error in loaded if error is None]
    done = iter(await run_batch(gateway, runnable, with_interactions, concurrency))
    results = []
    for case_id, _, error in loaded:
        if error is None:
            results.append(next(done))
        else:
            result = _empty_result(case_id)
            result["skipped"] = f"{INVALID_CASE_MESSAGE}: {error}"
            results.append(result)
    return results


async def run_interaction_only(gateway: LLMGateway, drugs: list[str]) -> str:
    """Interaction check for an ad-hoc drug list; returns rendered Markdown."""
    try:
        result = await gateway.check_interactions(drugs)
    except GatewayError as e:
        return render_error_markdown(e.message)
    return render_interactions_markdown(result)


# ------------------------------------------------------------------
#  Output
# ------------------------------------------------------------------
def save_results(results: list[dict], tag: str, output_dir: str = RESULTS_PATH) -> str:
    os.makedirs(output_dir, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    path = os.path.join(output_dir, f"results_{tag}_{timestamp}.json")
    with open(path, "w", encoding="utf-8") as f:
        json.dump(results, f, indent=2, ensure_ascii=False)
    return path


def print_summary(results: list[dict]):
    n_skipped = sum(1 for r in results if r["skipped"])
    n_failed = sum(1 for r in results if r["assessment_error"])
    n_ok = len(results) - n_skipped - n_failed
    print(f"\n{'='*60}")
    print(f"  {len(results)} case(s) | assessed={n_ok} failed={n_failed} skipped={n_skipped}")
    print(f"{'='*60}")
    for r in results:
        if r["skipped"]:
            print(f"    {r['case_id']} | {r['skipped']}")
        if r["assessment_error"]:
            print(f"    {r['case_id']} | {r['assessment_error']}")
        if r["interaction_error"]:
            print(f"    {r['case_id']} | interactions: {r['interaction_error']}")


def generate_reports(results: list[dict], docx: bool = False) -> list[str]:
    paths = []
    for r in results:
        if r["skipped"]:
            continue
        md_path = render_report(
            r["case_id"],
            assessment=_rehydrate_assessment(r["assessment"]),
            assessment_error=r["assessment_error"],
            interactions=_rehydrate_interactions(r["interactions"]),
            interaction_error=r["interaction_error"],
        )
        paths.append(md_path)
        if docx:
            paths.append(render_docx(md_path))
    return paths


def _rehydrate_assessment(items):
    return None if items is None else [IndividualAssessment(**i) for i in items]


def _rehydrate_interactions(items):
    return None if items is None else [InteractionPair(**i) for i in items]


def main():
    parser = argparse.ArgumentParser(description="ICSR Causality Bridge: LLM causality assessment")
    parser.add_argument("--cases", type=str, default="", help="Case file (.json or .csv)")
    parser.add_argument("--case-id", type=str, default="", help="Only run this case from the file")
    parser.add_argument("--interactions", action="store_true",
                        help="Also check drug-drug interactions for each case")
    parser.add_argument("--check-interactions", nargs="+", metavar="DRUG",
                        help="Interaction check only, for the given drug names")
    parser.add_argument("--concurrency", type=int, default=1, help="Cases in flight at once")
    parser.add_argument("--docx", action="store_true", help="Also generate Word reports")
    parser.add_argument("--quiet", action="store_true", help="Minimal output")
    args = parser.parse_args()

    if not args.cases and not args.check_interactions:
        parser.error("one of --cases or --check-interactions is required")

    # Startup precondition: nothing else runs without a key
    config = load_config()
    if not config.is_api_key_configured():
        print(CONFIGURATION_ERROR_MESSAGE, file=sys.stderr)
        sys.exit(2)
    gateway = LLMGateway(config)

    if args.check_interactions:
        _setup_run_logger("interactions", quiet=args.quiet)
        print(asyncio.run(run_interaction_only(gateway, args.check_interactions)))
        return

    cases = load_cases(args.cases)
    if args.case_id:
        cases = [entry for entry in cases if entry[0] == args.case_id]
        if not cases:
            print(f"No case with id {args.case_id!r} in {args.cases}", file=sys.stderr)
            sys.exit(1)
        tag = f"case_{report_stem(args.case_id)}"
    else:
        tag = os.path.splitext(os.path.basename(args.cases))[0]

    _setup_run_logger(tag, quiet=args.quiet)
    logger.info(f"Run start: {len(cases)} case(s) | tag={tag} | model={config.model}")

    results = asyncio.run(run_loaded(
        gateway, cases,
        with_interactions=args.interactions,
        concurrency=args.concurrency,
    ))

    results_path = save_results(results, tag)
    report_paths = generate_reports(results, docx=args.docx)
    if not args.quiet:
        print_summary(results)
    print(f"\n  Results: {results_path}")
    print(f"  Reports: {len(report_paths)} file(s)")


if __name__ == "__main__":
    main()
