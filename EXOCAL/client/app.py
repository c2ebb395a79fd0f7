from __future__ import annotations

import argparse
import asyncio
import sys

from EXOCAL.client.common.constants import (
    CLIENT_DESCRIPTION,
    CLIENT_TITLE,
    CLIENT_VERSION,
    DATASET_KINDS,
    NO_INPUT_HINT,
    NO_INPUT_MESSAGE,
)
from EXOCAL.client.common.exceptions import ResultsError, ValidationError
from EXOCAL.client.common.utils.logger import logger
from EXOCAL.client.configurations import ClientSettings, client_settings
from EXOCAL.client.entities.jobs import (
    InputSelection,
    JobPhase,
    JobSnapshot,
    SubmissionParameters,
)
from EXOCAL.client.services.controller import JobStateController
from EXOCAL.client.services.delivery import LocalDelivery
from EXOCAL.client.services.results import JobResultsClient


# -------------------------------------------------------------------------
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="exocal", description=f"{CLIENT_TITLE} - {CLIENT_DESCRIPTION}"
    )
    parser.add_argument("--version", action="version", version=CLIENT_VERSION)
    for kind in DATASET_KINDS:
        group = parser.add_mutually_exclusive_group()
        group.add_argument(
            f"--{kind}", metavar="CSV", help=f"{kind.upper()} table to upload"
        )
        group.add_argument(
            f"--demo-{kind}",
            action="store_true",
            help=f"use the service demo data for {kind.upper()}",
        )
    parser.add_argument("--limit-targets", default=None, help="targets to analyse (1-1000)")
    parser.add_argument("--seed", default=None, help="random seed (1-100)")
    parser.add_argument("--service-url", default=None, help="analysis service base URL")
    parser.add_argument("--output-dir", default=None, help="where results.zip is saved")
    parser.add_argument(
        "--skip-health-check",
        action="store_true",
        help="do not probe the service before submitting",
    )
    parser.add_argument(
        "--show-results",
        action="store_true",
        help="load the figures and top candidates once the job completes",
    )
    return parser


# -------------------------------------------------------------------------
def build_selection(args: argparse.Namespace) -> InputSelection:
    selection = InputSelection()
    for kind in DATASET_KINDS:
        path = getattr(args, kind)
        if path:
            selection.select_file(kind, path)
        elif getattr(args, f"demo_{kind}"):
            selection.set_demo(kind)
    return selection


# -------------------------------------------------------------------------
def log_snapshot(snapshot: JobSnapshot) -> None:
    progress = snapshot.progress
    if snapshot.state == JobPhase.POLLING and progress is not None:
        if progress.last_target:
            logger.info(
                "%s %.1f%% %s (last target: %s)",
                progress.dataset,
                progress.percent,
                progress.message,
                progress.last_target,
            )
        else:
            logger.info(
                "%s %.1f%% %s", progress.dataset, progress.percent, progress.message
            )
    elif snapshot.state == JobPhase.POLLING:
        logger.info("Job %s: initializing analysis...", snapshot.job_id)


# -------------------------------------------------------------------------
async def show_results(
    controller: JobStateController, job_id: str, delivery: LocalDelivery
) -> None:
    results_client = JobResultsClient(controller.client, controller.base_url)
    try:
        results = await results_client.load_results(job_id)
    except ResultsError as exc:
        logger.error(str(exc))
        return
    for figure in results.summary_images():
        logger.info("[%s] %s", figure.dataset, figure.url)
    if not results.candidates:
        logger.info("No candidate data found for this analysis.")
    for row in results.candidates:
        logger.info("Candidate: %s", row)
    try:
        await results_client.download_bundle(job_id, delivery)
    except ResultsError as exc:
        logger.error(str(exc))


# -------------------------------------------------------------------------
async def run_client(
    args: argparse.Namespace, settings: ClientSettings = client_settings
) -> int:
    selection = build_selection(args)
    parameters = SubmissionParameters.from_user_input(
        args.limit_targets,
        args.seed,
        default_limit_targets=settings.submission.limit_targets,
        default_seed=settings.submission.seed,
    )
    delivery = LocalDelivery(args.output_dir or settings.delivery.output_dir)

    async with JobStateController(
        base_url=args.service_url, delivery=delivery, settings=settings
    ) as controller:
        controller.subscribe(log_snapshot)
        if settings.service.health_check_on_startup and not args.skip_health_check:
            await controller.check_health()

        snapshot = await controller.run(selection, parameters)
        if isinstance(snapshot.error, ValidationError):
            if snapshot.error_message == NO_INPUT_MESSAGE:
                logger.error(NO_INPUT_HINT)
            else:
                logger.error(snapshot.error_message)
            return 1
        if snapshot.state != JobPhase.SUCCEEDED:
            logger.error(snapshot.error_message or "Job did not complete")
            return 1

        result = snapshot.delivery
        if result is not None and result.delivered:
            logger.info("Results saved to %s", result.location)
        elif result is not None:
            logger.warning("Results available at %s", result.location)
        if args.show_results and snapshot.job_id:
            await show_results(controller, snapshot.job_id, delivery)
    return 0


# -------------------------------------------------------------------------
def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return asyncio.run(run_client(args))
    except KeyboardInterrupt:
        logger.warning("Interrupted, job tracking stopped")
        return 130


if __name__ == "__main__":
    sys.exit(main())
