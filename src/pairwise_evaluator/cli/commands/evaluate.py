"""Command for scoring the runs of one existing experiment."""

from argparse import Namespace
from pathlib import Path

from pairwise_evaluator.cli.commands.base import BaseCommand, CommandResult
from pairwise_evaluator.config.models import JobConfig
from pairwise_evaluator.evaluation.existing import aevaluate_existing
from pairwise_evaluator.logging_config import get_logger
from pairwise_evaluator.report.generator import EvaluationReportGenerator

__all__ = ["EvaluateCommand"]

logger = get_logger(__name__)


class EvaluateCommand(BaseCommand):
    """Runs regular evaluators over each run of an experiment."""

    def __init__(self) -> None:
        self._report_generator = EvaluationReportGenerator()

    @property
    def name(self) -> str:
        return "evaluate"

    async def execute(self, job: JobConfig, args: Namespace) -> CommandResult:
        client = self.create_client(job)
        evaluators = self.load_evaluators(job)
        assert job.evaluate is not None

        results = await aevaluate_existing(
            job.evaluate,
            evaluators,
            client=client,
            max_concurrency=job.max_concurrency,
            load_nested=True if job.load_nested is None else job.load_nested,
        )

        output_path = getattr(args, "output", None)
        if output_path:
            self._report_generator.to_json(results, Path(output_path))

        if getattr(args, "json_output", False):
            output = results.model_dump_json(indent=2)
        else:
            output = self._report_generator.to_cli(results)

        logger.info(
            "evaluate_command_complete",
            experiment_id=results.experiment.id,
            failed=results.summary.failed,
        )
        return CommandResult(
            exit_code=1 if results.failures else 0,
            output=output,
        )
