"""Command for comparing two experiments."""

from argparse import Namespace
from pathlib import Path

from pairwise_evaluator.cli.commands.base import BaseCommand, CommandResult
from pairwise_evaluator.comparative.orchestrator import aevaluate_comparative
from pairwise_evaluator.config.models import JobConfig
from pairwise_evaluator.logging_config import get_logger
from pairwise_evaluator.report.generator import ComparativeReportGenerator

__all__ = ["CompareCommand"]

logger = get_logger(__name__)


class CompareCommand(BaseCommand):
    """Runs pairwise evaluators over two experiments and reports the outcome."""

    def __init__(self) -> None:
        self._report_generator = ComparativeReportGenerator()

    @property
    def name(self) -> str:
        return "compare"

    async def execute(self, job: JobConfig, args: Namespace) -> CommandResult:
        """Compare the job's two experiments.

        Returns:
            CommandResult with exit code 1 when any job failed.

        """
        client = self.create_client(job)
        evaluators = self.load_evaluators(job)
        assert job.compare is not None

        results = await aevaluate_comparative(
            job.compare,
            evaluators,
            client=client,
            randomize_order=job.randomize_order,
            experiment_prefix=job.experiment_prefix,
            description=job.description,
            max_concurrency=job.max_concurrency,
            load_nested=job.load_nested,
            seed=job.seed,
        )

        output_path = getattr(args, "output", None)
        if output_path:
            self._report_generator.to_json(results, Path(output_path))

        if getattr(args, "json_output", False):
            output = results.model_dump_json(indent=2)
        else:
            output = self._report_generator.to_cli(results)

        logger.info(
            "compare_command_complete",
            comparative_experiment_id=results.experiment_id,
            failed=results.summary.failed,
        )
        return CommandResult(
            exit_code=1 if results.failures else 0,
            output=output,
        )
