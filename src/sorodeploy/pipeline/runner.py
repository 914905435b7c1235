"""Pipeline runner orchestrating stage execution."""
from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Iterable, List

from pydantic import BaseModel, Field

from ..config.models import AppConfig
from ..confirmation import ConfirmationProvider, ConsoleConfirmation
from ..errors import PipelineStageError, SorodeployError
from ..process import CommandRunner, ProcessRunner
from ..reporting import ConsoleReporter
from ..workspace import Workspace
from .context import PipelineContext
from .results import HardFailure, SoftFailure, StageResult, Success
from .stages import PipelineStage, build_default_stages

METADATA_FILENAME = "last-run.json"


class StageRecord(BaseModel):
    name: str
    status: str
    duration_seconds: float
    detail: str | None = None


class PipelineResult(BaseModel):
    stage_results: List[StageRecord] = Field(default_factory=list)
    succeeded: bool = False
    failed_stage: str | None = None
    error: str | None = None
    error_output: str | None = None
    network: str | None = None
    deployer_address: str | None = None
    artifact_path: Path | None = None
    contract_id: str | None = None
    metadata_path: Path | None = None

    @property
    def warnings(self) -> list[StageRecord]:
        return [record for record in self.stage_results if record.status == "warning"]

    def raise_for_failure(self) -> None:
        if not self.succeeded:
            raise PipelineStageError(
                stage=self.failed_stage or "unknown",
                message=self.error or "Pipeline failed",
                output=self.error_output,
            )


class PipelineRunner:
    """Runs stages in order; the only place that decides whether the pipeline stops.

    A ``HardFailure`` ends the run. A ``SoftFailure`` is tolerated only from
    stages that allow it and leaves the context untouched; from any other stage
    it is promoted to a ``HardFailure``. Nothing provisioned before a failure is
    rolled back.
    """

    def __init__(
        self,
        config: AppConfig,
        workspace: Workspace,
        stages: Iterable[PipelineStage] | None = None,
        *,
        reporter: ConsoleReporter | None = None,
        runner: CommandRunner | None = None,
        confirm: ConfirmationProvider | None = None,
    ) -> None:
        self.config = config
        self.workspace = workspace
        self.logger = logging.getLogger("sorodeploy.pipeline")
        self.reporter = reporter or ConsoleReporter()
        if stages is None:
            stages = build_default_stages(
                config=config,
                workspace=workspace,
                runner=runner or ProcessRunner(timeout_seconds=config.deploy.timeout_seconds),
                reporter=self.reporter,
                confirm=confirm or ConsoleConfirmation(self.reporter.console),
            )
        self.stages = list(stages)

    def run(self) -> PipelineResult:
        ctx = PipelineContext(
            config=self.config,
            workspace=self.workspace,
            target_network_name=self.config.network.name,
        )
        stage_results: list[StageRecord] = []
        failure: tuple[str, HardFailure] | None = None

        for stage in self.stages:
            if stage.title:
                self.reporter.header(stage.title)

            start = time.perf_counter()
            missing = [field for field in stage.requires if not ctx.is_populated(field)]
            if missing:
                result: StageResult = HardFailure(f"Precondition not met: {', '.join(missing)} not set")
            else:
                if stage.description:
                    self.reporter.info(stage.description)
                result = self._invoke(stage, ctx)
            duration = time.perf_counter() - start

            if isinstance(result, SoftFailure) and not stage.soft_fail_allowed:
                result = HardFailure(result.warning, output=result.output)

            if isinstance(result, Success):
                if stage.output_field:
                    ctx.assign(stage.output_field, result.payload)
                if result.detail:
                    self.reporter.success(result.detail)
                stage_results.append(
                    StageRecord(name=stage.name, status="completed", duration_seconds=duration, detail=result.detail)
                )
            elif isinstance(result, SoftFailure):
                self.logger.debug("Stage %s degraded: %s", stage.name, result.warning)
                self.reporter.warning(result.warning)
                if result.output:
                    self.reporter.output(result.output)
                stage_results.append(
                    StageRecord(name=stage.name, status="warning", duration_seconds=duration, detail=result.warning)
                )
            else:
                self.logger.debug("Stage %s failed: %s", stage.name, result.error)
                self.reporter.error(result.error)
                if result.output:
                    self.reporter.output(result.output)
                stage_results.append(
                    StageRecord(name=stage.name, status="failed", duration_seconds=duration, detail=result.error)
                )
                failure = (stage.name, result)
                break

        pipeline_result = PipelineResult(
            stage_results=stage_results,
            succeeded=failure is None,
            failed_stage=failure[0] if failure else None,
            error=failure[1].error if failure else None,
            error_output=failure[1].output if failure else None,
            network=ctx.target_network_name,
            deployer_address=ctx.signing_identity_address,
            artifact_path=ctx.artifact_path,
            contract_id=ctx.remote_identifier,
        )
        pipeline_result.metadata_path = self._save_metadata(ctx, pipeline_result)
        return pipeline_result

    def _invoke(self, stage: PipelineStage, ctx: PipelineContext) -> StageResult:
        try:
            self.logger.debug("Running stage %s", stage.name)
            return stage.run(ctx)
        except SorodeployError as exc:
            self.logger.exception("Stage %s failed", stage.name)
            return HardFailure(str(exc))
        except Exception as exc:  # noqa: BLE001
            self.logger.exception("Unexpected failure in stage %s", stage.name)
            return HardFailure(f"Unexpected error: {exc}")

    def _save_metadata(self, ctx: PipelineContext, result: PipelineResult) -> Path | None:
        payload = {
            "config_name": self.config.name,
            "workspace": str(self.workspace.root),
            "succeeded": result.succeeded,
            "failed_stage": result.failed_stage,
            "error": result.error,
            "stages": [record.model_dump() for record in result.stage_results],
            "context": ctx.snapshot(),
            "diagnostics": ctx.diagnostics,
        }
        try:
            return self.workspace.save_metadata(METADATA_FILENAME, payload)
        except OSError as exc:
            self.logger.warning("Could not write run metadata: %s", exc)
            return None
