"""Ledger-gated idempotent provisioning tasks."""

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from .exceptions import DevEnvError, ProvisioningError
from .ledger import StepLedger
from .logging_config import LOGGER
from .models import StepOutcome, StepStatus


@dataclass
class ProvisioningTask:
    """A named, idempotent unit of work.

    Attributes:
        step_id: Ledger identifier, e.g. "homebrew"
        label: Human-readable description for logs
        action: Installs the tool; raises on failure
        precheck: Returns True when the tool is already present outside the ledger
        on_present: Idempotent follow-up run instead of action when precheck is True
    """

    step_id: str
    label: str
    action: Callable[[], None]
    precheck: Callable[[], bool] | None = None
    on_present: Callable[[], None] | None = None


def run_task(task: ProvisioningTask, ledger: StepLedger) -> StepOutcome:
    """Run one task through the three-state idempotency gate.

    1. Ledger says done -> SKIPPED, nothing runs
    2. Precheck says present -> on_present hook, mark done, ALREADY_PRESENT
    3. Otherwise run action -> mark done, INSTALLED

    Args:
        task: Task to run
        ledger: Completion ledger consulted before and updated after

    Returns:
        StepOutcome for the task

    Raises:
        ProvisioningError: If the action (or on_present hook) fails
    """
    if ledger.is_done(task.step_id):
        LOGGER.info("%s already completed, skipping", task.label)
        return StepOutcome(step_id=task.step_id, status=StepStatus.SKIPPED)

    try:
        if task.precheck is not None and task.precheck():
            LOGGER.info("%s already present", task.label)
            if task.on_present is not None:
                task.on_present()
            ledger.mark_done(task.step_id)
            return StepOutcome(step_id=task.step_id, status=StepStatus.ALREADY_PRESENT)

        LOGGER.info("Installing %s...", task.label)
        task.action()
    except DevEnvError as e:
        raise ProvisioningError(task.step_id, str(e), e.hint) from e
    except OSError as e:
        raise ProvisioningError(task.step_id, str(e)) from e

    ledger.mark_done(task.step_id)
    LOGGER.info("%s installed", task.label)
    return StepOutcome(step_id=task.step_id, status=StepStatus.INSTALLED)


class ProvisioningPlan:
    """Fixed-order sequence of tasks sharing one ledger.

    Fail-fast: the first failing task stops the run. Completed steps stay in the
    ledger, so re-running resumes at the first incomplete step.
    """

    def __init__(self, title: str, tasks: Sequence[ProvisioningTask]) -> None:
        """Initialize plan.

        Args:
            title: Plan name for logs
            tasks: Tasks in execution order
        """
        self.title = title
        self.tasks = list(tasks)

    @property
    def step_ids(self) -> list[str]:
        return [task.step_id for task in self.tasks]

    def run(self, ledger: StepLedger) -> list[StepOutcome]:
        """Run every task in order.

        Args:
            ledger: Completion ledger

        Returns:
            One StepOutcome per task

        Raises:
            ProvisioningError: On the first failing task, with the outcomes so
                far (ending in a FAILED one) attached as ``outcomes``
        """
        outcomes: list[StepOutcome] = []
        total = len(self.tasks)
        LOGGER.info("%s: %d steps, ledger %s", self.title, total, ledger.path)

        for position, task in enumerate(self.tasks, start=1):
            LOGGER.info("[Step %d/%d] %s", position, total, task.label)
            try:
                outcomes.append(run_task(task, ledger))
            except ProvisioningError as e:
                LOGGER.error("%s", e)
                outcomes.append(
                    StepOutcome(step_id=task.step_id, status=StepStatus.FAILED, error=str(e))
                )
                e.outcomes = outcomes
                raise

        return outcomes
