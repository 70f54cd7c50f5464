"""Projection of engine output onto the task's visible status."""

from __future__ import annotations

from direct_volume_migration.domain.entities import Condition
from direct_volume_migration.domain.phase_types import (
    CANCELED_MESSAGE,
    CONDITION_TRUE,
    RUNNING_MESSAGE,
    SUCCEEDED_MESSAGE,
    ConditionCategory,
    ConditionType,
    PhaseName,
)
from direct_volume_migration.domain.task import Task


class StatusProjector:
    """Write phase, description, itinerary and conditions back to the task."""

    def project(self, task: Task) -> None:
        status = task.owner.status
        status.phase = task.phase
        status.phase_description = task.phase_description
        status.itinerary = task.itinerary.name

        if task.phase == PhaseName.COMPLETED:
            status.delete_condition(ConditionType.RUNNING)
            if status.find_condition(ConditionType.FAILED) is None:
                task.set_condition(
                    Condition(
                        type=ConditionType.SUCCEEDED,
                        status=CONDITION_TRUE,
                        reason=task.phase,
                        category=ConditionCategory.ADVISORY,
                        message=SUCCEEDED_MESSAGE,
                        durable=True,
                    )
                )
            return

        if task.phase == PhaseName.MIGRATION_FAILED:
            status.delete_condition(ConditionType.RUNNING)
            return

        if task.phase == PhaseName.CANCELED:
            status.delete_condition(ConditionType.RUNNING)
            task.set_condition(
                Condition(
                    type=ConditionType.CANCELED,
                    status=CONDITION_TRUE,
                    reason=task.phase,
                    category=ConditionCategory.ADVISORY,
                    message=CANCELED_MESSAGE,
                    durable=True,
                )
            )
            return

        step, position, total = task.itinerary.progress_report(task.phase, task.flags)
        task.set_condition(
            Condition(
                type=ConditionType.RUNNING,
                status=CONDITION_TRUE,
                reason=step,
                category=ConditionCategory.ADVISORY,
                message=RUNNING_MESSAGE.format(step=position, total=total),
            )
        )


__all__ = ["StatusProjector"]
