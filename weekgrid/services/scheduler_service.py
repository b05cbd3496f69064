"""
Scheduler service for slot-based weekly planning.

Places routine occurrences and dependency-ordered project tasks into the
availability grid, then assembles a per-day schedule and summary.
"""

from datetime import date, timedelta
from typing import Optional

from weekgrid.core.logger import setup_logger
from weekgrid.models.enums import AlternativeReason, BlockType, EventType, ProjectRole, Weekday
from weekgrid.models.project import Project, Task
from weekgrid.models.routine import Routine, RoutineTask
from weekgrid.models.schedule import (
    DaySchedule,
    ExternalBooking,
    RoutineAlternative,
    ScheduledEvent,
    ScheduleEstimate,
    ScheduleResult,
    ScheduleSummary,
    TimeSlot,
    UnscheduledTask,
)
from weekgrid.models.schedule_config import ScheduleConfig
from weekgrid.services.time_grid import build_time_slots, date_range, subtract_bookings
from weekgrid.utils.dependency_graph import DependencyGraph
from weekgrid.utils.time_utils import minutes_to_hours, time_to_minutes

logger = setup_logger(__name__)

# (date, minute of day) at which a placed task finishes
Moment = tuple[date, int]

_ROLE_EVENT_TYPES = {
    ProjectRole.FOCUS: EventType.FOCUS,
    ProjectRole.BUFFER: EventType.BUFFER,
}


class SchedulerService:
    """
    Service for greedy slot allocation.

    Provides:
    - Routine placement with preferred-time, same-day and nearby-day fallback
    - Dependency-aware project task placement with split fallback
    - Minimal horizon estimation
    """

    def __init__(
        self,
        long_block_minutes: int = 180,
        min_split_minutes: int = 30,
        routine_search_days: int = 7,
        max_estimate_weeks: int = 52,
        strict_dependencies: bool = False,
    ):
        """
        Initialize scheduler service.

        Args:
            long_block_minutes: Free slot time a `long` task requires
            min_split_minutes: Smallest free slot time a split part may use
            routine_search_days: How many days away a routine may move
            max_estimate_weeks: Ceiling for the required-weeks search
            strict_dependencies: Raise on unknown or cyclic dependencies
                instead of ignoring them
        """
        self.long_block_minutes = long_block_minutes
        self.min_split_minutes = min_split_minutes
        self.routine_search_days = routine_search_days
        self.max_estimate_weeks = max_estimate_weeks
        self.strict_dependencies = strict_dependencies

    def create_schedule(
        self,
        projects: list[Project],
        routines: list[Routine],
        config: ScheduleConfig,
        start_date: date,
        weeks: int,
        existing_events: Optional[list[ExternalBooking]] = None,
    ) -> ScheduleResult:
        """
        Build a schedule for `weeks` whole weeks starting at `start_date`.

        Order of placement: external bookings are subtracted first, then
        routines, then focus projects, then buffer projects. Projects
        without a role are left unscheduled.

        Raises:
            MalformedDependencyError, CyclicDependencyError: Only with
                strict_dependencies enabled
        """
        result = self._run(projects, routines, config, start_date, weeks, existing_events or [])
        summary = result.summary
        logger.info(
            f"Schedule {start_date} +{weeks}w: {summary.scheduled_tasks}/{summary.total_tasks} "
            f"tasks placed, {summary.total_hours}h across {len(result.schedule)} days, "
            f"{len(result.routine_alternatives)} routine alternatives"
        )
        return result

    def calculate_required_weeks(
        self,
        projects: list[Project],
        routines: list[Routine],
        config: ScheduleConfig,
        start_date: date,
        max_weeks: Optional[int] = None,
        existing_events: Optional[list[ExternalBooking]] = None,
    ) -> ScheduleEstimate:
        """
        Find the smallest week count that places every project task.

        Runs the full pipeline for 1, 2, ... weeks and stops at the first run
        with no unscheduled task. Returns the ceiling when none succeeds.
        """
        ceiling = max_weeks or self.max_estimate_weeks
        total_tasks = sum(len(project.tasks) for project in projects)
        total_hours = minutes_to_hours(sum(project.total_minutes for project in projects))

        required = ceiling
        for weeks in range(1, ceiling + 1):
            result = self._run(
                projects, routines, config, start_date, weeks, existing_events or []
            )
            if result.summary.unscheduled_tasks == 0:
                required = weeks
                break
        else:
            logger.warning(
                f"Estimate hit the {ceiling}-week ceiling with tasks still unscheduled"
            )

        logger.info(f"Estimate from {start_date}: {required} weeks for {total_tasks} tasks")
        return ScheduleEstimate(
            required_weeks=required,
            total_tasks=total_tasks,
            total_hours=total_hours,
        )

    @staticmethod
    def rank_projects(projects: list[Project]) -> list[Project]:
        """Sort by priority, then deadline (dated first), then filename."""
        return sorted(
            projects,
            key=lambda project: (
                project.priority.rank,
                project.deadline is None,
                project.deadline or date.max,
                project.filename,
            ),
        )

    def _run(
        self,
        projects: list[Project],
        routines: list[Routine],
        config: ScheduleConfig,
        start_date: date,
        weeks: int,
        existing_events: list[ExternalBooking],
    ) -> ScheduleResult:
        slots = build_time_slots(config, start_date, weeks)
        subtract_bookings(slots, existing_events)

        board: dict[date, list[ScheduledEvent]] = {}
        alternatives = self._place_routines(routines, date_range(start_date, weeks), slots, board)

        placed: dict[tuple[str, str], Moment] = {}
        unscheduled: list[UnscheduledTask] = []
        scheduled_count = 0
        for role in (ProjectRole.FOCUS, ProjectRole.BUFFER):
            ranked = self.rank_projects([p for p in projects if p.role == role])
            for project in ranked:
                scheduled_count += self._place_project(
                    project, _ROLE_EVENT_TYPES[role], slots, board, placed, unscheduled
                )

        for project in projects:
            if project.role is None:
                unscheduled.extend(
                    UnscheduledTask(source=project.filename, task_id=task.id, reason="queued")
                    for task in project.tasks
                )

        return self._assemble(projects, board, scheduled_count, alternatives, unscheduled)

    # ------------------------------------------------------------------
    # Routines
    # ------------------------------------------------------------------

    def _place_routines(
        self,
        routines: list[Routine],
        dates: list[date],
        slots: list[TimeSlot],
        board: dict[date, list[ScheduledEvent]],
    ) -> list[RoutineAlternative]:
        """Place every routine occurrence; return the ones moved off their preference."""
        slots_by_date: dict[date, list[TimeSlot]] = {}
        for slot in slots:
            slots_by_date.setdefault(slot.date, []).append(slot)

        alternatives: list[RoutineAlternative] = []
        for routine in routines:
            for task in routine.tasks:
                for day in dates:
                    if Weekday.from_date(day) not in task.repeat:
                        continue
                    alternative = self._place_routine_occurrence(
                        routine, task, day, slots_by_date, board
                    )
                    if alternative:
                        alternatives.append(alternative)
        return alternatives

    def _place_routine_occurrence(
        self,
        routine: Routine,
        task: RoutineTask,
        day: date,
        slots_by_date: dict[date, list[TimeSlot]],
        board: dict[date, list[ScheduledEvent]],
    ) -> Optional[RoutineAlternative]:
        if self._has_routine_event(board, day, task.name):
            return None

        preferred = task.resolved_time
        day_slots = [
            slot for slot in slots_by_date.get(day, []) if slot.type.allows_routines()
        ]

        if preferred:
            for slot in day_slots:
                if slot.start == preferred and slot.can_fit(task.duration):
                    self._place_routine_event(routine, task, slot, board)
                    return None

        for slot in day_slots:
            if slot.can_fit(task.duration):
                start = self._place_routine_event(routine, task, slot, board)
                if preferred and slot.start != preferred:
                    logger.debug(f"Routine '{task.name}' on {day} moved {preferred} -> {start}")
                    return self._alternative(
                        task, day, preferred, day, start, AlternativeReason.SLOT_FULL
                    )
                return None

        for offset in range(1, self.routine_search_days + 1):
            for candidate in (day + timedelta(days=offset), day - timedelta(days=offset)):
                if self._has_routine_event(board, candidate, task.name):
                    continue
                for slot in slots_by_date.get(candidate, []):
                    if slot.type.allows_routines() and slot.can_fit(task.duration):
                        start = self._place_routine_event(routine, task, slot, board)
                        logger.debug(f"Routine '{task.name}' moved {day} -> {candidate} {start}")
                        return self._alternative(
                            task, day, preferred or "any", candidate, start,
                            AlternativeReason.NO_SLOT,
                        )

        logger.debug(f"Routine '{task.name}' on {day} dropped: no slot within reach")
        return None

    @staticmethod
    def _has_routine_event(board: dict[date, list[ScheduledEvent]], day: date, name: str) -> bool:
        return any(
            event.title == name and event.type == EventType.ROUTINE
            for event in board.get(day, [])
        )

    @staticmethod
    def _place_routine_event(
        routine: Routine,
        task: RoutineTask,
        slot: TimeSlot,
        board: dict[date, list[ScheduledEvent]],
    ) -> str:
        start, end = slot.consume(task.duration)
        board.setdefault(slot.date, []).append(
            ScheduledEvent(
                start=start,
                end=end,
                title=task.name,
                type=EventType.ROUTINE,
                source=routine.filename,
            )
        )
        return start

    @staticmethod
    def _alternative(
        task: RoutineTask,
        original: date,
        original_time: str,
        scheduled: date,
        scheduled_time: str,
        reason: AlternativeReason,
    ) -> RoutineAlternative:
        return RoutineAlternative(
            routine_name=task.name,
            original_day=Weekday.from_date(original),
            original_date=original,
            original_time=original_time,
            scheduled_day=Weekday.from_date(scheduled),
            scheduled_date=scheduled,
            scheduled_time=scheduled_time,
            reason=reason,
        )

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    def _place_project(
        self,
        project: Project,
        event_type: EventType,
        slots: list[TimeSlot],
        board: dict[date, list[ScheduledEvent]],
        placed: dict[tuple[str, str], Moment],
        unscheduled: list[UnscheduledTask],
    ) -> int:
        """
        Place a project's tasks in dependency order.

        Returns:
            Number of tasks placed (whole or in parts)
        """
        graph = DependencyGraph(project)
        if self.strict_dependencies:
            graph.validate()

        scheduled = 0
        for task in graph.topological_order():
            key = (project.filename, task.id)
            if key in placed:
                continue

            dep_keys = [(project.filename, dep_id) for dep_id in graph.edges[task.id]]
            if any(dep_key not in placed for dep_key in dep_keys):
                unscheduled.append(
                    UnscheduledTask(
                        source=project.filename,
                        task_id=task.id,
                        reason="dependency_unscheduled",
                    )
                )
                continue
            ready_at = max((placed[dep_key] for dep_key in dep_keys), default=None)

            finished = self._place_whole(project, task, event_type, slots, board, ready_at)
            if finished is None:
                finished = self._place_split(project, task, event_type, slots, board, ready_at)
            if finished is None:
                unscheduled.append(
                    UnscheduledTask(source=project.filename, task_id=task.id, reason="no_slot")
                )
                continue

            placed[key] = finished
            scheduled += 1

        logger.debug(
            f"Project '{project.filename}' ({event_type.value}): "
            f"{scheduled}/{len(project.tasks)} tasks placed"
        )
        return scheduled

    @staticmethod
    def _is_open_after(slot: TimeSlot, ready_at: Optional[Moment]) -> bool:
        """Whether the slot's next free minute comes no earlier than `ready_at`."""
        if ready_at is None:
            return True
        return (slot.date, slot.start_minutes + slot.used) >= ready_at

    def _place_whole(
        self,
        project: Project,
        task: Task,
        event_type: EventType,
        slots: list[TimeSlot],
        board: dict[date, list[ScheduledEvent]],
        ready_at: Optional[Moment],
    ) -> Optional[Moment]:
        for slot in slots:
            if not slot.type.allows_projects() or not self._is_open_after(slot, ready_at):
                continue
            if not slot.can_fit(task.duration):
                continue
            if task.block_type == BlockType.LONG and slot.remaining < self.long_block_minutes:
                continue
            title = f"[{project.project}] {task.name}"
            return self._place_project_event(
                project, task.id, title, task.duration, event_type, slot, board
            )
        return None

    def _place_split(
        self,
        project: Project,
        task: Task,
        event_type: EventType,
        slots: list[TimeSlot],
        board: dict[date, list[ScheduledEvent]],
        ready_at: Optional[Moment],
    ) -> Optional[Moment]:
        """Spread a task over consecutive slots with at least `min_split_minutes` free."""
        parts: list[tuple[TimeSlot, int]] = []
        remaining = task.duration
        for slot in slots:
            if remaining <= 0:
                break
            if not slot.type.allows_projects() or not self._is_open_after(slot, ready_at):
                continue
            if slot.remaining < self.min_split_minutes:
                continue
            minutes = min(remaining, slot.remaining)
            parts.append((slot, minutes))
            remaining -= minutes

        if not parts:
            return None

        numbered = len(parts) > 1 or remaining > 0
        if remaining > 0:
            logger.debug(
                f"Task '{project.filename}#{task.id}' only partly placed: "
                f"{remaining}/{task.duration} min left over"
            )

        finished: Optional[Moment] = None
        for index, (slot, minutes) in enumerate(parts, start=1):
            title = f"[{project.project}] {task.name}"
            task_id = task.id
            if numbered:
                title = f"{title} (Part {index})"
                task_id = f"{task.id}-part{index}"
            finished = self._place_project_event(
                project, task_id, title, minutes, event_type, slot, board
            )
        return finished

    @staticmethod
    def _place_project_event(
        project: Project,
        task_id: str,
        title: str,
        minutes: int,
        event_type: EventType,
        slot: TimeSlot,
        board: dict[date, list[ScheduledEvent]],
    ) -> Moment:
        start, end = slot.consume(minutes)
        board.setdefault(slot.date, []).append(
            ScheduledEvent(
                start=start,
                end=end,
                title=title,
                type=event_type,
                source=project.filename,
                task_id=task_id,
            )
        )
        return slot.date, time_to_minutes(end)

    # ------------------------------------------------------------------
    # Assembly
    # ------------------------------------------------------------------

    @staticmethod
    def _assemble(
        projects: list[Project],
        board: dict[date, list[ScheduledEvent]],
        scheduled_count: int,
        alternatives: list[RoutineAlternative],
        unscheduled: list[UnscheduledTask],
    ) -> ScheduleResult:
        days = [
            DaySchedule(
                date=day,
                events=sorted(board[day], key=lambda event: time_to_minutes(event.start)),
            )
            for day in sorted(board)
        ]

        total_tasks = sum(len(project.tasks) for project in projects)
        total_minutes = sum(event.duration for day in days for event in day.events)

        return ScheduleResult(
            schedule=days,
            summary=ScheduleSummary(
                total_tasks=total_tasks,
                scheduled_tasks=scheduled_count,
                unscheduled_tasks=total_tasks - scheduled_count,
                total_hours=minutes_to_hours(total_minutes),
            ),
            routine_alternatives=alternatives,
            unscheduled=unscheduled,
        )
