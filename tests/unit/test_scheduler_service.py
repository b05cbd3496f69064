"""
Unit tests for SchedulerService.
"""

from datetime import date, timedelta

import pytest

from weekgrid.core.exceptions import CyclicDependencyError, MalformedDependencyError
from weekgrid.models.enums import (
    AlternativeReason,
    BlockType,
    EventType,
    Priority,
    ProjectRole,
    Weekday,
)
from weekgrid.models.project import Project, Task
from weekgrid.models.routine import Routine, RoutineTask
from weekgrid.models.schedule import ExternalBooking
from weekgrid.models.schedule_config import ScheduleConfig
from weekgrid.services.scheduler_service import SchedulerService
from weekgrid.utils.time_utils import time_to_minutes


def make_config(**available) -> ScheduleConfig:
    """make_config(Mon=["09:00-10:00"], Tue=[{"time": "09:00-10:00", "type": "project"}])"""
    return ScheduleConfig(available=available)


def make_task(
    task_id: str,
    duration: int = 60,
    block_type: BlockType = BlockType.ANY,
    dependencies: list[str] | None = None,
    name: str | None = None,
) -> Task:
    return Task(
        id=task_id,
        name=name or f"Task {task_id}",
        duration=duration,
        block_type=block_type,
        dependencies=dependencies or [],
    )


def make_project(
    filename: str,
    tasks: list[Task],
    role: ProjectRole | None = ProjectRole.FOCUS,
    priority: Priority = Priority.MEDIUM,
    deadline: date | None = None,
    display: str | None = None,
) -> Project:
    return Project(
        filename=filename,
        project=display or filename,
        priority=priority,
        deadline=deadline,
        tasks=tasks,
        role=role,
    )


def make_routine(*tasks: RoutineTask, filename: str = "routine") -> Routine:
    return Routine(filename=filename, name=filename, tasks=list(tasks))


def all_events(result):
    return [(day.date, event) for day in result.schedule for event in day.events]


# ------------------------------------------------------------------
# Project placement
# ------------------------------------------------------------------


def test_single_task_fills_single_slot(monday):
    service = SchedulerService()
    config = make_config(Mon=["09:00-10:00"])
    project = make_project("alpha", [make_task("1", 60)])

    result = service.create_schedule([project], [], config, monday, 1)

    assert len(result.schedule) == 1
    day = result.schedule[0]
    assert day.date == monday
    assert len(day.events) == 1
    event = day.events[0]
    assert (event.start, event.end) == ("09:00", "10:00")
    assert event.type == EventType.FOCUS
    assert event.title == "[alpha] Task 1"
    assert event.task_id == "1"
    assert event.source == "alpha"
    assert result.summary.total_tasks == 1
    assert result.summary.scheduled_tasks == 1
    assert result.summary.unscheduled_tasks == 0
    assert result.summary.total_hours == 1.0
    assert result.unscheduled == []


def test_oversized_task_is_partially_placed(monday):
    service = SchedulerService()
    config = make_config(Mon=["09:00-10:00"])
    project = make_project("alpha", [make_task("1", 90)])

    result = service.create_schedule([project], [], config, monday, 1)

    events = all_events(result)
    assert len(events) == 1
    _, event = events[0]
    assert event.title == "[alpha] Task 1 (Part 1)"
    assert event.task_id == "1-part1"
    assert (event.start, event.end) == ("09:00", "10:00")
    # Partial placement still counts as scheduled
    assert result.summary.scheduled_tasks == 1
    assert result.summary.unscheduled_tasks == 0
    assert result.summary.total_hours == 1.0


def test_split_across_slots_numbers_every_part(monday):
    service = SchedulerService()
    config = make_config(Mon=["09:00-10:00", "13:00-13:45"], Tue=["09:00-10:00"])
    project = make_project("alpha", [make_task("1", 150)], display="Alpha")

    result = service.create_schedule([project], [], config, monday, 1)

    events = all_events(result)
    assert [event.title for _, event in events] == [
        "[Alpha] Task 1 (Part 1)",
        "[Alpha] Task 1 (Part 2)",
        "[Alpha] Task 1 (Part 3)",
    ]
    assert [event.task_id for _, event in events] == ["1-part1", "1-part2", "1-part3"]
    assert [event.duration for _, event in events] == [60, 45, 45]
    assert result.summary.scheduled_tasks == 1
    assert result.summary.total_hours == 2.5


def test_split_skips_slots_under_thirty_minutes(monday):
    service = SchedulerService()
    config = make_config(Mon=["09:00-09:20", "10:00-10:40"])
    project = make_project("alpha", [make_task("1", 60)])

    result = service.create_schedule([project], [], config, monday, 1)

    events = all_events(result)
    assert len(events) == 1
    assert events[0][1].start == "10:00"
    assert events[0][1].duration == 40


def test_long_task_needs_three_free_hours(monday):
    service = SchedulerService()
    config = make_config(Mon=["09:00-11:00", "13:00-17:00"])
    project = make_project("alpha", [make_task("1", 60, block_type=BlockType.LONG)])

    result = service.create_schedule([project], [], config, monday, 1)

    (_, event), = all_events(result)
    assert event.start == "13:00"
    assert event.end == "14:00"


def test_short_and_any_tasks_take_first_fitting_slot(monday):
    service = SchedulerService()
    config = make_config(Mon=["09:00-11:00", "13:00-17:00"])
    project = make_project(
        "alpha",
        [make_task("1", 60, block_type=BlockType.SHORT), make_task("2", 60)],
    )

    result = service.create_schedule([project], [], config, monday, 1)

    assert [event.start for _, event in all_events(result)] == ["09:00", "10:00"]


def test_slot_type_project_excludes_routines_and_routine_excludes_projects(monday):
    service = SchedulerService()
    config = make_config(
        Mon=[
            {"time": "08:00-09:00", "type": "routine"},
            {"time": "09:00-10:00", "type": "project"},
        ]
    )
    project = make_project("alpha", [make_task("1", 60)])
    routine = make_routine(RoutineTask(name="Stretch", duration=30, repeat=["Mon"]))

    result = service.create_schedule([project], [routine], config, monday, 1)

    by_type = {event.type: event for _, event in all_events(result)}
    assert by_type[EventType.ROUTINE].start == "08:00"
    assert by_type[EventType.FOCUS].start == "09:00"


def test_dependencies_are_placed_first(monday):
    service = SchedulerService()
    config = make_config(Mon=["09:00-10:00"], Tue=["09:00-10:00"])
    project = make_project(
        "alpha",
        [make_task("2", dependencies=["1"]), make_task("1")],
    )

    result = service.create_schedule([project], [], config, monday, 1)

    placed = {event.task_id: day for day, event in all_events(result)}
    assert placed["1"] == monday
    assert placed["2"] == monday + timedelta(days=1)


def test_dependent_task_never_starts_before_dependency_ends(monday):
    service = SchedulerService()
    # Evening window declared before the morning one
    config = make_config(Mon=["19:00-20:00", "09:00-10:00"], Tue=["09:00-10:00"])
    project = make_project(
        "alpha",
        [make_task("1"), make_task("2", dependencies=["1"])],
    )

    result = service.create_schedule([project], [], config, monday, 1)

    placed = {event.task_id: (day, event) for day, event in all_events(result)}
    dep_day, dep_event = placed["1"]
    day, event = placed["2"]
    assert (dep_day, dep_event.start) == (monday, "19:00")
    assert (dep_day, time_to_minutes(dep_event.end)) <= (day, time_to_minutes(event.start))
    assert day == monday + timedelta(days=1)


def test_long_dependency_chain_is_placed_in_order(monday):
    service = SchedulerService(strict_dependencies=True)
    config = make_config(Mon=["00:00-24:00"])
    size = 1200
    tasks = [
        make_task(str(n), 1, dependencies=[str(n - 1)] if n > 1 else [])
        for n in range(size, 0, -1)
    ]
    project = make_project("alpha", tasks)

    result = service.create_schedule([project], [], config, monday, 1)

    assert result.summary.scheduled_tasks == size
    assert result.unscheduled == []
    (day,) = result.schedule
    assert [event.task_id for event in day.events][:3] == ["1", "2", "3"]
    assert (day.events[-1].task_id, day.events[-1].end) == (str(size), "20:00")


def test_unplaceable_dependency_blocks_dependents(monday):
    service = SchedulerService()
    config = make_config(Mon=["09:00-09:20"])
    project = make_project(
        "alpha",
        [make_task("1", 60), make_task("2", 10, dependencies=["1"])],
    )

    result = service.create_schedule([project], [], config, monday, 1)

    assert result.schedule == []
    assert result.summary.scheduled_tasks == 0
    assert result.summary.unscheduled_tasks == 2
    assert [(item.task_id, item.reason) for item in result.unscheduled] == [
        ("1", "no_slot"),
        ("2", "dependency_unscheduled"),
    ]


def test_unknown_dependency_is_ignored_by_default(monday):
    service = SchedulerService()
    config = make_config(Mon=["09:00-10:00"])
    project = make_project("alpha", [make_task("1", dependencies=["99"])])

    result = service.create_schedule([project], [], config, monday, 1)

    assert result.summary.scheduled_tasks == 1


def test_unknown_dependency_raises_in_strict_mode(monday):
    service = SchedulerService(strict_dependencies=True)
    config = make_config(Mon=["09:00-10:00"])
    project = make_project("alpha", [make_task("1", dependencies=["99"])])

    with pytest.raises(MalformedDependencyError) as exc_info:
        service.create_schedule([project], [], config, monday, 1)

    assert exc_info.value.dependency_id == "99"


def test_cyclic_dependencies_stay_unscheduled(monday):
    service = SchedulerService()
    config = make_config(Mon=["09:00-12:00"])
    project = make_project(
        "alpha",
        [
            make_task("1", dependencies=["2"]),
            make_task("2", dependencies=["1"]),
            make_task("3"),
        ],
    )

    result = service.create_schedule([project], [], config, monday, 1)

    assert [event.task_id for _, event in all_events(result)] == ["3"]
    assert result.summary.scheduled_tasks == 1
    assert result.summary.unscheduled_tasks == 2
    assert {item.reason for item in result.unscheduled} == {"dependency_unscheduled"}


def test_cyclic_dependencies_raise_in_strict_mode(monday):
    service = SchedulerService(strict_dependencies=True)
    config = make_config(Mon=["09:00-12:00"])
    project = make_project(
        "alpha",
        [make_task("1", dependencies=["2"]), make_task("2", dependencies=["1"])],
    )

    with pytest.raises(CyclicDependencyError):
        service.create_schedule([project], [], config, monday, 1)


def test_focus_projects_are_placed_before_buffer(monday):
    service = SchedulerService()
    config = make_config(Mon=["09:00-10:00"])
    buffer = make_project("aaa-buffer", [make_task("1")], role=ProjectRole.BUFFER)
    focus = make_project("zzz-focus", [make_task("1")], role=ProjectRole.FOCUS)

    result = service.create_schedule([buffer, focus], [], config, monday, 1)

    (_, event), = all_events(result)
    assert event.source == "zzz-focus"
    assert event.type == EventType.FOCUS
    assert [(item.source, item.reason) for item in result.unscheduled] == [
        ("aaa-buffer", "no_slot"),
    ]


def test_buffer_events_are_tagged_buffer(monday):
    service = SchedulerService()
    config = make_config(Mon=["09:00-11:00"])
    buffer = make_project("side", [make_task("1")], role=ProjectRole.BUFFER)

    result = service.create_schedule([buffer], [], config, monday, 1)

    assert all_events(result)[0][1].type == EventType.BUFFER


def test_projects_without_role_are_queued(monday):
    service = SchedulerService()
    config = make_config(Mon=["09:00-12:00"])
    queued = make_project("later", [make_task("1"), make_task("2")], role=None)

    result = service.create_schedule([queued], [], config, monday, 1)

    assert result.schedule == []
    assert result.summary.total_tasks == 2
    assert result.summary.unscheduled_tasks == 2
    assert [item.reason for item in result.unscheduled] == ["queued", "queued"]


def test_rank_projects_orders_by_priority_deadline_filename():
    low = make_project("low", [], priority=Priority.LOW)
    high_open = make_project("high-open", [], priority=Priority.HIGH)
    high_dated = make_project(
        "high-dated", [], priority=Priority.HIGH, deadline=date(2025, 2, 1)
    )
    high_sooner = make_project(
        "z-high-sooner", [], priority=Priority.HIGH, deadline=date(2025, 1, 20)
    )
    medium_b = make_project("b", [])
    medium_a = make_project("a", [])

    ranked = SchedulerService.rank_projects(
        [low, medium_b, high_open, medium_a, high_dated, high_sooner]
    )

    assert [project.filename for project in ranked] == [
        "z-high-sooner",
        "high-dated",
        "high-open",
        "a",
        "b",
        "low",
    ]


def test_higher_ranked_project_gets_earlier_slot(monday):
    service = SchedulerService()
    config = make_config(Mon=["09:00-10:00"], Tue=["09:00-10:00"])
    low = make_project("a-low", [make_task("1")], priority=Priority.LOW)
    high = make_project("b-high", [make_task("1")], priority=Priority.HIGH)

    result = service.create_schedule([low, high], [], config, monday, 1)

    placed = {event.source: day for day, event in all_events(result)}
    assert placed["b-high"] == monday
    assert placed["a-low"] == monday + timedelta(days=1)


# ------------------------------------------------------------------
# Routines
# ------------------------------------------------------------------


def test_routine_placed_at_preferred_time(monday):
    service = SchedulerService()
    config = make_config(Mon=["07:00-08:00", "09:00-10:00"])
    routine = make_routine(
        RoutineTask(name="Workout", duration=30, repeat=["Mon"], preferred_time="09:00")
    )

    result = service.create_schedule([], [routine], config, monday, 1)

    (_, event), = all_events(result)
    assert (event.start, event.end) == ("09:00", "09:30")
    assert event.type == EventType.ROUTINE
    assert event.task_id is None
    assert result.routine_alternatives == []


def test_routine_keyword_preferred_time(monday):
    service = SchedulerService()
    config = make_config(Mon=["09:00-10:00", "19:00-20:00"])
    routine = make_routine(
        RoutineTask(name="Read", duration=30, repeat=["Mon"], preferred_time="evening")
    )

    result = service.create_schedule([], [routine], config, monday, 1)

    assert all_events(result)[0][1].start == "19:00"


def test_unpadded_window_matches_keyword_preferred_time(monday):
    service = SchedulerService()
    config = make_config(Mon=["9:00-10:00"])
    routine = make_routine(
        RoutineTask(name="Plan", duration=30, repeat=["Mon"], preferred_time="morning")
    )

    result = service.create_schedule([], [routine], config, monday, 1)

    (_, event), = all_events(result)
    assert (event.start, event.end) == ("09:00", "09:30")
    assert result.routine_alternatives == []


def test_routine_moves_within_day_when_preferred_slot_full(monday):
    service = SchedulerService()
    config = make_config(Mon=["08:00-09:00", "09:00-10:00"])
    routine = make_routine(
        RoutineTask(name="Workout", duration=60, repeat=["Mon"], preferred_time="09:00")
    )
    booking = ExternalBooking(date=monday, start="09:00", end="10:00", title="Dentist")

    result = service.create_schedule(
        [], [routine], config, monday, 1, existing_events=[booking]
    )

    (_, event), = all_events(result)
    assert event.start == "08:00"
    (alternative,) = result.routine_alternatives
    assert alternative.reason == AlternativeReason.SLOT_FULL
    assert alternative.original_date == alternative.scheduled_date == monday
    assert alternative.original_time == "09:00"
    assert alternative.scheduled_time == "08:00"


def test_routine_moves_to_nearby_day_when_day_has_no_eligible_slot(monday):
    service = SchedulerService()
    config = make_config(
        Mon=[{"time": "09:00-10:00", "type": "project"}],
        Tue=["10:00-11:00"],
    )
    routine = make_routine(
        RoutineTask(name="Workout", duration=30, repeat=["Mon"], preferred_time="09:00")
    )

    result = service.create_schedule([], [routine], config, monday, 1)

    (day, event), = all_events(result)
    assert day == monday + timedelta(days=1)
    assert event.start == "10:00"
    (alternative,) = result.routine_alternatives
    assert alternative.original_day == Weekday.MON
    assert alternative.original_time == "09:00"
    assert alternative.scheduled_day == Weekday.TUE
    assert alternative.scheduled_time == "10:00"
    assert alternative.reason == AlternativeReason.NO_SLOT


def test_nearby_day_alternative_without_preference_records_any(monday):
    service = SchedulerService()
    config = make_config(Tue=["10:00-11:00"])
    routine = make_routine(RoutineTask(name="Journal", duration=15, repeat=["Mon"]))

    result = service.create_schedule([], [routine], config, monday, 1)

    (alternative,) = result.routine_alternatives
    assert alternative.original_time == "any"
    assert alternative.reason == AlternativeReason.NO_SLOT


def test_routine_is_never_doubled_on_one_day(monday):
    service = SchedulerService()
    config = make_config(Tue=["09:00-12:00"])
    routine = make_routine(RoutineTask(name="Walk", duration=30, repeat=["daily"]))

    result = service.create_schedule([], [routine], config, monday, 1)

    titles_per_day = [
        [event.title for event in day.events if event.type == EventType.ROUTINE]
        for day in result.schedule
    ]
    assert titles_per_day == [["Walk"]]


def test_routine_without_any_reachable_slot_is_dropped(monday):
    service = SchedulerService()
    config = make_config(Mon=["09:00-09:15"])
    routine = make_routine(RoutineTask(name="Yoga", duration=60, repeat=["Mon"]))

    result = service.create_schedule([], [routine], config, monday, 1)

    assert result.schedule == []
    assert result.routine_alternatives == []
    assert result.summary.total_tasks == 0


def test_routines_count_toward_total_hours_but_not_tasks(monday):
    service = SchedulerService()
    config = make_config(Mon=["08:00-08:30", "09:00-10:00"])
    routine = make_routine(RoutineTask(name="Stretch", duration=30, repeat=["Mon"]))
    project = make_project("alpha", [make_task("1")])

    result = service.create_schedule([project], [routine], config, monday, 1)

    assert result.summary.total_tasks == 1
    assert result.summary.total_hours == 1.5


# ------------------------------------------------------------------
# Bookings, boundaries, properties
# ------------------------------------------------------------------


def test_existing_booking_reduces_capacity(monday):
    service = SchedulerService()
    config = make_config(Mon=["09:00-12:00"])
    project = make_project("alpha", [make_task("1", 120)])
    booking = ExternalBooking(
        start="2025-01-13T09:00:00+09:00", end="2025-01-13T10:00:00+09:00"
    )

    result = service.create_schedule(
        [project], [], config, monday, 1, existing_events=[booking]
    )

    (_, event), = all_events(result)
    assert (event.start, event.end) == ("10:00", "12:00")


def test_zero_week_horizon_schedules_nothing(monday):
    service = SchedulerService()
    config = make_config(Mon=["09:00-10:00"])
    project = make_project("alpha", [make_task("1"), make_task("2")])
    routine = make_routine(RoutineTask(name="Walk", duration=30, repeat=["daily"]))

    result = service.create_schedule([project], [routine], config, monday, 0)

    assert result.schedule == []
    assert result.summary.total_tasks == 2
    assert result.summary.scheduled_tasks == 0
    assert result.summary.unscheduled_tasks == 2
    assert result.summary.total_hours == 0


def test_empty_inputs_give_empty_result(monday):
    result = SchedulerService().create_schedule([], [], ScheduleConfig(), monday, 2)

    assert result.schedule == []
    assert result.summary.total_tasks == 0
    assert result.routine_alternatives == []


def _busy_inputs():
    config = make_config(
        Mon=["09:00-10:00", "19:00-23:00"],
        Wed=["13:00-14:00", "19:00-21:00"],
        Sat=["21:00-24:00"],
    )
    projects = [
        make_project(
            "alpha",
            [
                make_task("1", 90),
                make_task("2", 240, block_type=BlockType.LONG, dependencies=["1"]),
                make_task("3", 45, dependencies=["2"]),
            ],
            priority=Priority.HIGH,
        ),
        make_project("beta", [make_task("1", 60), make_task("2", 30)], role=ProjectRole.BUFFER),
        make_project("gamma", [make_task("1", 30)], role=None),
    ]
    routines = [
        make_routine(
            RoutineTask(name="Walk", duration=30, repeat=["weekdays"], preferred_time="morning"),
            RoutineTask(name="Review", duration=60, repeat=["Sat"], preferred_time="21:00"),
        )
    ]
    return projects, routines, config


def test_summary_counts_are_conserved(monday):
    projects, routines, config = _busy_inputs()

    for weeks in range(0, 4):
        result = SchedulerService().create_schedule(projects, routines, config, monday, weeks)
        summary = result.summary
        assert summary.scheduled_tasks + summary.unscheduled_tasks == summary.total_tasks
        assert summary.total_tasks == 6


def test_events_within_a_day_never_overlap(monday):
    projects, routines, config = _busy_inputs()

    result = SchedulerService().create_schedule(projects, routines, config, monday, 3)

    for day in result.schedule:
        starts = [time_to_minutes(event.start) for event in day.events]
        assert starts == sorted(starts)
        for previous, current in zip(day.events, day.events[1:]):
            assert time_to_minutes(previous.end) <= time_to_minutes(current.start)


def test_schedule_is_deterministic(monday):
    projects, routines, config = _busy_inputs()
    service = SchedulerService()

    first = service.create_schedule(projects, routines, config, monday, 2)
    second = service.create_schedule(projects, routines, config, monday, 2)

    assert first.model_dump_json() == second.model_dump_json()


def test_half_hour_totals_round_half_up(monday):
    service = SchedulerService()
    config = make_config(Mon=["09:00-10:00"])
    project = make_project("alpha", [make_task("1", 3)])

    result = service.create_schedule([project], [], config, monday, 1)

    # 3 minutes == 0.05h
    assert result.summary.total_hours == 0.1


# ------------------------------------------------------------------
# Estimator
# ------------------------------------------------------------------


def test_required_weeks_is_first_complete_horizon(monday):
    service = SchedulerService()
    config = make_config(Mon=["09:00-10:00"])
    project = make_project("alpha", [make_task("1"), make_task("2"), make_task("3")])

    estimate = service.calculate_required_weeks([project], [], config, monday)

    assert estimate.required_weeks == 3
    assert estimate.total_tasks == 3
    assert estimate.total_hours == 3.0

    check = service.create_schedule([project], [], config, monday, estimate.required_weeks)
    assert check.summary.unscheduled_tasks == 0


def test_required_weeks_returns_ceiling_when_never_complete(monday):
    service = SchedulerService(max_estimate_weeks=5)
    config = make_config(Mon=["09:00-10:00"])
    queued = make_project("later", [make_task("1", 30)], role=None)

    estimate = service.calculate_required_weeks([queued], [], config, monday)

    assert estimate.required_weeks == 5
    assert estimate.total_tasks == 1
    assert estimate.total_hours == 0.5


def test_required_weeks_explicit_ceiling_overrides_default(monday):
    service = SchedulerService()
    queued = make_project("later", [make_task("1")], role=None)

    estimate = service.calculate_required_weeks(
        [queued], [], ScheduleConfig(), monday, max_weeks=2
    )

    assert estimate.required_weeks == 2


def test_required_weeks_with_no_projects_is_one(monday):
    estimate = SchedulerService().calculate_required_weeks([], [], ScheduleConfig(), monday)

    assert estimate.required_weeks == 1
    assert estimate.total_tasks == 0
    assert estimate.total_hours == 0
