"""
Task dependency graph utilities.

Builds a per-project dependency graph, orders tasks so every task comes after
its dependencies, and optionally validates ids and acyclicity.
"""

from typing import Optional

from weekgrid.core.exceptions import CyclicDependencyError, MalformedDependencyError
from weekgrid.models.project import Project, Task


class DependencyGraph:
    """Adjacency list of one project's tasks, keyed by task id."""

    def __init__(self, project: Project):
        """
        Build the graph for a project.

        Args:
            project: Project whose tasks form the graph. Dependency ids that do
                not name a task of the same project are kept aside in
                `unknown_dependencies` and left out of the edges.
        """
        self.project = project
        self.tasks: dict[str, Task] = {task.id: task for task in project.tasks}

        self.edges: dict[str, list[str]] = {}
        self.unknown_dependencies: dict[str, list[str]] = {}
        for task_id, task in self.tasks.items():
            known = []
            for dep_id in task.dependencies:
                if dep_id in self.tasks:
                    known.append(dep_id)
                else:
                    self.unknown_dependencies.setdefault(task_id, []).append(dep_id)
            self.edges[task_id] = known

    def topological_order(self) -> list[Task]:
        """
        Order tasks by depth-first post-order over their dependencies.
        The walk keeps an explicit stack, so chain length is not bound by the
        interpreter recursion limit.

        Declaration order is kept wherever dependencies allow it. A cycle does
        not raise here: the visited set cuts it, so some task on the cycle ends
        up before one of its dependencies and is never placed.
        """
        ordered: list[Task] = []
        visited: set[str] = set()

        for root in self.tasks:
            if root in visited:
                continue
            visited.add(root)
            stack = [(root, iter(self.edges[root]))]
            while stack:
                task_id, deps = stack[-1]
                for dep_id in deps:
                    if dep_id not in visited:
                        visited.add(dep_id)
                        stack.append((dep_id, iter(self.edges[dep_id])))
                        break
                else:
                    stack.pop()
                    ordered.append(self.tasks[task_id])
        return ordered

    def find_cycle(self) -> Optional[list[str]]:
        """
        Find one dependency cycle using DFS.

        Returns:
            Task ids along the cycle, first id repeated at the end, or None
        """
        done: set[str] = set()

        for root in self.tasks:
            if root in done:
                continue
            path = [root]
            on_path = {root}
            stack = [iter(self.edges[root])]
            while stack:
                for dep_id in stack[-1]:
                    if dep_id in on_path:
                        return path[path.index(dep_id):] + [dep_id]
                    if dep_id not in done:
                        path.append(dep_id)
                        on_path.add(dep_id)
                        stack.append(iter(self.edges[dep_id]))
                        break
                else:
                    stack.pop()
                    finished = path.pop()
                    on_path.discard(finished)
                    done.add(finished)
        return None

    def validate(self) -> None:
        """
        Reject dependencies the scheduler would otherwise ignore.

        Raises:
            MalformedDependencyError: If a task depends on an unknown id
            CyclicDependencyError: If dependencies form a cycle
        """
        for task_id, dep_ids in self.unknown_dependencies.items():
            raise MalformedDependencyError(self.project.filename, task_id, dep_ids[0])

        cycle = self.find_cycle()
        if cycle:
            raise CyclicDependencyError(self.project.filename, cycle)
