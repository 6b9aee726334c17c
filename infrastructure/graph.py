"""Dependency graph of the resources in a synthesized template."""

from __future__ import annotations

from dataclasses import dataclass, field
from graphlib import CycleError, TopologicalSorter
from typing import Any

DEPENDS_ON = "DependsOn"
REF = "Ref"
GET_ATT = "Fn::GetAtt"


class GraphCycleError(Exception):
    """Raised when the resources in a template depend on each other in a loop."""


@dataclass(frozen=True)
class ResourceNode:
    logical_id: str
    resource_type: str


@dataclass(frozen=True)
class DependencyEdge:
    """``source`` cannot be created before ``target``."""

    source: str
    target: str
    kind: str


@dataclass
class ResourceGraph:
    nodes: dict[str, ResourceNode] = field(default_factory=dict)
    edges: list[DependencyEdge] = field(default_factory=list)

    @classmethod
    def from_template(cls, template: dict[str, Any]) -> ResourceGraph:
        graph = cls()
        resources = template.get("Resources", {})

        for logical_id, resource in resources.items():
            graph.nodes[logical_id] = ResourceNode(logical_id, resource.get("Type", ""))

        for logical_id, resource in resources.items():
            depends_on = resource.get("DependsOn", [])
            if isinstance(depends_on, str):
                depends_on = [depends_on]
            for target in depends_on:
                graph._add_edge(logical_id, target, DEPENDS_ON)

            for target, kind in _references(resource.get("Properties", {})):
                # Refs to parameters and pseudo parameters are not resources
                if target in graph.nodes:
                    graph._add_edge(logical_id, target, kind)

        return graph

    def _add_edge(self, source: str, target: str, kind: str) -> None:
        edge = DependencyEdge(source, target, kind)
        if edge not in self.edges:
            self.edges.append(edge)

    def of_type(self, resource_type: str) -> list[ResourceNode]:
        return [node for node in self.nodes.values() if node.resource_type == resource_type]

    def edges_from(self, logical_id: str) -> list[DependencyEdge]:
        return [edge for edge in self.edges if edge.source == logical_id]

    def dependencies_of(self, logical_id: str, kind: str | None = None) -> set[str]:
        return {
            edge.target
            for edge in self.edges_from(logical_id)
            if kind is None or edge.kind == kind
        }

    def topological_order(self) -> list[str]:
        """Logical ids ordered leaves first."""
        sorter = TopologicalSorter(
            {logical_id: self.dependencies_of(logical_id) for logical_id in sorted(self.nodes)}
        )
        try:
            return list(sorter.static_order())
        except CycleError as e:
            raise GraphCycleError(f"Dependency cycle between resources: {e.args[1]}") from e


def _references(value: Any):
    if isinstance(value, dict):
        if len(value) == 1 and REF in value and isinstance(value[REF], str):
            yield value[REF], REF
            return
        if len(value) == 1 and GET_ATT in value:
            target = value[GET_ATT]
            if isinstance(target, list) and target:
                yield target[0], GET_ATT
            elif isinstance(target, str):
                yield target.split(".", 1)[0], GET_ATT
            return
        for item in value.values():
            yield from _references(item)
    elif isinstance(value, list):
        for item in value:
            yield from _references(item)


def describe(graph: ResourceGraph) -> list[str]:
    lines = []
    for logical_id in graph.topological_order():
        node = graph.nodes[logical_id]
        needs = sorted(graph.dependencies_of(logical_id))
        suffix = f" <- {', '.join(needs)}" if needs else ""
        lines.append(f"{node.resource_type} {logical_id}{suffix}")
    return lines
