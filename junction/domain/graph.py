import networkx as nx
from typing import Dict, Iterable, Tuple
from junction.domain.models import Direction, TurnIntent


class MovementGraph:
    """Permitted movements through the intersection.

    Nodes are headings; an edge ``u -> v`` labelled with a turn means a vehicle
    heading ``u`` that performs that turn leaves heading ``v``.
    """

    def __init__(self):
        self.graph = nx.DiGraph()

    def add_heading(self, direction: Direction, vector: Tuple[float, float]):
        self.graph.add_node(direction, vector=vector)

    def add_movement(self, u: Direction, v: Direction, turn: TurnIntent):
        self.graph.add_edge(u, v, turn=turn)

    def exit_for(self, direction: Direction, turn: TurnIntent) -> Direction:
        for _, v, edge_turn in self.graph.out_edges(direction, data="turn"):
            if edge_turn == turn:
                return v
        raise AssertionError(f"no {turn.value} movement from {direction.value}")

    def movements(self) -> Iterable[Tuple[Direction, Direction, TurnIntent]]:
        return self.graph.edges(data="turn")

    @classmethod
    def from_headings(cls, headings: Dict[Direction, Tuple[float, float]]) -> "MovementGraph":
        # Right of heading (hx, hy) in screen coordinates (y down) is (-hy, hx)
        network = cls()
        by_vector = {vector: d for d, vector in headings.items()}
        for d, (hx, hy) in headings.items():
            network.add_heading(d, (hx, hy))
        for d, (hx, hy) in headings.items():
            network.add_movement(d, d, TurnIntent.NONE)
            network.add_movement(d, by_vector[(-hy, hx)], TurnIntent.RIGHT)
            network.add_movement(d, by_vector[(hy, -hx)], TurnIntent.LEFT)
        return network
