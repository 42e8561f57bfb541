"""graphkeep — diff-based SQLite persistence for editable node/edge diagrams.

Typical use from an editor layer::

    from graphkeep import GraphSession, GraphSnapshot, Node

    with GraphSession() as session:
        session.open("diagrams/plan.db")
        session.save_graph(GraphSnapshot(nodes=[Node(id="n1", x=0, y=0)]))
        snapshot = session.load_graph()
"""

from graphkeep.domain.snapshot import Edge, GraphSnapshot, GraphSummary, Node, Offset
from graphkeep.infrastructure.session import GraphSession

__version__ = "0.1.0"

__all__ = [
    "Edge",
    "GraphSession",
    "GraphSnapshot",
    "GraphSummary",
    "Node",
    "Offset",
    "__version__",
]
