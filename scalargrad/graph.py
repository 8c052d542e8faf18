"""
Read-only projections of a computational graph.

``export_graph`` flattens the DAG behind a root into plain node records and
edges. The graphviz helpers draw that export, one box per value and one
ellipse per operation.
"""

import logging
import os
from typing import Dict, List, NamedTuple, Optional, Tuple

import graphviz

from scalargrad.engine import Op, Value, get_config, topological_order

logger = logging.getLogger(__name__)


class NodeRecord(NamedTuple):
    id: int
    data: float
    grad: float
    op: str
    label: Optional[str] = None


class GraphExport(NamedTuple):
    """Nodes of a graph, de-duplicated by identity, and its (operand_id, node_id) edges."""

    nodes: List[NodeRecord]
    edges: List[Tuple[int, int]]

    def to_dict(self) -> dict:
        return {
            'nodes': [node._asdict() for node in self.nodes],
            'edges': [list(edge) for edge in self.edges],
        }


def _op_symbol(v: Value) -> str:
    if v.op is Op.POW:
        return f"**{v.exponent:g}"
    return v.op.value


def export_graph(root: Value) -> GraphExport:
    """
    Project the graph behind ``root`` into node records and edges.

    Node ids are positions in the topological order, so operands always get
    smaller ids than the nodes that use them. There is one edge per operand
    slot: ``a + a`` produces two edges from ``a``.

    Args:
        root (Value): The node whose ancestors are exported.

    Returns:
        GraphExport: The nodes and edges. The graph itself is not modified.
    """
    topo = topological_order(root)
    ids: Dict[int, int] = {id(v): i for i, v in enumerate(topo)}

    nodes = []
    edges = []
    for v in topo:
        node_id = ids[id(v)]
        nodes.append(NodeRecord(node_id, float(v.data), float(v.grad), _op_symbol(v), v.label))
        for child in v.operands:
            edges.append((ids[id(child)], node_id))
    return GraphExport(nodes, edges)


def to_dot(root: Value, rankdir: str = 'LR') -> graphviz.Digraph:
    """
    Build a graphviz Digraph of the graph behind ``root``.

    Args:
        root (Value): The root node of the computational graph.
        rankdir (str, optional): Graph layout direction. Defaults to 'LR'.
    """
    exported = export_graph(root)
    dot = graphviz.Digraph(comment='Computational Graph')
    dot.attr(rankdir=rankdir)

    for node in exported.nodes:
        name = str(node.id)
        fields = [f"data {node.data:.4f}", f"grad {node.grad:.4f}"]
        if node.label:
            fields.insert(0, node.label)
        dot.node(name, '{ ' + ' | '.join(fields) + ' }', shape='record')
        if node.op:
            dot.node(name + 'op', node.op, shape='ellipse')
            dot.edge(name + 'op', name)

    for child_id, node_id in exported.edges:
        dot.edge(str(child_id), str(node_id) + 'op')

    return dot


def draw_dot(root: Value, format: Optional[str] = None) -> bytes:
    """
    Render the graph behind ``root`` in memory with the graphviz ``dot`` executable.

    Args:
        root (Value): The root node of the computational graph.
        format (str, optional): Output format. Defaults to the configured graph_format.

    Returns:
        bytes: The rendered image.
    """
    return to_dot(root).pipe(format=format or get_config()['graph_format'])


def visualize_graph(
    root: Value,
    filename: str = 'computational_graph',
    directory: Optional[str] = None,
    format: Optional[str] = None,
    view: bool = False,
) -> str:
    """
    Visualize the computational graph.

    Renders the graph to a file and returns its path. The DOT source is
    removed once the image is written.

    Args:
        root (Value): The root node of the computational graph.
        filename (str, optional): The name of the file to save the visualization. Defaults to 'computational_graph'.
        directory (str, optional): Output directory. Defaults to the configured graph_directory.
        format (str, optional): Output format. Defaults to the configured graph_format.
        view (bool, optional): Open the rendered file with the system viewer. Defaults to False.
    """
    config = get_config()
    directory = directory or config['graph_directory']
    os.makedirs(directory, exist_ok=True)

    dot = to_dot(root)
    path = dot.render(
        filename,
        directory=directory,
        format=format or config['graph_format'],
        view=view,
        cleanup=True,
    )
    logger.info("Graph visualization saved as %s", path)
    return path
