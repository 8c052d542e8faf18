"""
scalargrad: reverse-mode automatic differentiation over a dynamically built DAG of scalars.
"""

from scalargrad.engine import (
    Op,
    Value,
    backward,
    exp,
    get_config,
    grad,
    log,
    relu,
    set_config,
    tanh,
    topological_order,
    value,
    zero_grad,
)
from scalargrad.errors import GraphCycleError, ScalargradError
from scalargrad.graph import GraphExport, NodeRecord, draw_dot, export_graph, to_dot, visualize_graph
from scalargrad.nn import Module, Neuron, Layer, MLP

__all__ = [
    'Op',
    'Value',
    'backward',
    'exp',
    'get_config',
    'grad',
    'log',
    'relu',
    'set_config',
    'tanh',
    'topological_order',
    'value',
    'zero_grad',
    'GraphCycleError',
    'ScalargradError',
    'GraphExport',
    'NodeRecord',
    'draw_dot',
    'export_graph',
    'to_dot',
    'visualize_graph',
    'Module',
    'Neuron',
    'Layer',
    'MLP',
]
