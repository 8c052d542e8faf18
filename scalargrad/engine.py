import enum
import logging
from typing import List, Optional, Tuple

import graphviz
import numpy as np

from scalargrad.errors import GraphCycleError

logger = logging.getLogger(__name__)

# Global configuration for traversal checks and graph rendering
_CONFIG = {
    'check_acyclic': False,  # Detect cycles during topological ordering
    'graph_directory': 'graph',  # Where visualize_graph writes rendered files
    'graph_format': 'png',
}

_NUMBER_TYPES = (int, float, np.integer, np.floating)


def set_config(
    check_acyclic: bool = None,
    graph_directory: str = None,
    graph_format: str = None,
):
    """
    Configure engine settings globally.

    Args:
        check_acyclic: Raise GraphCycleError when a traversal revisits a node on its own path
        graph_directory: Output directory used by visualize_graph
        graph_format: Default graphviz output format (e.g. 'png', 'svg')
    """
    if check_acyclic is not None:
        _CONFIG['check_acyclic'] = bool(check_acyclic)
    if graph_directory is not None:
        if not graph_directory:
            raise ValueError("graph_directory must be a non-empty path")
        _CONFIG['graph_directory'] = graph_directory
    if graph_format is not None:
        if graph_format not in graphviz.FORMATS:
            raise ValueError(f"unknown graphviz format: {graph_format!r}")
        _CONFIG['graph_format'] = graph_format


def get_config() -> dict:
    """Get a copy of the current engine configuration."""
    return _CONFIG.copy()


class Op(enum.Enum):
    """The operation that produced a Value. The enum value is its display symbol."""

    LEAF = ''
    ADD = '+'
    MUL = '*'
    POW = '**'
    RELU = 'ReLU'
    TANH = 'tanh'
    EXP = 'exp'
    LOG = 'log'


class Value:
    """
    A scalar node in the computational graph.

    Each Value remembers the operation that produced it and its operands, so a
    backward pass can push gradients from any root down to every ancestor.
    ``data``, ``op`` and ``operands`` are fixed at creation; only ``grad``
    changes, and only during backward passes or an explicit ``zero_grad``.

    Floating-point pathology (division by zero, log of a negative number,
    overflow) is not an error here: it shows up as ``nan`` or ``inf`` in
    ``data`` and ``grad``.
    """

    # numpy scalars on the left defer to the reflected operators below
    __array_ufunc__ = None

    def __init__(self, data, _children=(), _op=Op.LEAF, label=None, _exponent=None):
        """
        Initialize a Value object.

        Args:
            data: The scalar to be stored in the Value object.
            _children (tuple, optional): Operand nodes in the computational graph. Defaults to ().
            _op (Op, optional): The operation that produced this Value. Defaults to Op.LEAF.
            label (str, optional): A display label for the Value. Defaults to None.
            _exponent (float, optional): The constant exponent of a POW node.
        """
        if not isinstance(data, _NUMBER_TYPES):
            raise TypeError(f"Value() takes a real number, got {type(data).__name__}")
        self._data = np.float64(data)
        self.grad = np.float64(0.0)
        self._prev = tuple(_children)
        self._op = _op
        self._exponent = _exponent
        self.label = label

    @property
    def data(self) -> np.float64:
        """The forward-computed value."""
        return self._data

    @property
    def op(self) -> Op:
        return self._op

    @property
    def operands(self) -> Tuple['Value', ...]:
        return self._prev

    @property
    def exponent(self) -> Optional[float]:
        """The constant exponent for POW nodes, None otherwise."""
        return self._exponent

    @property
    def is_leaf(self) -> bool:
        return self._op is Op.LEAF

    def __add__(self, other):
        """Add two Values."""
        return self._binary_op(other, Op.ADD, np.add)

    def __radd__(self, other):
        """Reverse add two Values."""
        return self + other

    def __sub__(self, other):
        """Subtract two Values."""
        other = _as_value(other)
        if other is NotImplemented:
            return NotImplemented
        return self + (-other)

    def __rsub__(self, other):
        """Reverse subtract two Values."""
        other = _as_value(other)
        if other is NotImplemented:
            return NotImplemented
        return other + (-self)

    def __mul__(self, other):
        """Multiply two Values."""
        return self._binary_op(other, Op.MUL, np.multiply)

    def __rmul__(self, other):
        """Reverse multiply two Values."""
        return self * other

    def __neg__(self):
        """Negate a Value."""
        return self * -1

    def __truediv__(self, other):
        """Divide two Values."""
        other = _as_value(other)
        if other is NotImplemented:
            return NotImplemented
        return self * other**-1

    def __rtruediv__(self, other):
        """Reverse divide two Values."""
        other = _as_value(other)
        if other is NotImplemented:
            return NotImplemented
        return other * self**-1

    def __pow__(self, other):
        """Raise a Value to a constant power."""
        if isinstance(other, Value):
            raise TypeError("only supporting int/float powers, not Value exponents")
        if not isinstance(other, _NUMBER_TYPES):
            return NotImplemented
        exponent = float(other)
        with np.errstate(all='ignore'):
            data = np.power(self._data, exponent)
        return Value(data, (self,), Op.POW, _exponent=exponent)

    def relu(self):
        """Apply the ReLU function to this Value."""
        return self._unary_op(Op.RELU, lambda x: np.maximum(x, 0.0))

    def tanh(self):
        """Apply the tanh function to this Value."""
        return self._unary_op(Op.TANH, np.tanh)

    def exp(self):
        """Apply the exponential function to this Value."""
        return self._unary_op(Op.EXP, np.exp)

    def log(self):
        """Apply the natural logarithm function to this Value."""
        return self._unary_op(Op.LOG, np.log)

    def _binary_op(self, other, op, op_func):
        """
        Perform a binary operation.

        Args:
            other: The other Value (or plain number) to perform the operation with.
            op (Op): The operation tag recorded on the result.
            op_func (function): The numpy function computing the forward value.

        Returns:
            Value: The result of the operation, or NotImplemented for foreign operand types.
        """
        other = _as_value(other)
        if other is NotImplemented:
            return NotImplemented
        with np.errstate(all='ignore'):
            data = op_func(self._data, other._data)
        return Value(data, (self, other), op)

    def _unary_op(self, op, op_func):
        with np.errstate(all='ignore'):
            data = op_func(self._data)
        return Value(data, (self,), op)

    def backward(self):
        """Perform backpropagation starting from this Value."""
        backward(self)

    def zero_grad(self):
        """Reset the gradient of this Value and all of its ancestors to zero."""
        zero_grad(self)

    def __repr__(self):
        if self.label:
            return f"Value({self.label}, data={self._data:.4f}, grad={self.grad:.4f})"
        return f"Value(data={self._data:.4f}, grad={self.grad:.4f})"


def _as_value(x):
    if isinstance(x, Value):
        return x
    if isinstance(x, _NUMBER_TYPES):
        return Value(x)
    return NotImplemented


def relu(v: Value) -> Value:
    return v.relu()


def tanh(v: Value) -> Value:
    return v.tanh()


def exp(v: Value) -> Value:
    return v.exp()


def log(v: Value) -> Value:
    return v.log()


def value(node: Value) -> np.float64:
    """Read the forward value of a node."""
    return node.data


def grad(node: Value) -> np.float64:
    """Read the accumulated gradient of a node."""
    return node.grad


def topological_order(root: Value) -> List[Value]:
    """
    Order the ancestor graph of ``root`` so every node follows its operands.

    The traversal is a depth-first post-order over operands, in operand
    order, with nodes identified by ``id`` rather than by value. It uses an
    explicit stack so long chains do not hit the recursion limit.

    Args:
        root (Value): The node whose ancestors are ordered.

    Returns:
        list: Each reachable node exactly once; ``root`` is last.

    Raises:
        GraphCycleError: If ``check_acyclic`` is enabled and a cycle is found.
    """
    check_acyclic = _CONFIG['check_acyclic']
    topo = []
    visited = set()
    on_path = set()
    stack = [(root, False)]

    while stack:
        v, expanded = stack.pop()
        if expanded:
            on_path.discard(id(v))
            topo.append(v)
            continue
        if id(v) in visited:
            if check_acyclic and id(v) in on_path:
                raise GraphCycleError(v)
            continue
        visited.add(id(v))
        on_path.add(id(v))
        stack.append((v, True))
        for child in reversed(v._prev):
            stack.append((child, False))

    return topo


def _propagate(v: Value):
    """Apply the local gradient rule of ``v`` to its operands."""
    op = v._op
    if op is Op.LEAF:
        return
    if op is Op.ADD:
        a, b = v._prev
        a.grad += v.grad
        b.grad += v.grad
    elif op is Op.MUL:
        a, b = v._prev
        a_data, b_data = a._data, b._data
        a.grad += b_data * v.grad
        b.grad += a_data * v.grad
    elif op is Op.POW:
        a, = v._prev
        k = v._exponent
        a.grad += (k * np.power(a._data, k - 1)) * v.grad
    elif op is Op.RELU:
        a, = v._prev
        a.grad += (a._data > 0) * v.grad
    elif op is Op.TANH:
        a, = v._prev
        a.grad += (1 - v._data**2) * v.grad
    elif op is Op.EXP:
        a, = v._prev
        a.grad += v._data * v.grad
    elif op is Op.LOG:
        a, = v._prev
        a.grad += np.divide(v.grad, a._data)
    else:
        raise AssertionError(f"no gradient rule for {op!r}")


def backward(root: Value):
    """
    Compute d(root)/d(node) for every ancestor of ``root``.

    Seeds ``root.grad`` with 1.0 and walks the topological order in reverse,
    adding each node's contributions into its operands. Gradients are not
    reset first: call ``zero_grad(root)`` before reusing a graph, otherwise
    the new contributions are added to the old ones.

    Args:
        root (Value): The output node.
    """
    topo = topological_order(root)
    logger.debug("backward over %d nodes", len(topo))

    root.grad = np.float64(1.0)
    with np.errstate(all='ignore'):
        for v in reversed(topo):
            _propagate(v)


def zero_grad(root: Value):
    """Reset ``grad`` to 0.0 on ``root`` and every node it depends on."""
    for v in topological_order(root):
        v.grad = np.float64(0.0)
