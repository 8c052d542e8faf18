"""Exceptions raised by scalargrad."""


class ScalargradError(Exception):
    """Base class for all scalargrad errors."""


class GraphCycleError(ScalargradError):
    """Raised when a traversal meets a node that is its own ancestor.

    Graphs built through the public operators are always acyclic, so this
    only fires when ``check_acyclic`` is enabled and private fields were
    tampered with.
    """

    def __init__(self, node):
        super().__init__(f"cycle detected at {node!r}")
        self.node = node
