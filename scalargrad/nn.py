"""
Small neural-network building blocks made of scalar Values.
"""

from typing import List, Optional, Sequence, Union

import numpy as np

from scalargrad.engine import Value


class Module:
    """Base class for anything that owns trainable Values."""

    def parameters(self) -> List[Value]:
        return []

    def zero_grad(self):
        """Reset the gradient of every parameter to zero."""
        for p in self.parameters():
            p.grad = np.float64(0.0)


class Neuron(Module):
    """
    A single neuron computing ``relu(w . x + b)``, or ``w . x + b`` when linear.

    Weights are drawn uniformly from [-1, 1]; the bias starts at 0.

    Args:
        n_in (int): Number of inputs.
        nonlin (bool, optional): Apply ReLU to the output. Defaults to True.
        rng (np.random.Generator, optional): Source of the initial weights.
    """

    def __init__(self, n_in: int, nonlin: bool = True, rng: Optional[np.random.Generator] = None):
        if n_in < 1:
            raise ValueError(f"a neuron needs at least one input, got {n_in}")
        rng = rng if rng is not None else np.random.default_rng()
        self.w = [Value(w) for w in rng.uniform(-1.0, 1.0, size=n_in)]
        self.b = Value(0.0)
        self.nonlin = nonlin

    def __call__(self, x: Sequence[Union[Value, float]]) -> Value:
        if len(x) != len(self.w):
            raise ValueError(f"expected {len(self.w)} inputs, got {len(x)}")
        act = sum((wi * xi for wi, xi in zip(self.w, x)), self.b)
        return act.relu() if self.nonlin else act

    def parameters(self) -> List[Value]:
        return self.w + [self.b]

    def __repr__(self):
        return f"{'ReLU' if self.nonlin else 'Linear'}Neuron({len(self.w)})"


class Layer(Module):
    """A fully connected layer of independent neurons."""

    def __init__(self, n_in: int, n_out: int, **kwargs):
        if n_out < 1:
            raise ValueError(f"a layer needs at least one neuron, got {n_out}")
        self.neurons = [Neuron(n_in, **kwargs) for _ in range(n_out)]

    def __call__(self, x):
        out = [n(x) for n in self.neurons]
        return out[0] if len(out) == 1 else out

    def parameters(self) -> List[Value]:
        return [p for n in self.neurons for p in n.parameters()]

    def __repr__(self):
        return f"Layer of [{', '.join(str(n) for n in self.neurons)}]"


class MLP(Module):
    """
    A multi-layer perceptron. Every layer but the last applies ReLU.

    Args:
        n_in (int): Number of inputs.
        n_outs (list): Output size of each layer, in order.
        seed (int, optional): Seed for the weight initialization.
    """

    def __init__(self, n_in: int, n_outs: Sequence[int], seed: Optional[int] = None):
        if not n_outs:
            raise ValueError("an MLP needs at least one layer")
        rng = np.random.default_rng(seed)
        sizes = [n_in] + list(n_outs)
        self.layers = [
            Layer(sizes[i], sizes[i + 1], nonlin=i != len(n_outs) - 1, rng=rng)
            for i in range(len(n_outs))
        ]

    def __call__(self, x):
        for layer in self.layers:
            x = layer(x)
            if isinstance(x, Value):
                x = [x]
        return x[0] if len(x) == 1 else x

    def parameters(self) -> List[Value]:
        return [p for layer in self.layers for p in layer.parameters()]

    def __repr__(self):
        return f"MLP of [{', '.join(str(layer) for layer in self.layers)}]"
