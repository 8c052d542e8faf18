import numpy as np
import pytest

from scalargrad import MLP, Layer, Neuron, Value


def test_neuron_forward_and_parameters():
    n = Neuron(3, nonlin=False, rng=np.random.default_rng(0))
    assert len(n.parameters()) == 4
    x = [1.0, -2.0, 0.5]
    out = n(x)
    expected = sum(w.data * xi for w, xi in zip(n.w, x)) + n.b.data
    assert out.data == pytest.approx(expected)


def test_neuron_relu_clamps():
    n = Neuron(1, rng=np.random.default_rng(1))
    w = n.w[0].data
    out = n([-1.0 if w > 0 else 1.0])
    assert out.data == 0.0


def test_neuron_rejects_wrong_input_length():
    n = Neuron(2)
    with pytest.raises(ValueError):
        n([1.0])


def test_layer_output_shape():
    layer = Layer(2, 3)
    out = layer([1.0, 2.0])
    assert len(out) == 3
    assert isinstance(Layer(2, 1)([1.0, 2.0]), Value)


def test_mlp_parameters_count_and_seed():
    a = MLP(3, [4, 4, 1], seed=42)
    b = MLP(3, [4, 4, 1], seed=42)
    assert len(a.parameters()) == (3 * 4 + 4) + (4 * 4 + 4) + (4 * 1 + 1)
    assert [p.data for p in a.parameters()] == [p.data for p in b.parameters()]
    assert a.layers[0].neurons[0].nonlin is True
    assert a.layers[-1].neurons[0].nonlin is False


def test_mlp_backward_and_zero_grad():
    model = MLP(2, [3, 1], seed=7)
    x = [Value(0.5), Value(-1.5)]
    loss = (model(x) - 1.0) ** 2
    loss.backward()
    assert any(p.grad != 0.0 for p in model.parameters())

    model.zero_grad()
    assert all(p.grad == 0.0 for p in model.parameters())


def test_linear_neuron_weight_grads_equal_inputs():
    n = Neuron(3, nonlin=False, rng=np.random.default_rng(5))
    x = [Value(1.5), Value(-2.0), Value(0.25)]
    n(x).backward()
    assert [w.grad for w in n.w] == [xi.data for xi in x]
    assert [xi.grad for xi in x] == [w.data for w in n.w]
    assert n.b.grad == 1.0


def test_mlp_needs_layers():
    with pytest.raises(ValueError):
        MLP(2, [])
