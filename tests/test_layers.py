"""Tests for the dense and activation layers and the shared layer contract."""

import numpy as np
import pytest

from layerkit import Batch, InvalidConfigurationError, ShapeMismatchError, StateError
from layerkit.activations import ReLU, Sigmoid
from layerkit.initializers import constant
from layerkit.layers import (
    Activation,
    BatchNormalization,
    Dense,
    DenseGradients,
    LayerKind,
    NoGradients,
)
from layerkit.optimizers import SGD


class TestDense:
    def test_init(self):
        layer = Dense(3, 2, initializer=constant(0.5))

        assert layer.kind is LayerKind.DENSE
        assert layer.W.shape == (3, 2)
        assert np.all(layer.W == 0.5)
        assert np.all(layer.b == 0.0)

    def test_forward(self):
        layer = Dense(2, 2, initializer=constant(1.0))
        layer.b[...] = [0.0, -10.0]

        out, _ = layer.forward([[1.0, 2.0]])

        assert np.allclose(out.data, [[3.0, -7.0]])

    def test_forward_with_activation(self):
        layer = Dense(2, 2, initializer=constant(1.0), activation=ReLU())
        layer.b[...] = [0.0, -10.0]

        out, _ = layer.forward([[1.0, 2.0]])

        assert np.allclose(out.data, [[3.0, 0.0]])

    def test_shapes(self):
        layer = Dense(4, 6)
        x = np.random.randn(5, 4)

        out, context = layer.forward(x)
        dx, grads = layer.backward(x, out, np.ones((5, 6)), context)

        assert out.shape == (5, 6)
        assert dx.shape == (5, 4)
        assert grads.weight_gradient.shape == (4, 6)
        assert grads.bias_gradient.shape == (6,)

    def test_chained_construction(self):
        first = Dense(4, 6)
        second = Dense(first, 3)

        assert second.inputs == 6

    def test_update_and_packing(self):
        layer = Dense(2, 2, initializer=constant(1.0))
        grads = DenseGradients(np.array([[1.0, 2.0], [3.0, 4.0]]), np.array([5.0, 6.0]))

        packed = layer.pack_gradients(grads)
        assert np.array_equal(packed[0], [1.0, 2.0, 3.0, 4.0, 5.0, 6.0])

        layer.update(packed, SGD(lr=0.1))
        assert np.allclose(layer.W, [[0.9, 0.8], [0.7, 0.6]])
        assert np.allclose(layer.b, [-0.5, -0.6])

    def test_context_survives_input_mutation(self):
        np.random.seed(4)
        layer = Dense(2, 2)
        x = np.random.randn(3, 2)
        dout = np.ones((3, 2))

        out, context = layer.forward(x)
        _, expected = layer.backward(x, out, dout, layer.forward(x)[1])

        x[...] = 0.0
        _, grads = layer.backward(x, out, dout, context)

        assert np.allclose(grads.weight_gradient, expected.weight_gradient)

    def test_context_survives_batch_mutation(self):
        layer = Dense(2, 2, initializer=constant(1.0))
        x = Batch.from_samples([[1.0, 2.0], [3.0, 4.0]])

        out, context = layer.forward(x)
        x[0] = [0.0, 0.0]
        _, grads = layer.backward(x, out, np.ones((2, 2)), context)

        assert np.allclose(grads.weight_gradient, [[4.0, 4.0], [6.0, 6.0]])

    def test_wrong_input_features(self):
        with pytest.raises(ShapeMismatchError):
            Dense(3, 2).forward(np.ones((2, 4)))

    def test_mismatched_gradients(self):
        with pytest.raises(InvalidConfigurationError):
            Dense(2, 2).update(NoGradients(), SGD())


class TestActivation:
    def test_forward_backward(self):
        layer = Activation(2, ReLU())
        x = np.array([[-1.0, 2.0]])

        out, context = layer.forward(x)
        dx, grads = layer.backward(x, out, np.array([[5.0, 5.0]]), context)

        assert layer.kind is LayerKind.ACTIVATION
        assert np.array_equal(out.data, [[0.0, 2.0]])
        assert np.array_equal(dx.data, [[0.0, 5.0]])
        assert grads == NoGradients()

    def test_backward_after_inference_is_allowed(self):
        layer = Activation(1, Sigmoid())
        x = np.zeros((2, 1))

        out, context = layer.forward(x, is_training=False)
        dx, _ = layer.backward(x, out, np.ones((2, 1)), context)

        assert np.allclose(dx.data, 0.25)

    def test_context_survives_input_mutation(self):
        layer = Activation(2, ReLU())
        x = Batch.from_samples([[-1.0, 2.0]])

        out, context = layer.forward(x)
        x[0] = [1.0, -2.0]
        dx, _ = layer.backward(x, out, np.ones((1, 2)), context)

        assert np.array_equal(dx.data, [[0.0, 1.0]])

    def test_update_is_noop(self):
        layer = Activation(3, ReLU())
        layer.update(NoGradients(), SGD())

        assert layer.parameters() == {}

    def test_pack_without_parameters(self):
        with pytest.raises(InvalidConfigurationError):
            Activation(3, ReLU()).pack_gradients(NoGradients())


def test_context_of_other_layer_kind():
    dense = Dense(2, 2)
    bn = BatchNormalization(2)
    x = np.random.randn(3, 2)
    out, context = dense.forward(x)

    with pytest.raises(StateError):
        bn.backward(x, out, out, context)


@pytest.mark.parametrize("features", [True, 2.5, "3", None])
def test_feature_count_type(features):
    with pytest.raises(InvalidConfigurationError):
        Activation(features, ReLU())
