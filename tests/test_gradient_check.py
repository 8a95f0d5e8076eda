import numpy as np
import pytest

from layerkit.activations import ELU, SELU, LeakyReLU, ReLU, Sigmoid, Tanh
from layerkit.layers import Activation, BatchNormalization, Dense


def numerical_gradient(f, x, h=1e-4):
    """
    数値微分による勾配計算

    Args:
        f: スカラー値を返す関数
        x: 入力配列
        h: 微小な値

    Returns:
        勾配の配列
    """
    grad = np.zeros_like(x)
    it = np.nditer(x, flags=["multi_index"], op_flags=["readwrite"])  # type: ignore

    while not it.finished:
        idx = it.multi_index
        tmp_val = x[idx]

        # f(x+h)の計算
        x[idx] = tmp_val + h
        fxh1 = f(x)

        # f(x-h)の計算
        x[idx] = tmp_val - h
        fxh2 = f(x)

        # 勾配の計算
        grad[idx] = (fxh1 - fxh2) / (2 * h)

        # 値を元に戻す
        x[idx] = tmp_val
        it.iternext()

    return grad


def loss_of(layer, dout, is_training=False):
    def f(x_):
        out, _ = layer.forward(x_, is_training=is_training)
        return np.sum(out.data * dout)

    return f


class TestDense:
    def setup_method(self):
        np.random.seed(0)
        self.layer = Dense(4, 5, activation=Sigmoid())
        self.layer.b[...] = np.random.randn(5)
        self.x = np.random.randn(3, 4)
        self.dout = np.random.randn(3, 5)

        out, context = self.layer.forward(self.x, is_training=True)
        self.dx, self.grads = self.layer.backward(self.x, out, self.dout, context)

    def test_backward_dx(self):
        """Denseのbackwardでのdxが数値微分と一致することを確認"""
        dx_num = numerical_gradient(loss_of(self.layer, self.dout), self.x.copy())

        assert np.allclose(self.dx.data, dx_num), f"dx mismatch: {self.dx.data} vs {dx_num}"

    def test_backward_dW(self):
        """DenseのbackwardでのdWが数値微分と一致することを確認"""
        W = self.layer.W.copy()

        def f(W_):
            self.layer.W[...] = W_
            return loss_of(self.layer, self.dout)(self.x)

        dW_num = numerical_gradient(f, W.copy())
        self.layer.W[...] = W

        assert np.allclose(self.grads.weight_gradient, dW_num)

    def test_backward_db(self):
        """Denseのbackwardでのdbが数値微分と一致することを確認"""
        b = self.layer.b.copy()

        def f(b_):
            self.layer.b[...] = b_
            return loss_of(self.layer, self.dout)(self.x)

        db_num = numerical_gradient(f, b.copy())
        self.layer.b[...] = b

        assert np.allclose(self.grads.bias_gradient, db_num)


@pytest.mark.parametrize("function", [Sigmoid(), Tanh(), ReLU(), LeakyReLU(0.1), ELU(), SELU()])
def test_activation_backward(function):
    """Activation層のbackwardが数値微分と一致することを確認"""
    np.random.seed(1)
    layer = Activation(6, function)
    x = np.random.randn(5, 6)
    dout = np.random.randn(5, 6)

    out, context = layer.forward(x)
    dx, _ = layer.backward(x, out, dout, context)

    dx_num = numerical_gradient(loss_of(layer, dout), x.copy())
    assert np.allclose(dx.data, dx_num, atol=1e-6), f"dx mismatch for {function!r}"


class TestBatchNormalization:
    """The backward pass is the gradient of the variance-normalized transform
    ``gamma * xn + beta``, independent of the centered output the forward
    pass returns."""

    def setup_method(self):
        np.random.seed(2)
        self.layer = BatchNormalization(3)
        self.layer.gamma[...] = np.random.randn(3)
        self.layer.beta[...] = np.random.randn(3)
        self.x = np.random.randn(4, 3) * 2.0 + 1.0
        self.dout = np.random.randn(4, 3)

        out, context = self.layer.forward(self.x, is_training=True)
        self.dx, self.grads = self.layer.backward(self.x, out, self.dout, context)

    def normalized(self, x_, gamma=None):
        gamma = self.layer.gamma if gamma is None else gamma
        xc = x_ - x_.mean(axis=0)
        std = np.sqrt(np.mean(xc**2, axis=0) + self.layer.eps)
        return gamma * xc / std + self.layer.beta

    def test_backward_dx(self):
        """BatchNormalizationのdxが正規化変換の数値微分と一致することを確認"""

        def f(x_):
            return np.sum(self.normalized(x_) * self.dout)

        dx_num = numerical_gradient(f, self.x.copy())
        assert np.allclose(self.dx.data, dx_num, atol=1e-6)

    def test_backward_dgamma(self):
        def f(gamma_):
            return np.sum(self.normalized(self.x, gamma_) * self.dout)

        dgamma_num = numerical_gradient(f, self.layer.gamma.copy())
        assert np.allclose(self.grads.scale_gradient, dgamma_num, atol=1e-6)

    def test_input_gradient_sums_to_zero(self):
        assert np.allclose(self.dx.data.sum(axis=0), 0.0, atol=1e-10)
