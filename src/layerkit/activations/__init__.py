from layerkit.activations.activation import (
    ActivationFunction,
    Identity,
    Sigmoid,
    Tanh,
    ReLU,
    LeakyReLU,
    ELU,
    SELU,
)
