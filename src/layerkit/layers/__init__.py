from layerkit.layers.layer import Layer, LayerKind, Context, feature_count
from layerkit.layers.gradients import (
    ParameterGradients,
    BatchNormalizationGradients,
    DenseGradients,
    NoGradients,
)
from layerkit.layers.batch_normalization import BatchNormalization, BatchNormalizationContext
from layerkit.layers.dense import Dense, DenseContext
from layerkit.layers.activation import Activation, ActivationContext
