import logging

from layerkit.core import (
    Batch,
    as_batch,
    Config,
    use_config,
    test_mode,
    LayerError,
    ShapeMismatchError,
    StateError,
    InvalidConfigurationError,
)
from layerkit.layers import (
    Layer,
    LayerKind,
    BatchNormalization,
    BatchNormalizationGradients,
    Dense,
    DenseGradients,
    Activation,
    NoGradients,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())
