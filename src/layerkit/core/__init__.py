from layerkit.core.batch import Batch, as_batch
from layerkit.core.config import Config, use_config, test_mode, resolve_training
from layerkit.core.errors import (
    LayerError,
    ShapeMismatchError,
    StateError,
    InvalidConfigurationError,
)
