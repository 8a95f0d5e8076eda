class LayerError(Exception):
    """Base class for every failure raised by a layer."""


class ShapeMismatchError(LayerError, ValueError):
    """A batch or sample does not have the shape the layer expects."""


class StateError(LayerError, RuntimeError):
    """backward was called without a matching forward context."""


class InvalidConfigurationError(LayerError, ValueError):
    """A layer or optimizer was configured with invalid values."""
