from layerkit.optimizers.optimizer import Optimizer, FunctionRule, UpdateRule, as_optimizer
from layerkit.optimizers.sgd import SGD, MomentumSGD
from layerkit.optimizers.adam import Adam
