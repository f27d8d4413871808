from licenseptium.models.activation import Activation
from licenseptium.models.license import License

__all__ = [
    "Activation",
    "License",
]
