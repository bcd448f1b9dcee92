class StackDeploymentError(Exception):
    """Base class for errors that abort a stack deployment."""


class ConfigurationError(StackDeploymentError, ValueError):
    """Raised when the network parameters are missing or inconsistent."""


class ResourceNotFoundError(StackDeploymentError, FileNotFoundError):
    """Raised when a file required by the deployment does not exist."""


class DeploymentError(StackDeploymentError):
    """Raised when a contract creation transaction fails."""

    def __init__(self, contract_name: str, message: str):
        self.contract_name = contract_name
        super().__init__(f"{contract_name}: {message}")


class LinkResolutionError(DeploymentError):
    """Raised when library references in a contract's bytecode cannot be resolved."""


class WiringError(StackDeploymentError):
    """Raised when a post-deployment configuration transaction fails."""
