from computeforge.workflows.provision import ProvisionState, ProvisionWorkflow

__all__ = ["ProvisionState", "ProvisionWorkflow"]
