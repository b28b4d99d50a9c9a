"""tgscaffold - scaffold Terragrunt configuration from Terraform modules."""

__version__ = "0.1.0"
