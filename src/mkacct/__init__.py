"""mkacct — provision a new operating-system user account."""

__version__ = "0.1.0"
