"""Provision a compute instance, its disks and a static IP from a flat parameter bag."""

__version__ = "0.1.0"
