"""Node Provisioner - provision a group of cloud VMs through Apache Libcloud."""

__version__ = "0.1.0"
