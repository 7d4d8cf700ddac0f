"""Carina cluster client.

Create and manage container clusters on Rackspace Public Cloud (make-swarm) and
OpenStack Private Cloud (Magnum) through one interface.
"""

__version__ = "0.1.0"
__author__ = "Platform Engineering Team"
__license__ = "Apache-2.0"

USER_AGENT = f"carina-python/{__version__}"
