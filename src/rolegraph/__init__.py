"""RoleGraph - role containers and composite role graphs.

Realm and client scoped roles, cycle-free composite relationships,
capability-gated operations and an admin event trail.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
