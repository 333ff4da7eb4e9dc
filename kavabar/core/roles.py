from enum import Enum


class Role(str, Enum):
    admin = "admin"
    manager = "manager"
    user = "user"


# Roles that see every owner's entries, purchases, adjustments and reports
ADMIN_ROLES = {Role.admin}

# Managers also look after creditors and the payments collected from them
CREDIT_ROLES = {Role.admin, Role.manager}
