from .users import User, Role, Gender, ROLE_PERMISSIONS, permissions_for
