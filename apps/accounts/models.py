"""
User models for PharmaPOS.

This module defines the custom User model with role-based access control.
Permissions are stored per user as ``{module: [actions]}``; a user without
explicit permissions falls back to the defaults of their role.
"""
from django.contrib.auth.models import AbstractUser
from django.db import models


ACTION_CREATE = "create"
ACTION_READ = "read"
ACTION_UPDATE = "update"
ACTION_DELETE = "delete"
WILDCARD = "*"

CRUD = [ACTION_CREATE, ACTION_READ, ACTION_UPDATE, ACTION_DELETE]


class User(AbstractUser):
    """
    Custom User model extending Django's AbstractUser.

    Roles:
    - SUPERADMIN: Platform operator, toggles modules
    - OWNER: Full access to the pharmacy
    - MANAGER: Runs the POS and the back office, reads reports
    - CASHIER / SALESMAN: Ring up sales at the counter
    - PHARMACIST: Sells and checks stock
    - ACCOUNTANT: Reads sales, purchases and reports
    """
    ROLE_SUPERADMIN = "superadmin"
    ROLE_OWNER = "owner"
    ROLE_MANAGER = "manager"
    ROLE_CASHIER = "cashier"
    ROLE_PHARMACIST = "pharmacist"
    ROLE_ACCOUNTANT = "accountant"
    ROLE_SALESMAN = "salesman"

    ROLE_CHOICES = [
        (ROLE_SUPERADMIN, "Super admin"),
        (ROLE_OWNER, "Owner"),
        (ROLE_MANAGER, "Manager"),
        (ROLE_CASHIER, "Cashier"),
        (ROLE_PHARMACIST, "Pharmacist"),
        (ROLE_ACCOUNTANT, "Accountant"),
        (ROLE_SALESMAN, "Salesman"),
    ]

    FULL_ACCESS_ROLES = {ROLE_SUPERADMIN, ROLE_OWNER}

    DEFAULT_ROLE_PERMISSIONS = {
        ROLE_MANAGER: {
            "pos": [ACTION_CREATE, ACTION_READ, ACTION_UPDATE],
            "inventory": [ACTION_CREATE, ACTION_READ, ACTION_UPDATE],
            "purchases": [ACTION_CREATE, ACTION_READ, ACTION_UPDATE],
            "customers": [ACTION_CREATE, ACTION_READ, ACTION_UPDATE],
            "sales": [ACTION_READ],
            "reports": [ACTION_READ],
            "data": [ACTION_CREATE, ACTION_READ],
        },
        ROLE_CASHIER: {
            "pos": [ACTION_CREATE, ACTION_READ],
            "sales": [ACTION_READ],
            "customers": [ACTION_CREATE, ACTION_READ],
        },
        ROLE_PHARMACIST: {
            "pos": [ACTION_CREATE, ACTION_READ],
            "inventory": [ACTION_READ],
            "sales": [ACTION_READ],
            "customers": [ACTION_READ],
        },
        ROLE_ACCOUNTANT: {
            "sales": [ACTION_READ],
            "purchases": [ACTION_READ],
            "reports": [ACTION_READ],
        },
        ROLE_SALESMAN: {
            "pos": [ACTION_CREATE, ACTION_READ],
        },
    }

    role = models.CharField(
        max_length=20,
        choices=ROLE_CHOICES,
        default=ROLE_CASHIER,
        help_text="User role determines access level"
    )
    permissions = models.JSONField(
        default=dict,
        blank=True,
        help_text="Module to actions mapping; empty means the role defaults apply",
    )
    phone_number = models.CharField(
        max_length=20,
        blank=True,
        null=True,
        help_text="Contact phone number"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "User"
        verbose_name_plural = "Users"
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.username} ({self.get_role_display()})"

    def is_superadmin(self):
        """Platform operator (module toggles)."""
        return self.is_superuser or self.role == self.ROLE_SUPERADMIN

    def has_full_access(self):
        return self.is_superuser or self.role in self.FULL_ACCESS_ROLES

    def effective_permissions(self):
        if self.permissions:
            return self.permissions
        if self.has_full_access():
            return {WILDCARD: [WILDCARD]}
        return self.DEFAULT_ROLE_PERMISSIONS.get(self.role, {})

    def has_permission(self, module, action):
        """Check a module/action pair. Owner and superadmin always pass."""
        if self.has_full_access():
            return True
        granted = self.effective_permissions()
        actions = list(granted.get(module, [])) + list(granted.get(WILDCARD, []))
        return action in actions or WILDCARD in actions
