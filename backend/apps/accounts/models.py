"""
Accounts models - identity profiles and role grants.
"""

from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.db import models

from apps.accounts.constants import Roles


class UserManager(BaseUserManager):
    """Custom manager for User model."""

    def create_user(
        self,
        email: str,
        **extra_fields,
    ) -> "User":
        """Create and return a regular user."""
        if not email:
            raise ValueError("Email is required")

        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        # No password - Stytch handles authentication
        user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_superuser(
        self,
        email: str,
        **extra_fields,
    ) -> "User":
        """Create and return a superuser (for Django admin access)."""
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")

        return self.create_user(email, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin):
    """
    Local profile of a Stytch identity.

    This is AUTH_USER_MODEL. Stytch owns credentials and sessions; this row
    holds the profile fields the application reads.
    """

    stytch_user_id = models.CharField(
        max_length=255,
        unique=True,
        null=True,
        blank=True,
        help_text="Stytch user_id, e.g. 'user-test-xxx'",
    )
    email = models.EmailField(unique=True, db_index=True)
    first_name = models.CharField(max_length=150, blank=True)
    last_name = models.CharField(max_length=150, blank=True)
    phone = models.CharField(max_length=50, blank=True)

    # Django auth compatibility
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(
        default=False,
        help_text="Can access Django admin",
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []  # Email is already required via USERNAME_FIELD

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return self.email

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class RoleGrant(models.Model):
    """
    One role held by a user, optionally scoped to one organization.

    An owner grant with no organization is platform-wide authority. Every
    other grant applies to exactly one organization. Grants are never edited;
    they are inserted by provisioning workflows and deleted by administrators.
    """

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name="role_grants",
    )
    role = models.CharField(max_length=20, choices=Roles.CHOICES, db_index=True)
    organization = models.ForeignKey(
        "organizations.Organization",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="role_grants",
        help_text="Null means platform-wide scope",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["user", "role", "organization"],
                name="unique_role_grant_per_org",
            ),
            models.UniqueConstraint(
                fields=["user", "role"],
                condition=models.Q(organization__isnull=True),
                name="unique_platform_role_grant",
            ),
        ]

    def __str__(self) -> str:
        scope = self.organization_id if self.organization_id else "platform"
        return f"{self.user_id}:{self.role}@{scope}"

    @property
    def is_platform_wide(self) -> bool:
        return self.role == Roles.OWNER and self.organization_id is None


class PlatformBootstrap(models.Model):
    """
    Singleton claim taken by the first-owner bootstrap.

    The fixed primary key makes the database reject a second claim, so two
    concurrent bootstraps cannot both create an owner.
    """

    SINGLETON_ID = 1

    id = models.PositiveSmallIntegerField(primary_key=True, default=SINGLETON_ID)
    user = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    claimed_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"bootstrap claimed at {self.claimed_at:%Y-%m-%d %H:%M}"
