import secrets

from django.db import models
from django.contrib.auth.models import AbstractUser
from django.utils import timezone


class User(AbstractUser):
    """
    Application user. Doubles as the responsible-party directory:
    reminder recipients are resolved from users to e-mail addresses.
    """

    class LoginRole(models.TextChoices):
        ADMIN = "admin", "Admin"
        MANAGER = "manager", "Manager"
        USER = "user", "User"

    position_title = models.CharField(max_length=150, blank=True)

    login_role = models.CharField(
        max_length=20,
        choices=LoginRole.choices,
        default=LoginRole.USER,
        db_index=True,
    )

    def __str__(self):
        full = self.get_full_name()
        return f"{full} ({self.username})" if full else self.username

    @property
    def is_admin_role(self):
        return self.login_role == self.LoginRole.ADMIN


def generate_token_key():
    return secrets.token_urlsafe(32)


class ApiToken(models.Model):
    """
    Bearer credential used by the UI (or an operator) to call
    the reminder trigger endpoints.
    """

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name="api_tokens",
    )
    key = models.CharField(
        max_length=64,
        unique=True,
        default=generate_token_key,
    )
    label = models.CharField(max_length=100, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(default=timezone.now)
    last_used_at = models.DateTimeField(null=True, blank=True)

    def __str__(self):
        return f"{self.user} | {self.label or self.key[:8]}"

    def touch(self):
        self.last_used_at = timezone.now()
        self.save(update_fields=["last_used_at"])
