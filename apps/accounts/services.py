import logging

from django.contrib.auth import authenticate, login, logout
from rest_framework.authtoken.models import Token

from .models import User

logger = logging.getLogger(__name__)


class AuthService:
    @staticmethod
    def resolve_user(username, password):
        if not username or not password:
            return None

        user = authenticate(username=username, password=password)
        if user is None:
            user_obj = User.objects.filter(email__iexact=username).first()
            if user_obj is not None:
                user = authenticate(username=user_obj.username, password=password)

        if user is None or not user.is_active:
            return None
        return user

    @staticmethod
    def login(request, username, password):
        """Start a session for the credentials. Returns False on any failure."""
        user = AuthService.resolve_user(username, password)
        if user is None:
            logger.info("Failed login attempt for %s", username)
            return False

        login(request, user)
        logger.info("User %s logged in", user.username)
        return True

    @staticmethod
    def logout(request):
        user = getattr(request, "user", None)
        if user is not None and user.is_authenticated:
            Token.objects.filter(user=user).delete()
        logout(request)

    @staticmethod
    def issue_token(user):
        token, _ = Token.objects.get_or_create(user=user)
        return token.key
