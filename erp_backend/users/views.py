# users/views.py
"""
USER AUTH VIEWS

- Register: admin-only (staff accounts are provisioned, not self-served)
- Login: email + password -> JWT pair, audited as LOGIN
- Me: current actor plus role capabilities for the UI
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from drf_spectacular.utils import extend_schema
from rest_framework import generics, status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken

from activity.services.activity_logger import Action, activity_logger

from .permissions import IsAdmin, capabilities_for
from .serializers import LoginSerializer, RegisterSerializer, UserSerializer

User = get_user_model()


class LoginAnonThrottle(AnonRateThrottle):
    scope = "anon"


class RegisterView(generics.GenericAPIView):
    serializer_class = RegisterSerializer
    permission_classes = [IsAdmin]

    def post(self, request):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        return Response({"user": UserSerializer(user).data}, status=status.HTTP_201_CREATED)


class LoginView(generics.GenericAPIView):
    serializer_class = LoginSerializer
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [LoginAnonThrottle]

    def post(self, request):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        email = serializer.validated_data["email"]

        user = User.objects.filter(email__iexact=email).first()
        if user is None or not user.check_password(serializer.validated_data["password"]):
            return Response({"detail": "Invalid email or password"}, status=status.HTTP_400_BAD_REQUEST)
        if not user.is_active:
            return Response({"detail": "User account is disabled"}, status=status.HTTP_403_FORBIDDEN)

        activity_logger.log_crud(
            Action.LOGIN,
            "USER",
            user.email,
            user=user,
            description=f"{user.email} signed in",
            request=request,
        )

        refresh = RefreshToken.for_user(user)
        return Response(
            {
                "access": str(refresh.access_token),
                "refresh": str(refresh),
                "user": UserSerializer(user).data,
            }
        )


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: dict})
    def get(self, request):
        data = UserSerializer(request.user).data
        data["capabilities"] = capabilities_for(request.user)
        return Response(data)
