"""
Staff authentication and user management.
"""
from rest_framework import generics, permissions, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from .models import User
from .permissions import CanManageUsers
from .serializers import LoginSerializer, UserCreateSerializer, UserSerializer
from .services import AuthService


class UserListCreateView(generics.ListCreateAPIView):
    """Owners and super admins list staff accounts and open new ones."""
    queryset = User.objects.order_by('username')
    permission_classes = [CanManageUsers]

    def get_serializer_class(self):
        if self.request.method == 'POST':
            return UserCreateSerializer
        return UserSerializer

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)


class UserDetailView(generics.RetrieveUpdateAPIView):
    """
    A staff member reads and edits their own profile; role and module
    permissions only change through an owner.
    """
    serializer_class = UserSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_object(self):
        user = self.request.user
        user_id = self.kwargs.get('pk')
        if user_id and user.has_full_access():
            return generics.get_object_or_404(User, id=user_id)
        return user

    def perform_update(self, serializer):
        if not self.request.user.has_full_access():
            serializer.validated_data.pop("role", None)
            serializer.validated_data.pop("permissions", None)
        serializer.save()


@api_view(['POST'])
@permission_classes([permissions.AllowAny])
def login_view(request):
    """
    Staff login.

    Starts a session and returns a bearer token. Every failure answers the
    same generic message.
    """
    serializer = LoginSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({'error': 'Invalid credentials'}, status=status.HTTP_400_BAD_REQUEST)

    if not AuthService.login(request, serializer.validated_data['username'], serializer.validated_data['password']):
        return Response({'error': 'Invalid credentials'}, status=status.HTTP_400_BAD_REQUEST)

    return Response({
        'message': 'Login successful',
        'token': AuthService.issue_token(request.user),
        'user': UserSerializer(request.user).data,
    }, status=status.HTTP_200_OK)


@api_view(['POST'])
@permission_classes([permissions.IsAuthenticated])
def logout_view(request):
    AuthService.logout(request)
    return Response({'message': 'Logout successful'}, status=status.HTTP_200_OK)


@api_view(['GET'])
@permission_classes([permissions.IsAuthenticated])
def current_user_view(request):
    """
    Get current authenticated user information.
    """
    serializer = UserSerializer(request.user)
    return Response(serializer.data, status=status.HTTP_200_OK)
