from rest_framework import serializers

from .models import User


class UserSerializer(serializers.ModelSerializer):
    role_display = serializers.CharField(source='get_role_display', read_only=True)
    effective_permissions = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            'id', 'username', 'email', 'first_name', 'last_name', 'phone_number',
            'role', 'role_display', 'permissions', 'effective_permissions',
            'is_active', 'date_joined', 'created_at',
        ]
        read_only_fields = ['id', 'date_joined', 'created_at']

    def get_effective_permissions(self, obj):
        return obj.effective_permissions()


class UserCreateSerializer(serializers.ModelSerializer):
    """
    New staff account. Only a super admin may create another super admin;
    module permissions default to the role's preset when left empty.
    """
    password = serializers.CharField(write_only=True, min_length=6)
    password_confirm = serializers.CharField(write_only=True, min_length=6)

    class Meta:
        model = User
        fields = [
            'username', 'email', 'first_name', 'last_name', 'phone_number',
            'role', 'permissions', 'password', 'password_confirm',
        ]

    def validate(self, attrs):
        if attrs['password'] != attrs.pop('password_confirm'):
            raise serializers.ValidationError({'password_confirm': 'Passwords do not match.'})

        request = self.context.get('request')
        creator = getattr(request, 'user', None)
        if attrs.get('role') == User.ROLE_SUPERADMIN and not (creator and creator.is_superadmin()):
            raise serializers.ValidationError({'role': 'Only a super admin can create super admins.'})
        return attrs

    def create(self, validated_data):
        password = validated_data.pop('password')
        return User.objects.create_user(password=password, **validated_data)


class LoginSerializer(serializers.Serializer):
    username = serializers.CharField()
    password = serializers.CharField(write_only=True)
