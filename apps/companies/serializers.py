"""
Serializers for companies, memberships and the platform console.
"""
from django.contrib.auth import get_user_model
from rest_framework import serializers

from apps.access.roles import Role
from .models import Company, CompanyMembership, ReportingLine

User = get_user_model()


class UserSummarySerializer(serializers.ModelSerializer):
    """Minimal user representation nested in other payloads."""

    id = serializers.CharField(source='pk', read_only=True)
    full_name = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'full_name']
        read_only_fields = fields

    def get_full_name(self, obj):
        return obj.get_full_name() or obj.get_username()


class CompanySummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Company
        fields = ['id', 'name', 'slug', 'domain', 'plan', 'is_active']
        read_only_fields = fields


class UserCompanySerializer(serializers.ModelSerializer):
    """
    One entry of the company switcher: the company plus the caller's role in it.
    """

    company = CompanySummarySerializer(read_only=True)
    role_label = serializers.SerializerMethodField()

    class Meta:
        model = CompanyMembership
        fields = ['company', 'role', 'role_label', 'joined_at', 'last_seen_at']
        read_only_fields = fields

    def get_role_label(self, obj):
        role = Role.parse(obj.role)
        return role.label if role else obj.role


class CompanyListSerializer(serializers.ModelSerializer):
    """Platform console list view; expects the active_members annotation."""

    member_count = serializers.IntegerField(source='active_members', read_only=True)

    class Meta:
        model = Company
        fields = [
            'id', 'name', 'slug', 'domain', 'plan', 'is_active',
            'member_count', 'created_at',
        ]
        read_only_fields = fields


class CompanyDetailSerializer(serializers.ModelSerializer):
    member_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Company
        fields = [
            'id', 'name', 'slug', 'domain', 'custom_domain', 'plan', 'is_active',
            'subscription_end_date', 'settings', 'branding', 'member_count',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields


class CompanyWriteSerializer(serializers.Serializer):
    """Input for company create and partial update."""

    name = serializers.CharField(max_length=255)
    slug = serializers.SlugField(max_length=100, required=False)
    plan = serializers.ChoiceField(choices=Company.PLAN_CHOICES, required=False)
    domain = serializers.CharField(max_length=100, required=False, allow_blank=True)
    custom_domain = serializers.CharField(max_length=255, required=False, allow_blank=True)
    subscription_end_date = serializers.DateTimeField(required=False, allow_null=True)
    settings = serializers.JSONField(required=False)
    branding = serializers.JSONField(required=False)

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Company name cannot be blank.")
        return value

    def validate_branding(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError("Branding must be an object.")
        theme_mode = value.get('theme_mode')
        if theme_mode is not None and theme_mode not in Company.THEME_MODES:
            raise serializers.ValidationError(
                f"theme_mode must be one of {', '.join(Company.THEME_MODES)}."
            )
        return value

    def validate_settings(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError("Settings must be an object.")
        return value


class CompanyStatusSerializer(serializers.Serializer):
    is_active = serializers.BooleanField(required=False)


class MembershipSerializer(serializers.ModelSerializer):
    user = UserSummarySerializer(read_only=True)

    class Meta:
        model = CompanyMembership
        fields = ['id', 'user', 'role', 'is_active', 'joined_at', 'last_seen_at']
        read_only_fields = fields


class MembershipAssignSerializer(serializers.Serializer):
    user_id = serializers.CharField()
    role = serializers.ChoiceField(choices=Role.choices())


class ReportingLineSerializer(serializers.ModelSerializer):
    manager = UserSummarySerializer(read_only=True)
    report = UserSummarySerializer(read_only=True)

    class Meta:
        model = ReportingLine
        fields = ['id', 'manager', 'report', 'created_at']
        read_only_fields = fields


class ReportingLineWriteSerializer(serializers.Serializer):
    manager_id = serializers.CharField()
    report_id = serializers.CharField()

    def validate(self, attrs):
        if attrs['manager_id'] == attrs['report_id']:
            raise serializers.ValidationError("A user cannot report to themselves.")
        return attrs


class PlatformUserSerializer(serializers.ModelSerializer):
    id = serializers.CharField(source='pk', read_only=True)
    company_count = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = User
        fields = [
            'id', 'username', 'email', 'first_name', 'last_name',
            'is_active', 'is_superuser', 'company_count', 'date_joined', 'last_login',
        ]
        read_only_fields = fields


class PlatformUserWriteSerializer(serializers.Serializer):
    """Input for platform user create and partial update."""

    username = serializers.CharField(max_length=150)
    email = serializers.EmailField(required=False, allow_blank=True)
    password = serializers.CharField(write_only=True, required=False, min_length=8)
    first_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    last_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    is_active = serializers.BooleanField(required=False)
    is_superuser = serializers.BooleanField(required=False)


class PlatformUserUpdateSerializer(PlatformUserWriteSerializer):
    """Input for platform user partial update. Usernames are fixed once created."""

    username = None

    def validate(self, attrs):
        if 'username' in self.initial_data:
            raise serializers.ValidationError({'username': "Username cannot be changed."})
        return attrs
