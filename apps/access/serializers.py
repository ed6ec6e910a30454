"""
Serializers for the access API.
"""
from rest_framework import serializers


class PrincipalSerializer(serializers.Serializer):
    id = serializers.CharField()
    role = serializers.SerializerMethodField()
    role_label = serializers.SerializerMethodField()
    is_super_admin = serializers.BooleanField()

    def get_role(self, obj):
        return getattr(obj.role, 'value', obj.role)

    def get_role_label(self, obj):
        role = obj.known_role
        return role.label if role else None


class AccessSummarySerializer(serializers.Serializer):
    principal = PrincipalSerializer()
    company_id = serializers.CharField()
    decisions = serializers.DictField(child=serializers.BooleanField())
    can_access_platform_console = serializers.BooleanField()


class NavItemSerializer(serializers.Serializer):
    """Read-only rendering of a NavItem tree."""

    id = serializers.CharField()
    label = serializers.CharField()
    path = serializers.CharField()
    children = serializers.SerializerMethodField()

    def get_children(self, obj):
        return NavItemSerializer(obj.children, many=True).data


class AccessCheckSerializer(serializers.Serializer):
    """
    Either a coarse resource tag, or a navigation parent/child pair.
    """

    resource = serializers.CharField(required=False)
    parent_id = serializers.CharField(required=False)
    sub_item_id = serializers.CharField(required=False)

    def validate(self, attrs):
        has_resource = 'resource' in attrs
        has_sub_item = 'parent_id' in attrs or 'sub_item_id' in attrs

        if has_resource and has_sub_item:
            raise serializers.ValidationError(
                "Send either 'resource' or 'parent_id' and 'sub_item_id', not both."
            )
        if has_sub_item and not ('parent_id' in attrs and 'sub_item_id' in attrs):
            raise serializers.ValidationError(
                "'parent_id' and 'sub_item_id' must be sent together."
            )
        if not has_resource and not has_sub_item:
            raise serializers.ValidationError(
                "Send 'resource', or 'parent_id' and 'sub_item_id'."
            )
        return attrs


class EmployeeAccessSerializer(serializers.Serializer):
    employee_id = serializers.CharField()
    details = serializers.BooleanField()
    skills = serializers.BooleanField()
    edit_skills = serializers.BooleanField()
    approve_skills = serializers.BooleanField()
    direct_report = serializers.BooleanField()
