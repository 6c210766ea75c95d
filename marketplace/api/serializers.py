from rest_framework import serializers

from ..models import Profile, RoommateMessage, User
from ..services.roommates import profile_relation_for, resolve_identity


class UserSerializer(serializers.ModelSerializer):
    """Serializer exposing the current user's public profile information."""

    full_name = serializers.SerializerMethodField()
    phone = serializers.SerializerMethodField()
    location = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = (
            'id',
            'username',
            'email',
            'full_name',
            'phone',
            'location',
        )
        read_only_fields = fields

    def _profile(self, obj):
        try:
            return obj.profile
        except Profile.DoesNotExist:
            return None

    def get_full_name(self, obj):
        return resolve_identity(profile_relation_for(obj), fallback_name=obj.username).name

    def get_phone(self, obj):
        profile = self._profile(obj)
        return profile.phone if profile and profile.phone else None

    def get_location(self, obj):
        profile = self._profile(obj)
        return profile.location if profile and profile.location else None


class RoommateMessageSerializer(serializers.ModelSerializer):
    class Meta:
        model = RoommateMessage
        fields = ('id', 'sender', 'recipient', 'property', 'message', 'read', 'created_at', 'updated_at')
        read_only_fields = fields


class RoommateMessageCreateSerializer(serializers.Serializer):
    recipient = serializers.IntegerField()
    message = serializers.CharField(allow_blank=True, trim_whitespace=False)


class RoommateMatchSerializer(serializers.Serializer):
    """Flattens a scored roommate match for JSON clients."""

    student_id = serializers.IntegerField(source='student.pk')
    user_id = serializers.IntegerField(source='student.user_id')
    property_id = serializers.IntegerField(source='student.property_id')
    name = serializers.CharField(source='identity.name')
    email = serializers.CharField(source='identity.email')
    phone = serializers.CharField(source='identity.phone')
    college_name = serializers.CharField(source='student.college_name')
    degree = serializers.CharField(source='student.degree')
    branch = serializers.CharField(source='student.branch')
    score = serializers.IntegerField()
    badge = serializers.CharField(source='badge_class')
    routine = serializers.CharField(source='routine_summary')
