from rest_framework import serializers
from .models import UserProfile, UserInterest


class UserInterestSerializer(serializers.ModelSerializer):
    weight = serializers.IntegerField(min_value=1, max_value=10)

    class Meta:
        model = UserInterest
        fields = ["category", "weight"]


class InterestProfileSerializer(serializers.Serializer):
    interests = UserInterestSerializer(many=True)

    def validate_interests(self, value):
        categories = [item["category"] for item in value]
        if len(categories) != len(set(categories)):
            raise serializers.ValidationError("Each category may appear only once")
        return value


class FollowActionSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    message = serializers.CharField()
