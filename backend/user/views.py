from django.db import transaction
from rest_framework import status
from rest_framework.generics import get_object_or_404
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import UserProfile, UserInterest
from .serializers import InterestProfileSerializer, UserInterestSerializer


class FollowView(APIView):

    def post(self,request,id):
        follower = request.user.profile
        followed_profile = get_object_or_404(UserProfile,id=id)

        if follower == followed_profile:
            return Response(
                {"success":False,"message":"An account can not follow itself"},
                status =status.HTTP_400_BAD_REQUEST,
            )
        if follower.is_following(followed_profile):
            return Response(
                {"success":False,"message":"Account is already followed"},
                status = status.HTTP_400_BAD_REQUEST,
            )

        follower.follow(followed_profile)
        return Response(
            {"success":True,"message":"Successfully followed"},
            status = status.HTTP_200_OK
        )

class UnfollowView(APIView):

    def post(self,request,id):
        follower = request.user.profile
        followed = get_object_or_404(UserProfile,id=id)

        if not follower.is_following(followed):
            return Response(
                {"success": False, "message": "Account is not followed"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        follower.unfollow(followed)
        return Response(
            {"success": True, "message": "Successfully unfollowed"},
            status=status.HTTP_200_OK
        )


class InterestProfileView(APIView):
    """
    Read or replace the weighted interest profile of a user.

    GET /api/user/<id>/interests/
    PUT /api/user/<own id>/interests/  {"interests": [{"category": "FOOD_DRINK", "weight": 8}]}
    """

    def get(self,request,id):
        profile = get_object_or_404(UserProfile,id=id)
        serializer = UserInterestSerializer(profile.interests.order_by('category'), many=True)
        return Response({"interests": serializer.data})

    def put(self,request,id):
        if not request.user or not request.user.is_authenticated:
            return Response(
                {"error": "Authentication required"},
                status=status.HTTP_401_UNAUTHORIZED,
            )
        profile = request.user.profile
        if profile.id != id:
            return Response(
                {"error": "You can only change your own interests"},
                status=status.HTTP_403_FORBIDDEN,
            )
        serializer = InterestProfileSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({"error": serializer.errors}, status=status.HTTP_400_BAD_REQUEST)

        # Full replace so the stored profile always matches the submitted one
        with transaction.atomic():
            UserInterest.objects.filter(user=profile).delete()
            UserInterest.objects.bulk_create([
                UserInterest(user=profile, category=item["category"], weight=item["weight"])
                for item in serializer.validated_data["interests"]
            ])

        return Response({"interests": profile.get_interest_profile()}, status=status.HTTP_200_OK)
