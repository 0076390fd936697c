from django.urls import path
from .views import FollowView, UnfollowView, InterestProfileView

urlpatterns = [
    path("<uuid:id>/follow/", FollowView.as_view(), name="follow"),
    path("<uuid:id>/unfollow/", UnfollowView.as_view(), name="unfollow"),
    path("<uuid:id>/interests/", InterestProfileView.as_view(), name="interests"),
]
