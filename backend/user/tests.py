from django.test import TestCase
from django.urls import reverse
from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework.test import APITestCase
from .models import UserProfile, FollowRelation, UserInterest, InterestCategory

User = get_user_model()

class UserProfileTests(TestCase):
    def setUp(self):
        self.user1 = User.objects.create_user(username='user1', password='password123')
        self.user2 = User.objects.create_user(username='user2', password='password123')

        self.profile1 = UserProfile.objects.create(user=self.user1)
        self.profile2 = UserProfile.objects.create(user=self.user2)

    def test_follow_success(self):
        """Test that one user can successfully follow another."""
        self.profile1.follow(self.profile2)

        # Refresh from DB to get updated F() expression values
        self.profile1.refresh_from_db()
        self.profile2.refresh_from_db()

        self.assertEqual(self.profile1.following_count, 1)
        self.assertEqual(self.profile2.followers_count, 1)
        self.assertTrue(self.profile1.is_following(self.profile2))
        self.assertFalse(self.profile2.is_following(self.profile1))

    def test_unfollow_success(self):
        """Test that one user can successfully unfollow another."""
        self.profile1.follow(self.profile2)
        self.profile1.unfollow(self.profile2)

        self.profile1.refresh_from_db()
        self.profile2.refresh_from_db()

        self.assertEqual(self.profile1.following_count, 0)
        self.assertEqual(self.profile2.followers_count, 0)
        self.assertFalse(FollowRelation.objects.filter(follower=self.profile1, following=self.profile2).exists())

    def test_cannot_follow_self(self):
        """Test that a user cannot follow themselves."""
        self.profile1.follow(self.profile1)

        self.profile1.refresh_from_db()
        self.assertEqual(self.profile1.following_count, 0)

    def test_follow_twice_keeps_single_edge(self):
        self.profile1.follow(self.profile2)
        self.profile1.follow(self.profile2)

        self.profile1.refresh_from_db()
        self.assertEqual(self.profile1.following_count, 1)
        self.assertEqual(FollowRelation.objects.count(), 1)

    def test_set_interest_updates_existing_weight(self):
        """Setting the same category twice overwrites the weight."""
        self.profile1.set_interest(InterestCategory.FOOD_DRINK, 4)
        self.profile1.set_interest(InterestCategory.FOOD_DRINK, 9)
        self.profile1.set_interest(InterestCategory.HISTORY, 2)

        self.assertEqual(UserInterest.objects.filter(user=self.profile1).count(), 2)
        self.assertEqual(
            self.profile1.get_interest_profile(),
            {'FOOD_DRINK': 9, 'HISTORY': 2},
        )

    def test_empty_interest_profile(self):
        self.assertEqual(self.profile2.get_interest_profile(), {})


class UserAPITests(APITestCase):
    def setUp(self):
        self.user1 = User.objects.create_user(username='api_user1', password='password123')
        self.profile1 = UserProfile.objects.create(user=self.user1)

        self.user2 = User.objects.create_user(username='api_user2', password='password123')
        self.profile2 = UserProfile.objects.create(user=self.user2)

        self.client.force_authenticate(user=self.user1)

    def test_follow_endpoint(self):
        url = reverse('follow', args=[self.profile2.id])
        response = self.client.post(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(self.profile1.is_following(self.profile2))

    def test_follow_self_rejected(self):
        url = reverse('follow', args=[self.profile1.id])
        response = self.client.post(url)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unfollow_endpoint(self):
        self.profile1.follow(self.profile2)

        url = reverse('unfollow', args=[self.profile2.id])
        response = self.client.post(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(self.profile1.is_following(self.profile2))

    def test_unfollow_not_following(self):
        url = reverse('unfollow', args=[self.profile2.id])
        response = self.client.post(url)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_replace_interest_profile(self):
        """PUT replaces the whole profile."""
        self.profile1.set_interest(InterestCategory.NIGHTLIFE, 7)

        url = reverse('interests', args=[self.profile1.id])
        response = self.client.put(url, {
            'interests': [
                {'category': 'FOOD_DRINK', 'weight': 10},
                {'category': 'HISTORY', 'weight': 3},
            ]
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self.profile1.get_interest_profile(), {'FOOD_DRINK': 10, 'HISTORY': 3})

    def test_interest_weight_out_of_range(self):
        url = reverse('interests', args=[self.profile1.id])
        response = self.client.put(url, {
            'interests': [{'category': 'FOOD_DRINK', 'weight': 11}]
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_duplicate_interest_category_rejected(self):
        url = reverse('interests', args=[self.profile1.id])
        response = self.client.put(url, {
            'interests': [
                {'category': 'FOOD_DRINK', 'weight': 2},
                {'category': 'FOOD_DRINK', 'weight': 5},
            ]
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_get_interest_profile(self):
        self.profile1.set_interest(InterestCategory.ADVENTURE, 6)

        url = reverse('interests', args=[self.profile1.id])
        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['interests'], [{'category': 'ADVENTURE', 'weight': 6}])

    def test_cannot_replace_other_users_interests(self):
        self.profile2.set_interest(InterestCategory.HISTORY, 4)

        url = reverse('interests', args=[self.profile2.id])
        response = self.client.put(url, {
            'interests': [{'category': 'NIGHTLIFE', 'weight': 9}]
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(self.profile2.get_interest_profile(), {'HISTORY': 4})

    def test_replace_interests_requires_login(self):
        self.client.force_authenticate(user=None)

        url = reverse('interests', args=[self.profile1.id])
        response = self.client.put(url, {
            'interests': [{'category': 'NIGHTLIFE', 'weight': 9}]
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(self.profile1.get_interest_profile(), {})
