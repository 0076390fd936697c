"""
Tests for the moments module.
"""
import itertools
from datetime import timedelta
from unittest.mock import patch
from django.test import SimpleTestCase, TestCase
from django.contrib.auth.models import User
from django.db import DatabaseError
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase
from locations.models import Place, PlaceCategory
from moments.models import Moment
from moments.ranking import RankAssigner, assign_ranks, recompute_ranks
from moments.scoring import compute_composite_score
from moments.services import MomentService
from recommendations.dtos import OwnerScoredMoment
from recommendations.models import RecommendationScore
from user.models import UserProfile


def make_profile(username):
    return UserProfile.objects.create(user=User.objects.create_user(username=username, password='pass'))


class CompositeScoreTestCase(SimpleTestCase):
    """Test cases for compute_composite_score"""

    def test_maximum_and_minimum(self):
        self.assertEqual(compute_composite_score(5, 5, 5, 5), 10.0)
        self.assertEqual(compute_composite_score(1, 1, 1, 1), 2.0)

    def test_missing_ratings_default_to_overall(self):
        self.assertEqual(compute_composite_score(4), compute_composite_score(4, 4, 4, 4))
        self.assertEqual(compute_composite_score(4), 8.0)
        self.assertEqual(compute_composite_score(3, value=5), compute_composite_score(3, 5, 3, 3))

    def test_weighting(self):
        # 5*0.4 + 1*0.2 + 1*0.2 + 1*0.2 = 2.6 -> 5.2
        self.assertEqual(compute_composite_score(5, 1, 1, 1), 5.2)
        # 1*0.4 + 5*0.2 + 5*0.2 + 5*0.2 = 3.4 -> 6.8
        self.assertEqual(compute_composite_score(1, 5, 5, 5), 6.8)
        # 4*0.4 + 3*0.2 + 5*0.2 + 2*0.2 = 3.6 -> 7.2
        self.assertEqual(compute_composite_score(4, 3, 5, 2), 7.2)

    def test_out_of_range_ratings_are_clamped(self):
        self.assertEqual(compute_composite_score(9, 9, 9, 9), 10.0)
        self.assertEqual(compute_composite_score(0, -3, 0, 0), 2.0)
        self.assertEqual(compute_composite_score(7), 10.0)

    def test_rounded_to_one_decimal(self):
        # 4.5*0.4 + 4*0.2*3 = 4.2 -> 8.4
        self.assertEqual(compute_composite_score(4.5, 4, 4, 4), 8.4)
        # 3.3 everywhere -> 6.6
        self.assertEqual(compute_composite_score(3.3), 6.6)
        # raw 3.125 -> 6.25 rounds half up to 6.3
        self.assertEqual(compute_composite_score(3.125), 6.3)

    def test_all_integer_tuples_in_range(self):
        for ratings in itertools.product(range(1, 6), repeat=4):
            score = compute_composite_score(*ratings)
            self.assertGreaterEqual(score, 2.0)
            self.assertLessEqual(score, 10.0)
            self.assertEqual(round(score, 1), score)


class AssignRanksTestCase(SimpleTestCase):
    """Test cases for the pure rank assignment"""

    def test_dense_ranks_by_score(self):
        moments = [
            OwnerScoredMoment('a', 6.0),
            OwnerScoredMoment('b', 9.2),
            OwnerScoredMoment('c', 7.4),
        ]
        self.assertEqual(assign_ranks(moments), [('b', 1), ('c', 2), ('a', 3)])

    def test_ties_keep_creation_order(self):
        moments = [
            OwnerScoredMoment('oldest', 8.0),
            OwnerScoredMoment('middle', 9.0),
            OwnerScoredMoment('newest', 8.0),
        ]
        self.assertEqual(
            assign_ranks(moments),
            [('middle', 1), ('oldest', 2), ('newest', 3)]
        )

    def test_empty(self):
        self.assertEqual(assign_ranks([]), [])


class MomentModelTestCase(TestCase):

    def setUp(self):
        self.author = make_profile('author')

    def test_apply_ratings_sets_composite_score(self):
        moment = Moment(author=self.author)
        # 5*0.4 + 4*0.2 + 3*0.2 + 2*0.2 = 3.8 -> 7.6
        score = moment.apply_ratings(5, 4, 3, 2)
        self.assertEqual(score, 7.6)
        self.assertEqual(moment.composite_score, 7.6)
        self.assertTrue(moment.is_scored)

    def test_no_overall_leaves_moment_unscored(self):
        moment = Moment(author=self.author)
        moment.apply_ratings(None)
        self.assertIsNone(moment.composite_score)
        self.assertFalse(moment.is_scored)


class RankAssignerTestCase(TestCase):
    """Test cases for RankAssigner"""

    def setUp(self):
        self.owner = make_profile('owner')
        self.other = make_profile('other')
        self.base_time = timezone.now() - timedelta(days=5)

    def _moment(self, owner, score, minutes, rank=None):
        return Moment.objects.create(
            author=owner,
            composite_score=score,
            rank=rank,
            created_at=self.base_time + timedelta(minutes=minutes),
        )

    def _ranks(self, owner):
        return dict(Moment.objects.filter(author=owner).values_list('id', 'rank'))

    def test_ranks_are_dense_and_ordered(self):
        low = self._moment(self.owner, 4.0, 1)
        high = self._moment(self.owner, 9.6, 2)
        mid = self._moment(self.owner, 7.0, 3)

        recompute_ranks(self.owner.id)

        ranks = self._ranks(self.owner)
        self.assertEqual(ranks[high.id], 1)
        self.assertEqual(ranks[mid.id], 2)
        self.assertEqual(ranks[low.id], 3)
        self.assertEqual(sorted(ranks.values()), [1, 2, 3])

    def test_rank_one_has_max_score(self):
        for minutes, score in enumerate([5.0, 8.8, 2.0, 8.8, 6.4]):
            self._moment(self.owner, score, minutes)

        recompute_ranks(self.owner.id)

        top = Moment.objects.get(author=self.owner, rank=1)
        max_score = max(Moment.objects.filter(author=self.owner).values_list('composite_score', flat=True))
        self.assertEqual(top.composite_score, max_score)

    def test_ties_prefer_older_moment(self):
        older = self._moment(self.owner, 8.0, 1)
        newer = self._moment(self.owner, 8.0, 2)

        recompute_ranks(self.owner.id)

        self.assertEqual(self._ranks(self.owner), {older.id: 1, newer.id: 2})

    def test_idempotent(self):
        for minutes, score in enumerate([7.0, 7.0, 3.2, 9.0]):
            self._moment(self.owner, score, minutes)

        first = recompute_ranks(self.owner.id)
        first_ranks = self._ranks(self.owner)
        second = recompute_ranks(self.owner.id)

        self.assertEqual(first, second)
        self.assertEqual(first_ranks, self._ranks(self.owner))

    def test_unscored_moments_lose_stale_rank(self):
        scored = self._moment(self.owner, 6.0, 1, rank=2)
        unscored = self._moment(self.owner, None, 2, rank=1)

        recompute_ranks(self.owner.id)

        self.assertEqual(self._ranks(self.owner), {scored.id: 1, unscored.id: None})

    def test_other_owners_untouched(self):
        self._moment(self.owner, 6.0, 1)
        foreign = self._moment(self.other, 9.0, 1, rank=7)

        recompute_ranks(self.owner.id)

        foreign.refresh_from_db()
        self.assertEqual(foreign.rank, 7)

    def test_owner_without_moments(self):
        self.assertEqual(RankAssigner().recompute_ranks(self.owner.id), [])

    def test_failed_write_keeps_previous_ranks(self):
        first = self._moment(self.owner, 3.0, 1, rank=1)
        second = self._moment(self.owner, 9.0, 2, rank=2)
        lost_score = self._moment(self.owner, None, 3, rank=3)
        before = self._ranks(self.owner)

        with patch.object(Moment.objects, 'bulk_update', side_effect=DatabaseError('write failed')):
            with self.assertRaises(DatabaseError):
                recompute_ranks(self.owner.id)

        self.assertEqual(self._ranks(self.owner), before)
        self.assertEqual(before, {first.id: 1, second.id: 2, lost_score.id: 3})


class MomentServiceTestCase(TestCase):
    """Test cases for MomentService"""

    def setUp(self):
        self.author = make_profile('writer')
        self.place = Place.objects.create(name='Cafe Central', city='Vienna', category=PlaceCategory.CAFE)
        self.service = MomentService()

    def test_create_rated_moment_assigns_rank(self):
        moment = self.service.create_moment(self.author, place=self.place, overall=4)
        self.assertEqual(moment.composite_score, 8.0)
        self.assertEqual(moment.rank, 1)

    def test_create_unrated_moment_has_no_score_or_rank(self):
        moment = self.service.create_moment(self.author, caption='just a photo')
        self.assertIsNone(moment.composite_score)
        self.assertIsNone(moment.rank)

    def test_new_better_moment_takes_first_rank(self):
        first = self.service.create_moment(self.author, overall=3)
        second = self.service.create_moment(self.author, overall=5, value=5, authenticity=5, crowd=5)

        first.refresh_from_db()
        self.assertEqual(second.rank, 1)
        self.assertEqual(first.rank, 2)

    def test_update_ratings_reranks(self):
        first = self.service.create_moment(self.author, overall=5)
        second = self.service.create_moment(self.author, overall=3)

        self.service.update_ratings(second, overall=5, value=5, authenticity=5, crowd=5)
        self.service.update_ratings(first, overall=2)

        first.refresh_from_db()
        second.refresh_from_db()
        self.assertEqual(second.composite_score, 10.0)
        self.assertEqual(first.composite_score, 4.0)
        self.assertEqual(second.rank, 1)
        self.assertEqual(first.rank, 2)

    def test_removing_overall_unscores_moment(self):
        moment = self.service.create_moment(self.author, overall=4)
        moment = self.service.update_ratings(moment, overall=None)
        self.assertIsNone(moment.composite_score)
        self.assertIsNone(moment.rank)

    def test_delete_closes_rank_gap(self):
        best = self.service.create_moment(self.author, overall=5)
        middle = self.service.create_moment(self.author, overall=4)
        worst = self.service.create_moment(self.author, overall=2)

        self.service.delete_moment(middle)

        best.refresh_from_db()
        worst.refresh_from_db()
        self.assertEqual(best.rank, 1)
        self.assertEqual(worst.rank, 2)
        self.assertFalse(Moment.objects.filter(id=middle.id).exists())


class MomentAPITestCase(APITestCase):
    """Integration tests for moment endpoints"""

    def setUp(self):
        self.user = User.objects.create_user(username='poster', password='password')
        self.profile = UserProfile.objects.create(user=self.user)
        self.place = Place.objects.create(name='Prado', city='Madrid', category=PlaceCategory.MUSEUM)
        self.client.force_authenticate(user=self.user)

    def test_create_moment(self):
        url = reverse('moment-list')
        response = self.client.post(url, {
            'place': str(self.place.id),
            'caption': 'Las Meninas!',
            'overall': 5,
            'value': 4,
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['composite_score'], 9.6)
        self.assertEqual(response.data['rank'], 1)

    def test_rating_out_of_range_rejected(self):
        url = reverse('moment-list')
        response = self.client.post(url, {'overall': 6}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Moment.objects.count(), 0)

    def test_secondary_rating_without_overall_rejected(self):
        url = reverse('moment-list')
        response = self.client.post(url, {'value': 3}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_ratings(self):
        moment = MomentService().create_moment(self.profile, overall=2)
        url = reverse('moment-detail', kwargs={'pk': str(moment.id)})

        response = self.client.patch(url, {'overall': 5}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['composite_score'], 10.0)

    def test_cannot_modify_others_moment(self):
        other = make_profile('stranger')
        moment = MomentService().create_moment(other, overall=4)
        url = reverse('moment-detail', kwargs={'pk': str(moment.id)})

        response = self.client.delete(url)

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(Moment.objects.filter(id=moment.id).exists())

    def test_delete_moment(self):
        moment = MomentService().create_moment(self.profile, overall=4)
        url = reverse('moment-detail', kwargs={'pk': str(moment.id)})

        response = self.client.delete(url)

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Moment.objects.filter(id=moment.id).exists())

    def test_recompute_ranks_endpoint(self):
        low = Moment.objects.create(author=self.profile, composite_score=3.0)
        high = Moment.objects.create(author=self.profile, composite_score=9.0)
        url = reverse('moment-recompute-ranks', kwargs={'pk': str(low.id)})

        response = self.client.post(url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            response.data['ranks'],
            [{'moment_id': str(high.id), 'rank': 1}, {'moment_id': str(low.id), 'rank': 2}]
        )

    def test_list_by_author_in_rank_order(self):
        service = MomentService()
        worse = service.create_moment(self.profile, overall=3)
        better = service.create_moment(self.profile, overall=5)

        response = self.client.get(reverse('moment-list'), {'author_id': str(self.profile.id)})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([m['id'] for m in response.data], [str(better.id), str(worse.id)])

    def test_update_one_rating_keeps_the_others(self):
        moment = MomentService().create_moment(self.profile, overall=5, value=1, authenticity=1, crowd=1)
        self.assertEqual(moment.composite_score, 5.2)
        url = reverse('moment-detail', kwargs={'pk': str(moment.id)})

        response = self.client.patch(url, {'overall': 4}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['composite_score'], 4.4)
        self.assertEqual(response.data['rating_value'], 1)
        self.assertEqual(response.data['rating_authenticity'], 1)
        self.assertEqual(response.data['rating_crowd'], 1)

    def test_empty_update_keeps_score_and_rank(self):
        moment = MomentService().create_moment(self.profile, overall=4)
        url = reverse('moment-detail', kwargs={'pk': str(moment.id)})

        response = self.client.patch(url, {}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        moment.refresh_from_db()
        self.assertEqual(moment.composite_score, 8.0)
        self.assertEqual(moment.rank, 1)
        self.assertEqual(moment.rating_overall, 4)

    def test_update_secondary_rating_uses_stored_overall(self):
        moment = MomentService().create_moment(self.profile, overall=4)
        url = reverse('moment-detail', kwargs={'pk': str(moment.id)})

        response = self.client.patch(url, {'crowd': 2}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['rating_overall'], 4)
        self.assertEqual(response.data['composite_score'], 7.2)

    def test_update_secondary_rating_of_unrated_moment_rejected(self):
        moment = MomentService().create_moment(self.profile, caption='no rating yet')
        url = reverse('moment-detail', kwargs={'pk': str(moment.id)})

        response = self.client.patch(url, {'crowd': 2}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_null_overall_clears_score(self):
        moment = MomentService().create_moment(self.profile, overall=4)
        url = reverse('moment-detail', kwargs={'pk': str(moment.id)})

        response = self.client.patch(url, {'overall': None}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data['rating_overall'])
        self.assertIsNone(response.data['composite_score'])
        self.assertIsNone(response.data['rank'])

    def test_list_by_author_puts_unscored_last(self):
        service = MomentService()
        worse = service.create_moment(self.profile, overall=3)
        unscored = service.create_moment(self.profile, caption='no rating')
        better = service.create_moment(self.profile, overall=5)

        response = self.client.get(reverse('moment-list'), {'author_id': str(self.profile.id)})

        self.assertEqual(
            [m['id'] for m in response.data],
            [str(better.id), str(worse.id), str(unscored.id)]
        )


class MomentListFilterTestCase(APITestCase):
    """Tests for the filter query parameter of the moment list"""

    def setUp(self):
        self.user = User.objects.create_user(username='browser', password='password')
        self.viewer = UserProfile.objects.create(user=self.user)
        self.author = make_profile('author')
        self.friend = make_profile('friend')
        self.client.force_authenticate(user=self.user)

    def _list(self, **params):
        response = self.client.get(reverse('moment-list'), params)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        return [m['id'] for m in response.data]

    def test_top_rated(self):
        good = Moment.objects.create(author=self.author, composite_score=6.0)
        unscored = Moment.objects.create(author=self.author)
        best = Moment.objects.create(author=self.friend, composite_score=9.2)

        self.assertEqual(self._list(filter='topRated'), [str(best.id), str(good.id), str(unscored.id)])

    def test_most_viewed(self):
        few = Moment.objects.create(author=self.author, view_count=3)
        many = Moment.objects.create(author=self.friend, view_count=120)
        some = Moment.objects.create(author=self.author, view_count=40)

        self.assertEqual(self._list(filter='mostViewed'), [str(many.id), str(some.id), str(few.id)])

    def test_recommended_uses_cached_scores(self):
        first = Moment.objects.create(author=self.author, composite_score=4.0)
        second = Moment.objects.create(author=self.friend, composite_score=8.0)
        RecommendationScore.objects.create(user=self.viewer, moment=first, score=9.5, factors={})
        RecommendationScore.objects.create(user=self.viewer, moment=second, score=2.0, factors={})

        self.assertEqual(self._list(filter='recommended'), [str(first.id), str(second.id)])

    def test_recommended_pages_cached_scores(self):
        first = Moment.objects.create(author=self.author, composite_score=4.0)
        second = Moment.objects.create(author=self.friend, composite_score=8.0)
        RecommendationScore.objects.create(user=self.viewer, moment=first, score=9.5, factors={})
        RecommendationScore.objects.create(user=self.viewer, moment=second, score=2.0, factors={})

        self.assertEqual(self._list(filter='recommended', limit=1, offset=1), [str(second.id)])

    def test_recommended_falls_back_to_live_feed(self):
        self.viewer.follow(self.friend)
        stranger_moment = Moment.objects.create(author=self.author, composite_score=5.0)
        friend_moment = Moment.objects.create(author=self.friend, composite_score=5.0)
        own_moment = Moment.objects.create(author=self.viewer, composite_score=10.0)

        ids = self._list(filter='recommended')

        self.assertEqual(ids, [str(friend_moment.id), str(stranger_moment.id)])
        self.assertNotIn(str(own_moment.id), ids)

    def test_recommended_requires_login(self):
        self.client.force_authenticate(user=None)

        response = self.client.get(reverse('moment-list'), {'filter': 'recommended'})

        self.assertIn(response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))

    def test_unknown_filter_rejected(self):
        response = self.client.get(reverse('moment-list'), {'filter': 'newest'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
