"""
Tests for the recommendations module.
"""
import math
import uuid
from datetime import timedelta
from unittest.mock import patch
from django.test import SimpleTestCase, TestCase, TransactionTestCase, override_settings
from django.contrib.auth.models import User
from django.db import DatabaseError, connection
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase
from locations.models import Place, PlaceCategory, interest_category_for
from moments.models import Moment
from recommendations.collectors import MomentSnapshotRepository
from recommendations.dtos import CandidateMoment, ScoredMoment
from recommendations.exceptions import SnapshotFetchError
from recommendations.feed_selector import select_page
from recommendations.feed_service import FeedService, get_personalized_feed
from recommendations.models import RecommendationScore
from recommendations.scoring_service import PersonalizationScorer
from user.models import InterestCategory, UserProfile


NOW = timezone.now()


def candidate(author_id=None, category=None, likes=0, views=0, age_days=0.0, score=6.0, moment_id=None):
    return CandidateMoment(
        moment_id=moment_id or uuid.uuid4(),
        author_id=author_id or uuid.uuid4(),
        composite_score=score,
        like_count=likes,
        view_count=views,
        created_at=NOW - timedelta(days=age_days),
        category=category,
    )


def make_profile(username):
    return UserProfile.objects.create(user=User.objects.create_user(username=username, password='pass'))


class PersonalizationScorerTestCase(SimpleTestCase):
    """Test cases for PersonalizationScorer"""

    def setUp(self):
        self.scorer = PersonalizationScorer()

    def _score(self, candidates, interests=None, followed=None):
        return self.scorer.score_candidates(candidates, interests or {}, followed or set(), now=NOW)

    def test_empty_batch(self):
        self.assertEqual(self._score([]), [])

    def test_interest_affinity(self):
        matching = candidate(category='FOOD_DRINK')
        other = candidate(category='HISTORY')
        uncategorized = candidate(category=None)

        scored = self._score([matching, other, uncategorized], interests={'FOOD_DRINK': 7})

        self.assertEqual(scored[0].interest_score, 21.0)
        self.assertEqual(scored[1].interest_score, 0.0)
        self.assertEqual(scored[2].interest_score, 0.0)

    def test_social_boost(self):
        author = uuid.uuid4()
        scored = self._score([candidate(author_id=author), candidate()], followed={author})

        self.assertEqual(scored[0].social_score, 2.0)
        self.assertEqual(scored[1].social_score, 0.0)

    def test_engagement_normalized_within_batch(self):
        scored = self._score([
            candidate(likes=30, views=70),
            candidate(likes=10, views=15),
            candidate(),
        ])

        self.assertAlmostEqual(scored[0].engagement_score, 2.0)
        self.assertAlmostEqual(scored[1].engagement_score, 0.5)
        self.assertAlmostEqual(scored[2].engagement_score, 0.0)

    def test_zero_engagement_batch_has_no_nan(self):
        scored = self._score([candidate(), candidate()])

        for s in scored:
            self.assertEqual(s.engagement_score, 0.0)
            self.assertFalse(math.isnan(s.final_score))

    def test_recency_decay(self):
        scored = self._score([candidate(age_days=0), candidate(age_days=14), candidate(age_days=10)])

        self.assertAlmostEqual(scored[0].recency_score, 1.0)
        self.assertAlmostEqual(scored[1].recency_score, math.exp(-1.4))
        self.assertAlmostEqual(scored[1].recency_score, 0.2466, places=3)
        self.assertAlmostEqual(scored[2].recency_score, math.exp(-1))

    def test_quality_floor(self):
        scored = self._score([candidate(score=10.0), candidate(score=2.0)])

        self.assertAlmostEqual(scored[0].quality_score, 1.0)
        self.assertAlmostEqual(scored[1].quality_score, 0.2)

    def test_terms_are_additive(self):
        author = uuid.uuid4()
        c = candidate(author_id=author, category='ART_CULTURE', likes=5, views=5, age_days=3, score=8.4)

        s = self._score([c], interests={'ART_CULTURE': 4}, followed={author})[0]

        expected = 3 * 4 + 2 + 2 * 1.0 + math.exp(-0.3) + 0.84
        self.assertAlmostEqual(s.final_score, expected)
        self.assertAlmostEqual(s.final_score, sum(s.factors.values()))

    def test_cold_start_viewer(self):
        """No interests and no follows still yields engagement + recency + quality"""
        s = self._score([candidate(likes=4, age_days=0, score=5.0)])[0]

        self.assertEqual(s.interest_score, 0.0)
        self.assertEqual(s.social_score, 0.0)
        self.assertAlmostEqual(s.final_score, 2.0 + 1.0 + 0.5)

    def test_interest_and_follow_beat_identical_candidate(self):
        author = uuid.uuid4()
        interests = {'FOOD_DRINK': 10, 'HISTORY': 3}
        boosted = candidate(author_id=author, category='FOOD_DRINK', likes=12, age_days=2)
        plain = candidate(category=None, likes=12, age_days=2)

        scored = self._score([boosted, plain], interests=interests, followed={author})

        self.assertGreater(scored[0].final_score, scored[1].final_score)

    def test_weights_can_disable_terms(self):
        scorer = PersonalizationScorer(weight_interest=0, weight_social=0)
        author = uuid.uuid4()

        s = scorer.score_candidates(
            [candidate(author_id=author, category='FOOD_DRINK', score=4.0)],
            {'FOOD_DRINK': 10}, {author}, now=NOW
        )[0]

        self.assertEqual(s.interest_score, 0.0)
        self.assertEqual(s.social_score, 0.0)
        self.assertAlmostEqual(s.final_score, 1.0 + 0.4)

    @override_settings(FEED_SCORING={'WEIGHTS': {'social': 5.0}, 'RECENCY_DAYS': 5.0})
    def test_weights_from_settings(self):
        scorer = PersonalizationScorer()
        author = uuid.uuid4()

        s = scorer.score_candidates([candidate(author_id=author, age_days=5)], {}, {author}, now=NOW)[0]

        self.assertEqual(s.social_score, 5.0)
        self.assertAlmostEqual(s.recency_score, math.exp(-1))
        # untouched weights keep their defaults
        self.assertEqual(scorer.WEIGHT_INTEREST, 3.0)


class FeedSelectorTestCase(SimpleTestCase):
    """Test cases for select_page"""

    def _scored(self, *pairs):
        return [ScoredMoment(moment_id=moment_id, final_score=score) for moment_id, score in pairs]

    def test_orders_by_score_descending(self):
        page = select_page(self._scored(('a', 1.0), ('b', 3.0), ('c', 2.0)), limit=10)
        self.assertEqual(page.ids, ['b', 'c', 'a'])
        self.assertEqual(page.total, 3)
        self.assertFalse(page.has_more)

    def test_ties_broken_by_id(self):
        page = select_page(self._scored(('m3', 2.0), ('m1', 2.0), ('m2', 2.0)), limit=10)
        self.assertEqual(page.ids, ['m1', 'm2', 'm3'])

    def test_pagination(self):
        scored = self._scored(*[(f'm{i}', float(i)) for i in range(5)])

        first = select_page(scored, limit=2, offset=0)
        second = select_page(scored, limit=2, offset=2)
        last = select_page(scored, limit=2, offset=4)

        self.assertEqual(first.ids, ['m4', 'm3'])
        self.assertTrue(first.has_more)
        self.assertEqual(second.ids, ['m2', 'm1'])
        self.assertEqual(last.ids, ['m0'])
        self.assertFalse(last.has_more)

    def test_empty_input(self):
        page = select_page([], limit=10, offset=0)
        self.assertEqual(page.ids, [])
        self.assertEqual(page.total, 0)

    def test_zero_limit(self):
        page = select_page(self._scored(('a', 1.0)), limit=0)
        self.assertEqual(page.ids, [])
        self.assertEqual(page.total, 1)

    def test_offset_past_end(self):
        page = select_page(self._scored(('a', 1.0), ('b', 2.0)), limit=5, offset=2)
        self.assertEqual(page.ids, [])
        self.assertEqual(page.total, 2)


class SnapshotRepositoryTestCase(TestCase):
    """Test cases for MomentSnapshotRepository"""

    def setUp(self):
        self.viewer = make_profile('viewer')
        self.author = make_profile('author')
        self.repository = MomentSnapshotRepository()
        self.cafe = Place.objects.create(name='Cafe', category=PlaceCategory.CAFE)
        self.other_place = Place.objects.create(name='Somewhere', category=PlaceCategory.OTHER)

    def test_candidates_exclude_viewer_and_unscored(self):
        theirs = Moment.objects.create(author=self.author, place=self.cafe, composite_score=8.0, like_count=3)
        Moment.objects.create(author=self.author, composite_score=None)
        Moment.objects.create(author=self.viewer, composite_score=9.0)

        candidates = self.repository.fetch_candidate_moments(self.viewer.id)

        self.assertEqual(len(candidates), 1)
        self.assertEqual(candidates[0].moment_id, theirs.id)
        self.assertEqual(candidates[0].author_id, self.author.id)
        self.assertEqual(candidates[0].category, 'FOOD_DRINK')
        self.assertEqual(candidates[0].engagement, 3)

    def test_candidate_category_mapping(self):
        Moment.objects.create(author=self.author, place=self.other_place, composite_score=5.0)
        Moment.objects.create(author=self.author, place=None, composite_score=5.0)

        categories = [c.category for c in self.repository.fetch_candidate_moments(self.viewer.id)]

        self.assertEqual(categories, [None, None])

    def test_interest_profile_and_follows(self):
        self.viewer.set_interest(InterestCategory.HISTORY, 6)
        self.viewer.follow(self.author)

        self.assertEqual(self.repository.fetch_interest_profile(self.viewer.id), {'HISTORY': 6})
        self.assertEqual(self.repository.fetch_followed_ids(self.viewer.id), {self.author.id})
        self.assertEqual(self.repository.fetch_followed_ids(self.author.id), set())

    def test_owner_scored_moments_in_creation_order(self):
        base = timezone.now()
        newer = Moment.objects.create(author=self.author, composite_score=4.0, created_at=base)
        older = Moment.objects.create(author=self.author, composite_score=9.0, created_at=base - timedelta(days=1))
        Moment.objects.create(author=self.author, composite_score=None)

        moments = self.repository.fetch_owner_scored_moments(self.author.id)

        self.assertEqual([m.moment_id for m in moments], [older.id, newer.id])

    def test_database_error_becomes_snapshot_error(self):
        with patch('recommendations.collectors.UserInterest.objects.filter', side_effect=DatabaseError('gone')):
            with self.assertRaises(SnapshotFetchError) as ctx:
                self.repository.fetch_interest_profile(self.viewer.id)

        self.assertEqual(ctx.exception.source, 'interest profile')
        self.assertIsInstance(ctx.exception.__cause__, DatabaseError)


class PlaceCategoryMappingTestCase(SimpleTestCase):

    def test_mapping(self):
        self.assertEqual(interest_category_for('BAR'), 'FOOD_DRINK')
        self.assertEqual(interest_category_for('LANDMARK'), 'HISTORY')
        self.assertEqual(interest_category_for('HIDDEN_GEM'), 'LOCAL_EXPERIENCES')
        self.assertIsNone(interest_category_for('OTHER'))
        self.assertIsNone(interest_category_for(None))


class FeedServiceTestCase(TestCase):
    """Test cases for FeedService"""

    def setUp(self):
        self.viewer = make_profile('feed_viewer')
        self.author_a = make_profile('author_a')
        self.author_b = make_profile('author_b')
        self.restaurant = Place.objects.create(name='Trattoria', category=PlaceCategory.RESTAURANT)
        self.service = FeedService()

    def test_food_drink_scenario(self):
        """Followed author in a top-interest category ranks first"""
        self.viewer.set_interest(InterestCategory.FOOD_DRINK, 10)
        self.viewer.follow(self.author_a)
        x = Moment.objects.create(
            author=self.author_a, place=self.restaurant,
            composite_score=7.0, like_count=100, created_at=NOW,
        )
        y = Moment.objects.create(
            author=self.author_b, place=None,
            composite_score=7.0, like_count=100, created_at=NOW,
        )

        scored = {s.moment_id: s for s in self.service.score_for_viewer(self.viewer.id, now=NOW)}
        self.assertGreaterEqual(scored[x.id].final_score - scored[y.id].final_score, 32 - 1e-9)

        page = self.service.get_personalized_feed(self.viewer.id, limit=1, offset=0, now=NOW)
        self.assertEqual(page.ids, [x.id])
        self.assertEqual(page.total, 2)
        self.assertTrue(page.has_more)

    def test_own_moments_excluded(self):
        Moment.objects.create(author=self.viewer, composite_score=9.0)
        theirs = Moment.objects.create(author=self.author_a, composite_score=3.0)

        page = get_personalized_feed(self.viewer.id, limit=10, offset=0)

        self.assertEqual(page.ids, [theirs.id])
        self.assertEqual(page.total, 1)

    def test_empty_feed(self):
        page = self.service.get_personalized_feed(self.viewer.id, limit=10, offset=0)
        self.assertEqual(page.ids, [])
        self.assertEqual(page.total, 0)

    def test_zero_limit_and_large_offset(self):
        Moment.objects.create(author=self.author_a, composite_score=5.0)

        self.assertEqual(self.service.get_personalized_feed(self.viewer.id, limit=0).ids, [])
        self.assertEqual(self.service.get_personalized_feed(self.viewer.id, limit=10, offset=1).ids, [])

    def test_repeated_calls_are_stable(self):
        for _ in range(6):
            Moment.objects.create(author=self.author_a, composite_score=6.0, created_at=NOW)

        first = self.service.get_personalized_feed(self.viewer.id, limit=3, offset=0, now=NOW)
        again = self.service.get_personalized_feed(self.viewer.id, limit=3, offset=0, now=NOW)
        rest = self.service.get_personalized_feed(self.viewer.id, limit=3, offset=3, now=NOW)

        self.assertEqual(first.ids, again.ids)
        self.assertEqual(len(set(first.ids) | set(rest.ids)), 6)

    def test_fetch_failure_aborts_feed(self):
        Moment.objects.create(author=self.author_a, composite_score=5.0)

        with patch.object(
            MomentSnapshotRepository, 'fetch_candidate_moments',
            side_effect=SnapshotFetchError('candidate moments', self.viewer.id)
        ):
            with self.assertRaises(SnapshotFetchError):
                self.service.get_personalized_feed(self.viewer.id)

    def test_refresh_replaces_cached_scores(self):
        stale = Moment.objects.create(author=self.author_a, composite_score=5.0)
        RecommendationScore.objects.create(user=self.viewer, moment=stale, score=99.0)
        Moment.objects.create(author=self.author_b, composite_score=8.0)

        count = self.service.refresh_recommendations(self.viewer.id)

        self.assertEqual(count, 2)
        rows = RecommendationScore.objects.filter(user=self.viewer)
        self.assertEqual(rows.count(), 2)
        self.assertNotIn(99.0, rows.values_list('score', flat=True))
        self.assertEqual(
            set(rows.first().factors.keys()),
            {'interest', 'social', 'engagement', 'recency', 'quality'}
        )

    def test_cached_feed_matches_live_order(self):
        self.viewer.follow(self.author_b)
        Moment.objects.create(author=self.author_a, composite_score=9.0, created_at=NOW)
        Moment.objects.create(author=self.author_b, composite_score=4.0, created_at=NOW)

        self.service.refresh_recommendations(self.viewer.id, now=NOW)
        cached = self.service.get_cached_feed(self.viewer.id, limit=10)
        live = self.service.get_personalized_feed(self.viewer.id, limit=10, now=NOW)

        self.assertEqual(cached.ids, live.ids)
        self.assertEqual(cached.total, 2)

    def test_cached_feed_falls_back_to_live(self):
        theirs = Moment.objects.create(author=self.author_a, composite_score=5.0)

        page = self.service.get_cached_feed(self.viewer.id, limit=10)

        self.assertEqual(page.ids, [theirs.id])


class SnapshotTransactionTestCase(TransactionTestCase):
    """Runs outside the per-test transaction so atomic blocks are observable"""

    def test_snapshot_fetches_share_one_transaction(self):
        seen = []

        class RecordingRepository(MomentSnapshotRepository):
            def fetch_interest_profile(self, user_id):
                seen.append(connection.in_atomic_block)
                return super().fetch_interest_profile(user_id)

            def fetch_followed_ids(self, user_id):
                seen.append(connection.in_atomic_block)
                return super().fetch_followed_ids(user_id)

            def fetch_candidate_moments(self, excluding_user_id):
                seen.append(connection.in_atomic_block)
                return super().fetch_candidate_moments(excluding_user_id)

        viewer = make_profile('snapshot_viewer')
        self.assertFalse(connection.in_atomic_block)

        FeedService(repository=RecordingRepository()).score_for_viewer(viewer.id, now=NOW)

        self.assertEqual(seen, [True, True, True])


class FeedAPITestCase(APITestCase):
    """Integration tests for recommendation endpoints"""

    def setUp(self):
        self.viewer = make_profile('api_viewer')
        self.author = make_profile('api_author')
        self.moment = Moment.objects.create(author=self.author, composite_score=7.0)

    def test_get_feed(self):
        url = reverse('recommendations:personalized_feed')
        response = self.client.get(url, {'user_id': str(self.viewer.id), 'limit': 5})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['ids'], [str(self.moment.id)])
        self.assertEqual(response.data['total'], 1)
        self.assertFalse(response.data['has_more'])

    def test_feed_requires_user_id(self):
        response = self.client.get(reverse('recommendations:personalized_feed'))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_feed_rejects_negative_offset(self):
        url = reverse('recommendations:personalized_feed')
        response = self.client.get(url, {'user_id': str(self.viewer.id), 'offset': -1})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_feed_unknown_user(self):
        url = reverse('recommendations:personalized_feed')
        response = self.client.get(url, {'user_id': str(uuid.uuid4())})
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_feed_unavailable_on_fetch_failure(self):
        url = reverse('recommendations:personalized_feed')
        with patch.object(
            MomentSnapshotRepository, 'fetch_followed_ids',
            side_effect=SnapshotFetchError('followed ids', self.viewer.id)
        ):
            response = self.client.get(url, {'user_id': str(self.viewer.id)})

        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertIn('error', response.data)

    def test_refresh_and_cached_feed(self):
        response = self.client.post(
            reverse('recommendations:refresh_recommendations'),
            {'user_id': str(self.viewer.id)},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)

        response = self.client.get(
            reverse('recommendations:cached_feed'),
            {'user_id': str(self.viewer.id)}
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['ids'], [str(self.moment.id)])
