"""
Recommendations Module Summary
==============================

Scores moments and builds each user's personalized feed.

Key Features Implemented:
1. MomentSnapshotRepository - Bulk reads of candidates, interests and follows
2. PersonalizationScorer - Additive interest/social/engagement/recency/quality score
3. Feed selection - Deterministic ordering and offset/limit pagination
4. FeedService - Live feed, cached feed and cache refresh
5. REST API endpoints
"""
