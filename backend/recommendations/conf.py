"""
Feed scoring configuration, read from settings.FEED_SCORING.
"""
from typing import Any, Dict
from django.conf import settings

DEFAULTS = {
    'WEIGHTS': {
        'interest': 3.0,
        'social': 2.0,
        'engagement': 2.0,
        'recency': 1.0,
        'quality': 0.1,
    },
    'RECENCY_DAYS': 10.0,
    'DEFAULT_PAGE_SIZE': 20,
    'MAX_PAGE_SIZE': 100,
}


def get_feed_scoring_config() -> Dict[str, Any]:
    """Settings values layered over DEFAULTS; WEIGHTS is merged per key"""
    configured = getattr(settings, 'FEED_SCORING', {}) or {}
    config = {**DEFAULTS, **configured}
    config['WEIGHTS'] = {**DEFAULTS['WEIGHTS'], **configured.get('WEIGHTS', {})}
    return config
