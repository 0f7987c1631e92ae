"""
Prometheus metrics for the polling loop.
"""
from prometheus_client import Counter

FEED_POLLS_TOTAL = Counter(
    'feed_polls_total',
    'Total number of feed evaluations by outcome',
    ['outcome'],
)
POSTS_SAVED_TOTAL = Counter('posts_saved_total', 'Total number of posts persisted')
FEED_LIST_ERRORS_TOTAL = Counter(
    'feed_list_errors_total',
    'Total number of passes skipped because the feed list could not be loaded',
)
