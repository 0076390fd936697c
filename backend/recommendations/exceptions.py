"""
Exceptions raised by the recommendation engine.
"""


class SnapshotFetchError(Exception):
    """
    A bulk fetch of moments, interests or follow edges failed.
    Aborts the current scoring pass; no partial feed is built from it.
    """

    def __init__(self, source: str, user_id=None):
        self.source = source
        self.user_id = user_id
        message = f"Failed to fetch {source}"
        if user_id is not None:
            message += f" for user {user_id}"
        super().__init__(message)
