# Importing the package registers every table on Base.metadata
from catalog.models.feedback import FeedbackRow
from catalog.models.rating import RatingRow
from catalog.models.resource import ResourceRow

__all__ = ["FeedbackRow", "RatingRow", "ResourceRow"]
