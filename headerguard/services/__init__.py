"""External collaborators: header fetching and patch publishing."""

from headerguard.services.github_publisher import GitHubPublisher, PublishResult
from headerguard.services.header_source import HttpHeaderSource

__all__ = ["GitHubPublisher", "HttpHeaderSource", "PublishResult"]
